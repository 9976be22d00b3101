"""
Error taxonomy for delivery pricing.

Only malformed input and unrecoverable collaborator failures
reach the caller; domain outcomes are returned as results.
"""

class PricingError(Exception):
    """가격 계산 도메인 예외의 기반 클래스"""

class InvalidCoordinate(PricingError, ValueError):
    """위도/경도가 없거나 범위를 벗어남"""

    def __init__(self, lat, lon):
        self.lat = lat
        self.lon = lon
        super().__init__(f"invalid coordinate lat={lat!r} lon={lon!r}")

class BusinessNotFound(PricingError, LookupError):
    """사업장을 찾을 수 없음"""

    def __init__(self, business_id: int):
        self.business_id = business_id
        super().__init__(f"business {business_id} not found")

class AddressNotFound(PricingError, LookupError):
    """주소가 없거나 삭제됨"""

    def __init__(self, address_id: int, reason: str = "not found"):
        self.address_id = address_id
        self.reason = reason
        super().__init__(f"address {address_id} {reason}")

class ZoneUnresolved(PricingError):
    """전략이 주소를 배송 구역에 배치하지 못함 (내부에서 폴백으로 복구)"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)

class PromotionLookupFailure(PricingError):
    """프로모션 카탈로그 조회 실패 (프로모션 없음으로 처리)"""

class StoreUnavailable(PricingError):
    """복구할 수 없는 저장소 오류"""

"""
Pricing service facade.

This module exposes the operations consumed by order-creation and
address-validation flows: delivery zone checks, promotion application
and order total calculation.
"""

from datetime import datetime
from typing import Callable, Iterable, List, Optional

from pricing.adapters.geometry import RayCastingGeometryOracle
from pricing.common.geo import haversine_distance, validate_coordinates
from pricing.common.money import ZERO, Number
from pricing.core.costs import aggregate, max_bonus
from pricing.core.delivery_pricing import DistanceFn
from pricing.core.errors import AddressNotFound, InvalidCoordinate
from pricing.core.models import (
    Coordinate, DeliveryResult, DeliveryZones, OptionLine, OrderTotals, PromotionOutcome,
)
from pricing.engines.deadline import guarded
from pricing.engines.promotion_engine import LineItemInput, PromotionEngine
from pricing.engines.zone_resolver import ZoneResolver
from pricing.observability import metrics
from pricing.observability.logging_setup import get_logger
from pricing.ports.stores import AddressStore
from pricing.settings import Settings

log = get_logger("pricing.service")

class PricingService:
    """배송 구역 판정 + 프로모션 계산 서비스"""

    def __init__(self,
                 resolver: ZoneResolver,
                 promotions: PromotionEngine,
                 *,
                 addresses: Optional[AddressStore] = None,
                 settings: Optional[Settings] = None):
        """
        초기화합니다.

        Args:
            resolver: 배송 구역 판정기
            promotions: 프로모션 엔진
            addresses: 사용자 주소 저장소 (주소 기반 판정에 필요)
            settings: 설정
        """
        self.resolver = resolver
        self.promotions = promotions
        self.addresses = addresses
        self.settings = settings or resolver.settings

    @classmethod
    def from_catalog(cls,
                     catalog,
                     settings: Optional[Settings] = None,
                     *,
                     distance_fn: DistanceFn = haversine_distance,
                     clock: Callable[[], datetime] = datetime.now) -> "PricingService":
        """모든 저장소 포트를 구현한 카탈로그 하나로 서비스를 구성합니다."""
        settings = settings or Settings()
        resolver = ZoneResolver(
            businesses=catalog,
            cities=catalog,
            rates=catalog,
            areas=catalog,
            geometry=RayCastingGeometryOracle(catalog),
            settings=settings,
            distance_fn=distance_fn,
        )
        engine = PromotionEngine(catalog, lookup_timeout_sec=settings.lookups.timeout_sec, clock=clock)
        return cls(resolver, engine, addresses=catalog, settings=settings)

    async def check_delivery_zone(self, lat, lon, business_id: int) -> dict:
        """
        배송 구역을 판정하고 JSON 응답 형식으로 반환합니다.

        Args:
            lat: 배송지 위도
            lon: 배송지 경도
            business_id: 사업장 ID

        Returns:
            {in_zone, price, delivery_type, message, max_distance?, current_distance?}

        Raises:
            InvalidCoordinate: 좌표가 없거나 범위를 벗어난 경우
        """
        result = await self.resolver.resolve(_coordinate(lat, lon), business_id)
        return result.to_wire()

    async def check_delivery_by_address(self, address_id: int, business_id: int) -> DeliveryResult:
        """
        저장된 주소로 배송 구역을 판정합니다.

        Raises:
            AddressNotFound: 주소가 없거나 삭제된 경우
            InvalidCoordinate: 주소에 좌표가 없는 경우
            StoreUnavailable: 주소 조회가 시간 초과되거나 실패한 경우
        """
        if self.addresses is None:
            raise RuntimeError("address store is not configured")

        address = await guarded(
            self.addresses.get_address(address_id),
            self.settings.lookups.timeout_sec, "address", f"address_id={address_id}"
        )
        if address is None:
            raise AddressNotFound(address_id)
        if address.is_deleted:
            raise AddressNotFound(address_id, "deleted")

        return await self.resolver.resolve(_coordinate(address.lat, address.lon), business_id)

    async def describe_zones(self, business_id: int) -> DeliveryZones:
        """사업장의 배송 구역 설정을 반환합니다."""
        return await self.resolver.describe_zones(business_id)

    async def apply_promotions(self, business_id: int, line_items: Iterable[LineItemInput]) -> List[PromotionOutcome]:
        """주문 품목별 프로모션 적용 결과를 반환합니다."""
        return await self.promotions.apply(business_id, line_items)

    async def price_order(self,
                          business_id: int,
                          line_items: Iterable[LineItemInput],
                          *,
                          options: Iterable[OptionLine] = (),
                          delivery_price: Optional[Number] = ZERO,
                          bonus_available: Number = ZERO) -> OrderTotals:
        """
        프로모션, 옵션, 배송비, 보너스를 반영한 주문 합계를 계산합니다.

        보너스는 배송비 제외 금액의 설정 비율까지만 사용합니다.

        Args:
            business_id: 사업장 ID
            line_items: 주문 품목
            options: 선택 옵션
            delivery_price: 배송비
            bonus_available: 사용자가 보유한 보너스

        Returns:
            주문 합계
        """
        outcomes = await self.apply_promotions(business_id, line_items)
        option_costs = [o.cost for o in options]

        before_bonus = aggregate(outcomes, option_costs, delivery_price)
        bonus = max_bonus(before_bonus.subtotal, bonus_available, self.settings.bonus.max_share)
        if bonus == ZERO:
            return before_bonus

        log.info(f"보너스 사용 business_id:{business_id} bonus:{bonus} subtotal:{before_bonus.subtotal}")
        return aggregate(outcomes, option_costs, delivery_price, bonus)

def _coordinate(lat, lon) -> Coordinate:
    if not validate_coordinates(lat, lon):
        metrics.invalid_coordinates.inc()
        raise InvalidCoordinate(lat, lon)
    return Coordinate(lat=float(lat), lon=float(lon))

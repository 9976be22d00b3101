"""
Core domain models for delivery pricing.

This module defines the core domain models using Pydantic v2
for type safety and validation. Currency amounts are Decimal.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pricing.common.money import ZERO, to_wire_number

# 결과 배송 유형
DeliveryMode = Literal["distance", "area", "fallback"]

# 프로모션 상세 유형
PromotionType = Literal["SUBTRACT", "DISCOUNT"]

# 도시 배송 모드 (그 외 값은 모두 UNKNOWN)
CITY_MODE_DISTANCE = "DISTANCE"
CITY_MODE_AREA = "AREA"
CITY_MODE_UNKNOWN = "UNKNOWN"

# (경도, 위도)
Point = Tuple[float, float]
Polygon = List[Point]

class Coordinate(BaseModel):
    """위경도 좌표 모델"""
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float

    def as_point(self) -> Point:
        """폴리곤 테스트용 (경도, 위도) 튜플"""
        return (self.lon, self.lat)

class Business(BaseModel):
    """사업장 모델"""
    id: int
    coordinate: Coordinate
    city_id: Optional[int] = None

class City(BaseModel):
    """도시 배송 프로필 모델"""
    id: int
    name: Optional[str] = None
    delivery_mode: Optional[str] = None
    border_polygon_id: Optional[str] = None

    @property
    def mode(self) -> str:
        value = (self.delivery_mode or "").upper()
        if value in (CITY_MODE_DISTANCE, CITY_MODE_AREA):
            return value
        return CITY_MODE_UNKNOWN

class DeliveryRate(BaseModel):
    """DISTANCE 모드 요율 모델"""
    city_id: int
    base_distance_km: Optional[Decimal] = None
    base_distance_price: Optional[Decimal] = None

class PickupArea(BaseModel):
    """픽업 구역 모델"""
    id: int
    polygon_id: str
    name: Optional[str] = None

class DeliveryArea(BaseModel):
    """가격이 지정된 배송 구역 모델"""
    id: int
    pickup_area_id: int
    polygon_id: str
    price: Decimal
    name: Optional[str] = None

class DeliveryResult(BaseModel):
    """배송 가능 여부 및 가격 결과 모델"""
    in_zone: bool
    price: Optional[Decimal] = None
    mode: DeliveryMode
    message: str
    max_distance: Optional[int] = None
    current_distance: Optional[int] = None

    def to_wire(self) -> dict:
        """JSON 응답 형식으로 변환합니다 (가격이 없으면 false)."""
        wire = {
            "in_zone": self.in_zone,
            "price": to_wire_number(self.price) if self.price is not None else False,
            "delivery_type": self.mode,
            "message": self.message,
        }
        if self.max_distance is not None:
            wire["max_distance"] = self.max_distance
        if self.current_distance is not None:
            wire["current_distance"] = self.current_distance
        return wire

class Address(BaseModel):
    """저장된 사용자 주소 모델"""
    id: int
    lat: Optional[float] = None
    lon: Optional[float] = None
    name: Optional[str] = None
    is_deleted: bool = False

class DeliveryZones(BaseModel):
    """사업장의 배송 구역 설정 요약"""
    business_id: int
    city_id: Optional[int] = None
    mode: str = CITY_MODE_UNKNOWN
    areas: List[DeliveryArea] = Field(default_factory=list)
    distance_settings: Optional[DeliveryRate] = None

class PromotionDetail(BaseModel):
    """프로모션 상세 규칙 모델"""
    model_config = ConfigDict(frozen=True)

    id: int
    promotion_id: int
    item_id: int
    type: PromotionType
    base_amount: Optional[int] = None
    add_amount: Optional[int] = None
    discount_percent: Optional[Decimal] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        # 예전 데이터의 PERCENT 는 DISCOUNT 로 취급
        if isinstance(value, str):
            value = value.upper()
            if value == "PERCENT":
                return "DISCOUNT"
        return value

class Promotion(BaseModel):
    """프로모션 모델"""
    id: int
    business_id: int
    start_date: datetime
    end_date: datetime
    visible: bool = True
    name: Optional[str] = None
    details: List[PromotionDetail] = Field(default_factory=list)

    def is_active(self, now: datetime) -> bool:
        """노출 중이고 now 가 [시작, 종료) 구간에 있으면 활성"""
        return self.visible and self.start_date <= now < self.end_date

class OrderLineItem(BaseModel):
    """주문 품목 모델"""
    model_config = ConfigDict(frozen=True)

    item_id: int
    quantity: int = Field(ge=0)
    unit_price: Decimal = Field(ge=0)

class PromotionOutcome(BaseModel):
    """품목별 프로모션 적용 결과 모델"""
    item_id: int
    unit_price: Decimal
    original_quantity: int
    charged_quantity: int
    free_quantity: int = 0
    discounted_unit_price: Optional[Decimal] = None
    applied_detail: Optional[PromotionDetail] = None
    discount_value: Decimal = ZERO

    @property
    def line_cost(self) -> Decimal:
        if self.applied_detail is None:
            return self.unit_price * self.original_quantity
        if self.discounted_unit_price is not None:
            return self.discounted_unit_price * self.charged_quantity
        return self.unit_price * self.charged_quantity

class OptionLine(BaseModel):
    """품목 옵션 모델"""
    price: Decimal = Field(ge=0)
    amount: int = Field(default=1, ge=0)

    @property
    def cost(self) -> Decimal:
        return self.price * self.amount

class OrderTotals(BaseModel):
    """주문 합계 모델"""
    items_total: Decimal = ZERO
    options_total: Decimal = ZERO
    subtotal: Decimal = ZERO
    delivery_price: Decimal = ZERO
    bonus_used: Decimal = ZERO
    total_sum: Decimal = ZERO

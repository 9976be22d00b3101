"""
Zone strategies for delivery pricing.

Each strategy tries to place a destination in a serviceable zone and
returns a DeliveryResult, or None when it cannot. The resolver runs
them in order and stops at the first result.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from pricing.common.money import round_half_up
from pricing.core.delivery_pricing import (
    DistanceFn, FallbackEstimator, distance_price, max_distance_for,
)
from pricing.core.errors import ZoneUnresolved
from pricing.core.models import Business, City, Coordinate, DeliveryRate, DeliveryResult
from pricing.engines.deadline import bounded
from pricing.observability import metrics
from pricing.observability.logging_setup import get_logger
from pricing.ports.geometry import GeometryOracle
from pricing.ports.stores import AreaStore
from pricing.settings import DeliveryDefaults

log = get_logger("pricing.zone")

# 결과 메시지
MSG_IN_ZONE = "address is within the delivery zone"
MSG_FALLBACK_AVAILABLE = "delivery is available by distance estimate"
MSG_OUT_OF_ZONE = "address is outside the delivery zone"
MSG_BUSINESS_NOT_FOUND = "business not found"
MSG_UNAVAILABLE = "delivery is not available"

@dataclass
class ResolutionContext:
    """한 번의 배송 구역 판정에 필요한 입력"""
    coordinate: Coordinate
    business: Business
    city: Optional[City] = None
    rate: Optional[DeliveryRate] = None
    rate_error: Optional[BaseException] = None
    # 앞선 전략이 남긴 진단 값 (max_distance, current_distance)
    diagnostics: Dict[str, int] = field(default_factory=dict)

class ZoneStrategy(Protocol):
    """배송 구역 전략 인터페이스"""

    name: str

    async def attempt(self, ctx: ResolutionContext) -> Optional[DeliveryResult]:
        ...

class BaseZoneStrategy:
    """실패를 '판정 불가'로 바꾸는 공통 전략 기반 클래스"""

    name = "base"

    async def attempt(self, ctx: ResolutionContext) -> Optional[DeliveryResult]:
        """
        전략을 실행합니다.

        구역 밖, 타임아웃, 조회 오류는 모두 None 으로 처리되어
        다음 전략으로 넘어갑니다.

        Args:
            ctx: 판정 컨텍스트

        Returns:
            판정 결과 또는 None
        """
        try:
            return await self.place(ctx)
        except ZoneUnresolved as e:
            reason = e.reason
            log.debug(f"전략 판정 불가 strategy:{self.name} business_id:{ctx.business.id} reason:{reason}")
        except asyncio.TimeoutError:
            reason = "timeout"
            log.warning(f"전략 조회 타임아웃 strategy:{self.name} business_id:{ctx.business.id}")
        except Exception as e:
            reason = "error"
            log.opt(exception=e).warning(f"전략 실행 오류 strategy:{self.name} business_id:{ctx.business.id}")

        metrics.strategy_fallbacks.labels(strategy=self.name, reason=reason).inc()
        return None

    async def place(self, ctx: ResolutionContext) -> DeliveryResult:
        raise NotImplementedError

class DistanceStrategy(BaseZoneStrategy):
    """도시 경계 + 사업장 거리 기반 전략 (DISTANCE 모드)"""

    name = "distance"

    def __init__(self, geometry: GeometryOracle, cfg: DeliveryDefaults,
                 distance_fn: DistanceFn, timeout: Optional[float]):
        self.geometry = geometry
        self.cfg = cfg
        self.distance_fn = distance_fn
        self.timeout = timeout

    async def place(self, ctx: ResolutionContext) -> DeliveryResult:
        if ctx.rate_error is not None:
            raise ctx.rate_error

        city = ctx.city
        if city is None or not city.border_polygon_id:
            raise ZoneUnresolved("no_city_border")

        inside = await bounded(
            self.geometry.contains(city.border_polygon_id, ctx.coordinate),
            self.timeout, "geometry"
        )
        if not inside:
            raise ZoneUnresolved("outside_city_border")

        biz = ctx.business.coordinate
        distance = self.distance_fn(ctx.coordinate.lat, ctx.coordinate.lon, biz.lat, biz.lon)
        max_distance = max_distance_for(ctx.rate, self.cfg)
        current_m = int(round_half_up(distance))
        max_m = int(round_half_up(max_distance))

        if distance > max_distance:
            ctx.diagnostics.update(max_distance=max_m, current_distance=current_m)
            raise ZoneUnresolved("over_max_distance")

        return DeliveryResult(
            in_zone=True,
            price=distance_price(distance, ctx.rate, self.cfg),
            mode="distance",
            message=MSG_IN_ZONE,
            max_distance=max_m,
            current_distance=current_m,
        )

class AreaStrategy(BaseZoneStrategy):
    """픽업 구역 + 가격별 배송 구역 전략 (AREA 모드)"""

    name = "area"

    def __init__(self, geometry: GeometryOracle, areas: AreaStore, timeout: Optional[float]):
        self.geometry = geometry
        self.areas = areas
        self.timeout = timeout

    async def place(self, ctx: ResolutionContext) -> DeliveryResult:
        pickup = await bounded(
            self.areas.find_pickup_area_containing(ctx.business.coordinate),
            self.timeout, "pickup_area"
        )
        if pickup is None:
            raise ZoneUnresolved("business_outside_pickup_areas")

        candidates = await bounded(
            self.areas.find_delivery_areas(pickup.id),
            self.timeout, "delivery_areas"
        )
        # 가격 오름차순 (같은 가격은 먼저 나온 구역 우선)
        for area in sorted(candidates, key=lambda a: a.price):
            inside = await bounded(
                self.geometry.contains(area.polygon_id, ctx.coordinate),
                self.timeout, "geometry"
            )
            if inside:
                return DeliveryResult(
                    in_zone=True,
                    price=area.price,
                    mode="area",
                    message=MSG_IN_ZONE,
                )

        raise ZoneUnresolved("outside_delivery_areas")

class FallbackStrategy(BaseZoneStrategy):
    """거리 상한 기본요금 + km 요금 추정 전략 (항상 결과 반환)"""

    name = "fallback"

    def __init__(self, estimator: FallbackEstimator):
        self.estimator = estimator

    async def place(self, ctx: ResolutionContext) -> DeliveryResult:
        price = self.estimator.estimate(ctx.business.coordinate, ctx.coordinate)
        return DeliveryResult(
            in_zone=price is not None,
            price=price,
            mode="fallback",
            message=MSG_FALLBACK_AVAILABLE if price is not None else MSG_OUT_OF_ZONE,
            **ctx.diagnostics,
        )

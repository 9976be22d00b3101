"""
Delivery zone resolver for delivery pricing.

This module implements the zone resolution pipeline: business and
city profile lookup, mode-specific strategy dispatch, and the
fallback estimator as the last step of every pipeline.
"""

import asyncio
import time
from typing import List, Optional, Tuple

from pricing.common.geo import haversine_distance, validate_coordinates
from pricing.core.delivery_pricing import DistanceFn, FallbackEstimator
from pricing.core.errors import BusinessNotFound, InvalidCoordinate
from pricing.core.models import (
    CITY_MODE_AREA, CITY_MODE_DISTANCE, CITY_MODE_UNKNOWN,
    Business, City, Coordinate, DeliveryRate, DeliveryResult, DeliveryZones,
)
from pricing.engines.deadline import bounded, guarded
from pricing.engines.strategies import (
    MSG_BUSINESS_NOT_FOUND, MSG_UNAVAILABLE,
    AreaStrategy, DistanceStrategy, FallbackStrategy, ResolutionContext, ZoneStrategy,
)
from pricing.observability import metrics
from pricing.observability.logging_setup import get_logger
from pricing.ports.geometry import GeometryOracle
from pricing.ports.stores import AreaStore, BusinessStore, CityStore, RateStore
from pricing.settings import Settings

log = get_logger("pricing.zone")

def ensure_valid_coordinate(coordinate: Coordinate) -> Coordinate:
    """좌표가 범위 밖이면 InvalidCoordinate 를 발생시킵니다."""
    if not validate_coordinates(coordinate.lat, coordinate.lon):
        metrics.invalid_coordinates.inc()
        raise InvalidCoordinate(coordinate.lat, coordinate.lon)
    return coordinate

class ZoneResolver:
    """배송 구역 판정기"""

    def __init__(self,
                 *,
                 businesses: BusinessStore,
                 cities: CityStore,
                 rates: RateStore,
                 areas: AreaStore,
                 geometry: GeometryOracle,
                 settings: Optional[Settings] = None,
                 distance_fn: DistanceFn = haversine_distance):
        """
        초기화합니다.

        Args:
            businesses: 사업장 저장소
            cities: 도시 저장소
            rates: 배송 요율 저장소
            areas: 픽업/배송 구역 저장소
            geometry: 점-폴리곤 판정기
            settings: 설정 (가격 상수, 조회 타임아웃)
            distance_fn: 거리 계산 함수 (미터)
        """
        self.businesses = businesses
        self.cities = cities
        self.rates = rates
        self.areas = areas
        self.settings = settings or Settings()
        self.timeout = self.settings.lookups.timeout_sec

        self.estimator = FallbackEstimator(self.settings.fallback, distance_fn)
        self.distance_strategy = DistanceStrategy(geometry, self.settings.delivery, distance_fn, self.timeout)
        self.area_strategy = AreaStrategy(geometry, areas, self.timeout)
        self.fallback_strategy = FallbackStrategy(self.estimator)

    def pipeline(self, city: Optional[City]) -> List[ZoneStrategy]:
        """도시 배송 모드에 맞는 전략 순서를 반환합니다."""
        mode = city.mode if city is not None else CITY_MODE_UNKNOWN
        if mode == CITY_MODE_DISTANCE:
            return [self.distance_strategy, self.fallback_strategy]
        if mode == CITY_MODE_AREA:
            return [self.area_strategy, self.fallback_strategy]
        return [self.fallback_strategy]

    async def resolve(self, coordinate: Coordinate, business_id: int) -> DeliveryResult:
        """
        배송 가능 여부와 가격을 판정합니다.

        Args:
            coordinate: 배송지 좌표
            business_id: 사업장 ID

        Returns:
            판정 결과 (판정 불가도 in_zone=False 결과로 반환)

        Raises:
            InvalidCoordinate: 좌표가 없거나 범위를 벗어난 경우 (조회 전)
            StoreUnavailable: 사업장 조회 자체가 실패한 경우
        """
        ensure_valid_coordinate(coordinate)
        start = time.perf_counter()

        business = await self._load_business(business_id)
        if business is None:
            log.info(f"사업장 없음 business_id:{business_id}")
            result = DeliveryResult(in_zone=False, price=None, mode="fallback", message=MSG_BUSINESS_NOT_FOUND)
            self._record(result, start)
            return result

        city, rate, rate_error = await self._load_profile(business)
        ctx = ResolutionContext(
            coordinate=coordinate,
            business=business,
            city=city,
            rate=rate,
            rate_error=rate_error,
        )

        result: Optional[DeliveryResult] = None
        for strategy in self.pipeline(city):
            result = await strategy.attempt(ctx)
            if result is not None:
                break

        if result is None:
            result = DeliveryResult(
                in_zone=False, price=None, mode="fallback", message=MSG_UNAVAILABLE, **ctx.diagnostics
            )

        log.debug(f"배송 구역 판정 완료 business_id:{business_id} mode:{result.mode} "
                  f"in_zone:{result.in_zone} price:{result.price}")
        self._record(result, start)
        return result

    async def describe_zones(self, business_id: int) -> DeliveryZones:
        """
        사업장의 배송 구역 설정을 요약합니다.

        판정과 달리 폴백이 없으므로 모든 조회 실패를 호출자에게 알립니다.

        Args:
            business_id: 사업장 ID

        Returns:
            AREA 모드는 배송 구역 목록, DISTANCE 모드는 요율

        Raises:
            BusinessNotFound: 사업장이 없는 경우
            StoreUnavailable: 도시, 요율, 구역 조회가 실패한 경우
        """
        business = await self._load_business(business_id)
        if business is None:
            raise BusinessNotFound(business_id)

        subject = f"business_id={business.id}"
        city = await guarded(self.cities.get_by_business_id(business.id), self.timeout, "city", subject)
        mode = city.mode if city is not None else CITY_MODE_UNKNOWN
        zones = DeliveryZones(business_id=business.id, city_id=business.city_id, mode=mode)

        if mode == CITY_MODE_AREA:
            pickup = await guarded(
                self.areas.find_pickup_area_containing(business.coordinate),
                self.timeout, "pickup_area", subject
            )
            if pickup is not None:
                areas = await guarded(
                    self.areas.find_delivery_areas(pickup.id), self.timeout, "delivery_areas", subject
                )
                zones.areas = sorted(areas, key=lambda a: a.price)
        elif mode == CITY_MODE_DISTANCE and business.city_id is not None:
            zones.distance_settings = await guarded(
                self.rates.get_by_city_id(business.city_id), self.timeout, "rate", subject
            )

        return zones

    async def _load_business(self, business_id: int) -> Optional[Business]:
        return await guarded(
            self.businesses.get_business(business_id), self.timeout, "business", f"business_id={business_id}"
        )

    async def _load_profile(
        self, business: Business
    ) -> Tuple[Optional[City], Optional[DeliveryRate], Optional[BaseException]]:
        """도시와 요율을 동시에 조회합니다 (실패는 결과로 반환)."""
        async def no_rate() -> Optional[DeliveryRate]:
            return None

        rate_lookup = (
            self.rates.get_by_city_id(business.city_id)
            if business.city_id is not None else no_rate()
        )
        city_res, rate_res = await asyncio.gather(
            bounded(self.cities.get_by_business_id(business.id), self.timeout, "city"),
            bounded(rate_lookup, self.timeout, "rate"),
            return_exceptions=True,
        )

        city: Optional[City] = None
        if isinstance(city_res, BaseException):
            log.warning(f"도시 조회 실패, 폴백으로 진행 business_id:{business.id} error:{city_res!r}")
        else:
            city = city_res

        rate: Optional[DeliveryRate] = None
        rate_error: Optional[BaseException] = None
        if isinstance(rate_res, BaseException):
            log.warning(f"요율 조회 실패 business_id:{business.id} error:{rate_res!r}")
            rate_error = rate_res
        else:
            rate = rate_res

        return city, rate, rate_error

    def _record(self, result: DeliveryResult, start: float) -> None:
        metrics.delivery_checks.labels(mode=result.mode, in_zone=str(result.in_zone).lower()).inc()
        metrics.resolve_seconds.observe(time.perf_counter() - start)

"""
Delivery price formulas for delivery pricing.

This module contains pure functions for distance-based pricing
and the fallback estimator used when no zone strategy resolves.
"""

import math
from decimal import Decimal
from typing import Callable, Optional

from pricing.common.geo import haversine_distance
from pricing.common.money import round_half_up, to_decimal
from pricing.core.models import Coordinate, DeliveryRate
from pricing.settings import DeliveryDefaults, FallbackConfig

DistanceFn = Callable[[float, float, float, float], float]

def max_distance_for(rate: Optional[DeliveryRate], cfg: DeliveryDefaults) -> float:
    """
    DISTANCE 모드의 최대 배송 거리(미터)를 계산합니다.

    Args:
        rate: 도시 요율 (없으면 기본값 사용)
        cfg: DISTANCE 기본 설정

    Returns:
        최대 거리 (미터)
    """
    if rate is not None and rate.base_distance_km is not None:
        return float(rate.base_distance_km) * 1000
    return cfg.default_max_distance_m

def distance_price(distance_m: float, rate: Optional[DeliveryRate], cfg: DeliveryDefaults) -> Decimal:
    """
    DISTANCE 모드 배송 가격을 계산합니다.

    요율에 고정 가격이 있으면 거리와 무관하게 그 가격을 사용하고,
    없으면 기본 가격에 무료 반경을 넘는 km 마다(올림) 추가 요금을 더합니다.

    Args:
        distance_m: 사업장까지의 거리 (미터)
        rate: 도시 요율
        cfg: DISTANCE 기본 설정

    Returns:
        배송 가격
    """
    if rate is not None and rate.base_distance_price is not None:
        return rate.base_distance_price

    extra_km = max(0, math.ceil((distance_m - cfg.free_radius_m) / 1000))
    return cfg.base_price + extra_km * cfg.per_km_price

def fallback_price(distance_m: float, cfg: FallbackConfig) -> Optional[Decimal]:
    """
    폴백 배송 가격을 계산합니다.

    Args:
        distance_m: 사업장까지의 거리 (미터)
        cfg: 폴백 설정

    Returns:
        반올림된 가격, 최대 거리를 넘으면 None (배송 불가)
    """
    if distance_m > cfg.max_distance_m:
        return None
    km = to_decimal(distance_m) / 1000
    return round_half_up(cfg.base_price + km * cfg.per_km_price)

class FallbackEstimator:
    """거리 상한이 있는 기본요금 + km당 요금 추정기"""

    def __init__(self, cfg: FallbackConfig, distance_fn: DistanceFn = haversine_distance):
        self.cfg = cfg
        self.distance_fn = distance_fn

    def distance(self, business: Coordinate, dest: Coordinate) -> float:
        return self.distance_fn(business.lat, business.lon, dest.lat, dest.lon)

    def estimate(self, business: Coordinate, dest: Coordinate) -> Optional[Decimal]:
        """사업장에서 목적지까지의 폴백 가격 (배송 불가면 None)"""
        return fallback_price(self.distance(business, dest), self.cfg)

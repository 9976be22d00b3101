"""
Geographic utilities for delivery pricing.

This module provides geographic calculations including
distance calculation, point-in-polygon testing, and
coordinate validation.
"""

import math
from typing import List, Optional, Tuple

# 지구 반지름 (미터)
EARTH_RADIUS_M = 6371000.0

def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (미터).

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (미터)
    """
    # 도를 라디안으로 변환
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    # 위도와 경도의 차이
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    # Haversine 공식
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_M

def point_in_polygon(point: Tuple[float, float], polygon: List[Tuple[float, float]]) -> bool:
    """
    점이 폴리곤 내부에 있는지 Ray casting 알고리즘으로 확인합니다.

    Args:
        point: 확인할 점 (경도, 위도)
        polygon: 폴리곤의 꼭짓점들 [(경도, 위도), ...]

    Returns:
        점이 폴리곤 내부에 있으면 True, 외부에 있으면 False
    """
    if len(polygon) < 3:
        return False

    x, y = point
    n = len(polygon)
    inside = False

    p1x, p1y = polygon[0]
    for i in range(1, n + 1):
        p2x, p2y = polygon[i % n]
        if y > min(p1y, p2y):
            if y <= max(p1y, p2y):
                if x <= max(p1x, p2x):
                    if p1y != p2y:
                        xinters = (y - p1y) * (p2x - p1x) / (p2y - p1y) + p1x
                    if p1x == p2x or x <= xinters:
                        inside = not inside
        p1x, p1y = p2x, p2y

    return inside

def calculate_bounding_box(polygon: List[Tuple[float, float]]) -> Tuple[float, float, float, float]:
    """
    폴리곤의 경계 상자를 계산합니다.

    Args:
        polygon: 폴리곤의 꼭짓점들 [(경도, 위도), ...]

    Returns:
        (min_lon, min_lat, max_lon, max_lat)
    """
    if not polygon:
        return (0, 0, 0, 0)

    lons = [p[0] for p in polygon]
    lats = [p[1] for p in polygon]

    return (min(lons), min(lats), max(lons), max(lats))

def in_bounding_box(point: Tuple[float, float], bbox: Tuple[float, float, float, float]) -> bool:
    """점이 경계 상자 안(경계 포함)에 있는지 확인합니다."""
    x, y = point
    min_lon, min_lat, max_lon, max_lat = bbox
    return min_lon <= x <= max_lon and min_lat <= y <= max_lat

def validate_coordinates(lat: Optional[float], lon: Optional[float]) -> bool:
    """
    좌표가 유효한지 확인합니다.

    None, NaN, 무한대 값은 모두 유효하지 않은 것으로 처리합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    if lat is None or lon is None:
        return False
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return False
    return -90 <= lat_f <= 90 and -180 <= lon_f <= 180

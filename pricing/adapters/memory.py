"""
In-memory catalog adapter for delivery pricing.

This module implements every catalog store port over plain
in-process collections, for embedding and tests.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pricing.common.geo import point_in_polygon
from pricing.core.models import (
    Address, Business, City, Coordinate, DeliveryArea, DeliveryRate,
    PickupArea, Polygon, Promotion,
)

class InMemoryCatalog:
    """메모리 기반 카탈로그 (모든 저장소 포트 구현)"""

    def __init__(self,
                 *,
                 polygons: Optional[Dict[str, Polygon]] = None,
                 businesses: Iterable[Business] = (),
                 cities: Iterable[City] = (),
                 rates: Iterable[DeliveryRate] = (),
                 pickup_areas: Iterable[PickupArea] = (),
                 delivery_areas: Iterable[DeliveryArea] = (),
                 promotions: Iterable[Promotion] = (),
                 addresses: Iterable[Address] = ()):
        self.polygons: Dict[str, Polygon] = dict(polygons or {})
        self.businesses: Dict[int, Business] = {b.id: b for b in businesses}
        self.cities: Dict[int, City] = {c.id: c for c in cities}
        self.rates: Dict[int, DeliveryRate] = {r.city_id: r for r in rates}
        self.pickup_areas: List[PickupArea] = list(pickup_areas)
        self.delivery_areas: List[DeliveryArea] = list(delivery_areas)
        self.promotions: List[Promotion] = list(promotions)
        self.addresses: Dict[int, Address] = {a.id: a for a in addresses}

    # PolygonStore
    async def get_polygon(self, polygon_id: str) -> Optional[Polygon]:
        return self.polygons.get(polygon_id)

    # BusinessStore
    async def get_business(self, business_id: int) -> Optional[Business]:
        return self.businesses.get(business_id)

    # CityStore
    async def get_by_business_id(self, business_id: int) -> Optional[City]:
        business = self.businesses.get(business_id)
        if business is None or business.city_id is None:
            return None
        return self.cities.get(business.city_id)

    # RateStore
    async def get_by_city_id(self, city_id: int) -> Optional[DeliveryRate]:
        return self.rates.get(city_id)

    # AreaStore
    async def find_pickup_area_containing(self, coordinate: Coordinate) -> Optional[PickupArea]:
        for area in self.pickup_areas:
            ring = self.polygons.get(area.polygon_id)
            if ring and point_in_polygon(coordinate.as_point(), ring):
                return area
        return None

    async def find_delivery_areas(self, pickup_area_id: int) -> List[DeliveryArea]:
        areas = [a for a in self.delivery_areas if a.pickup_area_id == pickup_area_id]
        return sorted(areas, key=lambda a: a.price)

    # PromotionStore
    async def get_active(self, business_id: int, now: datetime) -> List[Promotion]:
        return [p for p in self.promotions if p.business_id == business_id and p.is_active(now)]

    # AddressStore
    async def get_address(self, address_id: int) -> Optional[Address]:
        return self.addresses.get(address_id)

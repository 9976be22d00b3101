"""
Catalog store port interfaces.

This module defines the read-only protocols the pricing engines
consume for businesses, cities, rates, areas, promotions and addresses.
"""

from datetime import datetime
from typing import List, Optional, Protocol
from pricing.core.models import (
    Address, Business, City, Coordinate, DeliveryArea, DeliveryRate,
    PickupArea, Promotion,
)

class BusinessStore(Protocol):
    """사업장 저장소 포트 인터페이스"""

    async def get_business(self, business_id: int) -> Optional[Business]:
        """사업장을 조회합니다. 없으면 None."""
        ...

class CityStore(Protocol):
    """도시 저장소 포트 인터페이스"""

    async def get_by_business_id(self, business_id: int) -> Optional[City]:
        """사업장이 속한 도시를 조회합니다. 없으면 None."""
        ...

class RateStore(Protocol):
    """배송 요율 저장소 포트 인터페이스"""

    async def get_by_city_id(self, city_id: int) -> Optional[DeliveryRate]:
        """도시의 DISTANCE 요율을 조회합니다. 없으면 None."""
        ...

class AreaStore(Protocol):
    """픽업/배송 구역 저장소 포트 인터페이스"""

    async def find_pickup_area_containing(self, coordinate: Coordinate) -> Optional[PickupArea]:
        """
        좌표를 포함하는 픽업 구역을 찾습니다.

        Args:
            coordinate: 사업장 좌표

        Returns:
            픽업 구역 또는 None
        """
        ...

    async def find_delivery_areas(self, pickup_area_id: int) -> List[DeliveryArea]:
        """
        픽업 구역에 연결된 배송 구역을 가격 오름차순으로 조회합니다.

        Args:
            pickup_area_id: 픽업 구역 ID

        Returns:
            배송 구역 목록
        """
        ...

class PromotionStore(Protocol):
    """프로모션 카탈로그 포트 인터페이스"""

    async def get_active(self, business_id: int, now: datetime) -> List[Promotion]:
        """
        시점 now 에 활성인 프로모션을 상세 규칙과 함께 조회합니다.

        Args:
            business_id: 사업장 ID
            now: 평가 시점

        Returns:
            활성 프로모션 목록
        """
        ...

class AddressStore(Protocol):
    """사용자 주소 저장소 포트 인터페이스"""

    async def get_address(self, address_id: int) -> Optional[Address]:
        """주소를 조회합니다. 없으면 None."""
        ...

"""
Geometry port interfaces.

This module defines the protocols for point-in-polygon testing
and stored polygon lookup.
"""

from typing import Optional, Protocol
from pricing.core.models import Coordinate, Polygon

class GeometryOracle(Protocol):
    """점-폴리곤 판정 포트 인터페이스"""

    async def contains(self, polygon_id: str, coordinate: Coordinate) -> bool:
        """
        저장된 폴리곤이 좌표를 포함하는지 확인합니다.

        Args:
            polygon_id: 폴리곤 ID
            coordinate: 확인할 좌표

        Returns:
            포함하면 True
        """
        ...

class PolygonStore(Protocol):
    """폴리곤 저장소 포트 인터페이스"""

    async def get_polygon(self, polygon_id: str) -> Optional[Polygon]:
        """
        폴리곤 꼭짓점 목록을 조회합니다.

        Args:
            polygon_id: 폴리곤 ID

        Returns:
            [(경도, 위도), ...] 또는 None
        """
        ...

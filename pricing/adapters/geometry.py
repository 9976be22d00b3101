"""
Ray casting geometry oracle for delivery pricing.

This module implements the GeometryOracle port on top of any
PolygonStore using an in-process point-in-polygon test.
"""

from pricing.common.geo import calculate_bounding_box, in_bounding_box, point_in_polygon
from pricing.core.models import Coordinate
from pricing.ports.geometry import PolygonStore
from pricing.observability.logging_setup import get_logger

log = get_logger("pricing.geometry")

class RayCastingGeometryOracle:
    """Ray casting 기반 점-폴리곤 판정기"""

    def __init__(self, polygons: PolygonStore):
        """
        초기화합니다.

        Args:
            polygons: 폴리곤 저장소
        """
        self.polygons = polygons

    async def contains(self, polygon_id: str, coordinate: Coordinate) -> bool:
        """저장된 폴리곤이 좌표를 포함하는지 확인합니다."""
        ring = await self.polygons.get_polygon(polygon_id)
        if not ring:
            log.warning(f"폴리곤을 찾을 수 없음 polygon_id:{polygon_id}")
            return False

        point = coordinate.as_point()
        # 경계 상자 밖이면 바로 제외
        if not in_bounding_box(point, calculate_bounding_box(ring)):
            return False
        return point_in_polygon(point, ring)

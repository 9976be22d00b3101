"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
import tempfile
import os
from datetime import datetime, timedelta
from decimal import Decimal
from pricing.settings import Settings
from pricing.core.models import (
    Address, Business, City, Coordinate, DeliveryArea,
    PickupArea, Promotion, PromotionDetail,
)
from pricing.adapters.memory import InMemoryCatalog


# 테스트 기준 좌표 (사업장)
BUSINESS_LAT = 55.75
BUSINESS_LON = 37.60

# 기준 좌표를 감싸는 사각형 (경도, 위도)
CITY_BORDER = [(37.0, 55.0), (38.0, 55.0), (38.0, 56.0), (37.0, 56.0)]
PICKUP_RING = [(37.5, 55.7), (37.7, 55.7), (37.7, 55.8), (37.5, 55.8)]
# 겹치는 두 배송 구역: 좁은 구역(700)이 넓은 구역(500) 안에 있음
WIDE_AREA_RING = [(37.4, 55.6), (37.8, 55.6), (37.8, 55.9), (37.4, 55.9)]
NARROW_AREA_RING = [(37.55, 55.72), (37.65, 55.72), (37.65, 55.78), (37.55, 55.78)]


@pytest.fixture
def fixed_distance():
    """항상 같은 거리(미터)를 반환하는 거리 함수 팩토리"""
    def factory(meters: float):
        def fn(lat1, lon1, lat2, lon2):
            return meters
        return fn
    return factory


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    settings.lookups.timeout_sec = 0.2
    return settings


@pytest.fixture
def destination():
    """사업장 근처 배송지 좌표"""
    return Coordinate(lat=55.76, lon=37.61)


@pytest.fixture
def now():
    """프로모션 평가 시점"""
    return datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def distance_catalog():
    """DISTANCE 모드 도시의 사업장 카탈로그"""
    return InMemoryCatalog(
        polygons={"city-1": CITY_BORDER},
        businesses=[Business(id=1, coordinate=Coordinate(lat=BUSINESS_LAT, lon=BUSINESS_LON), city_id=10)],
        cities=[City(id=10, name="Distance City", delivery_mode="DISTANCE", border_polygon_id="city-1")],
    )


@pytest.fixture
def area_catalog():
    """AREA 모드 도시의 사업장 카탈로그 (겹치는 배송 구역 포함)"""
    return InMemoryCatalog(
        polygons={
            "pickup-1": PICKUP_RING,
            "wide": WIDE_AREA_RING,
            "narrow": NARROW_AREA_RING,
        },
        businesses=[Business(id=2, coordinate=Coordinate(lat=BUSINESS_LAT, lon=BUSINESS_LON), city_id=20)],
        cities=[City(id=20, name="Area City", delivery_mode="AREA")],
        pickup_areas=[PickupArea(id=100, polygon_id="pickup-1", name="center")],
        delivery_areas=[
            DeliveryArea(id=201, pickup_area_id=100, polygon_id="narrow", price=Decimal("700")),
            DeliveryArea(id=202, pickup_area_id=100, polygon_id="wide", price=Decimal("500")),
        ],
    )


@pytest.fixture
def promotion_catalog(now):
    """프로모션이 있는 카탈로그"""
    return InMemoryCatalog(
        promotions=[
            Promotion(
                id=1, business_id=1, name="2+1",
                start_date=now - timedelta(days=1), end_date=now + timedelta(days=1),
                details=[PromotionDetail(id=11, promotion_id=1, item_id=501, type="SUBTRACT",
                                         base_amount=2, add_amount=1)],
            ),
            Promotion(
                id=2, business_id=1, name="20% off",
                start_date=now - timedelta(days=1), end_date=now + timedelta(days=1),
                details=[PromotionDetail(id=21, promotion_id=2, item_id=502, type="DISCOUNT",
                                         discount_percent=Decimal("20"))],
            ),
            Promotion(
                id=3, business_id=1, name="expired",
                start_date=now - timedelta(days=10), end_date=now - timedelta(days=5),
                details=[PromotionDetail(id=31, promotion_id=3, item_id=502, type="DISCOUNT",
                                         discount_percent=Decimal("90"))],
            ),
        ],
        addresses=[
            Address(id=1, lat=55.76, lon=37.61, name="home"),
            Address(id=2, lat=55.76, lon=37.61, name="old", is_deleted=True),
            Address(id=3, name="no coordinates"),
        ],
    )

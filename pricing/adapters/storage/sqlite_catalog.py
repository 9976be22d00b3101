"""
SQLite-based catalog for delivery pricing.

This module implements the catalog store ports on SQLite.
Polygons are stored as JSON rings and containment is tested
in-process, so no spatial extension is required.
"""

import aiosqlite
import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from pricing.common.geo import point_in_polygon
from pricing.common.retry import retry_with_backoff
from pricing.core.models import (
    Address, Business, City, Coordinate, DeliveryArea, DeliveryRate,
    PickupArea, Polygon, Promotion, PromotionDetail,
)
from pricing.observability.logging_setup import get_logger

log = get_logger("pricing.sqlite")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS polygons (
    polygon_id TEXT PRIMARY KEY,
    ring TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS cities (
    city_id INTEGER PRIMARY KEY,
    name TEXT,
    delivery_mode TEXT,
    border_polygon_id TEXT
);
CREATE TABLE IF NOT EXISTS businesses (
    business_id INTEGER PRIMARY KEY,
    lat REAL NOT NULL,
    lon REAL NOT NULL,
    city_id INTEGER
);
CREATE TABLE IF NOT EXISTS delivery_rates (
    city_id INTEGER PRIMARY KEY,
    base_distance_km TEXT,
    base_distance_price TEXT
);
CREATE TABLE IF NOT EXISTS pickup_areas (
    pickup_area_id INTEGER PRIMARY KEY,
    polygon_id TEXT NOT NULL,
    name TEXT
);
CREATE TABLE IF NOT EXISTS delivery_areas (
    delivery_area_id INTEGER PRIMARY KEY,
    pickup_area_id INTEGER NOT NULL,
    polygon_id TEXT NOT NULL,
    price TEXT NOT NULL,
    name TEXT
);
CREATE INDEX IF NOT EXISTS idx_delivery_areas_pickup ON delivery_areas(pickup_area_id);
CREATE TABLE IF NOT EXISTS promotions (
    promotion_id INTEGER PRIMARY KEY,
    business_id INTEGER NOT NULL,
    name TEXT,
    start_date TEXT NOT NULL,
    end_date TEXT NOT NULL,
    visible INTEGER NOT NULL DEFAULT 1
);
CREATE INDEX IF NOT EXISTS idx_promotions_business ON promotions(business_id);
CREATE TABLE IF NOT EXISTS promotion_details (
    detail_id INTEGER PRIMARY KEY,
    promotion_id INTEGER NOT NULL,
    item_id INTEGER NOT NULL,
    type TEXT NOT NULL,
    base_amount INTEGER,
    add_amount INTEGER,
    discount_percent TEXT
);
CREATE INDEX IF NOT EXISTS idx_promotion_details_promotion ON promotion_details(promotion_id);
CREATE TABLE IF NOT EXISTS addresses (
    address_id INTEGER PRIMARY KEY,
    lat REAL,
    lon REAL,
    name TEXT,
    is_deleted INTEGER NOT NULL DEFAULT 0
);
"""

def _dec(value: Optional[str]) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None

def _text(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None

class SQLiteCatalog:
    """SQLite 기반 카탈로그 (모든 저장소 포트 구현)"""

    def __init__(self, path: str, *, max_retries: int = 3,
                 backoff_initial_sec: float = 0.05, backoff_max_sec: float = 1.0):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
            max_retries: 잠금 등 일시적 오류 시 최대 재시도 횟수
            backoff_initial_sec: 재시도 기본 지연 (초)
            backoff_max_sec: 재시도 최대 지연 (초)
        """
        self.path = path
        self.max_retries = max_retries
        self.backoff_initial_sec = backoff_initial_sec
        self.backoff_max_sec = backoff_max_sec
        log.info(f"SQLiteCatalog 초기화: {path}")

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteCatalog 스키마 초기화 완료: {self.path}")

    async def _fetch(self, sql: str, params: Iterable[Any] = ()) -> List[tuple]:
        """읽기 쿼리를 실행합니다 (일시적 오류는 백오프 재시도)."""
        async def run():
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute(sql, tuple(params))
                return await cursor.fetchall()

        return await retry_with_backoff(
            run,
            max_retries=self.max_retries,
            base_delay=self.backoff_initial_sec,
            max_delay=self.backoff_max_sec,
            retry_on=(aiosqlite.OperationalError,)
        )

    async def ping(self) -> bool:
        """데이터베이스 파일을 읽을 수 있는지 확인합니다."""
        rows = await self._fetch("SELECT 1")
        return bool(rows)

    async def _execute(self, sql: str, params: Iterable[Any] = ()) -> None:
        async with aiosqlite.connect(self.path) as db:
            await db.execute(sql, tuple(params))
            await db.commit()

    # ---- 쓰기 (관리용 시드) ----

    async def save_polygon(self, polygon_id: str, ring: Polygon) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO polygons (polygon_id, ring) VALUES (?, ?)",
            (polygon_id, json.dumps([list(p) for p in ring]))
        )

    async def save_city(self, city: City) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO cities (city_id, name, delivery_mode, border_polygon_id) VALUES (?, ?, ?, ?)",
            (city.id, city.name, city.delivery_mode, city.border_polygon_id)
        )

    async def save_business(self, business: Business) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO businesses (business_id, lat, lon, city_id) VALUES (?, ?, ?, ?)",
            (business.id, business.coordinate.lat, business.coordinate.lon, business.city_id)
        )

    async def save_rate(self, rate: DeliveryRate) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO delivery_rates (city_id, base_distance_km, base_distance_price) VALUES (?, ?, ?)",
            (rate.city_id, _text(rate.base_distance_km), _text(rate.base_distance_price))
        )

    async def save_pickup_area(self, area: PickupArea) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO pickup_areas (pickup_area_id, polygon_id, name) VALUES (?, ?, ?)",
            (area.id, area.polygon_id, area.name)
        )

    async def save_delivery_area(self, area: DeliveryArea) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO delivery_areas (delivery_area_id, pickup_area_id, polygon_id, price, name) "
            "VALUES (?, ?, ?, ?, ?)",
            (area.id, area.pickup_area_id, area.polygon_id, str(area.price), area.name)
        )

    async def save_promotion(self, promotion: Promotion) -> None:
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO promotions (promotion_id, business_id, name, start_date, end_date, visible) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (promotion.id, promotion.business_id, promotion.name,
                 promotion.start_date.isoformat(), promotion.end_date.isoformat(),
                 1 if promotion.visible else 0)
            )
            await db.execute("DELETE FROM promotion_details WHERE promotion_id = ?", (promotion.id,))
            await db.executemany(
                "INSERT INTO promotion_details "
                "(detail_id, promotion_id, item_id, type, base_amount, add_amount, discount_percent) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                [(d.id, promotion.id, d.item_id, d.type, d.base_amount, d.add_amount,
                  _text(d.discount_percent)) for d in promotion.details]
            )
            await db.commit()

    async def save_address(self, address: Address) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO addresses (address_id, lat, lon, name, is_deleted) VALUES (?, ?, ?, ?, ?)",
            (address.id, address.lat, address.lon, address.name, 1 if address.is_deleted else 0)
        )

    # ---- 포트 구현 ----

    async def get_polygon(self, polygon_id: str) -> Optional[Polygon]:
        rows = await self._fetch("SELECT ring FROM polygons WHERE polygon_id = ?", (polygon_id,))
        if not rows:
            return None
        return [(float(p[0]), float(p[1])) for p in json.loads(rows[0][0])]

    async def get_business(self, business_id: int) -> Optional[Business]:
        rows = await self._fetch(
            "SELECT business_id, lat, lon, city_id FROM businesses WHERE business_id = ?",
            (business_id,)
        )
        if not rows:
            return None
        bid, lat, lon, city_id = rows[0]
        return Business(id=bid, coordinate=Coordinate(lat=lat, lon=lon), city_id=city_id)

    async def get_by_business_id(self, business_id: int) -> Optional[City]:
        rows = await self._fetch(
            "SELECT cities.city_id, cities.name, cities.delivery_mode, cities.border_polygon_id "
            "FROM businesses JOIN cities ON cities.city_id = businesses.city_id "
            "WHERE businesses.business_id = ?",
            (business_id,)
        )
        if not rows:
            return None
        cid, name, mode, border = rows[0]
        return City(id=cid, name=name, delivery_mode=mode, border_polygon_id=border)

    async def get_by_city_id(self, city_id: int) -> Optional[DeliveryRate]:
        rows = await self._fetch(
            "SELECT city_id, base_distance_km, base_distance_price FROM delivery_rates WHERE city_id = ?",
            (city_id,)
        )
        if not rows:
            return None
        cid, km, price = rows[0]
        return DeliveryRate(city_id=cid, base_distance_km=_dec(km), base_distance_price=_dec(price))

    async def find_pickup_area_containing(self, coordinate: Coordinate) -> Optional[PickupArea]:
        rows = await self._fetch(
            "SELECT pickup_areas.pickup_area_id, pickup_areas.polygon_id, pickup_areas.name, polygons.ring "
            "FROM pickup_areas JOIN polygons ON polygons.polygon_id = pickup_areas.polygon_id "
            "ORDER BY pickup_areas.pickup_area_id ASC"
        )
        point = coordinate.as_point()
        for area_id, polygon_id, name, ring in rows:
            vertices = [(float(p[0]), float(p[1])) for p in json.loads(ring)]
            if point_in_polygon(point, vertices):
                return PickupArea(id=area_id, polygon_id=polygon_id, name=name)
        return None

    async def find_delivery_areas(self, pickup_area_id: int) -> List[DeliveryArea]:
        rows = await self._fetch(
            "SELECT delivery_area_id, pickup_area_id, polygon_id, price, name "
            "FROM delivery_areas WHERE pickup_area_id = ?",
            (pickup_area_id,)
        )
        areas = [
            DeliveryArea(id=r[0], pickup_area_id=r[1], polygon_id=r[2], price=Decimal(r[3]), name=r[4])
            for r in rows
        ]
        # TEXT 컬럼이라 SQL 정렬 대신 Decimal 로 정렬
        return sorted(areas, key=lambda a: (a.price, a.id))

    async def get_active(self, business_id: int, now: datetime) -> List[Promotion]:
        rows = await self._fetch(
            "SELECT promotion_id, business_id, name, start_date, end_date, visible "
            "FROM promotions WHERE business_id = ? AND visible = 1 ORDER BY promotion_id ASC",
            (business_id,)
        )
        promotions = [
            Promotion(id=r[0], business_id=r[1], name=r[2],
                      start_date=datetime.fromisoformat(r[3]),
                      end_date=datetime.fromisoformat(r[4]),
                      visible=bool(r[5]))
            for r in rows
        ]
        active = [p for p in promotions if p.is_active(now)]
        if not active:
            return []

        ids = [p.id for p in active]
        placeholders = ",".join("?" for _ in ids)
        detail_rows = await self._fetch(
            "SELECT detail_id, promotion_id, item_id, type, base_amount, add_amount, discount_percent "
            f"FROM promotion_details WHERE promotion_id IN ({placeholders}) ORDER BY detail_id ASC",
            ids
        )
        by_promotion = {p.id: p for p in active}
        for d in detail_rows:
            by_promotion[d[1]].details.append(PromotionDetail(
                id=d[0], promotion_id=d[1], item_id=d[2], type=d[3],
                base_amount=d[4], add_amount=d[5], discount_percent=_dec(d[6])
            ))
        return active

    async def get_address(self, address_id: int) -> Optional[Address]:
        rows = await self._fetch(
            "SELECT address_id, lat, lon, name, is_deleted FROM addresses WHERE address_id = ?",
            (address_id,)
        )
        if not rows:
            return None
        aid, lat, lon, name, deleted = rows[0]
        return Address(id=aid, lat=lat, lon=lon, name=name, is_deleted=bool(deleted))

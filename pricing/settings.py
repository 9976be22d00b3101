# pricing/settings.py
from __future__ import annotations
import os
from decimal import Decimal
from pydantic import BaseModel, Field

class DeliveryDefaults(BaseModel):
    # DISTANCE 모드에서 요율이 없을 때 사용하는 값
    default_max_distance_m: float = 30000.0
    base_price: Decimal = Decimal("500")
    free_radius_m: float = 5000.0
    per_km_price: Decimal = Decimal("100")

class FallbackConfig(BaseModel):
    max_distance_m: float = 50000.0
    base_price: Decimal = Decimal("300")
    per_km_price: Decimal = Decimal("50")

class Lookups(BaseModel):
    timeout_sec: float = 2.0

class Bonus(BaseModel):
    max_share: Decimal = Decimal("0.25")      # 주문 금액 대비 최대 보너스 사용 비율

class Storage(BaseModel):
    sqlite_path: str = "/data/pricing.db"
    max_retries: int = 3
    backoff_initial_sec: float = 0.05
    backoff_max_sec: float = 1.0

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "delivery-pricing"
    build_version: str = "0.1.0"
    build_date: str = "2026-01-01"
    log_level: str = "INFO"
    log_format: str = "dev"                   # dev | json

class Settings(BaseModel):
    delivery: DeliveryDefaults = Field(default_factory=DeliveryDefaults)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    lookups: Lookups = Field(default_factory=Lookups)
    bonus: Bonus = Field(default_factory=Bonus)
    storage: Storage = Field(default_factory=Storage)
    observability: Observability = Field(default_factory=Observability)

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    """기본값 위에 환경 변수를 덮어써 설정을 만듭니다."""
    s = Settings()

    # DISTANCE 기본값
    s.delivery.default_max_distance_m = float(os.getenv("DISTANCE_DEFAULT_MAX_M", s.delivery.default_max_distance_m))
    s.delivery.base_price = Decimal(os.getenv("DISTANCE_BASE_PRICE", str(s.delivery.base_price)))
    s.delivery.free_radius_m = float(os.getenv("DISTANCE_FREE_RADIUS_M", s.delivery.free_radius_m))
    s.delivery.per_km_price = Decimal(os.getenv("DISTANCE_PER_KM_PRICE", str(s.delivery.per_km_price)))

    # 폴백 추정
    s.fallback.max_distance_m = float(os.getenv("FALLBACK_MAX_DISTANCE_M", s.fallback.max_distance_m))
    s.fallback.base_price = Decimal(os.getenv("FALLBACK_BASE_PRICE", str(s.fallback.base_price)))
    s.fallback.per_km_price = Decimal(os.getenv("FALLBACK_PER_KM_PRICE", str(s.fallback.per_km_price)))

    # 조회
    s.lookups.timeout_sec = float(os.getenv("LOOKUP_TIMEOUT_SEC", s.lookups.timeout_sec))

    # 보너스
    s.bonus.max_share = Decimal(os.getenv("BONUS_MAX_SHARE", str(s.bonus.max_share)))

    # 저장소
    s.storage.sqlite_path = os.getenv("PRICING_DB_PATH", s.storage.sqlite_path)
    s.storage.max_retries = int(os.getenv("STORAGE_MAX_RETRIES", s.storage.max_retries))

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("METRICS_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_format = os.getenv("LOG_FORMAT", s.observability.log_format)

    return s

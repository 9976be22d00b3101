"""
Observability 모듈 단위 테스트

이 모듈은 헬스 체크, 메트릭, 로깅 등의 관찰 가능성 기능을 테스트합니다.
"""

import pytest
import logging
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from loguru import logger
from pricing.observability.health import create_app
from pricing.observability.metrics import (
    delivery_checks, invalid_coordinates, promotions_applied, resolve_seconds, uptime_seconds
)
from pricing.observability.logging_setup import (
    InterceptHandler, get_logger, setup_logging, setup_logging_dev
)
from pricing.settings import Settings, build_settings


class TestHealthEndpoints:
    """헬스 체크 엔드포인트 테스트"""

    @pytest.fixture
    def client(self, sample_settings):
        """테스트용 클라이언트"""
        return TestClient(create_app(sample_settings))

    def test_health_endpoint(self, client):
        """헬스 체크 엔드포인트 테스트"""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "test-service"
        assert "timestamp" in data

    def test_ready_endpoint(self, client):
        """레디니스 체크 엔드포인트 테스트"""
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_ready_with_failing_check(self, sample_settings):
        """카탈로그 확인 실패 시 503"""
        readiness = AsyncMock(side_effect=ConnectionError("db gone"))
        client = TestClient(create_app(sample_settings, readiness=readiness))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_metrics_endpoint(self, client):
        """메트릭 엔드포인트 테스트"""
        delivery_checks.labels(mode="distance", in_zone="true").inc()
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        content = response.text
        assert "# HELP" in content
        assert "delivery_checks_total" in content
        assert "uptime_seconds" in content

    def test_metrics_disabled(self, sample_settings):
        """메트릭 비활성화 시 503"""
        sample_settings.observability.metrics_enabled = False
        client = TestClient(create_app(sample_settings))

        assert client.get("/metrics").status_code == 503

    def test_info_endpoint(self, client):
        """서비스 정보 엔드포인트 테스트"""
        response = client.get("/info")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "test-service"
        assert data["version"] == "1.0.0"
        assert data["log_level"] == "INFO"
        assert "uptime_seconds" in data

    def test_root_endpoint(self, client):
        """루트 엔드포인트 테스트"""
        data = client.get("/").json()

        assert set(data["endpoints"]) == {"health", "ready", "metrics", "info"}


class TestMetricsCollection:
    """메트릭 수집 테스트"""

    def test_invalid_coordinates_counter(self):
        """잘못된 좌표 카운터"""
        before = invalid_coordinates._value.get()
        invalid_coordinates.inc()
        assert invalid_coordinates._value.get() == before + 1

    def test_promotions_applied_labels(self):
        """프로모션 유형별 카운터"""
        before = promotions_applied.labels(type="SUBTRACT")._value.get()
        promotions_applied.labels(type="SUBTRACT").inc(2)
        assert promotions_applied.labels(type="SUBTRACT")._value.get() == before + 2

    def test_resolve_histogram(self):
        """판정 시간 히스토그램"""
        count = REGISTRY.get_sample_value("delivery_resolve_duration_seconds_count")
        resolve_seconds.observe(0.01)
        assert REGISTRY.get_sample_value("delivery_resolve_duration_seconds_count") == count + 1

    def test_uptime_gauge(self):
        """가동 시간 게이지"""
        uptime_seconds.set(42)
        assert uptime_seconds._value.get() == 42


class TestLogging:
    """로깅 설정 테스트"""

    def test_get_logger_binds_name(self):
        """이름이 바인딩된 로거"""
        messages = []
        sink_id = logger.add(lambda m: messages.append(m.record["extra"]["name"]), level="INFO")
        try:
            get_logger("pricing.test").info("hello")
        finally:
            logger.remove(sink_id)

        assert messages == ["pricing.test"]

    def test_stdlib_logging_intercepted(self):
        """stdlib logging 이 loguru 로 전달됨"""
        setup_logging_dev("DEBUG")
        messages = []
        sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
        try:
            logging.getLogger("aiosqlite").warning("from stdlib")
        finally:
            logger.remove(sink_id)

        assert "from stdlib" in messages
        assert any(isinstance(h, InterceptHandler) for h in logging.getLogger().handlers)

    def test_setup_logging_json(self):
        """JSON 포맷 설정"""
        setup_logging("INFO", "json")
        get_logger("pricing.test").info("json line")
        logger.complete()
        setup_logging_dev("INFO")


class TestSettings:
    """설정 테스트"""

    def test_defaults(self):
        """기본값"""
        s = Settings()
        assert s.delivery.default_max_distance_m == 30000
        assert s.fallback.max_distance_m == 50000
        assert s.lookups.timeout_sec == 2.0

    def test_env_overrides(self, monkeypatch):
        """환경 변수 덮어쓰기"""
        monkeypatch.setenv("FALLBACK_MAX_DISTANCE_M", "40000")
        monkeypatch.setenv("FALLBACK_BASE_PRICE", "250")
        monkeypatch.setenv("LOOKUP_TIMEOUT_SEC", "0.5")
        monkeypatch.setenv("METRICS_ENABLED", "false")
        monkeypatch.setenv("LOG_FORMAT", "json")

        s = build_settings()

        assert s.fallback.max_distance_m == 40000
        assert str(s.fallback.base_price) == "250"
        assert s.lookups.timeout_sec == 0.5
        assert s.observability.metrics_enabled is False
        assert s.observability.log_format == "json"

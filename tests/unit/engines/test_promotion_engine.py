"""
PromotionEngine 단위 테스트

이 모듈은 활성 프로모션 조회, 품목별 적용, 조회 실패 처리를 테스트합니다.
"""

import pytest
import asyncio
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock
from prometheus_client import REGISTRY

from pricing.core.models import OrderLineItem, Promotion, PromotionDetail
from pricing.engines.promotion_engine import PromotionEngine


class TestPromotionEngine:
    """프로모션 엔진 테스트"""

    @pytest.fixture
    def engine(self, promotion_catalog, now):
        return PromotionEngine(promotion_catalog, lookup_timeout_sec=0.2, clock=lambda: now)

    @pytest.mark.asyncio
    async def test_subtract_applied(self, engine):
        """2+1, 7개 → 유료 5, 무료 2"""
        [outcome] = await engine.apply(1, [OrderLineItem(item_id=501, quantity=7, unit_price=Decimal("100"))])

        assert outcome.charged_quantity == 5
        assert outcome.free_quantity == 2
        assert outcome.applied_detail.id == 11
        assert outcome.line_cost == Decimal("500")

    @pytest.mark.asyncio
    async def test_expired_promotion_ignored(self, engine):
        """만료된 90% 할인 대신 활성 20% 할인 적용"""
        [outcome] = await engine.apply(1, [OrderLineItem(item_id=502, quantity=3, unit_price=Decimal("1000"))])

        assert outcome.applied_detail.id == 21
        assert outcome.discounted_unit_price == Decimal("800")
        assert outcome.line_cost == Decimal("2400")
        assert outcome.discount_value == Decimal("600")

    @pytest.mark.asyncio
    async def test_order_preserved_and_dict_input(self, engine):
        """입력 순서 유지, dict 입력 허용"""
        outcomes = await engine.apply(1, [
            {"item_id": 999, "quantity": 1, "unit_price": "10"},
            {"item_id": 501, "quantity": 3, "unit_price": "100"},
        ])

        assert [o.item_id for o in outcomes] == [999, 501]
        assert outcomes[0].applied_detail is None
        assert outcomes[0].line_cost == Decimal("10")
        assert outcomes[1].free_quantity == 1

    @pytest.mark.asyncio
    async def test_other_business_promotions_ignored(self, engine):
        """다른 사업장의 프로모션은 적용하지 않음"""
        [outcome] = await engine.apply(2, [OrderLineItem(item_id=501, quantity=7, unit_price=Decimal("100"))])

        assert outcome.applied_detail is None
        assert outcome.charged_quantity == 7

    @pytest.mark.asyncio
    async def test_store_results_refiltered(self, now):
        """저장소가 비활성 프로모션을 돌려줘도 다시 거름"""
        stale = Promotion(
            id=5, business_id=1, start_date=now + timedelta(days=1), end_date=now + timedelta(days=2),
            details=[PromotionDetail(id=51, promotion_id=5, item_id=1, type="DISCOUNT",
                                     discount_percent=Decimal("50"))],
        )
        store = AsyncMock()
        store.get_active.return_value = [stale]
        engine = PromotionEngine(store, clock=lambda: now)

        [outcome] = await engine.apply(1, [OrderLineItem(item_id=1, quantity=1, unit_price=Decimal("100"))])

        assert outcome.applied_detail is None
        store.get_active.assert_awaited_once_with(1, now)

    @pytest.mark.asyncio
    async def test_lookup_failure_full_price(self, now):
        """조회 실패 → 정가"""
        store = AsyncMock()
        store.get_active.side_effect = ConnectionError("catalog down")
        engine = PromotionEngine(store, clock=lambda: now)

        before = REGISTRY.get_sample_value("promotion_lookup_failures_total") or 0
        [outcome] = await engine.apply(1, [OrderLineItem(item_id=501, quantity=7, unit_price=Decimal("100"))])
        after = REGISTRY.get_sample_value("promotion_lookup_failures_total")

        assert outcome.applied_detail is None
        assert outcome.line_cost == Decimal("700")
        assert after == before + 1

    @pytest.mark.asyncio
    async def test_lookup_timeout_full_price(self, now):
        """조회 타임아웃 → 정가"""
        async def slow(business_id, at):
            await asyncio.sleep(5)
            return []

        store = AsyncMock()
        store.get_active.side_effect = slow
        engine = PromotionEngine(store, lookup_timeout_sec=0.05, clock=lambda: now)

        [outcome] = await engine.apply(1, [OrderLineItem(item_id=1, quantity=2, unit_price=Decimal("50"))])

        assert outcome.line_cost == Decimal("100")

    @pytest.mark.asyncio
    async def test_empty_order(self, engine):
        """빈 주문"""
        assert await engine.apply(1, []) == []

    @pytest.mark.asyncio
    async def test_apply_is_idempotent(self, engine):
        """같은 입력은 같은 결과"""
        items = [OrderLineItem(item_id=501, quantity=7, unit_price=Decimal("100")),
                 OrderLineItem(item_id=502, quantity=3, unit_price=Decimal("1000"))]

        assert await engine.apply(1, items) == await engine.apply(1, items)

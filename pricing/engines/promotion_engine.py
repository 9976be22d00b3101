"""
Promotion engine for delivery pricing.

This module applies the single best active promotion detail to
each order line item. Catalog failures degrade to full price.
"""

import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Union

from pricing.core.errors import PromotionLookupFailure
from pricing.core.models import OrderLineItem, Promotion, PromotionOutcome
from pricing.core.promotions import select_best
from pricing.engines.deadline import bounded
from pricing.observability import metrics
from pricing.observability.logging_setup import get_logger
from pricing.ports.stores import PromotionStore

log = get_logger("pricing.promotions")

LineItemInput = Union[OrderLineItem, dict]

class PromotionEngine:
    """프로모션 적용 엔진"""

    def __init__(self,
                 promotions: PromotionStore,
                 *,
                 lookup_timeout_sec: Optional[float] = 2.0,
                 clock: Callable[[], datetime] = datetime.now):
        """
        초기화합니다.

        Args:
            promotions: 프로모션 카탈로그
            lookup_timeout_sec: 카탈로그 조회 제한 시간 (초)
            clock: 평가 시점 함수 (프로모션 날짜와 같은 tz 기준이어야 함)
        """
        self.promotions = promotions
        self.timeout = lookup_timeout_sec
        self.clock = clock

    async def apply(self, business_id: int, line_items: Iterable[LineItemInput]) -> List[PromotionOutcome]:
        """
        주문 품목들에 프로모션을 적용합니다.

        Args:
            business_id: 사업장 ID
            line_items: 주문 품목 목록

        Returns:
            입력과 같은 순서의 품목별 결과
        """
        start = time.perf_counter()
        items = [i if isinstance(i, OrderLineItem) else OrderLineItem.model_validate(i) for i in line_items]
        now = self.clock()

        try:
            active = await self._load_active(business_id, now)
        except PromotionLookupFailure as e:
            metrics.promotion_lookup_failures.inc()
            log.warning(f"프로모션 조회 실패, 정가로 계산 business_id:{business_id} error:{e}")
            active = []

        details = [d for p in active for d in p.details]
        outcomes = [select_best(item, details) for item in items]

        for outcome in outcomes:
            if outcome.applied_detail is not None:
                metrics.promotions_applied.labels(type=outcome.applied_detail.type).inc()
                log.debug(f"프로모션 적용 item_id:{outcome.item_id} detail_id:{outcome.applied_detail.id} "
                          f"type:{outcome.applied_detail.type} charged:{outcome.charged_quantity}"
                          f"/{outcome.original_quantity} discount:{outcome.discount_value}")

        metrics.promotion_seconds.observe(time.perf_counter() - start)
        return outcomes

    async def _load_active(self, business_id: int, now: datetime) -> List[Promotion]:
        try:
            promotions = await bounded(self.promotions.get_active(business_id, now), self.timeout, "promotions")
            # 저장소 결과를 한 번 더 활성 조건으로 거름
            return [p for p in promotions if p.business_id == business_id and p.is_active(now)]
        except Exception as e:
            raise PromotionLookupFailure(f"{type(e).__name__}: {e}") from e

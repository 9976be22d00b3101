"""
Promotion calculation functions for delivery pricing.

This module contains pure functions for SUBTRACT ("buy B get A free")
and DISCOUNT (percentage) promotions, and the best-discount selection.
"""

from decimal import Decimal
from typing import Iterable, Optional, Tuple

from pricing.common.money import ZERO
from pricing.core.models import OrderLineItem, PromotionDetail, PromotionOutcome
from pricing.observability.logging_setup import get_logger

log = get_logger("pricing.promotions")

HUNDRED = Decimal("100")

def split_subtract(quantity: int, base_amount: int, add_amount: int) -> Tuple[int, int]:
    """
    "B개 사면 A개 무료" 규칙으로 유료/무료 수량을 나눕니다.

    Args:
        quantity: 주문 수량
        base_amount: 유료 수량 B (> 0)
        add_amount: 무료 수량 A (> 0)

    Returns:
        (유료 수량, 무료 수량)
    """
    if quantity < base_amount:
        return quantity, 0

    set_size = base_amount + add_amount
    full_sets, remainder = divmod(quantity, set_size)

    charged = full_sets * base_amount
    # 나머지가 B 이상이면 B 만 유료, 나머지는 무료
    charged += base_amount if remainder >= base_amount else remainder

    return charged, quantity - charged

def discounted_unit_price(unit_price: Decimal, percent: Decimal) -> Decimal:
    """할인율(%)을 적용한 단가"""
    return unit_price * (1 - percent / HUNDRED)

def is_applicable(detail: PromotionDetail) -> bool:
    """계산에 필요한 값이 모두 유효한 상세 규칙인지 확인합니다."""
    if detail.type == "SUBTRACT":
        return bool(detail.base_amount and detail.add_amount
                    and detail.base_amount > 0 and detail.add_amount > 0)
    if detail.discount_percent is None:
        return False
    return ZERO <= detail.discount_percent <= HUNDRED

def no_promotion(item: OrderLineItem) -> PromotionOutcome:
    """프로모션 없이 정가로 계산한 결과"""
    return PromotionOutcome(
        item_id=item.item_id,
        unit_price=item.unit_price,
        original_quantity=item.quantity,
        charged_quantity=item.quantity,
    )

def evaluate_detail(item: OrderLineItem, detail: PromotionDetail) -> Optional[PromotionOutcome]:
    """
    하나의 상세 규칙을 품목에 적용한 후보 결과를 계산합니다.

    Args:
        item: 주문 품목
        detail: 프로모션 상세 규칙

    Returns:
        후보 결과, 적용할 수 없는 규칙이면 None
    """
    if not is_applicable(detail):
        log.debug(f"적용 불가 프로모션 상세 건너뜀 detail_id:{detail.id} type:{detail.type}")
        return None

    if detail.type == "SUBTRACT":
        charged, free = split_subtract(item.quantity, detail.base_amount, detail.add_amount)
        return PromotionOutcome(
            item_id=item.item_id,
            unit_price=item.unit_price,
            original_quantity=item.quantity,
            charged_quantity=charged,
            free_quantity=free,
            applied_detail=detail,
            discount_value=(item.quantity - charged) * item.unit_price,
        )

    price = discounted_unit_price(item.unit_price, detail.discount_percent)
    return PromotionOutcome(
        item_id=item.item_id,
        unit_price=item.unit_price,
        original_quantity=item.quantity,
        charged_quantity=item.quantity,
        free_quantity=0,
        discounted_unit_price=price,
        applied_detail=detail,
        discount_value=(item.unit_price - price) * item.quantity,
    )

def select_best(item: OrderLineItem, details: Iterable[PromotionDetail]) -> PromotionOutcome:
    """
    품목에 대해 할인 금액이 가장 큰 상세 규칙을 선택합니다.

    할인 금액이 0 이하인 후보는 적용하지 않으며,
    할인 금액이 같으면 detail id 가 가장 작은 규칙을 선택합니다.

    Args:
        item: 주문 품목
        details: 활성 프로모션들의 상세 규칙 (다른 품목 대상 포함 가능)

    Returns:
        품목별 프로모션 적용 결과
    """
    candidates = [
        c for c in (evaluate_detail(item, d) for d in details if d.item_id == item.item_id)
        if c is not None and c.discount_value > ZERO
    ]
    if not candidates:
        return no_promotion(item)

    return max(candidates, key=lambda c: (c.discount_value, -c.applied_detail.id))

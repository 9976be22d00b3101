"""
Order cost aggregation for delivery pricing.

This module contains pure functions that sum line-item costs,
option costs and the delivery price into order totals.
"""

from decimal import Decimal
from typing import Iterable, Optional

from pricing.common.money import ZERO, Number, to_decimal
from pricing.core.models import OptionLine, OrderTotals, PromotionOutcome

def option_cost(price: Number, amount: int = 1) -> Decimal:
    """옵션 하나의 비용 (가격 × 수량)"""
    return OptionLine(price=to_decimal(price), amount=amount).cost

def max_bonus(subtotal: Number, available: Number, share: Number = Decimal("0.25")) -> Decimal:
    """
    사용할 수 있는 최대 보너스를 계산합니다.

    Args:
        subtotal: 배송비 제외 주문 금액
        available: 사용자가 보유한 보너스
        share: 주문 금액 대비 최대 사용 비율

    Returns:
        min(보유 보너스, 주문 금액 × 비율), 음수는 0
    """
    cap = to_decimal(subtotal) * to_decimal(share)
    return max(ZERO, min(to_decimal(available), cap))

def aggregate(
    outcomes: Iterable[PromotionOutcome],
    option_costs: Iterable[Number] = (),
    delivery_price: Optional[Number] = ZERO,
    bonus_used: Number = ZERO
) -> OrderTotals:
    """
    주문 합계를 계산합니다.

    Args:
        outcomes: 품목별 프로모션 적용 결과
        option_costs: 옵션 비용 목록
        delivery_price: 배송비 (None 이면 0)
        bonus_used: 사용한 보너스

    Returns:
        품목 합계, 소계, 최종 합계

    Raises:
        ValueError: 보너스가 음수이거나 결제 금액보다 큰 경우
    """
    items_total = sum((o.line_cost for o in outcomes), ZERO)
    options_total = sum((to_decimal(c) for c in option_costs), ZERO)
    subtotal = items_total + options_total
    delivery = to_decimal(delivery_price) if delivery_price is not None else ZERO
    bonus = to_decimal(bonus_used)

    if bonus < ZERO:
        raise ValueError(f"bonus_used must not be negative: {bonus}")
    if bonus > subtotal + delivery:
        raise ValueError(f"bonus_used {bonus} exceeds payable amount {subtotal + delivery}")

    return OrderTotals(
        items_total=items_total,
        options_total=options_total,
        subtotal=subtotal,
        delivery_price=delivery,
        bonus_used=bonus,
        total_sum=subtotal + delivery - bonus,
    )

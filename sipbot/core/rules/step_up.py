"""
阶梯递增（step-up）金额计算。

公式：amount = base_amount × (1 + step_up_pct / 100) ^ prior_installments

- prior_installments 为已确认成功的期数，因此首期不递增；
- step_up_pct = 0 时永不递增；
- 全程使用 Decimal 整数幂，不做舍入（展示时再量化）。
"""

from __future__ import annotations

from decimal import Decimal

from sipbot.core.models.plan import SipPlan

_HUNDRED = Decimal("100")


def calc_installment_amount(
    base_amount: Decimal,
    step_up_pct: Decimal,
    prior_installments: int,
) -> Decimal:
    """
    计算某一期的扣款金额。

    Args:
        base_amount: 基础金额（首期金额）。
        step_up_pct: 每期递增百分比（>= 0）。
        prior_installments: 此前已成功的期数（>= 0）。

    Returns:
        本期金额（Decimal，未量化）。
    """
    if step_up_pct <= 0 or prior_installments <= 0:
        return base_amount
    factor = (Decimal("1") + step_up_pct / _HUNDRED) ** prior_installments
    return base_amount * factor


def next_installment_amount(plan: SipPlan) -> Decimal:
    """计划下一次扣款的金额（指数 = 已成功期数）。"""
    return calc_installment_amount(plan.base_amount, plan.step_up_pct, plan.installment_count)


def preview_installment_amounts(plan: SipPlan, periods: int = 2) -> list[Decimal]:
    """
    预估接下来 periods 期的金额，仅用于展示，不修改计划。

    示例：base=1000、step_up=10、已成功 2 期 → [1210, 1331]
    """
    return [
        calc_installment_amount(plan.base_amount, plan.step_up_pct, plan.installment_count + i)
        for i in range(periods)
    ]

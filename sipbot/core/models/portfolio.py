from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sipbot.core.models.plan import SipPlan


@dataclass(slots=True)
class PortfolioItem:
    """
    单个计划的持仓估值。

    口径：
    - 仅统计 SUCCESS 交易；
    - current_value = total_units × current_nav；
    - total_invested 为 0 时 gain_loss_pct 固定为 0；
    - current_installment_amount / next_installment_amount 为下一期与再下一期的预估金额（不修改计划）。
    """

    plan: SipPlan
    fund_name: str
    total_invested: Decimal
    total_units: Decimal
    current_nav: Decimal
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_pct: Decimal
    current_installment_amount: Decimal
    next_installment_amount: Decimal


@dataclass(slots=True)
class PortfolioSummary:
    """用户维度的组合汇总（金额求和 + 按状态计数）。"""

    user_id: str
    total_invested: Decimal
    total_current_value: Decimal
    total_units: Decimal
    gain_loss: Decimal
    gain_loss_pct: Decimal
    active_count: int
    paused_count: int
    stopped_count: int

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class Frequency(str, Enum):
    """
    定投频率。

    说明：继承自 str，__str__ 返回枚举值本身，便于日志与 CLI 展示。
    """

    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"

    def __str__(self) -> str:
        return self.value


class PlanState(str, Enum):
    """
    计划生命周期状态。

    - ACTIVE ⇄ PAUSED（pause / unpause）
    - ACTIVE / PAUSED → STOPPED（stop，终态）
    """

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    STOPPED = "STOPPED"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class SipPlan:
    """
    定投计划实体。

    说明：
    - 金额与递增比例使用 Decimal，禁止 float；
    - next_execution_date 只会从自身向后推进，始终 >= start_date；
    - installment_count 为已确认成功的期数，仅在支付成功回调时 +1；
    - 计划不持有交易列表，交易通过 plan_id 外键关联。
    """

    id: str
    user_id: str
    fund_id: str
    base_amount: Decimal
    frequency: Frequency
    start_date: date
    next_execution_date: date
    state: PlanState = PlanState.ACTIVE
    installment_count: int = 0
    step_up_pct: Decimal = Decimal("0")
    """每期递增百分比（如 10 表示每期在上期基础上 +10%），0 表示不递增。"""

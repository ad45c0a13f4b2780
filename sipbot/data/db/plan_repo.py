from __future__ import annotations

from datetime import date

from sipbot.core.models import PlanState, SipPlan
from sipbot.core.rules.date_math import is_on_or_before
from sipbot.data.db.base import InMemoryRepo


class InMemoryPlanRepo(InMemoryRepo[SipPlan]):
    """
    定投计划仓储（内存）。

    二级索引：user_id、fund_id；状态与到期查询走主表扫描（保持创建顺序）。
    """

    INDEXES = {
        "user_id": lambda p: p.user_id,
        "fund_id": lambda p: p.fund_id,
    }

    def list_by_user(self, user_id: str) -> list[SipPlan]:
        return self._lookup("user_id", user_id)

    def list_by_fund(self, fund_id: str) -> list[SipPlan]:
        return self._lookup("fund_id", fund_id)

    def list_by_state(self, state: PlanState) -> list[SipPlan]:
        return self._filter(lambda p: p.state == state)

    def list_by_user_and_state(self, user_id: str, state: PlanState) -> list[SipPlan]:
        return [p for p in self.list_by_user(user_id) if p.state == state]

    def list_due(self, as_of: date) -> list[SipPlan]:
        """返回 ACTIVE 且 next_execution_date <= as_of 的计划（按创建顺序）。"""
        return self._filter(
            lambda p: p.state == PlanState.ACTIVE and is_on_or_before(p.next_execution_date, as_of)
        )

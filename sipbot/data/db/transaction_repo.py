from __future__ import annotations

from sipbot.core.models import PaymentStatus, SipTransaction
from sipbot.data.db.base import InMemoryRepo


class InMemoryTransactionRepo(InMemoryRepo[SipTransaction]):
    """
    交易仓储（内存）。

    二级索引：plan_id。交易只增不删，状态仅在回调时修改一次。
    """

    INDEXES = {"plan_id": lambda t: t.plan_id}

    def list_by_plan(self, plan_id: str) -> list[SipTransaction]:
        return self._lookup("plan_id", plan_id)

    def list_by_status(self, status: PaymentStatus) -> list[SipTransaction]:
        return self._filter(lambda t: t.status == status)

    def list_successful_by_plan(self, plan_id: str) -> list[SipTransaction]:
        return [t for t in self.list_by_plan(plan_id) if t.status == PaymentStatus.SUCCESS]

    def list_pending_by_plan(self, plan_id: str) -> list[SipTransaction]:
        return [t for t in self.list_by_plan(plan_id) if t.status == PaymentStatus.PENDING]

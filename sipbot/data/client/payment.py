from __future__ import annotations

import logging
import random

from sipbot.core.models import PaymentEvent, PaymentRequest, PaymentStatus
from sipbot.core.protocols import PaymentCallback

logger = logging.getLogger(__name__)


class MockPaymentGateway:
    """
    Mock 支付网关。

    两种模式：
    - auto_complete=True：发起即按 success_rate 随机决定结果并立即回调（同步投递）；
    - auto_complete=False：挂起请求，由 complete_payment / complete_all_pending 手动投递（延迟投递）。

    redeliver 可对已发起过的交易再次投递任意状态，用于模拟重复/乱序回调；
    网关本身不做去重，幂等完全由回调处理函数保证。
    """

    def __init__(
        self,
        success_rate: float = 1.0,
        auto_complete: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        self.success_rate = max(0.0, min(1.0, success_rate))
        self.auto_complete = auto_complete
        self.rng = rng or random.Random()
        self._pending: dict[str, tuple[PaymentRequest, PaymentCallback]] = {}
        self._initiated: dict[str, tuple[PaymentRequest, PaymentCallback]] = {}
        self.requests: list[PaymentRequest] = []
        self.delivered: list[PaymentEvent] = []

    def initiate_payment(self, request: PaymentRequest, on_complete: PaymentCallback) -> None:
        self.requests.append(request)
        self._initiated[request.transaction_id] = (request, on_complete)
        if self.auto_complete:
            self._deliver(request, on_complete, self._simulate_result())
        else:
            self._pending[request.transaction_id] = (request, on_complete)
            logger.debug("[MockPayment] 挂起扣款：%s 金额=%s", request.transaction_id, request.amount)

    def complete_payment(self, transaction_id: str, status: PaymentStatus) -> bool:
        """
        手动完成一笔挂起的扣款。

        Returns:
            是否存在该挂起请求。
        """
        entry = self._pending.pop(transaction_id, None)
        if entry is None:
            return False
        request, on_complete = entry
        self._deliver(request, on_complete, status)
        return True

    def complete_all_pending(self, status: PaymentStatus) -> int:
        """以同一状态完成全部挂起扣款，返回完成笔数。"""
        transaction_ids = list(self._pending)
        for transaction_id in transaction_ids:
            self.complete_payment(transaction_id, status)
        return len(transaction_ids)

    def redeliver(self, transaction_id: str, status: PaymentStatus) -> bool:
        """
        对已发起的扣款再次投递回调（模拟重复或迟到的通知）。

        Returns:
            是否发起过该扣款。
        """
        entry = self._initiated.get(transaction_id)
        if entry is None:
            return False
        request, on_complete = entry
        self._deliver(request, on_complete, status)
        return True

    def pending_count(self) -> int:
        return len(self._pending)

    def set_success_rate(self, rate: float) -> None:
        self.success_rate = max(0.0, min(1.0, rate))

    # ========== 私有辅助函数 ==========

    def _simulate_result(self) -> PaymentStatus:
        if self.rng.random() < self.success_rate:
            return PaymentStatus.SUCCESS
        return PaymentStatus.FAILURE

    def _deliver(self, request: PaymentRequest, on_complete: PaymentCallback, status: PaymentStatus) -> None:
        event = PaymentEvent(
            transaction_id=request.transaction_id,
            plan_id=request.plan_id,
            status=status,
        )
        self.delivered.append(event)
        on_complete(event)

"""支付请求与回调事件（不可变值对象）。"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sipbot.core.models.transaction import PaymentStatus


@dataclass(slots=True, frozen=True)
class PaymentRequest:
    """发往支付网关的扣款请求。"""

    transaction_id: str
    plan_id: str
    amount: Decimal


@dataclass(slots=True, frozen=True)
class PaymentEvent:
    """
    支付完成事件。

    由支付网关投递给回调处理函数；同一 transaction_id 可能投递零次、一次或多次，
    且顺序不保证（幂等由处理函数保证）。
    """

    transaction_id: str
    plan_id: str
    status: PaymentStatus

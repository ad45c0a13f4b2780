from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class PaymentStatus(str, Enum):
    """支付状态：PENDING（待回调）/ SUCCESS / FAILURE。"""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"

    def __str__(self) -> str:
        return self.value


class TransactionType(str, Enum):
    """交易类型：INSTALLMENT（定投期）/ LUMP_SUM（一次性投入）。"""

    INSTALLMENT = "INSTALLMENT"
    LUMP_SUM = "LUMP_SUM"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class SipTransaction:
    """
    交易实体：一次扣款尝试。

    说明：
    - units 在创建时按 amount / nav 计算一次，之后不再重算；
    - nav 为创建时的净值快照；
    - callback_processed 为幂等标记：置为 True 后 status 不再变化。
    """

    id: str
    plan_id: str
    amount: Decimal
    units: Decimal
    nav: Decimal
    trade_date: date
    status: PaymentStatus = PaymentStatus.PENDING
    type: TransactionType = TransactionType.INSTALLMENT
    callback_processed: bool = False

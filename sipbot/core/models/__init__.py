from .fund import Fund, FundCategory, RiskLevel
from .payment import PaymentEvent, PaymentRequest
from .plan import Frequency, PlanState, SipPlan
from .portfolio import PortfolioItem, PortfolioSummary
from .transaction import PaymentStatus, SipTransaction, TransactionType
from .user import User

"""
领域模型聚合导出。

说明：
- 仅做名称聚合，不引入额外逻辑，便于上层模块统一引用；
- 也可以继续从各子模块直接导入。
"""

__all__ = [
    # 定投计划
    "SipPlan",
    "Frequency",
    "PlanState",
    # 交易与支付
    "SipTransaction",
    "PaymentStatus",
    "TransactionType",
    "PaymentRequest",
    "PaymentEvent",
    # 基金与用户
    "Fund",
    "FundCategory",
    "RiskLevel",
    "User",
    # 估值
    "PortfolioItem",
    "PortfolioSummary",
]

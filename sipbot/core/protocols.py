from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable, Protocol, TypeVar

from sipbot.core.models import (
    Fund,
    FundCategory,
    PaymentEvent,
    PaymentRequest,
    PaymentStatus,
    PlanState,
    RiskLevel,
    SipPlan,
    SipTransaction,
    User,
)

T = TypeVar("T")

# ============================================================================
# Repository 接口（数据访问层协议）
# ============================================================================


class Repository(Protocol[T]):
    """
    通用仓储协议（按 id 存取）。

    约定：返回值均为副本，调用方修改后需通过 update 写回；单次调用视为原子操作。
    """

    def add(self, entity: T) -> None:
        """新增实体；id 已存在时抛出 InvalidInputError。"""

    def get(self, entity_id: str) -> T | None:
        """按 id 读取，未找到返回 None。"""

    def list_all(self) -> list[T]:
        """按插入顺序返回全部实体。"""

    def update(self, entity: T) -> bool:
        """覆盖写回，返回是否找到。"""

    def remove(self, entity_id: str) -> bool:
        """删除实体，返回是否找到。"""

    def exists(self, entity_id: str) -> bool:
        """判断实体是否存在。"""

    def count(self) -> int:
        """实体数量。"""


class PlanRepo(Repository[SipPlan], Protocol):
    """定投计划存取。"""

    def list_by_user(self, user_id: str) -> list[SipPlan]:
        """某用户的全部计划。"""

    def list_by_fund(self, fund_id: str) -> list[SipPlan]:
        """投向某基金的全部计划。"""

    def list_by_state(self, state: PlanState) -> list[SipPlan]:
        """按状态筛选计划。"""

    def list_by_user_and_state(self, user_id: str, state: PlanState) -> list[SipPlan]:
        """按用户 + 状态筛选计划。"""

    def list_due(self, as_of: date) -> list[SipPlan]:
        """返回 state == ACTIVE 且 next_execution_date <= as_of 的计划。"""


class TransactionRepo(Repository[SipTransaction], Protocol):
    """交易存取。金额/份额使用 Decimal。"""

    def list_by_plan(self, plan_id: str) -> list[SipTransaction]:
        """某计划的全部交易（按创建顺序）。"""

    def list_by_status(self, status: PaymentStatus) -> list[SipTransaction]:
        """按支付状态筛选交易。"""

    def list_successful_by_plan(self, plan_id: str) -> list[SipTransaction]:
        """某计划的 SUCCESS 交易（估值口径）。"""

    def list_pending_by_plan(self, plan_id: str) -> list[SipTransaction]:
        """某计划仍在等待回调的 PENDING 交易。"""


class FundRepo(Repository[Fund], Protocol):
    """基金目录存取。"""

    def list_by_category(self, category: FundCategory) -> list[Fund]:
        """按基金类别筛选。"""

    def list_by_risk_level(self, risk_level: RiskLevel) -> list[Fund]:
        """按风险等级筛选。"""


class UserRepo(Repository[User], Protocol):
    """用户存取。"""

    def get_by_email(self, email: str) -> User | None:
        """按邮箱读取，未找到返回 None。"""


# ============================================================================
# Service 接口（外部服务协议）
# ============================================================================


class MarketPriceProtocol(Protocol):
    """
    行情协议：查询/更新基金当前净值。

    生产环境由外部行情源实现，流程层只依赖本协议。
    """

    def get_current_nav(self, fund_id: str) -> Decimal:
        """
        返回基金当前净值（> 0）。

        Raises:
            FundNotFoundError: 基金无行情。
        """

    def update_nav(self, fund_id: str, nav: Decimal) -> None:
        """
        更新基金净值。

        Raises:
            InvalidInputError: nav <= 0。
        """


PaymentCallback = Callable[[PaymentEvent], None]
"""支付完成回调：接收 PaymentEvent，可能被调用零次、一次或多次。"""


class PaymentGatewayProtocol(Protocol):
    """
    支付网关协议（异步契约）。

    initiate_payment 不等待扣款结果；结果通过 on_complete 投递 PaymentEvent。
    同步实现（立即回调）与延迟实现均满足本协议。
    """

    def initiate_payment(self, request: PaymentRequest, on_complete: PaymentCallback) -> None:
        """发起扣款。"""

"""
领域异常。

分类：
- NotFoundError：计划/基金/用户/交易不存在（同时是 LookupError）；
- InvalidInputError：入参非法（金额非正、递增比例为负、标识为空、NAV 非正等，同时是 ValueError）；
- InvalidStateTransitionError：当前计划状态不允许该操作。

传播口径：计划与估值流程同步抛出，不吞异常；仅调度批处理逐计划捕获并记录日志。
"""

from __future__ import annotations


class SipError(Exception):
    """定投系统异常基类。"""


class NotFoundError(SipError, LookupError):
    """实体不存在。"""

    entity = "实体"

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"{self.entity}不存在：{entity_id}")
        self.entity_id = entity_id


class PlanNotFoundError(NotFoundError):
    entity = "定投计划"


class FundNotFoundError(NotFoundError):
    entity = "基金"


class UserNotFoundError(NotFoundError):
    entity = "用户"


class TransactionNotFoundError(NotFoundError):
    """查询交易时抛出；支付回调找不到交易时静默忽略，不抛出本异常。"""

    entity = "交易"


class InvalidInputError(SipError, ValueError):
    """入参校验失败。"""

    def __init__(self, message: str) -> None:
        super().__init__(f"参数校验失败：{message}")


class InvalidStateTransitionError(SipError):
    """
    非法状态迁移。

    Attributes:
        plan_id: 计划 ID。
        current_state: 计划当前状态。
        operation: 尝试执行的操作（pause/unpause/stop/modify_step_up）。
    """

    def __init__(self, plan_id: str, current_state: str, operation: str) -> None:
        super().__init__(f"计划 {plan_id} 当前状态为 {current_state}，不允许执行操作：{operation}")
        self.plan_id = plan_id
        self.current_state = current_state
        self.operation = operation

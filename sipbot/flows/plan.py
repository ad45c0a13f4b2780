"""定投计划生命周期相关业务流程。"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sipbot.core.dependency import dependency
from sipbot.core.errors import (
    FundNotFoundError,
    InvalidStateTransitionError,
    PlanNotFoundError,
    UserNotFoundError,
)
from sipbot.core.ids import IdGenerator
from sipbot.core.models import Frequency, PlanState, SipPlan
from sipbot.core.protocols import FundRepo, PlanRepo, UserRepo
from sipbot.core.rules.step_up import next_installment_amount
from sipbot.schemas import PlanArgs, StepUpArgs, validate_args

logger = logging.getLogger(__name__)

# 操作 -> 允许执行该操作的当前状态
_ALLOWED_FROM: dict[str, frozenset[PlanState]] = {
    "pause": frozenset({PlanState.ACTIVE}),
    "unpause": frozenset({PlanState.PAUSED}),
    "stop": frozenset({PlanState.ACTIVE, PlanState.PAUSED}),
    "modify_step_up": frozenset({PlanState.ACTIVE, PlanState.PAUSED}),
}


@dependency
def create_plan(
    *,
    user_id: str,
    fund_id: str,
    amount: Decimal,
    frequency: Frequency,
    start_date: date,
    step_up_pct: Decimal = Decimal("0"),
    plan_repo: PlanRepo | None = None,
    user_repo: UserRepo | None = None,
    fund_repo: FundRepo | None = None,
    id_generator: IdGenerator | None = None,
) -> SipPlan:
    """
    创建定投计划（初始状态 ACTIVE）。

    Args:
        user_id: 计划所有者，需已注册。
        fund_id: 基金 ID，需已存在于基金目录。
        amount: 基础金额，必须大于 0。
        frequency: 定投频率。
        start_date: 首期执行日期（next_execution_date 初始即为该日）。
        step_up_pct: 每期递增百分比，必须 >= 0，默认不递增。
        plan_repo: 计划仓储（可选，自动注入）。
        user_repo: 用户仓储（可选，自动注入）。
        fund_repo: 基金仓储（可选，自动注入）。
        id_generator: ID 生成器（可选，自动注入）。

    Returns:
        入库后的计划。

    Raises:
        InvalidInputError: 标识为空、金额非正或递增比例为负。
        UserNotFoundError: 用户不存在。
        FundNotFoundError: 基金不存在。
    """
    args = validate_args(
        PlanArgs,
        user_id=user_id,
        fund_id=fund_id,
        amount=amount,
        frequency=frequency,
        start_date=start_date,
        step_up_pct=step_up_pct,
    )
    if not user_repo.exists(args.user_id):
        raise UserNotFoundError(args.user_id)
    if not fund_repo.exists(args.fund_id):
        raise FundNotFoundError(args.fund_id)

    plan = SipPlan(
        id=id_generator.next_plan_id(),
        user_id=args.user_id,
        fund_id=args.fund_id,
        base_amount=args.amount,
        frequency=args.frequency,
        start_date=args.start_date,
        next_execution_date=args.start_date,
        state=PlanState.ACTIVE,
        installment_count=0,
        step_up_pct=args.step_up_pct,
    )
    plan_repo.add(plan)
    logger.info(
        "[Plan] 创建计划 %s：user=%s fund=%s amount=%s freq=%s start=%s step_up=%s%%",
        plan.id,
        plan.user_id,
        plan.fund_id,
        plan.base_amount,
        plan.frequency,
        plan.start_date,
        plan.step_up_pct,
    )
    return plan


@dependency
def get_plan(
    *,
    plan_id: str,
    plan_repo: PlanRepo | None = None,
) -> SipPlan:
    """
    按 ID 读取计划。

    Raises:
        PlanNotFoundError: 计划不存在。
    """
    plan = plan_repo.get(plan_id)
    if plan is None:
        raise PlanNotFoundError(plan_id)
    return plan


@dependency
def list_user_plans(
    *,
    user_id: str,
    state: PlanState | None = None,
    plan_repo: PlanRepo | None = None,
) -> list[SipPlan]:
    """
    查询用户的计划。

    Args:
        user_id: 用户 ID。
        state: 仅返回该状态的计划（可选）。
        plan_repo: 计划仓储（可选，自动注入）。
    """
    if state is None:
        return plan_repo.list_by_user(user_id)
    return plan_repo.list_by_user_and_state(user_id, state)


@dependency
def pause_plan(
    *,
    plan_id: str,
    plan_repo: PlanRepo | None = None,
) -> SipPlan:
    """
    暂停计划：ACTIVE → PAUSED。

    Raises:
        PlanNotFoundError: 计划不存在。
        InvalidStateTransitionError: 计划已暂停或已终止。
    """
    return _transition(plan_id, "pause", PlanState.PAUSED, plan_repo)


@dependency
def unpause_plan(
    *,
    plan_id: str,
    plan_repo: PlanRepo | None = None,
) -> SipPlan:
    """
    恢复计划：PAUSED → ACTIVE。

    说明：next_execution_date 保持不变，若已过期会在下次调度时立即到期。

    Raises:
        PlanNotFoundError: 计划不存在。
        InvalidStateTransitionError: 计划处于 ACTIVE 或 STOPPED。
    """
    return _transition(plan_id, "unpause", PlanState.ACTIVE, plan_repo)


@dependency
def stop_plan(
    *,
    plan_id: str,
    plan_repo: PlanRepo | None = None,
) -> SipPlan:
    """
    终止计划（终态）：ACTIVE / PAUSED → STOPPED。

    Raises:
        PlanNotFoundError: 计划不存在。
        InvalidStateTransitionError: 计划已终止。
    """
    return _transition(plan_id, "stop", PlanState.STOPPED, plan_repo)


@dependency
def modify_step_up(
    *,
    plan_id: str,
    step_up_pct: Decimal,
    plan_repo: PlanRepo | None = None,
) -> SipPlan:
    """
    修改递增比例（对之后的期数生效，已成功期数不受影响）。

    Raises:
        PlanNotFoundError: 计划不存在。
        InvalidStateTransitionError: 计划已终止。
        InvalidInputError: 新比例为负。
    """
    plan = _load(plan_id, plan_repo)
    _ensure_allowed(plan, "modify_step_up")
    args = validate_args(StepUpArgs, plan_id=plan_id, step_up_pct=step_up_pct)

    plan.step_up_pct = args.step_up_pct
    plan_repo.update(plan)
    logger.info("[Plan] 计划 %s 递增比例调整为 %s%%", plan.id, plan.step_up_pct)
    return plan


@dependency
def calc_current_installment_amount(
    *,
    plan_id: str,
    plan_repo: PlanRepo | None = None,
) -> Decimal:
    """
    计算计划下一期的扣款金额（base × (1 + step_up/100)^已成功期数）。

    Raises:
        PlanNotFoundError: 计划不存在。
    """
    return next_installment_amount(_load(plan_id, plan_repo))


# ========== 私有辅助函数 ==========


def _load(plan_id: str, plan_repo: PlanRepo) -> SipPlan:
    plan = plan_repo.get(plan_id)
    if plan is None:
        raise PlanNotFoundError(plan_id)
    return plan


def _ensure_allowed(plan: SipPlan, operation: str) -> None:
    if plan.state not in _ALLOWED_FROM[operation]:
        raise InvalidStateTransitionError(plan.id, str(plan.state), operation)


def _transition(plan_id: str, operation: str, target: PlanState, plan_repo: PlanRepo) -> SipPlan:
    plan = _load(plan_id, plan_repo)
    _ensure_allowed(plan, operation)

    previous = plan.state
    plan.state = target
    plan_repo.update(plan)
    logger.info("[Plan] 计划 %s：%s → %s（%s）", plan.id, previous, target, operation)
    return plan

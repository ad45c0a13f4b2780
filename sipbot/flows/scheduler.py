"""定投调度与支付回调相关业务流程。"""

from __future__ import annotations

import logging
from datetime import date
from functools import partial

from sipbot.core.dependency import dependency
from sipbot.core.ids import IdGenerator
from sipbot.core.models import (
    PaymentEvent,
    PaymentRequest,
    PaymentStatus,
    PlanState,
    SipPlan,
    SipTransaction,
    TransactionType,
)
from sipbot.core.protocols import (
    MarketPriceProtocol,
    PaymentGatewayProtocol,
    PlanRepo,
    TransactionRepo,
)
from sipbot.core.rules.date_math import advance, is_on_or_before
from sipbot.core.rules.step_up import next_installment_amount

logger = logging.getLogger(__name__)


def is_plan_due(plan: SipPlan, as_of: date) -> bool:
    """仅 ACTIVE 且 next_execution_date <= as_of 的计划到期。"""
    return plan.state == PlanState.ACTIVE and is_on_or_before(plan.next_execution_date, as_of)


@dependency
def execute_due(
    *,
    as_of: date,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
    payment_gateway: PaymentGatewayProtocol | None = None,
    id_generator: IdGenerator | None = None,
) -> int:
    """
    执行截至 as_of 到期的全部定投计划。

    口径：
    - 按创建顺序逐个处理，单个计划失败（如基金无行情）只记录日志，不影响其他计划；
    - 失败计划保持原样，下次调度仍会到期；
    - 不等待扣款结果，交易在回调到达前保持 PENDING。

    Args:
        as_of: 调度基准日。
        plan_repo: 计划仓储（可选，自动注入）。
        transaction_repo: 交易仓储（可选，自动注入）。
        market_price_service: 行情服务（可选，自动注入）。
        payment_gateway: 支付网关（可选，自动注入）。
        id_generator: ID 生成器（可选，自动注入）。

    Returns:
        成功创建交易并发起扣款的计划数量。
    """
    due_plans = plan_repo.list_due(as_of)
    logger.info("[Scheduler] %s 到期计划 %d 个", as_of, len(due_plans))

    count = 0
    for plan in due_plans:
        try:
            txn = execute_plan(
                plan_id=plan.id,
                execution_date=as_of,
                plan_repo=plan_repo,
                transaction_repo=transaction_repo,
                market_price_service=market_price_service,
                payment_gateway=payment_gateway,
                id_generator=id_generator,
            )
        except Exception:  # noqa: BLE001
            logger.exception("[Scheduler] 计划 %s 执行失败，跳过", plan.id)
            continue
        if txn is not None:
            count += 1

    logger.info("[Scheduler] %s 调度完成：发起扣款 %d 笔", as_of, count)
    return count


@dependency
def execute_plan(
    *,
    plan_id: str,
    execution_date: date,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
    payment_gateway: PaymentGatewayProtocol | None = None,
    id_generator: IdGenerator | None = None,
) -> SipTransaction | None:
    """
    执行单个计划的一期定投。

    步骤：
    1. 重新读取计划并确认仍为 ACTIVE（否则静默跳过）；
    2. 查询基金当前净值（无行情抛出 FundNotFoundError）；
    3. 金额 = base × (1 + step_up/100)^已成功期数，份额 = 金额 / 净值；
    4. 先落库 PENDING 交易，保证扣款无论是否完成都有记录；
    5. 发起扣款，回调绑定到 handle_payment_event。

    Args:
        plan_id: 计划 ID。
        execution_date: 交易日期（即调度基准日）。

    Returns:
        新建的交易；计划不存在或非 ACTIVE 时返回 None。

    Raises:
        FundNotFoundError: 基金无行情。
    """
    plan = plan_repo.get(plan_id)
    if plan is None or plan.state != PlanState.ACTIVE:
        logger.debug("[Scheduler] 计划 %s 非 ACTIVE，跳过", plan_id)
        return None

    nav = market_price_service.get_current_nav(plan.fund_id)
    amount = next_installment_amount(plan)

    in_flight = transaction_repo.list_pending_by_plan(plan.id)
    if in_flight:
        # 幂等仅按交易保证，不按计划：上一期仍在途时会再发起一笔
        logger.warning(
            "[Scheduler] 计划 %s 仍有 %d 笔在途交易（%s），继续发起新扣款",
            plan.id,
            len(in_flight),
            ", ".join(t.id for t in in_flight),
        )

    txn = SipTransaction(
        id=id_generator.next_transaction_id(),
        plan_id=plan.id,
        amount=amount,
        units=amount / nav,
        nav=nav,
        trade_date=execution_date,
        status=PaymentStatus.PENDING,
        type=TransactionType.INSTALLMENT,
        callback_processed=False,
    )
    transaction_repo.add(txn)
    logger.info(
        "[Scheduler] 计划 %s 第 %d 期：交易 %s 金额=%s NAV=%s",
        plan.id,
        plan.installment_count + 1,
        txn.id,
        txn.amount,
        txn.nav,
    )

    on_complete = partial(
        handle_payment_event,
        plan_repo=plan_repo,
        transaction_repo=transaction_repo,
    )
    payment_gateway.initiate_payment(
        PaymentRequest(transaction_id=txn.id, plan_id=plan.id, amount=txn.amount),
        on_complete,
    )
    return txn


@dependency
def handle_payment_event(
    event: PaymentEvent,
    *,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
) -> bool:
    """
    处理支付完成事件（幂等）。

    规则：
    - 交易不存在 → 忽略；
    - 交易已处理过回调（callback_processed=True）→ 忽略，重复/迟到的 SUCCESS 或 FAILURE 均无副作用；
    - 否则写入状态并标记已处理；
    - 仅 SUCCESS：已成功期数 +1，next_execution_date 从当前值推进一个周期（不参考调度日），
      保持固定节奏；
    - FAILURE：计划不变，下次调度仍到期重试。

    Args:
        event: 支付完成事件。
        plan_repo: 计划仓储（可选，自动注入）。
        transaction_repo: 交易仓储（可选，自动注入）。

    Returns:
        本次事件是否产生了状态变更。
    """
    txn = transaction_repo.get(event.transaction_id)
    if txn is None:
        logger.debug("[Scheduler] 回调交易不存在，忽略：%s", event.transaction_id)
        return False
    if txn.callback_processed:
        logger.debug(
            "[Scheduler] 回调已处理，忽略：%s（已记录 %s，本次 %s）",
            txn.id,
            txn.status,
            event.status,
        )
        return False
    if event.status == PaymentStatus.PENDING:
        logger.debug("[Scheduler] 回调状态仍为 PENDING，忽略：%s", txn.id)
        return False

    txn.status = event.status
    txn.callback_processed = True
    transaction_repo.update(txn)

    if event.status == PaymentStatus.SUCCESS:
        _record_installment_success(txn.plan_id, plan_repo)
    else:
        logger.warning("[Scheduler] 交易 %s 扣款失败，计划 %s 保持到期待重试", txn.id, txn.plan_id)
    return True


# ========== 私有辅助函数 ==========


def _record_installment_success(plan_id: str, plan_repo: PlanRepo) -> None:
    """成功期数 +1，并从当前 next_execution_date 推进一个周期。"""
    plan = plan_repo.get(plan_id)
    if plan is None:
        logger.warning("[Scheduler] 成功回调对应的计划不存在：%s", plan_id)
        return
    if plan.state == PlanState.STOPPED:
        # 终止后的计划不再修改，交易本身已记为 SUCCESS
        logger.warning("[Scheduler] 计划 %s 已终止，成功回调不再推进计划", plan_id)
        return

    previous = plan.next_execution_date
    plan.installment_count += 1
    plan.next_execution_date = advance(previous, plan.frequency)
    plan_repo.update(plan)
    logger.info(
        "[Scheduler] 计划 %s 已成功 %d 期，下次执行日 %s → %s",
        plan.id,
        plan.installment_count,
        previous,
        plan.next_execution_date,
    )

"""持仓估值相关业务流程。"""

from __future__ import annotations

from decimal import Decimal

from sipbot.core.dependency import dependency
from sipbot.core.errors import PlanNotFoundError, TransactionNotFoundError
from sipbot.core.models import (
    PlanState,
    PortfolioItem,
    PortfolioSummary,
    SipPlan,
    SipTransaction,
)
from sipbot.core.protocols import FundRepo, MarketPriceProtocol, PlanRepo, TransactionRepo
from sipbot.core.rules.step_up import preview_installment_amounts

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def calc_gain_loss_pct(gain_loss: Decimal, total_invested: Decimal) -> Decimal:
    """收益率（%）；投入为 0 时固定为 0。"""
    if total_invested == 0:
        return _ZERO
    return gain_loss / total_invested * _HUNDRED


@dependency
def build_portfolio_item(
    *,
    plan: SipPlan,
    transaction_repo: TransactionRepo | None = None,
    fund_repo: FundRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
) -> PortfolioItem:
    """
    计算单个计划的持仓估值。

    口径：
    - 仅统计 SUCCESS 交易的金额与份额（PENDING/FAILURE 不计入）；
    - 市值 = 总份额 × 当前净值；
    - 预估金额按已成功期数顺延两期，不修改计划。

    Raises:
        FundNotFoundError: 基金无行情。
    """
    current_nav = market_price_service.get_current_nav(plan.fund_id)
    successful = transaction_repo.list_successful_by_plan(plan.id)

    total_invested = _sum_amount(successful)
    total_units = _sum_units(successful)
    current_value = total_units * current_nav
    gain_loss = current_value - total_invested

    fund = fund_repo.get(plan.fund_id)
    current_amount, next_amount = preview_installment_amounts(plan, periods=2)

    return PortfolioItem(
        plan=plan,
        fund_name=fund.name if fund else plan.fund_id,
        total_invested=total_invested,
        total_units=total_units,
        current_nav=current_nav,
        current_value=current_value,
        gain_loss=gain_loss,
        gain_loss_pct=calc_gain_loss_pct(gain_loss, total_invested),
        current_installment_amount=current_amount,
        next_installment_amount=next_amount,
    )


@dependency
def get_user_portfolio(
    *,
    user_id: str,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
    fund_repo: FundRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
) -> list[PortfolioItem]:
    """返回用户全部计划的持仓估值（按计划创建顺序）。"""
    return [
        build_portfolio_item(
            plan=plan,
            transaction_repo=transaction_repo,
            fund_repo=fund_repo,
            market_price_service=market_price_service,
        )
        for plan in plan_repo.list_by_user(user_id)
    ]


@dependency
def filter_portfolio_by_state(
    *,
    user_id: str,
    state: PlanState,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
    fund_repo: FundRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
) -> list[PortfolioItem]:
    """返回用户指定状态计划的持仓估值。"""
    return [
        build_portfolio_item(
            plan=plan,
            transaction_repo=transaction_repo,
            fund_repo=fund_repo,
            market_price_service=market_price_service,
        )
        for plan in plan_repo.list_by_user_and_state(user_id, state)
    ]


@dependency
def get_portfolio_summary(
    *,
    user_id: str,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
    fund_repo: FundRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
) -> PortfolioSummary:
    """
    用户组合汇总。

    口径：各计划金额/份额/市值求和，收益率按汇总值重新计算（非各计划收益率平均），
    并分别统计 ACTIVE/PAUSED/STOPPED 计划数。
    """
    items = get_user_portfolio(
        user_id=user_id,
        plan_repo=plan_repo,
        transaction_repo=transaction_repo,
        fund_repo=fund_repo,
        market_price_service=market_price_service,
    )

    total_invested = sum((i.total_invested for i in items), start=_ZERO)
    total_value = sum((i.current_value for i in items), start=_ZERO)
    total_units = sum((i.total_units for i in items), start=_ZERO)
    gain_loss = total_value - total_invested
    states = [i.plan.state for i in items]

    return PortfolioSummary(
        user_id=user_id,
        total_invested=total_invested,
        total_current_value=total_value,
        total_units=total_units,
        gain_loss=gain_loss,
        gain_loss_pct=calc_gain_loss_pct(gain_loss, total_invested),
        active_count=states.count(PlanState.ACTIVE),
        paused_count=states.count(PlanState.PAUSED),
        stopped_count=states.count(PlanState.STOPPED),
    )


@dependency
def get_transaction(
    *,
    transaction_id: str,
    transaction_repo: TransactionRepo | None = None,
) -> SipTransaction:
    """
    按 ID 读取交易。

    Raises:
        TransactionNotFoundError: 交易不存在。
    """
    txn = transaction_repo.get(transaction_id)
    if txn is None:
        raise TransactionNotFoundError(transaction_id)
    return txn


@dependency
def get_transaction_history(
    *,
    plan_id: str,
    transaction_repo: TransactionRepo | None = None,
) -> list[SipTransaction]:
    """返回计划的全部交易（含 PENDING/FAILURE），按创建顺序。"""
    return transaction_repo.list_by_plan(plan_id)


@dependency
def calc_total_invested(
    *,
    plan_id: str,
    transaction_repo: TransactionRepo | None = None,
) -> Decimal:
    return _sum_amount(transaction_repo.list_successful_by_plan(plan_id))


@dependency
def calc_total_units(
    *,
    plan_id: str,
    transaction_repo: TransactionRepo | None = None,
) -> Decimal:
    return _sum_units(transaction_repo.list_successful_by_plan(plan_id))


@dependency
def calc_current_value(
    *,
    plan_id: str,
    plan_repo: PlanRepo | None = None,
    transaction_repo: TransactionRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
) -> Decimal:
    """
    计划当前市值 = 已成功总份额 × 当前净值。

    Raises:
        PlanNotFoundError: 计划不存在。
        FundNotFoundError: 基金无行情。
    """
    plan = plan_repo.get(plan_id)
    if plan is None:
        raise PlanNotFoundError(plan_id)
    total_units = _sum_units(transaction_repo.list_successful_by_plan(plan_id))
    return total_units * market_price_service.get_current_nav(plan.fund_id)


# ========== 私有辅助函数 ==========


def _sum_amount(transactions: list[SipTransaction]) -> Decimal:
    return sum((t.amount for t in transactions), start=_ZERO)


def _sum_units(transactions: list[SipTransaction]) -> Decimal:
    return sum((t.units for t in transactions), start=_ZERO)

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from sipbot.core.errors import FundNotFoundError, PlanNotFoundError, TransactionNotFoundError
from sipbot.core.models import Fund, FundCategory, PaymentStatus, PlanState, RiskLevel
from sipbot.core.rules.precision import quantize_amount, quantize_pct
from sipbot.data.client.payment import MockPaymentGateway
from sipbot.flows.fund import add_fund, update_fund_nav
from sipbot.flows.plan import pause_plan, stop_plan
from sipbot.flows.portfolio import (
    calc_current_value,
    calc_gain_loss_pct,
    calc_total_invested,
    calc_total_units,
    filter_portfolio_by_state,
    get_portfolio_summary,
    get_transaction,
    get_transaction_history,
    get_user_portfolio,
)
from sipbot.flows.scheduler import execute_due


def _run_until(plan_repo, plan_id, deps, times):
    for _ in range(times):
        as_of = plan_repo.get(plan_id).next_execution_date
        execute_due(as_of=as_of, **deps)


def test_gain_loss_pct_is_zero_without_investment():
    assert calc_gain_loss_pct(Decimal("0"), Decimal("0")) == Decimal("0")
    assert calc_gain_loss_pct(Decimal("50"), Decimal("200")) == Decimal("25")


def test_new_plan_has_empty_valuation(make_plan, user, valuation_deps):
    plan = make_plan(step_up_pct=Decimal("10"))

    [item] = get_user_portfolio(user_id=user.id, **valuation_deps)

    assert item.plan.id == plan.id
    assert item.fund_name == "Index Growth Fund"
    assert item.total_invested == Decimal("0")
    assert item.current_value == Decimal("0")
    assert item.gain_loss_pct == Decimal("0")
    assert item.current_installment_amount == Decimal("1000")
    assert item.next_installment_amount == Decimal("1100")


def test_value_follows_market_nav(make_plan, user, plan_repo, fund, fund_repo, market, scheduler_deps, valuation_deps):
    plan = make_plan()
    _run_until(plan_repo, plan.id, scheduler_deps, 2)

    update_fund_nav(fund_id=fund.id, nav=Decimal("120"), fund_repo=fund_repo, market_price_service=market)
    [item] = get_user_portfolio(user_id=user.id, **valuation_deps)

    assert item.total_invested == Decimal("2000")
    assert item.total_units == Decimal("20")
    assert item.current_nav == Decimal("120")
    assert item.current_value == Decimal("2400")
    assert item.gain_loss == Decimal("400")
    assert item.gain_loss_pct == Decimal("20")
    assert fund_repo.get(fund.id).nav == Decimal("120")


def test_only_successful_transactions_count(make_plan, plan_repo, transaction_repo, scheduler_deps, market):
    plan = make_plan()
    _run_until(plan_repo, plan.id, scheduler_deps, 1)
    failing = {**scheduler_deps, "payment_gateway": MockPaymentGateway(success_rate=0.0)}
    _run_until(plan_repo, plan.id, failing, 1)
    deferred = {**scheduler_deps, "payment_gateway": MockPaymentGateway(auto_complete=False)}
    _run_until(plan_repo, plan.id, deferred, 1)

    history = get_transaction_history(plan_id=plan.id, transaction_repo=transaction_repo)
    assert [t.status for t in history] == [PaymentStatus.SUCCESS, PaymentStatus.FAILURE, PaymentStatus.PENDING]

    assert calc_total_invested(plan_id=plan.id, transaction_repo=transaction_repo) == Decimal("1000")
    assert calc_total_units(plan_id=plan.id, transaction_repo=transaction_repo) == Decimal("10")
    assert calc_current_value(
        plan_id=plan.id,
        plan_repo=plan_repo,
        transaction_repo=transaction_repo,
        market_price_service=market,
    ) == Decimal("1000")


def test_get_transaction(make_plan, plan_repo, transaction_repo, scheduler_deps):
    plan = make_plan()
    _run_until(plan_repo, plan.id, scheduler_deps, 1)
    [txn] = transaction_repo.list_by_plan(plan.id)

    assert get_transaction(transaction_id=txn.id, transaction_repo=transaction_repo) == txn
    with pytest.raises(TransactionNotFoundError) as exc_info:
        get_transaction(transaction_id="TXN_404", transaction_repo=transaction_repo)
    assert exc_info.value.entity_id == "TXN_404"


def test_current_value_for_missing_plan(plan_repo, transaction_repo, market):
    with pytest.raises(PlanNotFoundError):
        calc_current_value(
            plan_id="SIP_404",
            plan_repo=plan_repo,
            transaction_repo=transaction_repo,
            market_price_service=market,
        )


def test_summary_aggregates_plans(
    make_plan, user, plan_repo, fund_repo, market, id_generator, scheduler_deps, valuation_deps
):
    debt = add_fund(
        name="Short Duration Debt",
        category=FundCategory.DEBT,
        risk_level=RiskLevel.LOW,
        nav=Decimal("50"),
        fund_repo=fund_repo,
        market_price_service=market,
        id_generator=id_generator,
    )
    make_plan()
    debt_plan = make_plan(fund_id=debt.id, amount=Decimal("500"))
    idle_plan = make_plan(start_date=date(2030, 1, 1))

    execute_due(as_of=date(2024, 1, 15), **scheduler_deps)
    pause_plan(plan_id=debt_plan.id, plan_repo=plan_repo)
    stop_plan(plan_id=idle_plan.id, plan_repo=plan_repo)
    market.simulate_market_movement(Decimal("0.1"))

    summary = get_portfolio_summary(user_id=user.id, **valuation_deps)

    assert summary.total_invested == Decimal("1500")
    assert summary.total_units == Decimal("20")
    assert summary.total_current_value == Decimal("1650")
    assert summary.gain_loss == Decimal("150")
    assert quantize_pct(summary.gain_loss_pct) == Decimal("10.00")
    assert (summary.active_count, summary.paused_count, summary.stopped_count) == (1, 1, 1)

    paused = filter_portfolio_by_state(user_id=user.id, state=PlanState.PAUSED, **valuation_deps)
    assert [i.plan.id for i in paused] == [debt_plan.id]
    assert quantize_amount(paused[0].current_value) == Decimal("550.00")


def test_summary_for_user_without_plans(user, valuation_deps):
    summary = get_portfolio_summary(user_id=user.id, **valuation_deps)
    assert summary.total_invested == Decimal("0")
    assert summary.gain_loss_pct == Decimal("0")
    assert (summary.active_count, summary.paused_count, summary.stopped_count) == (0, 0, 0)


def test_valuation_requires_market_nav(make_plan, user, fund_repo, valuation_deps):
    fund_repo.add(Fund("FUND_DARK", "No Quote", FundCategory.HYBRID, RiskLevel.MEDIUM, Decimal("10")))
    make_plan(fund_id="FUND_DARK")
    with pytest.raises(FundNotFoundError):
        get_user_portfolio(user_id=user.id, **valuation_deps)

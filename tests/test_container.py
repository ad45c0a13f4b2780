from __future__ import annotations

from decimal import Decimal

from sipbot.core.container import get_id_generator, get_payment_gateway, get_plan_repo, reset_container
from sipbot.core.dependency import dependency, get_registered_deps
from sipbot.core.models import FundCategory, RiskLevel
from sipbot.data.db.plan_repo import InMemoryPlanRepo
from sipbot.flows.fund import add_fund, get_fund


def test_registry_contains_all_dependencies():
    assert set(get_registered_deps()) >= {
        "plan_repo",
        "transaction_repo",
        "fund_repo",
        "user_repo",
        "market_price_service",
        "payment_gateway",
        "id_generator",
    }


def test_singletons_reused_until_reset():
    repo = get_plan_repo()
    assert get_plan_repo() is repo
    reset_container()
    assert get_plan_repo() is not repo


def test_gateway_reads_config(monkeypatch):
    monkeypatch.setenv("SIP_PAYMENT_SUCCESS_RATE", "0.25")
    monkeypatch.setenv("SIP_PAYMENT_AUTO_COMPLETE", "0")
    gateway = get_payment_gateway()
    assert gateway.success_rate == 0.25
    assert gateway.auto_complete is False


def test_flows_use_injected_defaults():
    fund = add_fund(name="Bond Fund", category=FundCategory.DEBT, risk_level=RiskLevel.LOW, nav=Decimal("10"))
    assert fund.id == "FUND_000001"
    assert get_fund(fund_id=fund.id).name == "Bond Fund"
    assert get_id_generator().next_fund_id() == "FUND_000002"


def test_explicit_argument_is_not_overridden():
    seen = []

    @dependency
    def probe(*, plan_repo=None):
        seen.append(plan_repo)

    explicit = InMemoryPlanRepo()
    probe(plan_repo=explicit)
    probe()
    assert seen[0] is explicit
    assert seen[1] is get_plan_repo()

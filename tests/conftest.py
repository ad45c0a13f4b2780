from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

import pytest

from sipbot.core.container import reset_container
from sipbot.core.ids import IdGenerator
from sipbot.core.models import Frequency, FundCategory, RiskLevel
from sipbot.data.client.market_price import MockMarketPriceService
from sipbot.data.client.payment import MockPaymentGateway
from sipbot.data.db.fund_repo import InMemoryFundRepo
from sipbot.data.db.plan_repo import InMemoryPlanRepo
from sipbot.data.db.transaction_repo import InMemoryTransactionRepo
from sipbot.data.db.user_repo import InMemoryUserRepo
from sipbot.flows.fund import add_fund
from sipbot.flows.plan import create_plan
from sipbot.flows.user import add_user


@pytest.fixture(autouse=True)
def _fresh_container():
    reset_container()
    yield
    reset_container()


@pytest.fixture()
def plan_repo() -> InMemoryPlanRepo:
    return InMemoryPlanRepo()


@pytest.fixture()
def transaction_repo() -> InMemoryTransactionRepo:
    return InMemoryTransactionRepo()


@pytest.fixture()
def fund_repo() -> InMemoryFundRepo:
    return InMemoryFundRepo()


@pytest.fixture()
def user_repo() -> InMemoryUserRepo:
    return InMemoryUserRepo()


@pytest.fixture()
def market() -> MockMarketPriceService:
    return MockMarketPriceService(rng=random.Random(7))


@pytest.fixture()
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway(rng=random.Random(7))


@pytest.fixture()
def id_generator() -> IdGenerator:
    return IdGenerator()


@pytest.fixture()
def repos(plan_repo, transaction_repo, fund_repo, user_repo, id_generator) -> dict:
    """计划流程所需的仓储集合。"""
    return {
        "plan_repo": plan_repo,
        "user_repo": user_repo,
        "fund_repo": fund_repo,
        "id_generator": id_generator,
    }


@pytest.fixture()
def scheduler_deps(plan_repo, transaction_repo, market, gateway, id_generator) -> dict:
    """调度流程所需的依赖集合。"""
    return {
        "plan_repo": plan_repo,
        "transaction_repo": transaction_repo,
        "market_price_service": market,
        "payment_gateway": gateway,
        "id_generator": id_generator,
    }


@pytest.fixture()
def valuation_deps(plan_repo, transaction_repo, fund_repo, market) -> dict:
    return {
        "plan_repo": plan_repo,
        "transaction_repo": transaction_repo,
        "fund_repo": fund_repo,
        "market_price_service": market,
    }


@pytest.fixture()
def user(user_repo, id_generator):
    return add_user(
        name="Alice",
        email="alice@example.com",
        user_repo=user_repo,
        id_generator=id_generator,
    )


@pytest.fixture()
def fund(fund_repo, market, id_generator):
    return add_fund(
        name="Index Growth Fund",
        category=FundCategory.EQUITY,
        risk_level=RiskLevel.HIGH,
        nav=Decimal("100"),
        fund_repo=fund_repo,
        market_price_service=market,
        id_generator=id_generator,
    )


@pytest.fixture()
def make_plan(repos, user, fund):
    """按需创建计划，默认月度 1000、无递增、2024-01-15 起。"""

    def _make(**overrides):
        params = {
            "user_id": user.id,
            "fund_id": fund.id,
            "amount": Decimal("1000"),
            "frequency": Frequency.MONTHLY,
            "start_date": date(2024, 1, 15),
            "step_up_pct": Decimal("0"),
        }
        params.update(overrides)
        return create_plan(**params, **repos)

    return _make

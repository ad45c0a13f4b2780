from __future__ import annotations

from decimal import Decimal

import pytest

from sipbot.core.errors import FundNotFoundError, InvalidInputError
from sipbot.core.models import FundCategory, RiskLevel
from sipbot.flows.fund import (
    add_fund,
    filter_funds_by_category,
    filter_funds_by_risk,
    fund_exists,
    get_fund,
    list_funds,
    update_fund_nav,
)


@pytest.fixture()
def catalog(fund_repo, market, id_generator):
    deps = {"fund_repo": fund_repo, "market_price_service": market, "id_generator": id_generator}
    add_fund(name="Blue Chip", category=FundCategory.EQUITY, risk_level=RiskLevel.HIGH, nav=Decimal("45.2"), **deps)
    add_fund(name="Liquid", category=FundCategory.DEBT, risk_level=RiskLevel.LOW, nav=Decimal("1000"), **deps)
    add_fund(
        name="Tax Saver",
        category=FundCategory.ELSS,
        risk_level=RiskLevel.HIGH,
        nav=Decimal("80"),
        fund_id="ELSS01",
        **deps,
    )
    return deps


def test_add_fund_seeds_market_nav(catalog, market):
    assert market.get_current_nav("FUND_000001") == Decimal("45.2")
    assert market.get_current_nav("ELSS01") == Decimal("80")


def test_catalog_queries(catalog, fund_repo):
    assert [f.name for f in list_funds(fund_repo=fund_repo)] == ["Blue Chip", "Liquid", "Tax Saver"]
    debt = filter_funds_by_category(category=FundCategory.DEBT, fund_repo=fund_repo)
    assert [f.name for f in debt] == ["Liquid"]
    high = filter_funds_by_risk(risk_level=RiskLevel.HIGH, fund_repo=fund_repo)
    assert [f.id for f in high] == ["FUND_000001", "ELSS01"]
    assert fund_exists(fund_id="ELSS01", fund_repo=fund_repo) is True
    assert fund_exists(fund_id="NOPE", fund_repo=fund_repo) is False


@pytest.mark.parametrize(
    "overrides",
    [{"name": "  "}, {"nav": Decimal("0")}, {"fund_id": "ELSS01"}],
)
def test_add_fund_rejects_invalid(catalog, overrides):
    params = {
        "name": "Another",
        "category": FundCategory.HYBRID,
        "risk_level": RiskLevel.MEDIUM,
        "nav": Decimal("10"),
    }
    params.update(overrides)
    with pytest.raises(InvalidInputError):
        add_fund(**params, **catalog)


def test_update_fund_nav(catalog, fund_repo, market):
    updated = update_fund_nav(fund_id="ELSS01", nav=Decimal("82.5"), fund_repo=fund_repo, market_price_service=market)
    assert updated.nav == Decimal("82.5")
    assert get_fund(fund_id="ELSS01", fund_repo=fund_repo).nav == Decimal("82.5")
    assert market.get_current_nav("ELSS01") == Decimal("82.5")

    with pytest.raises(InvalidInputError):
        update_fund_nav(fund_id="ELSS01", nav=Decimal("-1"), fund_repo=fund_repo, market_price_service=market)
    with pytest.raises(FundNotFoundError):
        update_fund_nav(fund_id="NOPE", nav=Decimal("1"), fund_repo=fund_repo, market_price_service=market)

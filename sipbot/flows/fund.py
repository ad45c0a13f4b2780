"""基金目录相关业务流程。"""

from __future__ import annotations

from decimal import Decimal

from sipbot.core.dependency import dependency
from sipbot.core.errors import FundNotFoundError
from sipbot.core.ids import IdGenerator
from sipbot.core.models import Fund, FundCategory, RiskLevel
from sipbot.core.protocols import FundRepo, MarketPriceProtocol
from sipbot.schemas import FundArgs, NavArgs, validate_args


@dependency
def add_fund(
    *,
    name: str,
    category: FundCategory,
    risk_level: RiskLevel,
    nav: Decimal,
    fund_id: str | None = None,
    fund_repo: FundRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
    id_generator: IdGenerator | None = None,
) -> Fund:
    """
    录入基金。

    Args:
        name: 基金名称，不能为空。
        category: 基金类别。
        risk_level: 风险等级。
        nav: 初始净值，必须为正。
        fund_id: 指定 ID（可选，缺省由 ID 生成器分配）。
        fund_repo: 基金仓储（可选，自动注入）。
        market_price_service: 行情服务（可选，自动注入）。
        id_generator: ID 生成器（可选，自动注入）。

    Returns:
        入库后的 Fund。

    Raises:
        InvalidInputError: 参数非法或 ID 已存在。

    副作用：
        同时把初始净值写入行情服务，之后调度与估值按行情净值计算。
    """
    args = validate_args(
        FundArgs, fund_id=fund_id, name=name, category=category, risk_level=risk_level, nav=nav
    )
    fund = Fund(
        id=args.fund_id or id_generator.next_fund_id(),
        name=args.name,
        category=args.category,
        risk_level=args.risk_level,
        nav=args.nav,
    )
    fund_repo.add(fund)
    market_price_service.update_nav(fund.id, fund.nav)
    return fund


@dependency
def get_fund(
    *,
    fund_id: str,
    fund_repo: FundRepo | None = None,
) -> Fund:
    """
    按 ID 读取基金。

    Raises:
        FundNotFoundError: 基金不存在。
    """
    fund = fund_repo.get(fund_id)
    if fund is None:
        raise FundNotFoundError(fund_id)
    return fund


@dependency
def list_funds(
    *,
    fund_repo: FundRepo | None = None,
) -> list[Fund]:
    """返回全部基金（按录入顺序）。"""
    return fund_repo.list_all()


@dependency
def filter_funds_by_category(
    *,
    category: FundCategory,
    fund_repo: FundRepo | None = None,
) -> list[Fund]:
    return fund_repo.list_by_category(category)


@dependency
def filter_funds_by_risk(
    *,
    risk_level: RiskLevel,
    fund_repo: FundRepo | None = None,
) -> list[Fund]:
    return fund_repo.list_by_risk_level(risk_level)


@dependency
def fund_exists(
    *,
    fund_id: str,
    fund_repo: FundRepo | None = None,
) -> bool:
    return fund_repo.exists(fund_id)


@dependency
def update_fund_nav(
    *,
    fund_id: str,
    nav: Decimal,
    fund_repo: FundRepo | None = None,
    market_price_service: MarketPriceProtocol | None = None,
) -> Fund:
    """
    更新基金净值（目录 + 行情）。

    Raises:
        InvalidInputError: nav <= 0。
        FundNotFoundError: 基金不存在。
    """
    args = validate_args(NavArgs, fund_id=fund_id, nav=nav)
    fund = fund_repo.get(args.fund_id)
    if fund is None:
        raise FundNotFoundError(args.fund_id)

    fund.nav = args.nav
    fund_repo.update(fund)
    market_price_service.update_nav(fund.id, args.nav)
    return fund

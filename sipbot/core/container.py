"""
依赖容器模块（Dependency Container）。

职责：
- 集中管理所有依赖对象的创建逻辑；
- 通过 @register 注册到依赖注入容器，供 @dependency 流程函数自动注入。

说明：
- 仓储为内存实现，必须在进程内复用同一实例（否则计划/交易会"丢失"），因此全部按单例缓存；
- Mock 行情/支付的参数取自环境变量配置（见 sipbot/core/config.py）；
- reset_container() 丢弃全部单例，测试用；
- 本模块在 sipbot/flows/__init__.py 中自动导入，确保注册表在任何流程使用前被填充。
"""

from __future__ import annotations

import random
from typing import Any, Callable, TypeVar

from sipbot.core import config
from sipbot.core.dependency import register
from sipbot.core.ids import IdGenerator
from sipbot.data.client.market_price import MockMarketPriceService
from sipbot.data.client.payment import MockPaymentGateway
from sipbot.data.db.fund_repo import InMemoryFundRepo
from sipbot.data.db.plan_repo import InMemoryPlanRepo
from sipbot.data.db.transaction_repo import InMemoryTransactionRepo
from sipbot.data.db.user_repo import InMemoryUserRepo

T = TypeVar("T")

# ========== 全局单例（进程内复用） ==========

_instances: dict[str, Any] = {}


def _singleton(name: str, factory: Callable[[], T]) -> T:
    if name not in _instances:
        _instances[name] = factory()
    return _instances[name]


def _new_rng() -> random.Random:
    return random.Random(config.get_random_seed())


def reset_container() -> None:
    """丢弃全部已创建的单例（仅用于测试）。"""
    _instances.clear()


# ========== 依赖工厂函数（注册到容器） ==========


@register("plan_repo")
def get_plan_repo() -> InMemoryPlanRepo:
    """
    获取定投计划仓储。

    注册名：plan_repo
    """
    return _singleton("plan_repo", InMemoryPlanRepo)


@register("transaction_repo")
def get_transaction_repo() -> InMemoryTransactionRepo:
    """
    获取交易仓储。

    注册名：transaction_repo
    """
    return _singleton("transaction_repo", InMemoryTransactionRepo)


@register("fund_repo")
def get_fund_repo() -> InMemoryFundRepo:
    """
    获取基金目录仓储。

    注册名：fund_repo
    """
    return _singleton("fund_repo", InMemoryFundRepo)


@register("user_repo")
def get_user_repo() -> InMemoryUserRepo:
    """
    获取用户仓储。

    注册名：user_repo
    """
    return _singleton("user_repo", InMemoryUserRepo)


@register("market_price_service")
def get_market_price_service() -> MockMarketPriceService:
    """
    获取行情服务（Mock，波动幅度取自 SIP_NAV_FLUCTUATION）。

    注册名：market_price_service
    """
    return _singleton(
        "market_price_service",
        lambda: MockMarketPriceService(fluctuation=config.get_nav_fluctuation(), rng=_new_rng()),
    )


@register("payment_gateway")
def get_payment_gateway() -> MockPaymentGateway:
    """
    获取支付网关（Mock，成功率与投递模式取自配置）。

    注册名：payment_gateway
    """
    return _singleton(
        "payment_gateway",
        lambda: MockPaymentGateway(
            success_rate=config.get_payment_success_rate(),
            auto_complete=config.is_payment_auto_complete(),
            rng=_new_rng(),
        ),
    )


@register("id_generator")
def get_id_generator() -> IdGenerator:
    """
    获取 ID 生成器。

    注册名：id_generator
    """
    return _singleton("id_generator", IdGenerator)

"""
依赖注入装饰器（Dependency Injection）。

职责：
- 通过 @register 将工厂函数按名字注册到容器；
- 通过 @dependency 在调用时自动填充流程函数中值为 None 的可选参数；
- 测试时直接传入内存仓储/Mock 服务即可覆盖默认依赖。

设计原则：
- 显式注册：所有可注入依赖必须通过 @register 显式注册（见 sipbot/core/container.py）；
- 命名一致：注册名必须与函数参数名完全一致；
- 可覆盖：调用时传入的非 None 参数不会被覆盖。

使用示例：
    @register("plan_repo")
    def get_plan_repo() -> InMemoryPlanRepo:
        ...

    @dependency
    def pause_plan(*, plan_id: str, plan_repo: PlanRepo | None = None) -> SipPlan:
        # plan_repo 已自动填充
        ...

    pause_plan(plan_id="SIP_000001")                          # 使用容器中的仓储
    pause_plan(plan_id="SIP_000001", plan_repo=InMemoryPlanRepo())  # 测试覆盖

注意事项：
- 仅当参数值为 None 时才会注入；
- 依赖注册在 sipbot/flows/__init__.py 自动触发（导入任何 flow 模块时生效）。
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable, TypeVar

# 依赖注册表：参数名 -> 工厂函数
_REGISTRY: dict[str, Callable[[], Any]] = {}

T = TypeVar("T")


def register(name: str) -> Callable[[Callable[[], T]], Callable[[], T]]:
    """
    装饰器：将工厂函数注册到依赖注入容器。

    Args:
        name: 注册名称，必须与目标函数的参数名完全一致。

    Returns:
        装饰器函数（原样返回工厂函数）。
    """

    def decorator(factory_func: Callable[[], T]) -> Callable[[], T]:
        _REGISTRY[name] = factory_func
        return factory_func

    return decorator


def dependency(func: Callable[..., T]) -> Callable[..., T]:
    """
    依赖注入装饰器：自动注入函数的可选参数。

    工作原理：
    1. 绑定调用时传入的参数并补齐默认值；
    2. 对于注册表中存在、且当前值为 None 的参数，调用对应工厂函数创建实例并注入；
    3. 非 None 的传入值保持不变。

    Args:
        func: 需要自动注入依赖的函数。

    Returns:
        包装后的函数。
    """
    # 注册可能晚于装饰（容器在 flows 包导入时加载），因此在调用时查表
    sig = inspect.signature(func)

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        bound_args = sig.bind_partial(*args, **kwargs)
        bound_args.apply_defaults()

        for param_name in sig.parameters:
            factory = _REGISTRY.get(param_name)
            if factory is None:
                continue
            if bound_args.arguments.get(param_name) is None:
                kwargs[param_name] = factory()

        return func(*args, **kwargs)

    return wrapper


def get_registered_deps() -> dict[str, Callable[[], Any]]:
    """
    获取当前注册的所有依赖（用于调试）。

    Returns:
        依赖注册表的副本。
    """
    return _REGISTRY.copy()

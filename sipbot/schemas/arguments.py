"""
流程入参 Schema（Pydantic 模型）。

职责：
- 定义计划/基金/用户/净值相关流程的入参结构与约束；
- 统一把数值入参规整为 Decimal（int/str/float 均可传入）；
- validate_args 将 Pydantic ValidationError 翻译为领域异常 InvalidInputError。

设计原则：
- 约束写在字段上（gt/ge/min_length/pattern），流程函数只关心业务规则；
- 字符串自动去除首尾空白，空白标识视为空。
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sipbot.core.errors import InvalidInputError
from sipbot.core.models import Frequency, FundCategory, RiskLevel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class _Args(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)


class PlanArgs(_Args):
    """
    创建定投计划参数。

    用于 create_plan 流程。
    """

    user_id: str = Field(..., min_length=1, description="计划所有者 ID")
    fund_id: str = Field(..., min_length=1, description="基金 ID")
    amount: Decimal = Field(..., gt=0, description="基础定投金额（首期金额）")
    frequency: Frequency = Field(..., description="定投频率：WEEKLY/MONTHLY/QUARTERLY")
    start_date: date = Field(..., description="首期执行日期")
    step_up_pct: Decimal = Field(Decimal("0"), ge=0, description="每期递增百分比，0 表示不递增")


class StepUpArgs(_Args):
    """修改递增比例参数。"""

    plan_id: str = Field(..., min_length=1)
    step_up_pct: Decimal = Field(..., ge=0, description="新的每期递增百分比")


class FundArgs(_Args):
    """
    录入基金参数。

    用于 add_fund 流程；fund_id 为空时由 ID 生成器分配。
    """

    fund_id: str | None = Field(None, min_length=1, description="基金 ID")
    name: str = Field(..., min_length=1, description="基金名称")
    category: FundCategory = Field(..., description="基金类别")
    risk_level: RiskLevel = Field(..., description="风险等级")
    nav: Decimal = Field(..., gt=0, description="初始净值")


class NavArgs(_Args):
    """更新净值参数。"""

    fund_id: str = Field(..., min_length=1)
    nav: Decimal = Field(..., gt=0, description="新净值，必须为正")


class UserArgs(_Args):
    """
    注册用户参数。

    用于 add_user 流程；user_id 为空时由 ID 生成器分配。
    """

    user_id: str | None = Field(None, min_length=1, description="用户 ID")
    name: str = Field(..., min_length=1, description="用户名")
    email: str = Field(
        ...,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="邮箱",
    )


def validate_args(args_model: type[M], **kwargs: Any) -> M:
    """
    校验并规整流程入参。

    Args:
        args_model: Pydantic 参数模型。
        **kwargs: 原始入参。

    Returns:
        校验后的模型实例。

    Raises:
        InvalidInputError: 任一字段不满足约束（消息中列出字段与原因）。
    """
    try:
        return args_model(**kwargs)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        logger.debug("[Schemas] 参数校验失败: %s - %s", args_model.__name__, reasons)
        raise InvalidInputError(reasons) from e

"""用户相关业务流程。"""

from __future__ import annotations

from sipbot.core.dependency import dependency
from sipbot.core.errors import InvalidInputError, UserNotFoundError
from sipbot.core.ids import IdGenerator
from sipbot.core.models import User
from sipbot.core.protocols import UserRepo
from sipbot.schemas import UserArgs, validate_args


@dependency
def add_user(
    *,
    name: str,
    email: str,
    user_id: str | None = None,
    user_repo: UserRepo | None = None,
    id_generator: IdGenerator | None = None,
) -> User:
    """
    注册用户。

    Args:
        name: 用户名，不能为空。
        email: 邮箱（不区分大小写唯一）。
        user_id: 指定 ID（可选，缺省由 ID 生成器分配）。
        user_repo: 用户仓储（可选，自动注入）。
        id_generator: ID 生成器（可选，自动注入）。

    Returns:
        入库后的 User。

    Raises:
        InvalidInputError: 参数非法或邮箱已注册。
    """
    args = validate_args(UserArgs, user_id=user_id, name=name, email=email)
    if user_repo.get_by_email(args.email) is not None:
        raise InvalidInputError(f"邮箱已注册：{args.email}")

    user = User(id=args.user_id or id_generator.next_user_id(), name=args.name, email=args.email)
    user_repo.add(user)
    return user


@dependency
def get_user(
    *,
    user_id: str,
    user_repo: UserRepo | None = None,
) -> User:
    """
    按 ID 读取用户。

    Raises:
        UserNotFoundError: 用户不存在。
    """
    user = user_repo.get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


@dependency
def get_user_by_email(
    *,
    email: str,
    user_repo: UserRepo | None = None,
) -> User | None:
    """按邮箱读取用户，未注册返回 None。"""
    return user_repo.get_by_email(email)

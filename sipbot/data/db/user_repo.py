from __future__ import annotations

from sipbot.core.models import User
from sipbot.data.db.base import InMemoryRepo


class InMemoryUserRepo(InMemoryRepo[User]):
    """用户仓储（内存），邮箱不区分大小写建索引。"""

    INDEXES = {"email": lambda u: u.email.lower()}

    def get_by_email(self, email: str) -> User | None:
        users = self._lookup("email", email.lower())
        return users[0] if users else None

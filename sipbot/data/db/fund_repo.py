from __future__ import annotations

from sipbot.core.models import Fund, FundCategory, RiskLevel
from sipbot.data.db.base import InMemoryRepo


class InMemoryFundRepo(InMemoryRepo[Fund]):
    """基金目录仓储（内存），按类别与风险等级建索引。"""

    INDEXES = {
        "category": lambda f: f.category,
        "risk_level": lambda f: f.risk_level,
    }

    def list_by_category(self, category: FundCategory) -> list[Fund]:
        return self._lookup("category", category)

    def list_by_risk_level(self, risk_level: RiskLevel) -> list[Fund]:
        return self._lookup("risk_level", risk_level)

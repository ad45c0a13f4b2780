from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class FundCategory(str, Enum):
    """
    基金类别。

    - EQUITY: 股票型
    - DEBT: 债券型
    - HYBRID: 混合型
    - ELSS: 权益类节税型
    """

    EQUITY = "EQUITY"
    DEBT = "DEBT"
    HYBRID = "HYBRID"
    ELSS = "ELSS"

    def __str__(self) -> str:
        return self.value


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class Fund:
    """
    基金目录条目。

    nav 为录入/最近一次更新时的净值；实时净值以行情服务为准。
    """

    id: str
    name: str
    category: FundCategory
    risk_level: RiskLevel
    nav: Decimal

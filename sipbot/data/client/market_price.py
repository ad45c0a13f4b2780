from __future__ import annotations

import random
from decimal import Decimal

from sipbot.core.errors import FundNotFoundError, InvalidInputError


class MockMarketPriceService:
    """
    Mock 行情服务：内存维护基金净值，可选随机波动。

    职责：
    - 满足 MarketPriceProtocol，供调度/估值读取当前净值；
    - 0 < fluctuation < 1 时，每次查询在存储净值上叠加 ±fluctuation 的随机波动（结果恒为正）；
    - simulate_market_movement 用于演示/测试整体涨跌。
    """

    def __init__(self, fluctuation: float = 0.0, rng: random.Random | None = None) -> None:
        self.fluctuation = _check_fluctuation(fluctuation)
        self.rng = rng or random.Random()
        self._navs: dict[str, Decimal] = {}

    def get_current_nav(self, fund_id: str) -> Decimal:
        """返回当前净值；无行情时抛出 FundNotFoundError。"""
        nav = self.get_stored_nav(fund_id)
        if self.fluctuation > 0:
            drift = Decimal(str(self.rng.uniform(-self.fluctuation, self.fluctuation)))
            nav = nav * (Decimal("1") + drift)
        return nav

    def update_nav(self, fund_id: str, nav: Decimal) -> None:
        if nav <= 0:
            raise InvalidInputError(f"NAV 必须为正数：{fund_id}={nav}")
        self._navs[fund_id] = nav

    def set_navs(self, navs: dict[str, Decimal]) -> None:
        """批量设置净值（逐个校验）。"""
        for fund_id, nav in navs.items():
            self.update_nav(fund_id, nav)

    def get_stored_nav(self, fund_id: str) -> Decimal:
        """返回存储净值（不含波动）。"""
        nav = self._navs.get(fund_id)
        if nav is None:
            raise FundNotFoundError(fund_id)
        return nav

    def set_fluctuation(self, fluctuation: float) -> None:
        self.fluctuation = _check_fluctuation(fluctuation)

    def simulate_market_movement(self, pct: Decimal) -> None:
        """
        所有基金净值整体变动。

        Args:
            pct: 变动比例（小数），如 Decimal("0.05") 表示 +5%，Decimal("-0.03") 表示 -3%。

        Raises:
            InvalidInputError: pct <= -1（净值将变为非正）。
        """
        if pct <= Decimal("-1"):
            raise InvalidInputError(f"市场变动比例过小：{pct}")
        factor = Decimal("1") + pct
        for fund_id in self._navs:
            self._navs[fund_id] = self._navs[fund_id] * factor


def _check_fluctuation(fluctuation: float) -> float:
    """波动幅度必须在 [0, 1) 区间，保证叠加波动后净值仍为正。"""
    if not 0 <= fluctuation < 1:
        raise InvalidInputError(f"波动幅度必须在 [0, 1) 区间：{fluctuation}")
    return fluctuation

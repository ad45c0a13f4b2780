"""
金额/份额/NAV/百分比精度工具函数（展示口径）。

统一精度规则：
- 金额：2 位小数
- 份额：4 位小数
- NAV：4 位小数
- 百分比：2 位小数

说明：仓储中保存未量化的 Decimal，仅在输出时量化，避免多期累加的舍入误差。
"""

from decimal import ROUND_HALF_UP, Decimal


def quantize_amount(amount: Decimal) -> Decimal:
    """将金额量化为 2 位小数。"""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def quantize_units(units: Decimal) -> Decimal:
    """将份额量化为 4 位小数。"""
    return units.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def quantize_nav(nav: Decimal) -> Decimal:
    """将净值量化为 4 位小数。"""
    return nav.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def quantize_pct(pct: Decimal) -> Decimal:
    """将百分比量化为 2 位小数。"""
    return pct.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

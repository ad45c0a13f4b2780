"""
定投日期运算（自然日口径，不涉及交易日历）。

规则：
- 按周：直接偏移 7n 天；
- 按月：保持日号，目标月无该日时收敛到月末（1/31 + 1 月 = 2/28，闰年 2/29）；
- 按季：等价于按月偏移 3n；
- n 可为任意整数（含负数），跨年自动进位/借位。
"""

from __future__ import annotations

from datetime import date, timedelta

from sipbot.core.models.plan import Frequency

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    """能被 4 整除且不能被 100 整除，或能被 400 整除。"""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def add_weeks(day: date, n: int) -> date:
    return day + timedelta(days=7 * n)


def add_months(day: date, n: int) -> date:
    """
    按月偏移，日号超出目标月天数时收敛到月末。

    Args:
        day: 起始日期。
        n: 偏移月数，可为负。

    Returns:
        偏移后的日期。
    """
    # divmod 对负数向下取整，月份借位时年份同步 -1
    year_offset, month_index = divmod(day.month - 1 + n, 12)
    year = day.year + year_offset
    month = month_index + 1
    return date(year, month, min(day.day, days_in_month(year, month)))


def add_quarters(day: date, n: int) -> date:
    return add_months(day, 3 * n)


def is_on_or_before(a: date, b: date) -> bool:
    """a <= b（非严格），用于到期判断。"""
    return a <= b


def advance(day: date, frequency: Frequency, n: int = 1) -> date:
    """
    按定投频率推进 n 个周期。

    Raises:
        ValueError: 未知频率。
    """
    if frequency == Frequency.WEEKLY:
        return add_weeks(day, n)
    if frequency == Frequency.MONTHLY:
        return add_months(day, n)
    if frequency == Frequency.QUARTERLY:
        return add_quarters(day, n)
    raise ValueError(f"未知定投频率：{frequency}")

from __future__ import annotations

import os


def get_log_level() -> str:
    """
    返回日志级别。

    Returns:
        `DEBUG`/`INFO`/`WARNING` 等，默认 `INFO`（由 `SIP_LOG_LEVEL` 配置）。
    """
    return os.getenv("SIP_LOG_LEVEL", "INFO").upper()


def get_payment_success_rate() -> float:
    """
    返回 Mock 支付网关的成功率。

    Returns:
        0..1 之间的小数，默认 1.0（由 `SIP_PAYMENT_SUCCESS_RATE` 配置，越界自动截断）。

    Raises:
        ValueError: 配置值不是数字。
    """
    raw = os.getenv("SIP_PAYMENT_SUCCESS_RATE", "1.0")
    try:
        rate = float(raw)
    except ValueError as e:
        raise ValueError(f"SIP_PAYMENT_SUCCESS_RATE 配置无效：{raw}") from e
    return max(0.0, min(1.0, rate))


def is_payment_auto_complete() -> bool:
    """
    Mock 支付网关是否在发起时立即回调。

    Returns:
        True/False（由 `SIP_PAYMENT_AUTO_COMPLETE=1` 控制，默认开启）。
    """
    return os.getenv("SIP_PAYMENT_AUTO_COMPLETE", "1") == "1"


def get_nav_fluctuation() -> float:
    """
    返回 Mock 行情的净值波动幅度（±比例，如 0.02 表示 ±2%）。

    Raises:
        ValueError: 配置值不是数字，或不在 [0, 1) 区间（>= 1 会产生非正净值）。
    """
    raw = os.getenv("SIP_NAV_FLUCTUATION", "0")
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"SIP_NAV_FLUCTUATION 配置无效：{raw}") from e
    if not 0 <= value < 1:
        raise ValueError(f"SIP_NAV_FLUCTUATION 必须在 [0, 1) 区间：{raw}")
    return value


def get_random_seed() -> int | None:
    """
    返回 Mock 服务随机数种子，未配置返回 None。

    Raises:
        ValueError: 配置值不是整数。
    """
    raw = os.getenv("SIP_RANDOM_SEED")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"SIP_RANDOM_SEED 配置无效：{raw}") from e

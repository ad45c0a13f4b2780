"""
日志工具。

- 库代码各自使用 `logging.getLogger(__name__)`；
- CLI/任务入口使用 `log()` 输出面向用户的进度信息；
- `setup_logging()` 在入口处调用一次，级别默认取自 `SIP_LOG_LEVEL`。
"""

from __future__ import annotations

import logging

from sipbot.core import config

_LOGGER = logging.getLogger("sipbot")
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """
    配置根日志处理器（重复调用只更新级别）。

    Args:
        level: 日志级别名，None 时读取配置。
    """
    resolved = (level or config.get_log_level()).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    root.setLevel(resolved)


def log(message: str) -> None:
    """输出一条面向用户的信息日志。"""
    _LOGGER.info(message)

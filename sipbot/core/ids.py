from __future__ import annotations

from collections import defaultdict
from itertools import count
from typing import Iterator


class IdGenerator:
    """
    ID 生成器（按前缀独立计数）。

    格式：PREFIX_000001。由容器注入而非进程级全局计数，测试可调用 reset() 重置。
    """

    def __init__(self, width: int = 6) -> None:
        self.width = width
        self._counters: dict[str, Iterator[int]] = defaultdict(lambda: count(1))

    def next(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counters[prefix]):0{self.width}d}"

    def next_plan_id(self) -> str:
        return self.next("SIP")

    def next_transaction_id(self) -> str:
        return self.next("TXN")

    def next_user_id(self) -> str:
        return self.next("USER")

    def next_fund_id(self) -> str:
        return self.next("FUND")

    def reset(self) -> None:
        self._counters.clear()

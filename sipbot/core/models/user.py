from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class User:
    """计划所有者。"""

    id: str
    name: str
    email: str

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, ClassVar, Generic, Hashable, TypeVar

from sipbot.core.errors import InvalidInputError

T = TypeVar("T")


class InMemoryRepo(Generic[T]):
    """
    内存仓储基类：主表（id -> 实体）+ 二级索引（索引名 -> 键 -> id 集合）。

    说明：
    - 子类通过 INDEXES 声明二级索引（如 {"user_id": lambda p: p.user_id}）；
    - add/update/remove 时同步维护索引；update 先按旧值摘除再按新值挂载，
      外键（如 user_id）变化时索引保持一致；
    - 读写均复制实体，调用方持有的对象与仓储内部互不影响；
    - id 集合使用 dict 保序，查询结果按插入顺序返回。
    """

    INDEXES: ClassVar[dict[str, Callable[[Any], Hashable]]] = {}

    def __init__(self) -> None:
        self._rows: dict[str, T] = {}
        self._indexes: dict[str, dict[Hashable, dict[str, None]]] = {
            name: {} for name in self.INDEXES
        }

    def add(self, entity: T) -> None:
        """新增实体；id 已存在时抛出 InvalidInputError。"""
        entity_id = self._id_of(entity)
        if not entity_id:
            raise InvalidInputError("实体 id 不能为空")
        if entity_id in self._rows:
            raise InvalidInputError(f"实体已存在：{entity_id}")
        stored = replace(entity)
        self._rows[entity_id] = stored
        self._index(stored)

    def get(self, entity_id: str) -> T | None:
        """按 id 读取，未找到返回 None。"""
        row = self._rows.get(entity_id)
        return replace(row) if row is not None else None

    def list_all(self) -> list[T]:
        return [replace(r) for r in self._rows.values()]

    def update(self, entity: T) -> bool:
        """覆盖写回，返回是否找到。"""
        entity_id = self._id_of(entity)
        old = self._rows.get(entity_id)
        if old is None:
            return False
        self._unindex(old)
        stored = replace(entity)
        self._rows[entity_id] = stored
        self._index(stored)
        return True

    def remove(self, entity_id: str) -> bool:
        old = self._rows.pop(entity_id, None)
        if old is None:
            return False
        self._unindex(old)
        return True

    def exists(self, entity_id: str) -> bool:
        return entity_id in self._rows

    def count(self) -> int:
        return len(self._rows)

    # ========== 子类使用的查询辅助 ==========

    def _lookup(self, index_name: str, key: Hashable) -> list[T]:
        """按二级索引读取，返回副本列表。"""
        ids = self._indexes[index_name].get(key, {})
        return [replace(self._rows[i]) for i in ids]

    def _filter(self, predicate: Callable[[T], bool]) -> list[T]:
        """全表过滤（按插入顺序），返回副本列表。"""
        return [replace(r) for r in self._rows.values() if predicate(r)]

    # ========== 私有辅助函数 ==========

    @staticmethod
    def _id_of(entity: T) -> str:
        return entity.id  # type: ignore[attr-defined]

    def _index(self, entity: T) -> None:
        entity_id = self._id_of(entity)
        for name, key_of in self.INDEXES.items():
            self._indexes[name].setdefault(key_of(entity), {})[entity_id] = None

    def _unindex(self, entity: T) -> None:
        entity_id = self._id_of(entity)
        for name, key_of in self.INDEXES.items():
            bucket = self._indexes[name].get(key_of(entity))
            if bucket is None:
                continue
            bucket.pop(entity_id, None)
            if not bucket:
                del self._indexes[name][key_of(entity)]

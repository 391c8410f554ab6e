"""Infrastructure layer for item persistence."""
from __future__ import annotations

import threading
from typing import Protocol

from itembatch.core.schema import Item


class ItemRepository(Protocol):
    """Persistence contract for items. Calls may block and ``save`` may raise."""

    def all_ids(self) -> list[int]: ...

    def find_all(self) -> list[Item]: ...

    def get(self, item_id: int) -> Item | None: ...

    def save(self, item: Item) -> Item: ...

    def delete(self, item_id: int) -> None: ...

    def reset(self) -> None: ...


class InMemoryItemRepository:
    """Thread-safe in-memory repository used by the default app and tests."""

    def __init__(self) -> None:
        self._items: dict[int, Item] = {}
        self._id_counter = 0
        self._lock = threading.Lock()

    def all_ids(self) -> list[int]:
        with self._lock:
            return list(self._items)

    def find_all(self) -> list[Item]:
        with self._lock:
            return list(self._items.values())

    def get(self, item_id: int) -> Item | None:
        with self._lock:
            return self._items.get(item_id)

    def save(self, item: Item) -> Item:
        with self._lock:
            if item.id is None:
                self._id_counter += 1
                item = item.model_copy(update={"id": self._id_counter})
            else:
                self._id_counter = max(self._id_counter, item.id)
            self._items[item.id] = item
            return item

    def delete(self, item_id: int) -> None:
        with self._lock:
            self._items.pop(item_id, None)

    def reset(self) -> None:
        with self._lock:
            self._items.clear()
            self._id_counter = 0

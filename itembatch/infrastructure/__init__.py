"""Infrastructure layer exports."""

from .items import InMemoryItemRepository, ItemRepository

__all__ = [
    "InMemoryItemRepository",
    "ItemRepository",
]

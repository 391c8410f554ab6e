"""Application services."""

from .items import ItemService

__all__ = [
    "ItemService",
]

from __future__ import annotations


class ItemNotFoundError(LookupError):
    """Raised when an identifier has no stored item at processing time."""

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class PersistenceError(RuntimeError):
    """Raised when the record store fails while reading or saving an item."""

    def __init__(self, item_id: int, cause: BaseException, *, operation: str = "save") -> None:
        super().__init__(f"Failed to {operation} item {item_id}: {cause}")
        self.item_id = item_id
        self.cause = cause
        self.operation = operation


class AggregationFault(RuntimeError):
    """Raised when a batch cannot be joined, independent of any single item."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Batch aggregation failed: {cause}")
        self.cause = cause

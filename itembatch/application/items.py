"""Application service layer for item use cases."""
from __future__ import annotations

from concurrent.futures import Executor, Future

from itembatch.core.schema import Item, ItemPayload
from itembatch.infrastructure import ItemRepository
from itembatch.workers.processing import BatchAggregator, FailureReporter, log_failure


class ItemService:
    """Coordinates item CRUD and batch processing."""

    def __init__(
        self,
        repository: ItemRepository,
        pool: Executor,
        *,
        reporter: FailureReporter = log_failure,
    ) -> None:
        self._repository = repository
        self._aggregator = BatchAggregator(repository, pool, reporter=reporter)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def list_items(self) -> list[Item]:
        return self._repository.find_all()

    def get_item(self, item_id: int) -> Item | None:
        return self._repository.get(item_id)

    def create_item(self, payload: ItemPayload) -> Item:
        return self._repository.save(Item.from_payload(payload))

    def update_item(self, item_id: int, payload: ItemPayload) -> Item | None:
        if self._repository.get(item_id) is None:
            return None
        return self._repository.save(Item.from_payload(payload, item_id=item_id))

    def delete_item(self, item_id: int) -> bool:
        if self._repository.get(item_id) is None:
            return False
        self._repository.delete(item_id)
        return True

    # ------------------------------------------------------------------
    # batch processing
    # ------------------------------------------------------------------
    def process_items(self) -> Future[list[Item]]:
        """Process every stored item concurrently.

        Returns immediately. Identifiers are snapshotted once before dispatch;
        items added while the batch runs are not part of it.
        """

        return self._aggregator.dispatch(self._repository.all_ids())

    def reset(self) -> None:
        self._repository.reset()

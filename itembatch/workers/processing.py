"""Per-item processing tasks and the fan-out/fan-in batch aggregator."""
from __future__ import annotations

import threading
from concurrent.futures import Executor, Future
from functools import partial
from typing import Callable, Iterable

import structlog

from itembatch.core.errors import AggregationFault, ItemNotFoundError, PersistenceError
from itembatch.core.schema import Item, ItemStatus
from itembatch.domain import Failure, Outcome, Success
from itembatch.infrastructure import ItemRepository

logger = structlog.get_logger(__name__)

FailureReporter = Callable[[int, Exception], None]


def log_failure(item_id: int, cause: Exception) -> None:
    """Default reporter: every absorbed per-item failure becomes a log event."""

    logger.warning(
        "item_processing_failed",
        item_id=item_id,
        error_type=type(cause).__name__,
        error=str(cause),
    )


def process_item(repository: ItemRepository, item_id: int) -> Outcome:
    """Mark one item as processed. Never raises for store-level failures."""

    try:
        item = repository.get(item_id)
    except Exception as exc:
        return Failure(item_id, PersistenceError(item_id, exc, operation="get"))
    if item is None:
        return Failure(item_id, ItemNotFoundError(item_id))

    processed = item.with_status(ItemStatus.PROCESSED)
    try:
        saved = repository.save(processed)
    except Exception as exc:
        return Failure(item_id, PersistenceError(item_id, exc, operation="save"))
    return Success(saved)


class _BatchJoin:
    """Counting completion signal for one dispatched batch.

    Each task handle decrements the pending counter from its done callback;
    the callback that brings it to zero settles the aggregate future.
    """

    def __init__(self, item_ids: list[int], reporter: FailureReporter) -> None:
        self._item_ids = item_ids
        self._reporter = reporter
        self._outcomes: list[Outcome | None] = [None] * len(item_ids)
        self._pending = len(item_ids)
        self._fault: BaseException | None = None
        self._lock = threading.Lock()
        self.future: Future[list[Item]] = Future()
        # Running futures cannot be cancelled by callers.
        self.future.set_running_or_notify_cancel()

    def on_task_done(self, index: int, handle: Future[Outcome]) -> None:
        with self._lock:
            if handle.cancelled():
                self._fault = self._fault or RuntimeError(
                    f"task for item {self._item_ids[index]} was cancelled"
                )
            elif handle.exception() is not None:
                self._fault = self._fault or handle.exception()
            else:
                self._outcomes[index] = handle.result()
            self._pending -= 1
            finished = self._pending == 0
        if finished:
            self._settle()

    def abandon(self, count: int, cause: BaseException) -> None:
        """Account for ``count`` tasks that could never be submitted."""

        with self._lock:
            self._fault = self._fault or cause
            self._pending -= count
            finished = self._pending == 0
        if finished:
            self._settle()

    def settle_if_empty(self) -> None:
        if not self._item_ids:
            self._settle()

    def _settle(self) -> None:
        if self._fault is not None:
            logger.error("batch_aggregation_failed", total=len(self._item_ids), error=str(self._fault))
            self.future.set_exception(AggregationFault(self._fault))
            return

        items: list[Item] = []
        failed = 0
        try:
            for outcome in self._outcomes:
                if isinstance(outcome, Success):
                    items.append(outcome.item)
                elif isinstance(outcome, Failure):
                    failed += 1
                    self._reporter(outcome.item_id, outcome.cause)
                else:
                    raise RuntimeError("batch settled with a missing outcome")
        except Exception as exc:
            logger.error("batch_aggregation_failed", total=len(self._item_ids), error=str(exc))
            self.future.set_exception(AggregationFault(exc))
            return

        logger.info(
            "batch_completed",
            total=len(self._item_ids),
            succeeded=len(items),
            failed=failed,
        )
        self.future.set_result(items)


class BatchAggregator:
    """Dispatch one processing task per identifier and join on all of them."""

    def __init__(
        self,
        repository: ItemRepository,
        pool: Executor,
        *,
        reporter: FailureReporter = log_failure,
    ) -> None:
        self._repository = repository
        self._pool = pool
        self._reporter = reporter

    def dispatch(self, item_ids: Iterable[int]) -> Future[list[Item]]:
        """Submit every identifier and return a future of the successful items.

        The future resolves once all tasks are terminal. Items keep the order of
        ``item_ids``; failed identifiers are reported and left out. The future
        carries an :class:`AggregationFault` only if the join itself breaks.
        """

        ids = list(item_ids)
        join = _BatchJoin(ids, self._reporter)
        logger.info("batch_dispatched", total=len(ids))

        for index, item_id in enumerate(ids):
            try:
                handle = self._pool.submit(process_item, self._repository, item_id)
            except Exception as exc:  # pool shut down or broken
                join.abandon(len(ids) - index, exc)
                break
            handle.add_done_callback(partial(join.on_task_done, index))

        join.settle_if_empty()
        return join.future

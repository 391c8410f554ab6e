from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor

import structlog

logger = structlog.get_logger(__name__)


def create_worker_pool(max_workers: int | None = None) -> Executor:
    """Build the pool that runs item processing tasks.

    With ``max_workers`` unset the executor default applies
    (``min(32, cpu_count + 4)``), which leaves headroom for tasks blocked on
    record store I/O.
    """

    pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="item-worker")
    logger.info("worker_pool_started", max_workers=max_workers or "default")
    return pool

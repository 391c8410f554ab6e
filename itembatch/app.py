from __future__ import annotations

from concurrent.futures import Executor
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from itembatch.application import ItemService
from itembatch.config import Settings
from itembatch.core.logging import configure_logging
from itembatch.infrastructure import InMemoryItemRepository, ItemRepository
from itembatch.routes import items
from itembatch.workers.pool import create_worker_pool

logger = structlog.get_logger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> list[str]:
    messages: list[str] = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        messages.append(f"{field}: {error.get('msg', 'invalid value')}")
    return messages


def create_app(
    settings: Settings | None = None,
    *,
    repository: ItemRepository | None = None,
    pool: Executor | None = None,
) -> FastAPI:
    """Build the API. A supplied ``pool`` is left running on shutdown."""

    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.log_format)
    repository = repository or InMemoryItemRepository()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        worker_pool = pool or create_worker_pool(settings.max_workers)
        app.state.item_service = ItemService(repository, worker_pool)
        try:
            yield
        finally:
            if pool is None:
                worker_pool.shutdown(wait=True)
                logger.info("worker_pool_stopped")

    app = FastAPI(title="Item Batch API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _format_validation_errors(exc)},
        )

    app.include_router(items.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Item Batch API",
                "docs": "/docs",
                "health": "/api/items",
            }
        )

    return app


app = create_app()

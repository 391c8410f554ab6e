from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from itembatch.application import ItemService
from itembatch.core.errors import AggregationFault
from itembatch.core.schema import Item, ItemPayload

router = APIRouter(prefix="/items", tags=["items"])
logger = structlog.get_logger(__name__)


def get_item_service(request: Request) -> ItemService:
    return request.app.state.item_service


@router.get("")
async def list_items(service: ItemService = Depends(get_item_service)) -> dict:
    return {"items": [item.model_dump(mode="json") for item in service.list_items()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(payload: ItemPayload, service: ItemService = Depends(get_item_service)) -> Item:
    return service.create_item(payload)


@router.get("/process")
async def process_items(service: ItemService = Depends(get_item_service)) -> dict:
    """Run one batch over all stored items and return the processed ones."""
    try:
        items = await asyncio.wrap_future(service.process_items())
    except AggregationFault as exc:
        cause = exc.cause or exc
        logger.warning("process_items_failed", path="/api/items/process", status_code=500)
        raise HTTPException(status_code=500, detail=f"Error: {cause}") from exc

    body: dict[str, object] = {
        "items": [item.model_dump(mode="json") for item in items],
        "processed": len(items),
    }
    if not items:
        body["message"] = "No items processed"
    return body


@router.get("/{item_id}")
async def get_item(item_id: int, service: ItemService = Depends(get_item_service)) -> Item:
    item = service.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="item not found")
    return item


@router.put("/{item_id}")
async def update_item(
    item_id: int,
    payload: ItemPayload,
    service: ItemService = Depends(get_item_service),
) -> Item:
    updated = service.update_item(item_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="item not found")
    return updated


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, service: ItemService = Depends(get_item_service)) -> Response:
    if not service.delete_item(item_id):
        raise HTTPException(status_code=404, detail="item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

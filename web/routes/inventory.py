from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from billdesk.models.inventory import InventoryItem
from web.deps import get_inventory_service
from web.schemas import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/affiliates/{affiliate_id}/inventory")


def _item_json(item: InventoryItem) -> dict:
    data = item.model_dump(mode="json")
    data["is_low_stock"] = item.is_low_stock
    return data


def _get_item_or_404(request: Request, affiliate_id: int, item_id: int) -> InventoryItem:
    item = get_inventory_service(request).get_item(affiliate_id, item_id)
    if item is None or not item.is_active:
        logger.warning("Inventory item not found: id=%s affiliate=%s", item_id, affiliate_id)
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.get("")
async def inventory_list(
    request: Request,
    affiliate_id: int,
    search: str = "",
    category: str = "",
    low_stock: bool = False,
):
    items = get_inventory_service(request).list_items(
        affiliate_id, search=search.strip(), category=category.strip(), low_stock=low_stock
    )
    return {"items": [_item_json(item) for item in items], "count": len(items)}


@router.post("", status_code=201)
async def inventory_create(request: Request, affiliate_id: int, body: InventoryItemCreate):
    logger.info("POST /affiliates/%s/inventory: %s", affiliate_id, body.item_name)
    item = get_inventory_service(request).add_item(affiliate_id, **body.model_dump())
    return {"success": True, "message": "Item added successfully", "item": _item_json(item)}


@router.get("/search")
async def inventory_search(request: Request, affiliate_id: int, q: str = ""):
    items = get_inventory_service(request).search(affiliate_id, q)
    return {"items": [_item_json(item) for item in items]}


@router.put("/{item_id}")
async def inventory_update(request: Request, affiliate_id: int, item_id: int, body: InventoryItemUpdate):
    item = _get_item_or_404(request, affiliate_id, item_id)
    updated = get_inventory_service(request).update_item(item, **body.model_dump(exclude_none=True))
    return {"success": True, "message": "Item updated successfully", "item": _item_json(updated)}


@router.delete("/{item_id}")
async def inventory_delete(request: Request, affiliate_id: int, item_id: int):
    item = _get_item_or_404(request, affiliate_id, item_id)
    get_inventory_service(request).delete_item(item)
    return {"success": True, "message": "Item deleted successfully"}

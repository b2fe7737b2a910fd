"""FastAPI endpoints for the Inventory domain."""

from fastapi import APIRouter, Depends

from identity.api.dependencies import require_permission
from identity.principal import Permission
from inventory.api.schemas import RestockRequest, StockLevelResponse, WriteOffRequest
from inventory.stock.adjustment import restock, stock_level, write_off

inventory_router = APIRouter(
    prefix="/inventory",
    tags=["inventory"],
    dependencies=[Depends(require_permission(Permission.MANAGE_INVENTORY))],
)


@inventory_router.get("/{product_id}", response_model=StockLevelResponse)
async def get_stock_level(product_id: str) -> StockLevelResponse:
    return StockLevelResponse(product_id=product_id, available=stock_level(product_id))


@inventory_router.put("/{product_id}/restock", response_model=StockLevelResponse)
async def receive_stock(product_id: str, body: RestockRequest) -> StockLevelResponse:
    available = restock(product_id, body.quantity, reference=body.reference)
    return StockLevelResponse(product_id=product_id, available=available)


@inventory_router.put("/{product_id}/write-off", response_model=StockLevelResponse)
async def write_off_stock(product_id: str, body: WriteOffRequest) -> StockLevelResponse:
    """Remove damaged or lost units; refused with 409 if fewer are on hand."""
    available = write_off(product_id, body.quantity, reason=body.reason)
    return StockLevelResponse(product_id=product_id, available=available)

"""FastAPI endpoints for the Catalogue domain."""

from fastapi import APIRouter, Depends

from catalogue.api.schemas import (
    ChangePriceRequest,
    ItemIdResponse,
    ItemResponse,
    RegisterProductRequest,
    RegisterServiceRequest,
    StatusResponse,
)
from catalogue.item.lifecycle import activate_item, change_price, deactivate_item
from catalogue.item.registration import register_product, register_service
from catalogue.reader import browse_items, find_item
from identity.api.dependencies import require_permission
from identity.principal import Permission

item_router = APIRouter(prefix="/items", tags=["items"])

_catalogue_admin = [Depends(require_permission(Permission.MANAGE_CATALOGUE))]


# --- Browsing ---


@item_router.get("", response_model=list[ItemResponse])
async def list_items() -> list[ItemResponse]:
    return [ItemResponse.from_item(item) for item in browse_items()]


@item_router.get("/{item_id}", response_model=ItemResponse)
async def item_detail(item_id: str) -> ItemResponse:
    return ItemResponse.from_item(find_item(item_id))


# --- Administration ---


@item_router.post("/products", status_code=201, response_model=ItemIdResponse, dependencies=_catalogue_admin)
async def create_product(body: RegisterProductRequest) -> ItemIdResponse:
    item_id = register_product(
        name=body.name,
        price=body.price,
        initial_stock=body.initial_stock,
        seller_id=body.seller_id,
        item_id=body.item_id,
        sku=body.sku,
    )
    return ItemIdResponse(item_id=item_id)


@item_router.post("/services", status_code=201, response_model=ItemIdResponse, dependencies=_catalogue_admin)
async def create_service(body: RegisterServiceRequest) -> ItemIdResponse:
    item_id = register_service(
        name=body.name,
        price=body.price,
        duration_minutes=body.duration_minutes,
        seller_id=body.seller_id,
        item_id=body.item_id,
    )
    return ItemIdResponse(item_id=item_id)


@item_router.put("/{item_id}/price", response_model=StatusResponse, dependencies=_catalogue_admin)
async def update_price(item_id: str, body: ChangePriceRequest) -> StatusResponse:
    change_price(item_id, body.price)
    return StatusResponse()


@item_router.put("/{item_id}/deactivate", response_model=StatusResponse, dependencies=_catalogue_admin)
async def deactivate(item_id: str) -> StatusResponse:
    deactivate_item(item_id)
    return StatusResponse()


@item_router.put("/{item_id}/activate", response_model=StatusResponse, dependencies=_catalogue_admin)
async def activate(item_id: str) -> StatusResponse:
    activate_item(item_id)
    return StatusResponse()

"""Pydantic request/response schemas for the Catalogue API."""

from decimal import Decimal

from pydantic import BaseModel

from catalogue.reader import CatalogueItem


class RegisterProductRequest(BaseModel):
    name: str
    price: Decimal
    initial_stock: int = 0
    seller_id: str | None = None
    sku: str | None = None
    item_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Vitamin C Face Serum",
                    "price": "499.00",
                    "initial_stock": 25,
                    "seller_id": "seller-001",
                    "sku": "SER-VITC-30",
                }
            ]
        }
    }


class RegisterServiceRequest(BaseModel):
    name: str
    price: Decimal
    duration_minutes: int | None = None
    seller_id: str | None = None
    item_id: str | None = None


class ChangePriceRequest(BaseModel):
    price: Decimal


class ItemIdResponse(BaseModel):
    item_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class ItemResponse(BaseModel):
    item_id: str
    item_type: str
    name: str
    price: Decimal
    active: bool
    seller_id: str | None = None
    available_stock: int | None = None

    @classmethod
    def from_item(cls, item: CatalogueItem) -> "ItemResponse":
        return cls(
            item_id=item.item_id,
            item_type=item.item_type,
            name=item.name,
            price=item.current_price,
            active=item.active,
            seller_id=item.seller_id,
            available_stock=item.available_stock,
        )

"""Pydantic request/response schemas for the Inventory API."""

from pydantic import BaseModel


class RestockRequest(BaseModel):
    quantity: int
    reference: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "quantity": 40,
                    "reference": "GRN-2024-0117",
                }
            ]
        }
    }


class WriteOffRequest(BaseModel):
    quantity: int
    reason: str | None = None


class StockLevelResponse(BaseModel):
    product_id: str
    available: int

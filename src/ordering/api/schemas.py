"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the ORM models and the
internal dataclasses they are built from.
"""

from dataclasses import asdict
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from ordering.cart.view import CartView
from ordering.checkout.validator import StockVerdict
from ordering.order.order import Order, OrderStatusChange
from ordering.order.queries import OrderPage, OrderStatistics


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingInfoSchema(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class ShortfallSchema(BaseModel):
    item_id: str
    name: str
    requested: int
    available: int


class PricingSchema(BaseModel):
    subtotal: Decimal
    tax: Decimal
    shipping_fee: Decimal
    total: Decimal


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    item_id: str
    quantity: int = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "item_id": "prod-serum-001",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Cart Response Schemas
# ---------------------------------------------------------------------------
class CartLineResponse(BaseModel):
    item_id: str
    item_type: str
    name: str | None
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    available: bool


class CartSummaryResponse(PricingSchema):
    total_items: int
    product_items: int
    product_price: Decimal
    service_items: int
    service_price: Decimal


class CartResponse(BaseModel):
    principal_id: str
    lines: list[CartLineResponse]
    summary: CartSummaryResponse

    @classmethod
    def from_view(cls, view: CartView) -> "CartResponse":
        def _price_of(item_type):
            return sum(
                (line.line_total for line in view.lines if line.available and line.item_type == item_type),
                Decimal("0.00"),
            )

        return cls(
            principal_id=view.principal_id,
            lines=[CartLineResponse(**asdict(line)) for line in view.lines],
            summary=CartSummaryResponse(
                subtotal=view.summary.subtotal,
                tax=view.summary.tax,
                shipping_fee=view.summary.shipping_fee,
                total=view.summary.total,
                total_items=view.item_count,
                product_items=view.product_count,
                product_price=_price_of("product"),
                service_items=view.service_count,
                service_price=_price_of("service"),
            ),
        )


class StockCheckResponse(BaseModel):
    status: str
    shortfalls: list[ShortfallSchema] | None = None

    @classmethod
    def from_verdict(cls, verdict: StockVerdict) -> "StockCheckResponse":
        return cls(**verdict.to_dict())


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping: ShippingInfoSchema
    payment_method: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping": {
                        "name": "Asha Rao",
                        "email": "asha@example.com",
                        "phone": "9876543210",
                        "address": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    "payment_method": "cod",
                }
            ]
        }
    }


class OrderItemSchema(BaseModel):
    item_id: str
    quantity: int


class PlaceOrderRequest(BaseModel):
    items: list[OrderItemSchema]
    shipping: ShippingInfoSchema
    payment_method: str
    from_cart: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"item_id": "prod-serum-001", "quantity": 2}],
                    "shipping": {
                        "name": "Asha Rao",
                        "email": "asha@example.com",
                        "phone": "9876543210",
                        "address": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    "payment_method": "upi",
                    "from_cart": True,
                }
            ]
        }
    }


class ChangeStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class CheckoutResponse(BaseModel):
    order_ids: list[str]


class OrderLineResponse(BaseModel):
    item_id: str
    item_type: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    seller_id: str | None = None


class OrderResponse(PricingSchema):
    order_id: str
    principal_id: str
    status: str
    currency: str
    payment_method: str
    shipping: ShippingInfoSchema
    lines: list[OrderLineResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.id,
            principal_id=order.principal_id,
            status=order.status,
            subtotal=order.subtotal,
            tax=order.tax,
            shipping_fee=order.shipping_fee,
            total=order.total,
            currency=order.currency,
            payment_method=order.payment_method,
            shipping=ShippingInfoSchema(**asdict(order.shipping_address)),
            lines=[
                OrderLineResponse(
                    item_id=line.item_id,
                    item_type=line.item_type,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    line_total=line.line_total,
                    seller_id=line.seller_id,
                )
                for line in order.lines
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    per_page: int
    current_page: int
    last_page: int

    @classmethod
    def from_page(cls, page: OrderPage) -> "OrderListResponse":
        return cls(
            orders=[OrderResponse.from_order(order) for order in page.orders],
            total=page.total,
            per_page=page.per_page,
            current_page=page.current_page,
            last_page=page.last_page,
        )


class OrderStatisticsResponse(BaseModel):
    total_orders: int
    total_revenue: Decimal
    total_customers: int
    by_status: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_statistics(cls, statistics: OrderStatistics) -> "OrderStatisticsResponse":
        return cls(**asdict(statistics))


class StatusChangeResponse(BaseModel):
    from_status: str | None
    to_status: str
    changed_by: str
    changed_at: datetime

    @classmethod
    def from_change(cls, change: OrderStatusChange) -> "StatusChangeResponse":
        return cls(
            from_status=change.from_status,
            to_status=change.to_status,
            changed_by=change.changed_by,
            changed_at=change.changed_at,
        )

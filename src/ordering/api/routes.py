"""FastAPI routes for the Ordering domain: cart, checkout and orders."""

from fastapi import APIRouter, Query

from identity.api.dependencies import CurrentPrincipal
from ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    ChangeStatusRequest,
    CheckoutRequest,
    CheckoutResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatisticsResponse,
    PlaceOrderRequest,
    StatusChangeResponse,
    StockCheckResponse,
    UpdateCartQuantityRequest,
)
from ordering.cart.items import add_to_cart, clear_cart, remove_from_cart, update_cart_quantity
from ordering.cart.view import get_cart
from ordering.checkout.orchestrator import checkout, place_order, stock_check
from ordering.order.queries import get_order, list_my_orders, list_orders, order_history, order_statistics
from ordering.order.status import change_order_status

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def view_cart(principal: CurrentPrincipal) -> CartResponse:
    """The cart at current prices, with its priced summary."""
    return CartResponse.from_view(get_cart(principal.principal_id))


@cart_router.post("/items", status_code=201, response_model=CartResponse)
async def add_item(body: AddToCartRequest, principal: CurrentPrincipal) -> CartResponse:
    add_to_cart(principal.principal_id, body.item_id, body.quantity)
    return CartResponse.from_view(get_cart(principal.principal_id))


@cart_router.put("/items/{item_id}", response_model=CartResponse)
async def update_item(item_id: str, body: UpdateCartQuantityRequest, principal: CurrentPrincipal) -> CartResponse:
    """Set an item's quantity. Zero removes it."""
    update_cart_quantity(principal.principal_id, item_id, body.quantity)
    return CartResponse.from_view(get_cart(principal.principal_id))


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_item(item_id: str, principal: CurrentPrincipal) -> CartResponse:
    remove_from_cart(principal.principal_id, item_id)
    return CartResponse.from_view(get_cart(principal.principal_id))


@cart_router.delete("", response_model=CartResponse)
async def empty_cart(principal: CurrentPrincipal) -> CartResponse:
    clear_cart(principal.principal_id)
    return CartResponse.from_view(get_cart(principal.principal_id))


@cart_router.get("/stock-check", response_model=StockCheckResponse, response_model_exclude_none=True)
async def check_stock(principal: CurrentPrincipal) -> StockCheckResponse:
    """Advisory check of the cart against current stock."""
    return StockCheckResponse.from_verdict(stock_check(principal))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/checkout", status_code=201, response_model=CheckoutResponse)
async def checkout_cart(body: CheckoutRequest, principal: CurrentPrincipal) -> CheckoutResponse:
    """Turn the cart into orders, committing stock atomically."""
    result = checkout(principal, body.shipping.model_dump(), body.payment_method)
    return CheckoutResponse(order_ids=result.order_ids)


@order_router.post("", status_code=201, response_model=CheckoutResponse)
async def create_order(body: PlaceOrderRequest, principal: CurrentPrincipal) -> CheckoutResponse:
    """Order an explicit list of items. With ``from_cart`` their cart lines are removed."""
    result = place_order(
        principal,
        [item.model_dump() for item in body.items],
        body.shipping.model_dump(),
        body.payment_method,
        from_cart=body.from_cart,
    )
    return CheckoutResponse(order_ids=result.order_ids)


@order_router.get("/mine", response_model=list[OrderResponse])
async def my_orders(principal: CurrentPrincipal) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in list_my_orders(principal)]


@order_router.get("/statistics", response_model=OrderStatisticsResponse)
async def statistics(principal: CurrentPrincipal) -> OrderStatisticsResponse:
    return OrderStatisticsResponse.from_statistics(order_statistics(principal))


@order_router.get("", response_model=OrderListResponse)
async def all_orders(
    principal: CurrentPrincipal,
    status: str | None = None,
    owner_id: str | None = None,
    page: int = Query(default=1),
    per_page: int = Query(default=10),
) -> OrderListResponse:
    """Staff listing of every order, newest first."""
    return OrderListResponse.from_page(
        list_orders(principal, status=status, owner_id=owner_id, page=page, per_page=per_page)
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, principal: CurrentPrincipal) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id, principal))


@order_router.get("/{order_id}/history", response_model=list[StatusChangeResponse])
async def order_status_history(order_id: str, principal: CurrentPrincipal) -> list[StatusChangeResponse]:
    return [StatusChangeResponse.from_change(change) for change in order_history(order_id, principal)]


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_status(order_id: str, body: ChangeStatusRequest, principal: CurrentPrincipal) -> OrderResponse:
    return OrderResponse.from_order(change_order_status(order_id, body.status, principal))

"""GlowMart FastAPI application.

Cart, checkout and order endpoints plus the catalogue and inventory
administration routes. The acting principal is resolved per request from
the headers set by the upstream session layer.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.api.handlers import register_exception_handlers
from shared.config import get_settings
from shared.utils.logging import add_context, clear_context, configure_logging

configure_logging()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="GlowMart API",
    description="Beauty and wellness marketplace: cart, checkout and orders",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_context_middleware(request: Request, call_next):
    """Start every request with a fresh log context carrying the method and path."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from catalogue.api import item_router  # noqa: E402
from inventory.api import inventory_router  # noqa: E402
from ordering.api.routes import cart_router, order_router  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(item_router)
app.include_router(inventory_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    settings = get_settings()
    return JSONResponse(content={"status": "ok", "env": settings.env, "currency": settings.currency})

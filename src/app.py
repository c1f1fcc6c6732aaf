"""FreshCart Storefront FastAPI application.

Web server that processes storefront commands synchronously via HTTP. Every
request runs inside the storefront domain context with the request id and
caller bound into the log context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, configure_logging, get_logger

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the domain.toml overlay (e.g. "test", "production").
configure_logging()
storefront.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="FreshCart Storefront API",
    description="Grocery storefront: catalogue, cart, checkout and orders",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and per-request log context."""
    clear_context()
    add_context(
        request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
        method=request.method,
        path=request.url.path,
    )
    try:
        with storefront.domain_context():
            response = await call_next(request)
        logger.debug("Request handled", status_code=response.status_code)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    admin_router,
    cart_router,
    order_router,
    product_router,
    register_exception_handlers,
)

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(admin_router)
register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    settings = get_settings()
    return JSONResponse(
        content={
            "status": "ok",
            "domain": storefront.name,
            "environment": settings.environment,
            "status_policy": settings.status_policy.value,
        }
    )

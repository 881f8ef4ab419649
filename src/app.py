"""Atelier FastAPI application.

Serves admin order management, public order tracking, the storefront
shipping preview, and the payment provider webhook. Every request runs
inside the atelier domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from atelier.domain import atelier
from atelier.utils.db import setup_db
from atelier.utils.logging import add_context, clear_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
configure_logging()
atelier.init()
setup_db(atelier)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Atelier API",
    description="Order fulfillment for a shop of one-of-a-kind antiques",
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
    """Push the atelier domain context and request log context for each request."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        with atelier.domain_context():
            return await call_next(request)
    finally:
        clear_context()


register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from atelier.api import order_router, shipping_router, webhook_router  # noqa: E402

app.include_router(order_router)
app.include_router(shipping_router)
app.include_router(webhook_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": atelier.name})

"""FastAPI application factory for the marketplace API."""

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import (
    address_router,
    cart_router,
    order_router,
    product_router,
    shop_router,
)
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Marketplace API",
        description="Multivendor marketplace: carts, orders and the stock they consume",
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
        """Run every request inside the marketplace domain context, with a request id bound to logs."""
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)
        try:
            with marketplace.domain_context():
                response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "path")
        response.headers["X-Request-ID"] = request_id
        return response

    register_error_handlers(app)

    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(address_router)
    app.include_router(shop_router)
    app.include_router(product_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "success": True,
                "data": {"status": "ok", "domain": marketplace.name},
            }
        )

    return app

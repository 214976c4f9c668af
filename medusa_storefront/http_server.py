"""HTTP server exposing the storefront cart and catalog."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .auth import SessionAuthMiddleware, SessionValidator, delete_session_token_cookie
from .context import StorefrontContext
from .errors import HttpStatusError, InvalidArgument, RemoteServiceError
from .pricing import product_prices
from .sessions import InMemorySessionStore

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("medusa-storefront-http")


# Request/Response Models
class AddItemRequest(BaseModel):
    variant_id: str
    quantity: int = 1


class UpdateItemRequest(BaseModel):
    quantity: int


def _remote_error(e: RemoteServiceError) -> HTTPException:
    detail = str(e)
    if isinstance(e, HttpStatusError) and e.status_code == 404:
        return HTTPException(status_code=404, detail=detail)
    return HTTPException(status_code=502, detail=detail)


def _cart_payload(context: StorefrontContext) -> dict:
    store = context.cart_store
    return {
        "cart": store.cart.model_dump(mode="json") if store.cart else None,
        "cart_id": store.cart_id,
        "item_count": store.item_count,
        "subtotal": str(store.subtotal),
        "total": str(store.total),
    }


def create_app(
    context: Optional[StorefrontContext] = None,
    validator: Optional[SessionValidator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        context: Storefront context to serve; built from the environment at
            startup (and closed at shutdown) when omitted
        validator: Session validator for the auth middleware
            (default: an in-memory session store)
    """
    owns_context = context is None
    if validator is None:
        validator = InMemorySessionStore()
    cookie_name = context.config.session_cookie_name if context else os.environ.get(
        "STOREFRONT_SESSION_COOKIE", "auth-session"
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown."""
        logger.info("Starting Medusa storefront HTTP server...")
        app.state.context = context if context is not None else StorefrontContext.from_env()

        yield

        logger.info("Shutting down Medusa storefront HTTP server...")
        if owns_context:
            await app.state.context.aclose()

    app = FastAPI(
        title="Medusa Storefront",
        description="HTTP API for browsing products and managing a Medusa cart",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.validator = validator
    app.add_middleware(SessionAuthMiddleware, validator=validator, cookie_name=cookie_name)

    def ctx(request: Request) -> StorefrontContext:
        return request.app.state.context

    @app.get("/")
    async def root(request: Request):
        """Root endpoint with API information."""
        return {
            "name": "Medusa Storefront",
            "version": "0.1.0",
            "backend_url": ctx(request).config.backend_url,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "products": {"list": "GET /products", "get": "GET /products/{product_id}"},
                "collections": {"list": "GET /collections"},
                "cart": {
                    "get": "GET /cart",
                    "add": "POST /cart/items",
                    "update": "PATCH /cart/items/{line_item_id}",
                    "remove": "DELETE /cart/items/{line_item_id}",
                    "refresh": "POST /cart/refresh",
                    "clear": "DELETE /cart",
                },
                "auth": {"status": "GET /auth/status", "logout": "POST /auth/logout"},
            },
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "cached_products": len(ctx(request).products),
            "cart_id": ctx(request).cart_store.cart_id,
        }

    # Product endpoints
    @app.get("/products")
    async def list_products(request: Request, limit: Optional[int] = None, offset: int = 0):
        """List products and populate the product cache."""
        products = await ctx(request).catalog.load_products(limit=limit, offset=offset)
        return {
            "count": len(products),
            "products": [product.model_dump(mode="json") for product in products],
        }

    @app.get("/products/{product_id}")
    async def get_product(request: Request, product_id: str):
        """Get a previously listed product with its variant prices."""
        context = ctx(request)
        product = await context.catalog.get_product(product_id)
        if product is None:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found in cache")
        prices = product_prices(product, context.config.default_currency)
        return {
            "product": product.model_dump(mode="json"),
            "prices": {
                variant_id: money.model_dump(mode="json") if money else None
                for variant_id, money in prices.items()
            },
        }

    @app.get("/collections")
    async def list_collections(request: Request):
        collections = await ctx(request).catalog.load_collections()
        return {
            "count": len(collections),
            "collections": [c.model_dump(mode="json") for c in collections],
        }

    # Cart endpoints
    @app.get("/cart")
    async def get_cart(request: Request):
        """Get the local cart and derived totals."""
        return _cart_payload(ctx(request))

    @app.post("/cart/items")
    async def add_item(request: Request, body: AddItemRequest):
        """Add a variant to the cart."""
        context = ctx(request)
        try:
            await context.carts.add_item(body.variant_id, body.quantity)
        except InvalidArgument as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RemoteServiceError as e:
            logger.error(f"Add to cart error: {e}")
            raise _remote_error(e)
        return _cart_payload(context)

    @app.patch("/cart/items/{line_item_id}")
    async def update_item(request: Request, line_item_id: str, body: UpdateItemRequest):
        """Change a line item's quantity."""
        context = ctx(request)
        try:
            await context.carts.update_item(line_item_id, body.quantity)
        except InvalidArgument as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RemoteServiceError as e:
            logger.error(f"Update cart error: {e}")
            raise _remote_error(e)
        return _cart_payload(context)

    @app.delete("/cart/items/{line_item_id}")
    async def remove_item(request: Request, line_item_id: str):
        """Remove a line item from the cart."""
        context = ctx(request)
        try:
            await context.carts.remove_item(line_item_id)
        except RemoteServiceError as e:
            logger.error(f"Remove from cart error: {e}")
            raise _remote_error(e)
        return _cart_payload(context)

    @app.post("/cart/refresh")
    async def refresh_cart(request: Request):
        """Reload the cart from the backend."""
        context = ctx(request)
        try:
            await context.carts.refresh_cart()
        except RemoteServiceError as e:
            logger.error(f"Refresh cart error: {e}")
            raise _remote_error(e)
        return _cart_payload(context)

    @app.delete("/cart")
    async def clear_cart(request: Request):
        context = ctx(request)
        context.carts.clear_cart()
        return _cart_payload(context)

    # Authentication endpoints
    @app.get("/auth/status")
    async def auth_status(request: Request):
        """Get the signed-in user."""
        user = request.state.user
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return {"authenticated": True, "user": user.model_dump()}

    @app.post("/auth/logout")
    async def logout(request: Request):
        """End the current session."""
        session = request.state.session
        if session is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        await request.app.state.validator.invalidate_session(session.id)
        request.state.session_ended = True
        response = JSONResponse({"success": True, "message": "Successfully logged out"})
        delete_session_token_cookie(response, cookie_name)
        return response

    return app


app = create_app()


def run_http_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """
    Run the HTTP server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable hot reloading (default: False)
    """
    import uvicorn

    logger.info(f"Starting server on {host}:{port} (reload={'enabled' if reload else 'disabled'})")

    if reload:
        uvicorn.run(
            "medusa_storefront.http_server:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["medusa_storefront"],
            log_level="info",
        )
    else:
        uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server(reload=True)

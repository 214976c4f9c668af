"""MCP Server for a Medusa storefront."""

import asyncio
import logging
import os
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, Tool, TextContent
from pydantic import AnyUrl

from .context import StorefrontContext
from .errors import InvalidArgument, RemoteServiceError
from .models import Cart
from .pricing import format_money, lowest_price, product_prices

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("medusa-storefront-mcp")

# Initialize server
app = Server("medusa-storefront")

# Global state
context: StorefrontContext

CART_URI = "storefront://cart"


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def format_cart(cart: Optional[Cart]) -> str:
    """Render the cart as text."""
    if cart is None:
        return "You have no cart yet"
    if not cart.items:
        return f"Cart {cart.id} is empty"

    currency = (cart.currency_code or context.config.default_currency).upper()
    lines = [f"Shopping Cart {cart.id} ({cart.item_count} items):\n"]
    for item in cart.items:
        price = f" @ {item.unit_price} {currency}" if item.unit_price is not None else ""
        lines.append(f"  - {item.title or item.variant_id} x{item.quantity}{price} (line item: {item.id})")
    lines.append(f"\nSubtotal: {cart.subtotal or 0} {currency}")
    lines.append(f"Total: {cart.total or 0} {currency}")
    return "\n".join(lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl(CART_URI),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents",
        )
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    if str(uri) == CART_URI:
        cart = context.cart_store.cart
        return cart.model_dump_json(indent=2) if cart else "null"

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="storefront_list_products",
            description="List products with prices (also makes them available to storefront_get_product)",
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": {"type": "integer", "description": "Number of products (default: 12)"},
                    "offset": {"type": "integer", "description": "Products to skip", "default": 0},
                },
            },
        ),
        Tool(
            name="storefront_list_collections",
            description="List product collections",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_get_product",
            description="Show a previously listed product with variant prices",
            inputSchema={
                "type": "object",
                "properties": {
                    "product_id": {"type": "string", "description": "Product ID (prod_...)"},
                },
                "required": ["product_id"],
            },
        ),
        Tool(
            name="storefront_get_cart",
            description="Get current shopping cart contents",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_add_to_cart",
            description="Add a product variant to the cart (creates the cart on first use)",
            inputSchema={
                "type": "object",
                "properties": {
                    "variant_id": {"type": "string", "description": "Variant ID (variant_...)"},
                    "quantity": {"type": "integer", "description": "Quantity to add (default: 1)", "default": 1},
                },
                "required": ["variant_id"],
            },
        ),
        Tool(
            name="storefront_update_cart_item",
            description="Change the quantity of a cart line item",
            inputSchema={
                "type": "object",
                "properties": {
                    "line_item_id": {"type": "string", "description": "Line item ID from the cart"},
                    "quantity": {"type": "integer", "description": "New quantity (at least 1)"},
                },
                "required": ["line_item_id", "quantity"],
            },
        ),
        Tool(
            name="storefront_remove_from_cart",
            description="Remove a line item from the cart",
            inputSchema={
                "type": "object",
                "properties": {
                    "line_item_id": {"type": "string", "description": "Line item ID to remove"},
                },
                "required": ["line_item_id"],
            },
        ),
        Tool(
            name="storefront_refresh_cart",
            description="Reload the cart from the store backend",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_clear_cart",
            description="Forget the current cart and start a new one on the next addition",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    currency = context.config.default_currency
    try:
        if name == "storefront_list_products":
            products = await context.catalog.load_products(
                limit=arguments.get("limit"), offset=arguments.get("offset", 0)
            )
            if not products:
                return _text("No products found")

            result_lines = [f"Found {len(products)} product(s):\n"]
            for i, product in enumerate(products, 1):
                result_lines.append(f"\n{i}. {product.title}")
                result_lines.append(f"   ID: {product.id}")
                result_lines.append(f"   From: {format_money(lowest_price(product, currency))}")
                if product.collection:
                    result_lines.append(f"   Collection: {product.collection.title}")
            return _text("\n".join(result_lines))

        elif name == "storefront_list_collections":
            collections = await context.catalog.load_collections()
            if not collections:
                return _text("No collections found")
            return _text("\n".join(f"- {c.title} ({c.id})" for c in collections))

        elif name == "storefront_get_product":
            product_id = arguments.get("product_id")
            if not product_id:
                return _text("Error: product_id parameter required")

            product = await context.catalog.get_product(product_id)
            if product is None:
                return _text(
                    f"Product {product_id} is not cached. Run storefront_list_products first to load prices."
                )

            result_lines = [product.title]
            if product.description:
                result_lines.append(product.description)
            result_lines.append("\nVariants:")
            prices = product_prices(product, currency)
            for variant in product.variants:
                label = variant.title or variant.id
                result_lines.append(f"  - {label} ({variant.id}): {format_money(prices.get(variant.id))}")
            return _text("\n".join(result_lines))

        elif name == "storefront_get_cart":
            return _text(format_cart(context.cart_store.cart))

        elif name == "storefront_add_to_cart":
            variant_id = arguments["variant_id"]
            quantity = arguments.get("quantity", 1)
            cart = await context.carts.add_item(variant_id, quantity)
            return _text(f"✅ Added variant {variant_id} (quantity: {quantity})\n\n{format_cart(cart)}")

        elif name == "storefront_update_cart_item":
            cart = await context.carts.update_item(arguments["line_item_id"], arguments["quantity"])
            return _text(f"✅ Updated line item {arguments['line_item_id']}\n\n{format_cart(cart)}")

        elif name == "storefront_remove_from_cart":
            cart = await context.carts.remove_item(arguments["line_item_id"])
            return _text(f"✅ Removed line item {arguments['line_item_id']}\n\n{format_cart(cart)}")

        elif name == "storefront_refresh_cart":
            cart = await context.carts.refresh_cart()
            return _text(format_cart(cart))

        elif name == "storefront_clear_cart":
            context.carts.clear_cart()
            return _text("✅ Cart cleared")

        else:
            return _text(f"Unknown tool: {name}")

    except InvalidArgument as e:
        return _text(f"Error: {e}")
    except RemoteServiceError as e:
        logger.error(f"Store backend error in {name}: {e}")
        return _text(f"❌ Store backend error: {e}")
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return _text(f"Error: {str(e)}")


async def main() -> None:
    """Main entry point."""
    global context

    context = StorefrontContext.from_env()
    logger.info("Starting Medusa storefront MCP Server...")

    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await context.aclose()


if __name__ == "__main__":
    asyncio.run(main())

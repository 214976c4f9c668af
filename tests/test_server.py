"""
Tests for the MCP tool handlers
"""

import pytest

from medusa_storefront import server


@pytest.fixture
def mcp_context(context, monkeypatch):
    monkeypatch.setattr(server, "context", context, raising=False)
    return context


def text_of(result) -> str:
    return "\n".join(content.text for content in result)


@pytest.mark.asyncio
async def test_tools_are_listed():
    names = {tool.name for tool in await server.list_tools()}

    assert "storefront_add_to_cart" in names
    assert "storefront_get_product" in names


@pytest.mark.asyncio
async def test_list_then_get_product(mcp_context):
    listing = text_of(await server.call_tool("storefront_list_products", {}))
    detail = text_of(await server.call_tool("storefront_get_product", {"product_id": "prod_1"}))

    assert "Found 2 product(s)" in listing
    assert "From: 1500 EUR" in listing
    assert "variant_prod_1): 1500 EUR" in detail


@pytest.mark.asyncio
async def test_uncached_product(mcp_context):
    result = text_of(await server.call_tool("storefront_get_product", {"product_id": "prod_9"}))

    assert "not cached" in result


@pytest.mark.asyncio
async def test_cart_tools(mcp_context):
    assert text_of(await server.call_tool("storefront_get_cart", {})) == "You have no cart yet"

    added = text_of(await server.call_tool("storefront_add_to_cart", {"variant_id": "variant_a", "quantity": 2}))
    assert "Added variant variant_a" in added
    assert "Subtotal: 2000 EUR" in added

    line_item_id = mcp_context.cart_store.cart.items[0].id
    updated = text_of(
        await server.call_tool("storefront_update_cart_item", {"line_item_id": line_item_id, "quantity": 0})
    )
    assert updated.startswith("Error: Quantity must be a positive integer")

    removed = text_of(await server.call_tool("storefront_remove_from_cart", {"line_item_id": line_item_id}))
    assert "is empty" in removed


@pytest.mark.asyncio
async def test_backend_errors_are_reported(mcp_context, backend):
    backend.fail_status = 503

    result = text_of(await server.call_tool("storefront_refresh_cart", {}))

    assert result.startswith("❌ Store backend error")


@pytest.mark.asyncio
async def test_cart_resource(mcp_context):
    await mcp_context.carts.ensure_cart()

    body = await server.read_resource(server.CART_URI)

    assert mcp_context.cart_store.cart_id in body

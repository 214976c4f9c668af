"""Pytest configuration and fixtures"""
import json
import re
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from medusa_storefront.config import StorefrontConfig
from medusa_storefront.context import StorefrontContext
from medusa_storefront.storage import MemoryStorage

CART_PATH = re.compile(r"^/store/carts/([^/]+)$")
LINE_ITEMS_PATH = re.compile(r"^/store/carts/([^/]+)/line-items$")
LINE_ITEM_PATH = re.compile(r"^/store/carts/([^/]+)/line-items/([^/]+)$")


class FakeMedusa:
    """In-memory stand-in for the Medusa store API."""

    def __init__(
        self,
        products: Optional[List[Dict[str, Any]]] = None,
        collections: Optional[List[Dict[str, Any]]] = None,
        unit_price: int = 1000,
    ):
        self.products = products or []
        self.collections = collections or []
        self.unit_price = unit_price
        self.carts: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.fail_status: Optional[int] = None
        self._next_id = 0

    def _id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}_{self._next_id:03d}"

    def _totals(self, cart: Dict[str, Any]) -> Dict[str, Any]:
        subtotal = sum(item["unit_price"] * item["quantity"] for item in cart["items"])
        cart["subtotal"] = subtotal
        cart["total"] = subtotal
        return json.loads(json.dumps(cart))

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "backend failure"})

        path = request.url.path
        body = json.loads(request.content) if request.content else {}

        if request.method == "GET" and path == "/store/products":
            return httpx.Response(200, json={"products": self.products, "count": len(self.products)})
        if request.method == "GET" and path == "/store/collections":
            return httpx.Response(200, json={"collections": self.collections})
        if request.method == "POST" and path == "/store/carts":
            cart = {"id": self._id("cart"), "items": [], "region_id": body.get("region_id"), "currency_code": "eur"}
            self.carts[cart["id"]] = cart
            return httpx.Response(200, json={"cart": self._totals(cart)})

        match = CART_PATH.match(path)
        if match and request.method == "GET":
            cart = self.carts.get(match.group(1))
            if cart is None:
                return httpx.Response(404, json={"message": "Cart not found"})
            return httpx.Response(200, json={"cart": self._totals(cart)})

        match = LINE_ITEMS_PATH.match(path)
        if match and request.method == "POST":
            cart = self.carts[match.group(1)]
            for item in cart["items"]:
                if item["variant_id"] == body["variant_id"]:
                    item["quantity"] += body["quantity"]
                    break
            else:
                cart["items"].append({
                    "id": self._id("item"),
                    "variant_id": body["variant_id"],
                    "quantity": body["quantity"],
                    "title": f"Variant {body['variant_id']}",
                    "unit_price": self.unit_price,
                })
            return httpx.Response(200, json={"cart": self._totals(cart)})

        match = LINE_ITEM_PATH.match(path)
        if match:
            cart = self.carts[match.group(1)]
            line_id = match.group(2)
            if request.method == "POST":
                for item in cart["items"]:
                    if item["id"] == line_id:
                        item["quantity"] = body["quantity"]
                return httpx.Response(200, json={"cart": self._totals(cart)})
            if request.method == "DELETE":
                cart["items"] = [item for item in cart["items"] if item["id"] != line_id]
                return httpx.Response(
                    200,
                    json={"id": line_id, "object": "line-item", "deleted": True, "parent": self._totals(cart)},
                )

        return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})


def make_product(product_id: Optional[str], title: str = "Espresso Beans", **variant: Any) -> Dict[str, Any]:
    """Product payload as returned by GET /store/products."""
    variant.setdefault("id", f"variant_{product_id}")
    variant.setdefault("prices", [{"amount": 1500, "currency_code": "eur"}])
    return {
        "id": product_id,
        "title": title,
        "description": f"{title} description",
        "thumbnail": None,
        "collection": {"id": "pcol_coffee", "title": "Coffee"},
        "variants": [variant],
    }


@pytest.fixture
def config(tmp_path):
    return StorefrontConfig(
        backend_url="http://medusa.test",
        publishable_key="pk_test",
        region_id="reg_eu",
        storage_dir=tmp_path / "storage",
    )


@pytest.fixture
def backend():
    return FakeMedusa(products=[make_product("prod_1"), make_product("prod_2", "Filter Papers")])


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest_asyncio.fixture
async def context(config, backend, storage):
    ctx = StorefrontContext(config, storage=storage, transport=httpx.MockTransport(backend.handler))
    yield ctx
    await ctx.aclose()

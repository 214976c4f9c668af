"""Medusa store API client."""

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import StorefrontConfig
from .errors import HttpStatusError, MalformedResponseError, NetworkError
from .models import Cart, Collection, Product

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class MedusaClient:
    """Async client for the Medusa store API."""

    def __init__(
        self,
        config: StorefrontConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the Medusa client.

        Args:
            config: Storefront configuration (backend URL, publishable key, ...)
            transport: Optional transport override; defaults to one that
                retries failed connections config.max_retries times
        """
        self.config = config
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if config.publishable_key:
            headers["x-publishable-api-key"] = config.publishable_key

        if transport is None:
            transport = httpx.AsyncHTTPTransport(retries=config.max_retries)

        self.client = httpx.AsyncClient(
            base_url=config.backend_url,
            timeout=config.timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON object body."""
        logger.debug(f"{method} {path} params={params}")
        try:
            response = await self.client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise NetworkError(f"Could not reach Medusa backend: {e}", path=path) from e

        if not response.is_success:
            logger.error(f"{method} {path} returned HTTP {response.status_code}")
            raise HttpStatusError(
                response.status_code,
                f"HTTP error! status: {response.status_code}",
                path=path,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}", path=path) from e

        if not isinstance(data, dict):
            raise MalformedResponseError("Response body is not a JSON object", path=path)
        return data

    @staticmethod
    def _parse(model: type[M], data: Any, path: str) -> M:
        if data is None:
            raise MalformedResponseError(f"Missing {model.__name__.lower()} in response", path=path)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid {model.__name__.lower()} payload: {e}", path=path) from e

    def _parse_list(self, model: type[M], data: Any, path: str) -> list[M]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise MalformedResponseError(f"Expected a list of {model.__name__.lower()}s", path=path)
        items = []
        for index, item in enumerate(data):
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid {model.__name__.lower()} at index {index} from {path}: {e}")
        return items

    # Products

    async def list_products(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        region_id: Optional[str] = None,
    ) -> list[Product]:
        """
        List products, pricing included (products.list).

        Args:
            limit: Page size (default: config.product_page_size)
            offset: Number of products to skip
            region_id: Region used for price calculation (default: config.region_id)
        """
        path = "/store/products"
        params: dict[str, Any] = {"limit": limit or self.config.product_page_size}
        if offset:
            params["offset"] = offset
        region_id = region_id or self.config.region_id
        if region_id:
            params["region_id"] = region_id
        data = await self._request("GET", path, params=params)
        return self._parse_list(Product, data.get("products"), path)

    async def retrieve_product(self, product_id: str) -> Product:
        """Retrieve a single product (products.retrieve). Prices are not included."""
        path = f"/store/products/{product_id}"
        data = await self._request("GET", path)
        return self._parse(Product, data.get("product"), path)

    async def list_collections(self) -> list[Collection]:
        """List collections (collections.list)."""
        path = "/store/collections"
        data = await self._request("GET", path)
        return self._parse_list(Collection, data.get("collections"), path)

    # Carts

    async def create_cart(self, region_id: Optional[str] = None) -> Cart:
        """Create a new remote cart (carts.create)."""
        path = "/store/carts"
        body: dict[str, Any] = {}
        region_id = region_id or self.config.region_id
        if region_id:
            body["region_id"] = region_id
        data = await self._request("POST", path, json=body)
        cart = self._parse(Cart, data.get("cart"), path)
        logger.info(f"Created cart {cart.id}")
        return cart

    async def retrieve_cart(self, cart_id: str) -> Cart:
        """Fetch the authoritative cart (carts.retrieve)."""
        path = f"/store/carts/{cart_id}"
        data = await self._request("GET", path)
        return self._parse(Cart, data.get("cart"), path)

    async def add_line_item(self, cart_id: str, variant_id: str, quantity: int = 1) -> Cart:
        """Add a variant to the cart (carts.lineItems.create)."""
        path = f"/store/carts/{cart_id}/line-items"
        data = await self._request("POST", path, json={"variant_id": variant_id, "quantity": quantity})
        return self._parse(Cart, data.get("cart"), path)

    async def update_line_item(self, cart_id: str, line_item_id: str, quantity: int) -> Cart:
        """Change a line item's quantity (carts.lineItems.update)."""
        path = f"/store/carts/{cart_id}/line-items/{line_item_id}"
        data = await self._request("POST", path, json={"quantity": quantity})
        return self._parse(Cart, data.get("cart"), path)

    async def delete_line_item(self, cart_id: str, line_item_id: str) -> Cart:
        """Remove a line item (carts.lineItems.delete)."""
        path = f"/store/carts/{cart_id}/line-items/{line_item_id}"
        data = await self._request("DELETE", path)
        # v2 backends return the cart as "parent" alongside a deletion receipt
        cart = data.get("cart") if data.get("cart") is not None else data.get("parent")
        return self._parse(Cart, cart, path)

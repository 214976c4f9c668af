"""Wiring of the storefront components."""

import logging
from typing import Optional

import httpx

from .cart_service import CartSynchronizer
from .cart_store import CartStore
from .catalog import Catalog
from .config import StorefrontConfig
from .medusa_client import MedusaClient
from .product_cache import ProductCache
from .storage import JsonFileStorage, KeyValueStorage

logger = logging.getLogger(__name__)


class StorefrontContext:
    """
    Owns one session's client, stores and services.

    Surfaces receive a context instead of reaching for module globals; the
    cart and product stores each have exactly one writer inside it.
    """

    def __init__(
        self,
        config: StorefrontConfig,
        storage: Optional[KeyValueStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        if storage is None:
            storage = JsonFileStorage(config.storage_dir)
        self.storage = storage
        self.client = MedusaClient(config, transport=transport)
        self.products = ProductCache(storage)
        self.cart_store = CartStore(storage)
        self.carts = CartSynchronizer(self.client, self.cart_store)
        self.catalog = Catalog(self.client, self.products)

    @classmethod
    def from_env(cls) -> "StorefrontContext":
        return cls(StorefrontConfig.from_env())

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "StorefrontContext":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

"""Product and collection listings backed by the product cache."""

import logging
from typing import Optional

from .errors import RemoteServiceError
from .medusa_client import MedusaClient
from .models import Collection, Product
from .product_cache import ProductCache

logger = logging.getLogger(__name__)


class Catalog:
    """Fetches listings for display; failures degrade to empty results."""

    def __init__(self, client: MedusaClient, cache: ProductCache) -> None:
        self.client = client
        self.cache = cache

    async def load_products(self, limit: Optional[int] = None, offset: int = 0) -> list[Product]:
        """
        Fetch a page of products and cache them for later lookups.

        Returns:
            The products, or an empty list if the backend call failed
        """
        try:
            products = await self.client.list_products(limit=limit, offset=offset)
        except RemoteServiceError as e:
            logger.error(f"Error fetching products: {e}")
            return []
        self.cache.cache_products(products)
        logger.info(f"Cached {len(products)} product(s)")
        return products

    async def load_collections(self) -> list[Collection]:
        """Fetch collections, or an empty list if the backend call failed."""
        try:
            return await self.client.list_collections()
        except RemoteServiceError as e:
            logger.error(f"Error fetching collections: {e}")
            return []

    async def get_product(self, product_id: str) -> Optional[Product]:
        return await self.cache.get_product(product_id)

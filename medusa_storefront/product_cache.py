"""Product cache with durable-storage fallback."""

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from .models import Product
from .storage import PRODUCTS_CACHE_KEY, KeyValueStorage, SnapshotPersister
from .store import SnapshotStore

logger = logging.getLogger(__name__)

ProductLike = Union[Product, Mapping[str, Any]]

EMPTY: Mapping[str, Product] = MappingProxyType({})


def _serialize(cache: Mapping[str, Product]) -> dict[str, Any]:
    return {product_id: product.model_dump(mode="json") for product_id, product in cache.items()}


def _coerce(product: Any) -> Optional[Product]:
    if isinstance(product, Product):
        return product
    if not isinstance(product, Mapping):
        return None
    try:
        return Product.model_validate(product)
    except ValidationError as e:
        logger.warning(f"Skipping unparsable product {product.get('id')}: {e}")
        return None


def _parse_snapshot(data: Any) -> dict[str, Product]:
    if not isinstance(data, dict):
        return {}
    parsed = {}
    for product_id, raw in data.items():
        product = _coerce(raw)
        if product is not None:
            parsed[product_id] = product
    return parsed


class ProductCache(SnapshotStore[Mapping[str, Product]]):
    """
    Maps product ID to the last product record seen from the list endpoint.

    The detail endpoint does not return pricing, so this cache is the only
    source for product lookups. Entries never expire; they are overwritten on
    re-fetch or dropped by clear().
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None) -> None:
        super().__init__(EMPTY)
        self.persister: Optional[SnapshotPersister] = None
        if storage is not None:
            self.persister = SnapshotPersister(storage, PRODUCTS_CACHE_KEY, _serialize)
            stored = _parse_snapshot(self.persister.load())
            if stored:
                self._snapshot = MappingProxyType(stored)
                logger.info(f"Loaded {len(stored)} cached product(s) from storage")
            self.subscribe(self.persister)

    def __len__(self) -> int:
        return len(self._snapshot)

    def _merge(self, products: Iterable[Product]) -> None:
        updated = dict(self._snapshot)
        for product in products:
            updated[product.id] = product
        self._publish(MappingProxyType(updated))

    def cache_product(self, product: Optional[ProductLike]) -> None:
        """Insert or overwrite one product. Products without an ID are ignored."""
        parsed = _coerce(product)
        if parsed is None or not parsed.id:
            return
        self._merge([parsed])

    def cache_products(self, products: Optional[Iterable[ProductLike]]) -> None:
        """Insert or overwrite many products in a single snapshot change."""
        if products is None or isinstance(products, (str, bytes, Mapping)):
            return
        parsed = [p for p in (_coerce(item) for item in products) if p is not None and p.id]
        if parsed:
            self._merge(parsed)

    def get_cached_product(self, product_id: Optional[str]) -> Optional[Product]:
        """
        Look up a product in memory, then in durable storage.

        A product found only in storage is copied back into memory.
        """
        if not product_id:
            return None

        product = self._snapshot.get(product_id)
        if product is not None or self.persister is None:
            return product

        stored = _parse_snapshot(self.persister.load())
        product = stored.get(product_id)
        if product is not None:
            logger.debug(f"Product {product_id} restored from storage")
            self._merge([product])
        return product

    async def get_product(self, product_id: Optional[str]) -> Optional[Product]:
        """
        Get a product by ID from the cache only.

        There is no remote fallback: the detail endpoint omits prices, so an
        uncached product yields None rather than an unpriced record.
        """
        if not product_id:
            return None
        product = self.get_cached_product(product_id)
        if product is None:
            logger.warning(
                f"Product {product_id} not found in cache. "
                "Load the product list first to populate the cache with pricing data."
            )
        return product

    def clear(self) -> None:
        """Drop every cached product, in memory and in storage."""
        self._publish(EMPTY)

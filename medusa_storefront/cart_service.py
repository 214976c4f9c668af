"""Cart synchronization between the local store and the Medusa backend."""

import asyncio
import logging
from typing import Optional

from .cart_store import CartStore
from .errors import InvalidArgument, MalformedResponseError
from .medusa_client import MedusaClient
from .models import Cart

logger = logging.getLogger(__name__)


def _require_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidArgument(f"Quantity must be a positive integer, got {quantity!r}")


class CartSynchronizer:
    """
    Keeps the local cart, the remote cart and durable storage consistent.

    Every successful mutation replaces the local cart with the backend's
    response. Failed calls raise RemoteServiceError and leave local state
    untouched. Concurrent mutations are not serialized: the last response to
    arrive wins.
    """

    def __init__(self, client: MedusaClient, store: CartStore) -> None:
        self.client = client
        self.store = store
        self._pending_create: Optional["asyncio.Task[Cart]"] = None

    @property
    def cart(self) -> Optional[Cart]:
        return self.store.cart

    async def _create_cart(self) -> Cart:
        cart = await self.client.create_cart()
        self.store.replace(cart)
        return cart

    def _create_done(self, task: "asyncio.Task[Cart]") -> None:
        if self._pending_create is task:
            self._pending_create = None

    async def ensure_cart(self) -> str:
        """
        Return the current cart ID, creating a remote cart on first use.

        Callers that arrive while a creation is in flight share it, so at most
        one cart is created. If creation fails, the next call tries again.
        """
        cart_id = self.store.cart_id
        if cart_id:
            return cart_id

        task = self._pending_create
        if task is None:
            task = asyncio.get_running_loop().create_task(self._create_cart())
            task.add_done_callback(self._create_done)
            self._pending_create = task
        cart = await asyncio.shield(task)
        return cart.id

    def _apply(self, cart_id: str, cart: Cart) -> Cart:
        if cart.id != cart_id:
            raise MalformedResponseError(f"Backend answered for cart {cart.id}, expected {cart_id}")
        return self.store.replace(cart)

    async def add_item(self, variant_id: str, quantity: int = 1) -> Cart:
        """Add quantity of a variant to the cart."""
        _require_quantity(quantity)
        if not variant_id:
            raise InvalidArgument("variant_id is required")
        cart_id = await self.ensure_cart()
        logger.info(f"Adding variant {variant_id} (qty: {quantity}) to cart {cart_id}")
        cart = await self.client.add_line_item(cart_id, variant_id, quantity)
        return self._apply(cart_id, cart)

    async def update_item(self, line_item_id: str, quantity: int) -> Cart:
        """Set a line item's quantity; quantity must be at least 1."""
        _require_quantity(quantity)
        if not line_item_id:
            raise InvalidArgument("line_item_id is required")
        cart_id = await self.ensure_cart()
        logger.info(f"Updating line item {line_item_id} to qty {quantity} in cart {cart_id}")
        cart = await self.client.update_line_item(cart_id, line_item_id, quantity)
        return self._apply(cart_id, cart)

    async def remove_item(self, line_item_id: str) -> Cart:
        """Remove a line item. Removing the last one leaves an empty cart."""
        if not line_item_id:
            raise InvalidArgument("line_item_id is required")
        cart_id = await self.ensure_cart()
        logger.info(f"Removing line item {line_item_id} from cart {cart_id}")
        cart = await self.client.delete_line_item(cart_id, line_item_id)
        return self._apply(cart_id, cart)

    async def refresh_cart(self) -> Cart:
        """Replace the local cart with the backend's copy."""
        cart_id = await self.ensure_cart()
        cart = await self.client.retrieve_cart(cart_id)
        return self._apply(cart_id, cart)

    def clear_cart(self) -> None:
        """Forget the current cart; the next operation creates a new one."""
        logger.info(f"Clearing cart {self.store.cart_id}")
        self._pending_create = None
        self.store.clear()

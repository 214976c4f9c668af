"""Local mirror of the current cart."""

import logging
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError

from .models import Cart
from .storage import CART_KEY, KeyValueStorage, SnapshotPersister
from .store import SnapshotStore

logger = logging.getLogger(__name__)


def _serialize(cart: Cart) -> dict[str, Any]:
    return cart.model_dump(mode="json")


class CartStore(SnapshotStore[Optional[Cart]]):
    """
    Holds the current cart snapshot and its derived views.

    The stored snapshot is loaded on construction; afterwards every change is
    mirrored to storage by a SnapshotPersister observer.
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None) -> None:
        super().__init__(None)
        self.persister: Optional[SnapshotPersister] = None
        if storage is not None:
            self.persister = SnapshotPersister(storage, CART_KEY, _serialize)
            self._snapshot = self._restore(self.persister.load())
            self.subscribe(self.persister)

    @staticmethod
    def _restore(data: Any) -> Optional[Cart]:
        if data is None:
            return None
        try:
            cart = Cart.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring unparsable stored cart: {e}")
            return None
        logger.info(f"Restored cart {cart.id} from storage")
        return cart

    @property
    def cart(self) -> Optional[Cart]:
        return self._snapshot

    @property
    def cart_id(self) -> Optional[str]:
        return self._snapshot.id if self._snapshot else None

    @property
    def item_count(self) -> int:
        return self._snapshot.item_count if self._snapshot else 0

    @property
    def subtotal(self) -> Decimal:
        if self._snapshot is None or self._snapshot.subtotal is None:
            return Decimal("0")
        return self._snapshot.subtotal

    @property
    def total(self) -> Decimal:
        if self._snapshot is None or self._snapshot.total is None:
            return Decimal("0")
        return self._snapshot.total

    def replace(self, cart: Cart) -> Cart:
        """Make cart the current snapshot."""
        return self._publish(cart)

    def clear(self) -> None:
        """Forget the current cart."""
        self._publish(None)

"""Single-writer snapshot store with change observers."""

import logging
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[Any], None]


class SnapshotStore(Generic[T]):
    """
    Holds one immutable snapshot and notifies observers on every change.

    Only the owning component calls _publish; everyone else reads through
    snapshot or subscribes.
    """

    def __init__(self, initial: T) -> None:
        self._snapshot: T = initial
        self._observers: list[Observer] = []

    @property
    def snapshot(self) -> T:
        return self._snapshot

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer for future snapshots.

        Returns:
            A callable that removes the observer again
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _publish(self, snapshot: T) -> T:
        self._snapshot = snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as e:
                logger.error(f"Store observer {observer!r} failed: {e}", exc_info=True)
        return snapshot

"""Durable key-value storage and snapshot persistence."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union

from .errors import StorageError, StorageParseError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

CART_KEY = "medusa_cart"
PRODUCTS_CACHE_KEY = "productsCache"


class KeyValueStorage(Protocol):
    """String-keyed storage of JSON-serialized values."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Storage that lives only as long as the process."""

    def __init__(self, items: Optional[dict[str, str]] = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """Stores each key as a JSON file inside a directory."""

    def __init__(self, directory: Union[str, Path, None] = None) -> None:
        """
        Initialize file storage.

        Args:
            directory: Storage directory (default: ~/.medusa_storefront)
        """
        if directory is None:
            directory = Path.home() / ".medusa_storefront"
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageParseError(f"Stored value in {path} is not UTF-8 text: {e}", key=key) from e
        except OSError as e:
            raise StorageReadError(f"Could not read {path}: {e}", key=key) from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
            os.chmod(path, 0o600)  # cart snapshots are per-user
        except OSError as e:
            raise StorageWriteError(f"Could not write {path}: {e}", key=key) from e

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Could not delete {path}: {e}", key=key) from e


def load_json(storage: KeyValueStorage, key: str) -> Any:
    """
    Read and decode a stored value.

    Returns None for a missing key.

    Raises:
        StorageReadError: If the storage primitive fails
        StorageParseError: If the stored value is not valid JSON
    """
    raw = storage.get_item(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise StorageParseError(f"Stored value for {key} is not valid JSON: {e}", key=key) from e


class SnapshotPersister:
    """
    Observer that mirrors store snapshots into durable storage.

    Persistence is best effort: storage failures are logged and the store
    keeps working in memory.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        serialize: Callable[[Any], Any],
    ) -> None:
        self.storage = storage
        self.key = key
        self.serialize = serialize

    def load(self) -> Any:
        """Load the stored snapshot, or None if absent or unreadable."""
        try:
            return load_json(self.storage, self.key)
        except StorageError as e:
            logger.warning(f"Failed to load {self.key} from storage: {e}")
            return None

    def __call__(self, snapshot: Any) -> None:
        """Write a snapshot; a None snapshot removes the key."""
        try:
            if snapshot is None:
                self.storage.remove_item(self.key)
            else:
                self.storage.set_item(self.key, json.dumps(self.serialize(snapshot)))
        except StorageError as e:
            logger.warning(f"Failed to save {self.key} to storage: {e}")
        except (TypeError, ValueError) as e:
            logger.warning(f"Could not serialize {self.key}: {e}")

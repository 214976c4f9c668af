"""Error taxonomy for the storefront layer."""

from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""


class InvalidArgument(StorefrontError, ValueError):
    """Raised for bad caller input, before any network call is made."""


class RemoteServiceError(StorefrontError):
    """A call to the Medusa backend failed."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class NetworkError(RemoteServiceError):
    """The backend could not be reached."""


class HttpStatusError(RemoteServiceError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, path=path)
        self.status_code = status_code


class MalformedResponseError(RemoteServiceError):
    """The backend answered with a payload we cannot use."""


class StorageError(StorefrontError):
    """Durable storage failed. Never surfaces past the persistence layer."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class StorageParseError(StorageError):
    pass

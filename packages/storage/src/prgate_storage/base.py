"""Abstract object store interface.

The screenshot archiver depends on BaseObjectStore, not on a concrete
backend, so S3, MinIO or an in-memory fake used by tests are swappable
without touching prgate_core.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prgate_storage.models import StoredObject


class BaseObjectStore(ABC):
    """Key/value blob store holding archived screenshot diffs.

    Implementations receive all credentials through their constructor so
    they can be built from CI environment variables without prompting.
    """

    @abstractmethod
    def list_keys(self, prefix: str) -> list[str]:
        """Return every key stored under prefix (empty list if none)."""

    @abstractmethod
    def delete_keys(self, keys: list[str]) -> None:
        """Delete the given keys in as few requests as the backend allows."""

    @abstractmethod
    def put_object(self, key: str, body: bytes, content_type: str) -> StoredObject:
        """Upload body under key with public-read access."""

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return the URL a browser can load the object from."""

    def purge(self, prefix: str) -> int:
        """Delete everything under prefix and return how many keys were removed."""
        keys = self.list_keys(prefix)
        if keys:
            self.delete_keys(keys)
        return len(keys)

    def close(self) -> None:
        """Release any resources held by the store.

        Default is a no-op so callers can always call close() safely.
        """

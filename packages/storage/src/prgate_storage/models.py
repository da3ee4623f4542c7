"""Object storage data models.

Decoupled from prgate_core so the storage layer can be used independently
and prgate_core has no knowledge of how screenshots are persisted.
"""

from __future__ import annotations

from dataclasses import dataclass


class StorageError(Exception):
    """Raised when the storage backend reports a failure it did not raise itself."""


@dataclass(frozen=True)
class StorageCredentials:
    """Endpoint and key pair for an S3-compatible object store."""

    endpoint: str
    access_key: str
    secret_key: str

    @classmethod
    def from_config(cls, config: dict) -> StorageCredentials | None:
        """Return credentials only when all three values are configured.

        A partial set is treated the same as no set at all: archiving is
        skipped for local and unconfigured runs.
        """
        endpoint = config.get("storage_endpoint")
        access_key = config.get("storage_access_key")
        secret_key = config.get("storage_secret_key")
        if not endpoint or not access_key or not secret_key:
            return None
        return cls(endpoint=endpoint, access_key=access_key, secret_key=secret_key)


@dataclass
class StoredObject:
    """An object written to the store by put_object()."""

    key: str
    url: str
    size: int

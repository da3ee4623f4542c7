"""S3ObjectStore: screenshot archive in any S3-compatible bucket.

Objects are written with a public-read ACL so the <img> tags embedded in the
PR comment render for every reviewer without signed URLs. URLs are built in
virtual-hosted style (https://{bucket}.{endpoint-host}/{key}), which is what
AWS and most S3-compatible providers serve public objects from.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from prgate_storage.base import BaseObjectStore
from prgate_storage.models import StorageCredentials, StorageError, StoredObject

logger = logging.getLogger(__name__)

# DeleteObjects accepts at most 1000 keys per request.
_DELETE_BATCH_LIMIT = 1000


def _endpoint_url(endpoint: str) -> str:
    if "://" in endpoint:
        return endpoint
    return f"https://{endpoint}"


class S3ObjectStore(BaseObjectStore):
    """BaseObjectStore backed by a boto3 S3 client."""

    def __init__(self, credentials: StorageCredentials, bucket: str):
        try:
            import boto3
        except ImportError:
            raise ImportError("boto3 is required for S3ObjectStore. Install prgate-storage.")
        self._bucket = bucket
        self._endpoint_url = _endpoint_url(credentials.endpoint)
        self._client = boto3.client(
            "s3",
            endpoint_url=self._endpoint_url,
            aws_access_key_id=credentials.access_key,
            aws_secret_access_key=credentials.secret_key,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    def delete_keys(self, keys: list[str]) -> None:
        for start in range(0, len(keys), _DELETE_BATCH_LIMIT):
            batch = keys[start : start + _DELETE_BATCH_LIMIT]
            response = self._client.delete_objects(
                Bucket=self._bucket,
                Delete={"Objects": [{"Key": key} for key in batch]},
            )
            errors = response.get("Errors") or []
            if errors:
                first = errors[0]
                raise StorageError(
                    f"{len(errors)} object(s) could not be deleted "
                    f"({first.get('Key')}: {first.get('Code')} {first.get('Message')})"
                )
            logger.debug("Deleted %d object(s) from %s", len(batch), self._bucket)

    def put_object(self, key: str, body: bytes, content_type: str) -> StoredObject:
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            ACL="public-read",
        )
        return StoredObject(key=key, url=self.public_url(key), size=len(body))

    def public_url(self, key: str) -> str:
        parsed = urlparse(self._endpoint_url)
        return f"{parsed.scheme}://{self._bucket}.{parsed.netloc}/{key}"

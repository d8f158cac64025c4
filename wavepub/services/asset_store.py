"""Remote asset store contract and its S3 implementation.

Every operation is scoped to video resources: objects whose extension is not
a known video container are neither returned nor deleted, so audio and image
assets sharing the bucket are left alone.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional
from urllib.parse import quote

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from wavepub.config.settings import StoreConfig
from wavepub.domain import DeleteResult, PublishedResource
from wavepub.services.aws import create_boto3_client

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "mkv": "video/x-matroska",
}


class StoreError(RuntimeError):
    """Raised when the remote asset store rejects or fails a request."""


class UploadFailure(StoreError):
    """Raised when a video could not be uploaded."""


class NotFound(StoreError):
    """Raised when no video resource exists under the given public id."""


def _split_key(key: str) -> tuple[str, str] | None:
    """Return (public_id, format) for video keys, ``None`` otherwise."""

    public_id, dot, extension = key.rpartition(".")
    if not dot or not public_id:
        return None
    extension = extension.lower()
    if extension not in VIDEO_CONTENT_TYPES:
        return None
    return public_id, extension


class AssetStore(ABC):
    """Contract for remote media hosts holding published videos."""

    supports_transformations: bool = False

    @abstractmethod
    def upload(
        self,
        local_path: Path,
        public_id: str,
        *,
        transformation: Optional[list[dict[str, Any]]] = None,
    ) -> PublishedResource:
        ...

    @abstractmethod
    def get(self, public_id: str) -> PublishedResource:
        ...

    @abstractmethod
    def list(self, prefix: str) -> list[PublishedResource]:
        ...

    @abstractmethod
    def delete(self, public_ids: Iterable[str]) -> DeleteResult:
        ...


class S3AssetStore(AssetStore):
    """Video store backed by an S3-compatible bucket.

    S3 has no server-side compositing, so uploads carrying transformation
    directives are rejected; overlays must be burned in while rendering.
    """

    supports_transformations = False

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url
        self._public_base_url = public_base_url

    @classmethod
    def from_config(cls, store_config: StoreConfig) -> "S3AssetStore":
        return cls(
            create_boto3_client("s3", store_config),
            store_config.bucket_name,
            region=store_config.region,
            endpoint_url=store_config.endpoint_url,
            public_base_url=store_config.public_base_url,
        )

    def object_url(self, key: str) -> str:
        quoted = quote(key)
        if self._public_base_url:
            return f"{self._public_base_url.rstrip('/')}/{quoted}"
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{quoted}"
        if self._region == "us-east-1":
            return f"https://{self._bucket}.s3.amazonaws.com/{quoted}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{quoted}"

    def _describe(
        self,
        key: str,
        *,
        size: int | None = None,
        created_at: datetime | None = None,
    ) -> PublishedResource:
        split = _split_key(key)
        if split is None:
            raise NotFound(f"{key} is not a video resource")
        public_id, fmt = split
        folder = public_id.rpartition("/")[0] or None
        return PublishedResource(
            public_id=public_id,
            secure_url=self.object_url(key),
            format=fmt,
            bytes=size,
            created_at=created_at,
            folder=folder,
        )

    def upload(
        self,
        local_path: Path,
        public_id: str,
        *,
        transformation: Optional[list[dict[str, Any]]] = None,
    ) -> PublishedResource:
        if transformation:
            raise UploadFailure("S3 buckets cannot apply transformations at upload time.")

        path = Path(local_path)
        fmt = path.suffix.lstrip(".").lower()
        if fmt not in VIDEO_CONTENT_TYPES:
            raise UploadFailure(f"{path.name} is not a supported video file.")
        if not path.is_file():
            raise UploadFailure(f"{path} does not exist.")

        key = f"{public_id}.{fmt}"
        try:
            self._client.upload_file(
                str(path),
                self._bucket,
                key,
                ExtraArgs={
                    "ContentType": VIDEO_CONTENT_TYPES[fmt],
                    "Metadata": {"resource-type": "video"},
                },
            )
        except (BotoCoreError, ClientError, S3UploadFailedError) as exc:
            raise UploadFailure(f"Failed to upload {public_id}: {exc}") from exc

        logger.info("Uploaded %s to s3://%s/%s", path.name, self._bucket, key)
        return self._describe(
            key,
            size=path.stat().st_size,
            created_at=datetime.now(timezone.utc),
        )

    def _find_key(self, public_id: str) -> dict[str, Any] | None:
        """Return the listing entry of the video stored under ``public_id``."""

        try:
            response = self._client.list_objects_v2(
                Bucket=self._bucket,
                Prefix=f"{public_id}.",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(f"Failed to look up {public_id}: {exc}") from exc

        for entry in response.get("Contents", []):
            split = _split_key(entry["Key"])
            if split is not None and split[0] == public_id:
                return entry
        return None

    def get(self, public_id: str) -> PublishedResource:
        entry = self._find_key(public_id)
        if entry is None:
            raise NotFound(f"Resource not found - {public_id}")
        return self._describe(
            entry["Key"],
            size=entry.get("Size"),
            created_at=entry.get("LastModified"),
        )

    def list(self, prefix: str) -> list[PublishedResource]:
        resources: list[PublishedResource] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for entry in page.get("Contents", []):
                    if _split_key(entry["Key"]) is None:
                        continue
                    resources.append(
                        self._describe(
                            entry["Key"],
                            size=entry.get("Size"),
                            created_at=entry.get("LastModified"),
                        )
                    )
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(f"Failed to list resources under '{prefix}': {exc}") from exc
        return resources

    def delete(self, public_ids: Iterable[str]) -> DeleteResult:
        statuses: dict[str, str] = {}
        keys: dict[str, str] = {}
        for public_id in public_ids:
            entry = self._find_key(public_id)
            if entry is None:
                statuses[public_id] = "not_found"
            else:
                keys[entry["Key"]] = public_id

        if keys:
            try:
                response = self._client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
                )
            except (BotoCoreError, ClientError) as exc:
                raise StoreError(f"Failed to delete resources: {exc}") from exc

            failed = {error.get("Key"): error.get("Code", "error") for error in response.get("Errors", [])}
            for key, public_id in keys.items():
                if key in failed:
                    logger.warning("Store refused to delete %s: %s", key, failed[key])
                    statuses[public_id] = "failed"
                else:
                    statuses[public_id] = "deleted"

        return DeleteResult(deleted=statuses)


__all__ = [
    "AssetStore",
    "NotFound",
    "S3AssetStore",
    "StoreError",
    "UploadFailure",
    "VIDEO_CONTENT_TYPES",
]

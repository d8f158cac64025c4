"""Asset publishing on top of the remote store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from fastapi.concurrency import run_in_threadpool

from wavepub.domain import DeleteResult, OverlaySpec, PublishedResource
from wavepub.services.asset_store import AssetStore, UploadFailure

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "audio-waveform-videos/"


def qualify(public_id: str, folder: str) -> str:
    """Prefix ``public_id`` with ``folder`` using a single ``/`` separator."""

    folder = folder.strip("/")
    public_id = public_id.lstrip("/")
    return f"{folder}/{public_id}" if folder else public_id


class AssetPublisher:
    """Upload, fetch, list and delete published videos.

    Store calls are blocking network I/O and run in the threadpool.
    """

    def __init__(self, store: AssetStore, *, default_folder: str = DEFAULT_FOLDER) -> None:
        self._store = store
        self._default_folder = default_folder

    @property
    def default_folder(self) -> str:
        return self._default_folder

    @property
    def composites_overlays(self) -> bool:
        """Whether the store can apply overlay directives at upload time."""

        return self._store.supports_transformations

    async def upload(
        self,
        local_path: str | Path,
        public_id: str,
        overlay_spec: Optional[OverlaySpec] = None,
        folder: Optional[str] = None,
        place_in_folder: bool = False,
    ) -> PublishedResource:
        target_id = qualify(public_id, folder or self._default_folder) if place_in_folder else public_id
        transformation = overlay_spec.to_transformation() if overlay_spec else None
        if transformation and not self.composites_overlays:
            raise UploadFailure(
                "The configured store cannot composite overlays; render them into the video instead."
            )

        logger.info("Publishing %s as %s", Path(local_path).name, target_id)
        return await run_in_threadpool(
            self._store.upload,
            Path(local_path),
            target_id,
            transformation=transformation,
        )

    async def get(self, public_id: str) -> PublishedResource:
        return await run_in_threadpool(self._store.get, public_id)

    async def list(self, folder: Optional[str] = None) -> list[PublishedResource]:
        prefix = folder if folder is not None else self._default_folder
        return await run_in_threadpool(self._store.list, prefix)

    async def delete(self, ids: Iterable[str]) -> DeleteResult:
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return DeleteResult()
        logger.info("Deleting %s", ", ".join(unique_ids))
        return await run_in_threadpool(self._store.delete, unique_ids)


__all__ = ["AssetPublisher", "DEFAULT_FOLDER", "qualify"]

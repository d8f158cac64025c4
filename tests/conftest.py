"""Shared fakes for the render-and-publish tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Iterable, Optional

import pytest

from wavepub.config.settings import PublishConfig, RenderConfig, Settings
from wavepub.domain import DeleteResult, PublishedResource, RenderJob
from wavepub.services.asset_store import AssetStore, NotFound
from wavepub.services.renderer import RenderFailure


class InMemoryStore(AssetStore):
    """Asset store double that keeps resources in a dict."""

    def __init__(self, *, supports_transformations: bool = True) -> None:
        self.supports_transformations = supports_transformations
        self.resources: dict[str, PublishedResource] = {}
        self.uploads: list[dict[str, Any]] = []
        self.upload_error: Optional[Exception] = None

    def upload(self, local_path, public_id, *, transformation=None):
        path = Path(local_path)
        self.uploads.append(
            {
                "path": path,
                "existed": path.is_file(),
                "public_id": public_id,
                "transformation": transformation,
            }
        )
        if self.upload_error is not None:
            raise self.upload_error
        resource = PublishedResource(
            public_id=public_id,
            secure_url=f"https://media.example.com/video/upload/{public_id}.mp4",
            format="mp4",
            bytes=path.stat().st_size,
            folder=public_id.rpartition("/")[0] or None,
        )
        self.resources[public_id] = resource
        return resource

    def get(self, public_id):
        try:
            return self.resources[public_id]
        except KeyError:
            raise NotFound(f"Resource not found - {public_id}") from None

    def list(self, prefix):
        return [resource for key, resource in self.resources.items() if key.startswith(prefix)]

    def delete(self, public_ids: Iterable[str]):
        statuses = {}
        for public_id in public_ids:
            statuses[public_id] = "deleted" if self.resources.pop(public_id, None) else "not_found"
        return DeleteResult(deleted=statuses)


class FakeRenderer:
    """Renderer double that writes a small file instead of running ffmpeg."""

    def __init__(
        self,
        *,
        progress: Iterable[float] = (12.5, 50.0, 87.5),
        error: Optional[RenderFailure] = None,
        block_until_cancelled: bool = False,
    ) -> None:
        self.progress = tuple(progress)
        self.error = error
        self.block_until_cancelled = block_until_cancelled
        self.jobs: list[RenderJob] = []
        self._lock = threading.Lock()

    def render(self, job, on_progress=None, *, cancel_event=None):
        with self._lock:
            self.jobs.append(job)
        if self.block_until_cancelled and cancel_event is not None:
            cancel_event.wait(timeout=5)
            raise RenderFailure("Render cancelled")
        if self.error is not None:
            raise self.error
        Path(job.output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(job.output_path).write_bytes(b"\x00\x00\x00\x18ftypmp42")
        for percent in self.progress:
            if on_progress is not None:
                on_progress(percent)
        return Path(job.output_path)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def app_settings(tmp_path: Path) -> Settings:
    return Settings(
        log_file=str(tmp_path / "logs" / "app.log"),
        pipeline_log_file=str(tmp_path / "logs" / "pipeline.log"),
        render=RenderConfig(
            videos_dir=str(tmp_path / "videos"),
            uploads_dir=str(tmp_path / "uploads"),
            background_image=str(tmp_path / "background.png"),
        ),
        publish=PublishConfig(default_folder="audio-waveform-videos/", compositing="auto"),
    )

"""Value objects shared by the render-and-publish pipeline.

Plain dataclasses describe what flows between the pipeline stages; the
pydantic models describe what the remote store hands back and what the API
serialises.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .overlay import OverlaySpec


@dataclass(frozen=True)
class AudioSubmission:
    """An uploaded audio file as produced by the multipart decoder."""

    source_path: Path
    original_filename: str


@dataclass(frozen=True)
class TrackMetadata:
    """Best-effort tag metadata; unset fields stay ``None``."""

    title: Optional[str] = None
    artist: Optional[str] = None
    duration_seconds: Optional[float] = None


@dataclass(frozen=True)
class RenderJob:
    """One request to the waveform renderer."""

    audio_path: Path
    background_image_path: Path
    output_path: Path
    duration_seconds: Optional[float] = None
    # Only set when banners are burned in during rendering.
    overlay: Optional[OverlaySpec] = None


class PublishedResource(BaseModel):
    """A video resource as stored by the remote asset store."""

    public_id: str
    secure_url: str
    format: str
    resource_type: Literal["video"] = "video"
    bytes: Optional[int] = None
    created_at: Optional[datetime] = None
    folder: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class DeleteResult(BaseModel):
    """Per-id outcome of a delete call (``deleted`` or ``not_found``)."""

    deleted: dict[str, str] = Field(default_factory=dict)


__all__ = [
    "AudioSubmission",
    "TrackMetadata",
    "RenderJob",
    "PublishedResource",
    "DeleteResult",
]

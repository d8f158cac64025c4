"""Domain value objects for the waveform publisher."""

from .models import (
    AudioSubmission,
    DeleteResult,
    PublishedResource,
    RenderJob,
    TrackMetadata,
)
from .overlay import BannerStep, OverlaySpec, OverlaySpecError, PlacementStep

__all__ = [
    "AudioSubmission",
    "BannerStep",
    "DeleteResult",
    "OverlaySpec",
    "OverlaySpecError",
    "PlacementStep",
    "PublishedResource",
    "RenderJob",
    "TrackMetadata",
]

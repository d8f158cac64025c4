"""Service layer helpers for external integrations."""

from .asset_store import (
    AssetStore,
    NotFound,
    S3AssetStore,
    StoreError,
    UploadFailure,
)
from .metadata import MetadataReadFailure, extract
from .publisher import DEFAULT_FOLDER, AssetPublisher
from .renderer import RenderFailure, SpectrumPreset, WaveformRenderer

__all__ = [
    "AssetPublisher",
    "AssetStore",
    "DEFAULT_FOLDER",
    "MetadataReadFailure",
    "NotFound",
    "RenderFailure",
    "S3AssetStore",
    "SpectrumPreset",
    "StoreError",
    "UploadFailure",
    "WaveformRenderer",
    "extract",
]

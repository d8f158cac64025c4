"""Track metadata extraction backed by mutagen."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import mutagen
from mutagen import MutagenError

from wavepub.domain import TrackMetadata

logger = logging.getLogger(__name__)


class MetadataReadFailure(RuntimeError):
    """Raised internally when tags cannot be read; never leaves this module."""


def _first_tag(tags: Any, key: str) -> str | None:
    """Return the first non-blank value stored under ``key``."""

    if tags is None:
        return None
    try:
        values = tags.get(key)
    except (KeyError, ValueError):
        return None
    if values is None:
        return None
    if isinstance(values, str):
        values = [values]
    for value in values:
        text = str(value).strip()
        if text:
            return text
    return None


def _read(audio_path: Path) -> Any:
    try:
        audio = mutagen.File(str(audio_path), easy=True)
    except MutagenError as exc:
        raise MetadataReadFailure(f"Could not read tags from {audio_path.name}: {exc}") from exc
    except Exception as exc:  # format probes raise arbitrary errors on malformed headers
        raise MetadataReadFailure(
            f"Could not parse {audio_path.name}: {exc.__class__.__name__}: {exc}"
        ) from exc
    if audio is None:
        raise MetadataReadFailure(f"Unrecognised audio format: {audio_path.name}")
    return audio


def extract(audio_path: str | Path) -> TrackMetadata:
    """Return (title, artist, duration) for ``audio_path`` without ever raising."""

    path = Path(audio_path)
    try:
        audio = _read(path)
    except MetadataReadFailure as exc:
        logger.warning("Metadata unavailable, using defaults: %s", exc)
        return TrackMetadata()

    duration: float | None = None
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    if isinstance(length, (int, float)) and length > 0:
        duration = float(length)

    metadata = TrackMetadata(
        title=_first_tag(audio.tags, "title"),
        artist=_first_tag(audio.tags, "artist"),
        duration_seconds=duration,
    )
    logger.debug("Metadata for %s: %s", path.name, metadata)
    return metadata


__all__ = ["MetadataReadFailure", "extract"]

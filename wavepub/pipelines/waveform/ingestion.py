"""Submission decoding and naming helpers."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path, PurePosixPath, PureWindowsPath
from uuid import uuid4

from fastapi import Request
from starlette.datastructures import UploadFile

from wavepub.domain import AudioSubmission

logger = logging.getLogger(__name__)

AUDIO_FIELD = "audio"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class DecodeFailure(RuntimeError):
    """Raised when a submission is not a multipart form with an audio file."""


def _basename(filename: str) -> str:
    # Browsers on Windows may send full paths.
    return PureWindowsPath(PurePosixPath(filename).name).name


def safe_stem(filename: str) -> str:
    """Filesystem/identifier-safe stem of ``filename`` (``song.mp3`` -> ``song``)."""

    stem = Path(_basename(filename)).stem
    cleaned = _UNSAFE_CHARS.sub("-", stem).strip("-._")
    return cleaned or "audio"


def derive_public_id(original_filename: str) -> str:
    return safe_stem(original_filename)


def unique_output_path(videos_dir: str | Path, original_filename: str) -> Path:
    """Run-scoped render target: ``<videos_dir>/<stem>-<token>.mp4``."""

    return Path(videos_dir) / f"{safe_stem(original_filename)}-{uuid4().hex}.mp4"


async def decode_submission(request: Request, uploads_dir: str | Path) -> AudioSubmission:
    """Spool the ``audio`` form field to disk and describe it.

    The caller owns the spooled file and must remove it once the run ends.
    """

    try:
        form = await request.form()
    except Exception as exc:  # multipart parser errors are not typed consistently
        raise DecodeFailure(f"Could not parse multipart body: {exc}") from exc

    upload = form.get(AUDIO_FIELD)
    if not isinstance(upload, UploadFile):
        raise DecodeFailure(f"Missing '{AUDIO_FIELD}' file field")
    original_filename = _basename(upload.filename or "") or "audio"

    target_dir = Path(uploads_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(original_filename).suffix
    source_path = target_dir / f"{uuid4().hex}{suffix}"
    try:
        with source_path.open("wb") as target:
            await upload.seek(0)
            shutil.copyfileobj(upload.file, target)
    finally:
        await upload.close()

    if source_path.stat().st_size == 0:
        source_path.unlink(missing_ok=True)
        raise DecodeFailure("Uploaded audio file is empty")

    logger.info("Received %s (%d bytes)", original_filename, source_path.stat().st_size)
    return AudioSubmission(source_path=source_path, original_filename=original_filename)


__all__ = [
    "AUDIO_FIELD",
    "DecodeFailure",
    "decode_submission",
    "derive_public_id",
    "safe_stem",
    "unique_output_path",
]

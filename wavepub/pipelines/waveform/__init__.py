"""Waveform publishing pipeline package.

Modules follow the order in which ``POST /audio`` executes:

1. `ingestion` – spool the multipart upload and name the run's files.
2. `progress` – the channel carrying renderer progress and cancellation.
3. `overlay` – build the title/artist banner steps.
4. `orchestrator` – run extract, render, overlay, publish and cleanup.
5. `flow` – human-readable description of the stages.
"""

from .flow import PipelineStage, PipelineStages
from .ingestion import (
    DecodeFailure,
    decode_submission,
    derive_public_id,
    safe_stem,
    unique_output_path,
)
from .orchestrator import CleanupFailure, WaveformPipeline
from .overlay import DEFAULT_STYLE, BannerStyle, OverlayStyle, build, build_pairs
from .progress import ProgressChannel, log_progress

__all__ = [
    "BannerStyle",
    "CleanupFailure",
    "DEFAULT_STYLE",
    "DecodeFailure",
    "OverlayStyle",
    "PipelineStage",
    "PipelineStages",
    "ProgressChannel",
    "WaveformPipeline",
    "build",
    "build_pairs",
    "decode_submission",
    "derive_public_id",
    "log_progress",
    "safe_stem",
    "unique_output_path",
]

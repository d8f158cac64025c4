"""High-level orchestration map for the waveform publishing pipeline.

``WaveformPipeline.publish`` in ``orchestrator`` runs these stages in order
for every ``POST /audio`` submission:

1. ``extract`` – read title/artist/duration tags (never aborts the run).
2. ``render`` – ffmpeg turns the background image + audio into a spectrum video.
3. ``overlay`` – build the title/artist banner steps.
4. ``publish`` – upload the video (and banner directives) to the asset store.
5. ``cleanup`` – remove the local render, whatever the upload outcome.

With render-side compositing stage 3 runs before stage 2 so the banners can
be burned into the video.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the waveform pipeline."""

    order: int
    name: str
    module: str
    summary: str


class PipelineStages:
    """Ordered stage metadata used for logging and debugging."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Extract",
            "wavepub.services.metadata",
            "Read title, artist and duration tags; missing tags stay unset.",
        ),
        PipelineStage(
            2,
            "Render",
            "wavepub.services.renderer",
            "Render the spectrum video into a run-scoped file under the videos directory.",
        ),
        PipelineStage(
            3,
            "Overlay",
            "wavepub.pipelines.waveform.overlay",
            "Build the title and artist banners, falling back to placeholders.",
        ),
        PipelineStage(
            4,
            "Publish",
            "wavepub.services.publisher",
            "Upload the video into the default folder of the remote asset store.",
        ),
        PipelineStage(
            5,
            "Cleanup",
            "wavepub.pipelines.waveform.orchestrator",
            "Delete the local render on both the success and failure paths.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["PipelineStage", "PipelineStages"]

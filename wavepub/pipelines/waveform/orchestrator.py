"""Submit-to-publish orchestration for one audio submission."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Literal, Optional

from fastapi.concurrency import run_in_threadpool

from wavepub.domain import AudioSubmission, OverlaySpec, PublishedResource, RenderJob, TrackMetadata
from wavepub.services import metadata as metadata_service
from wavepub.services.publisher import AssetPublisher
from wavepub.services.renderer import RenderFailure, WaveformRenderer
from wavepub.telemetry import observe_render, record_pipeline_run

from . import overlay as overlay_builder
from .flow import PipelineStage, PipelineStages
from .ingestion import derive_public_id, unique_output_path
from .progress import ProgressChannel, ProgressSink, log_progress

logger = logging.getLogger("wavepub.pipeline")

Compositing = Literal["auto", "store", "render"]


class CleanupFailure(RuntimeError):
    """Local render could not be removed; logged, never raised to callers."""


class WaveformPipeline:
    """Extract, render, overlay, publish and clean up, in that order.

    Runs share no mutable state: each one renders into its own uniquely
    named file and is the only code that ever deletes it.
    """

    def __init__(
        self,
        publisher: AssetPublisher,
        renderer: WaveformRenderer,
        *,
        videos_dir: str | Path,
        background_image: str | Path,
        compositing: Compositing = "auto",
        render_timeout: Optional[float] = None,
        overlay_style: overlay_builder.OverlayStyle = overlay_builder.DEFAULT_STYLE,
        extract: Callable[[Path], TrackMetadata] = metadata_service.extract,
    ) -> None:
        self._publisher = publisher
        self._renderer = renderer
        self._videos_dir = Path(videos_dir)
        self._background_image = Path(background_image)
        self._compositing = compositing
        self._render_timeout = render_timeout
        self._overlay_style = overlay_style
        self._extract = extract

    @staticmethod
    def describe() -> tuple[PipelineStage, ...]:
        return tuple(PipelineStages.describe())

    @property
    def strategy(self) -> Literal["store", "render"]:
        """Where banners get composited for the next run."""

        if self._compositing == "auto":
            return "store" if self._publisher.composites_overlays else "render"
        return self._compositing

    async def publish(
        self,
        submission: AudioSubmission,
        *,
        progress: Optional[ProgressSink] = log_progress,
        channel: Optional[ProgressChannel] = None,
    ) -> PublishedResource:
        """Turn ``submission`` into a published video and return its descriptor."""

        channel = channel or ProgressChannel()
        unsubscribe = channel.subscribe(progress) if progress is not None else None
        try:
            return await self._run(submission, channel)
        finally:
            if unsubscribe is not None:
                unsubscribe()

    async def _run(self, submission: AudioSubmission, channel: ProgressChannel) -> PublishedResource:
        name = submission.original_filename
        strategy = self.strategy

        # Stage 1: never aborts; missing tags stay unset.
        metadata = await run_in_threadpool(self._extract, submission.source_path)
        logger.info(
            "Extracted %s title=%r artist=%r duration=%s",
            name,
            metadata.title,
            metadata.artist,
            metadata.duration_seconds,
        )

        overlay: OverlaySpec | None = None
        if strategy == "render":
            overlay = self._build_overlay(metadata)

        # Stage 2
        job = RenderJob(
            audio_path=submission.source_path,
            background_image_path=self._background_image,
            output_path=unique_output_path(self._videos_dir, name),
            duration_seconds=metadata.duration_seconds,
            overlay=overlay,
        )
        try:
            output_path = await self._render(job, channel)
        except RenderFailure:
            logger.exception("Render failed for %s", name)
            self._discard(job.output_path)
            record_pipeline_run("render_failed")
            raise
        except asyncio.CancelledError:
            channel.cancel()
            self._discard(job.output_path)
            record_pipeline_run("cancelled")
            raise

        # Stages 3-5
        try:
            if overlay is None:
                overlay = self._build_overlay(metadata)
            resource = await self._publisher.upload(
                output_path,
                derive_public_id(name),
                overlay if strategy == "store" else None,
                place_in_folder=True,
            )
        except Exception:
            logger.exception("Publishing failed for %s", name)
            record_pipeline_run("upload_failed")
            raise
        finally:
            self._cleanup(output_path)

        record_pipeline_run("published")
        logger.info("Published %s as %s", name, resource.public_id)
        return resource

    def _build_overlay(self, metadata: TrackMetadata) -> OverlaySpec:
        return overlay_builder.build(
            metadata.title,
            metadata.artist,
            style=self._overlay_style,
        )

    async def _render(self, job: RenderJob, channel: ProgressChannel) -> Path:
        started = time.perf_counter()
        # The worker thread cannot be interrupted, so the deadline trips the
        # cancel event and the renderer stops ffmpeg itself.
        timer = None
        if self._render_timeout is not None:
            timer = asyncio.get_running_loop().call_later(self._render_timeout, channel.cancel)
        try:
            return await run_in_threadpool(
                self._renderer.render,
                job,
                channel.publish,
                cancel_event=channel.cancel_event,
            )
        except RenderFailure as exc:
            timed_out = (
                self._render_timeout is not None
                and channel.cancelled
                and time.perf_counter() - started >= self._render_timeout
            )
            if timed_out:
                raise RenderFailure(f"Render exceeded {self._render_timeout:g}s and was cancelled") from exc
            raise
        finally:
            if timer is not None:
                timer.cancel()
            observe_render(time.perf_counter() - started)

    @staticmethod
    def _discard(path: Path) -> None:
        """Best-effort removal of a partial render."""

        try:
            Path(path).unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove partial render %s", path, exc_info=True)

    @staticmethod
    def _cleanup(path: Path) -> None:
        try:
            Path(path).unlink()
        except FileNotFoundError:
            logger.warning("Rendered file %s was already gone", path)
        except OSError as exc:
            failure = CleanupFailure(f"Could not remove rendered file {path}: {exc}")
            logger.error("%s", failure)


__all__ = ["CleanupFailure", "Compositing", "WaveformPipeline"]

"""Waveform video rendering via an ffmpeg subprocess."""

from __future__ import annotations

import logging
import subprocess
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from wavepub.domain import BannerStep, OverlaySpec, PlacementStep, RenderJob

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

_STDERR_TAIL_CHARS = 2000

# drawtext x/y expressions per gravity; X/Y are the inset fractions.
_GRAVITY_POSITIONS = {
    "north_west": ("w*{x}", "h*{y}"),
    "north": ("(w-text_w)/2+w*{x}", "h*{y}"),
    "north_east": ("w-text_w-w*{x}", "h*{y}"),
    "west": ("w*{x}", "(h-text_h)/2+h*{y}"),
    "center": ("(w-text_w)/2+w*{x}", "(h-text_h)/2+h*{y}"),
    "east": ("w-text_w-w*{x}", "(h-text_h)/2+h*{y}"),
    "south_west": ("w*{x}", "h-text_h-h*{y}"),
    "south": ("(w-text_w)/2+w*{x}", "h-text_h-h*{y}"),
    "south_east": ("w-text_w-w*{x}", "h-text_h-h*{y}"),
}


class RenderFailure(RuntimeError):
    """Raised when ffmpeg does not produce the requested video."""

    def __init__(self, message: str, *, exit_code: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


@dataclass(frozen=True)
class SpectrumPreset:
    """Spectrum bars laid over the background image."""

    width: str = "100%"
    height: str = "100%"
    rotation: str = "up"
    color: str = "white"
    canvas: str = "1280x720"


DEFAULT_SPECTRUM = SpectrumPreset()


def _dimension(value: str, reference: str) -> str:
    """Translate "100%" / "640" into a scale2ref expression."""

    value = value.strip()
    if value.endswith("%"):
        fraction = float(value[:-1]) / 100
        return f"{reference}*{fraction:g}"
    return str(int(value))


def _font_pattern(banner: BannerStep) -> str:
    style = " ".join(
        part.capitalize()
        for part in (banner.font_weight, banner.font_style)
        if part and part.lower() not in {"normal", "regular"}
    )
    return f"{banner.font_family}:style={style or 'Regular'}"


def _quote(value: str) -> str:
    """Quote ``value`` as a single filter option.

    The graph parser drops the quotes before the option parser splits on
    ``:``, so colons inside the value stay escaped.
    """

    cleaned = value.replace("\\", "/").replace("'", "")
    return "'" + cleaned.replace(":", "\\:") + "'"


def drawtext_filter(banner: BannerStep, placement: PlacementStep, textfile: Path) -> str:
    """Build one drawtext filter burning ``banner`` into the frame."""

    x_expr, y_expr = _GRAVITY_POSITIONS.get(placement.gravity, _GRAVITY_POSITIONS["north_west"])
    options = [
        f"textfile={_quote(str(textfile))}",
        "expansion=none",
        f"font={_quote(_font_pattern(banner))}",
        f"fontsize={banner.font_size}",
        f"fontcolor={banner.color}",
        "box=1",
        f"boxcolor={banner.background}",
        "boxborderw=12",
        f"x={x_expr.format(x=placement.x)}",
        f"y={y_expr.format(y=placement.y)}",
    ]
    return "drawtext=" + ":".join(options)


class WaveformRenderer:
    """Render a background image + audio track into a spectrum video."""

    def __init__(
        self,
        *,
        ffmpeg_binary: str = "ffmpeg",
        spectrum: SpectrumPreset = DEFAULT_SPECTRUM,
        video_codec: str = "libx264",
        audio_codec: str = "aac",
        audio_bitrate: str = "192k",
        fallback_background: Optional[str] = "0x191414",
        fallback_size: str = "1280x720",
    ) -> None:
        self._ffmpeg = ffmpeg_binary
        self._spectrum = spectrum
        self._video_codec = video_codec
        self._audio_codec = audio_codec
        self._audio_bitrate = audio_bitrate
        self._fallback_background = fallback_background
        self._fallback_size = fallback_size

    def _background_input(self, job: RenderJob) -> list[str]:
        image = Path(job.background_image_path)
        if image.is_file():
            return ["-loop", "1", "-i", str(image)]
        if self._fallback_background is None:
            raise RenderFailure(f"Background image not found: {image}")
        logger.warning("Background image %s missing, using a solid %s canvas", image, self._fallback_background)
        return [
            "-f",
            "lavfi",
            "-i",
            f"color=c={self._fallback_background}:s={self._fallback_size}:r=25",
        ]

    def build_filter_graph(self, banner_filters: list[str] | None = None) -> str:
        spectrum = self._spectrum
        flip = ",vflip" if spectrum.rotation == "down" else ""
        overlay_y = "0" if spectrum.rotation == "down" else "main_h-overlay_h"
        width = _dimension(spectrum.width, "main_w")
        height = _dimension(spectrum.height, "main_h")

        chain = [
            f"[1:a]showfreqs=s={spectrum.canvas}:mode=bar:ascale=log:fscale=log"
            f":colors={spectrum.color}{flip},format=rgba,colorkey=0x000000:0.1:0.0[spec0]",
            f"[spec0][0:v]scale2ref=w={width}:h={height}[spec][bg]",
            f"[bg][spec]overlay=x=(main_w-overlay_w)/2:y={overlay_y}:format=auto[wave]",
        ]
        tail = list(banner_filters or [])
        tail += ["scale=trunc(iw/2)*2:trunc(ih/2)*2", "format=yuv420p"]
        chain.append("[wave]" + ",".join(tail) + "[vout]")
        return ";".join(chain)

    def build_command(self, job: RenderJob, banner_filters: list[str] | None = None) -> list[str]:
        return [
            self._ffmpeg,
            "-hide_banner",
            "-nostats",
            "-y",
            *self._background_input(job),
            "-i",
            str(job.audio_path),
            "-filter_complex",
            self.build_filter_graph(banner_filters),
            "-map",
            "[vout]",
            "-map",
            "1:a",
            "-c:v",
            self._video_codec,
            "-c:a",
            self._audio_codec,
            "-b:a",
            self._audio_bitrate,
            "-shortest",
            "-progress",
            "pipe:1",
            str(job.output_path),
        ]

    def render(
        self,
        job: RenderJob,
        on_progress: Optional[ProgressCallback] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> Path:
        """Run ffmpeg for ``job`` and return the output path on success.

        ``on_progress`` receives percentages parsed from ffmpeg's progress
        stream; it is only called when the job knows the track duration.
        Setting ``cancel_event`` terminates the process.
        """

        Path(job.output_path).parent.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix="wavepub-banners-") as scratch:
            banner_filters: list[str] = []
            if job.overlay:
                banner_filters = self._write_banners(job.overlay, Path(scratch))
            command = self.build_command(job, banner_filters)
            logger.debug("Running renderer: %s", " ".join(command))
            self._run(command, job, on_progress, cancel_event)

        if not Path(job.output_path).is_file():
            raise RenderFailure(f"Renderer reported success but {job.output_path} is missing")
        return Path(job.output_path)

    def _write_banners(self, overlay: OverlaySpec, directory: Path) -> list[str]:
        filters = []
        for index, (banner, placement) in enumerate(overlay.pairs()):
            textfile = directory / f"banner-{index}.txt"
            textfile.write_text(banner.text, encoding="utf-8")
            filters.append(drawtext_filter(banner, placement, textfile))
        return filters

    def _run(
        self,
        command: list[str],
        job: RenderJob,
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> None:
        total_us = (job.duration_seconds or 0) * 1_000_000
        with tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace") as stderr_file:
            try:
                process = subprocess.Popen(
                    command,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    stdin=subprocess.DEVNULL,
                    text=True,
                )
            except OSError as exc:
                raise RenderFailure(f"Could not start renderer '{self._ffmpeg}': {exc}") from exc

            finished = threading.Event()
            if cancel_event is not None:
                threading.Thread(
                    target=self._terminate_on_cancel,
                    args=(process, cancel_event, finished),
                    daemon=True,
                ).start()

            try:
                self._consume_progress(process, total_us, on_progress, cancel_event)
                exit_code = process.wait()
            finally:
                finished.set()
                if process.stdout is not None:
                    process.stdout.close()

            if cancel_event is not None and cancel_event.is_set():
                raise RenderFailure("Render cancelled", exit_code=exit_code)
            if exit_code != 0:
                stderr_file.seek(0)
                stderr = stderr_file.read()[-_STDERR_TAIL_CHARS:]
                logger.error("Renderer exited with %s: %s", exit_code, stderr)
                raise RenderFailure(
                    f"Renderer failed with exit code {exit_code}",
                    exit_code=exit_code,
                    stderr=stderr,
                )

    @staticmethod
    def _terminate_on_cancel(
        process: subprocess.Popen,
        cancel_event: threading.Event,
        finished: threading.Event,
    ) -> None:
        # Covers an ffmpeg that stalls without writing progress.
        while not finished.wait(0.2):
            if cancel_event.is_set():
                process.terminate()
                return

    @staticmethod
    def _consume_progress(
        process: subprocess.Popen,
        total_us: float,
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> None:
        assert process.stdout is not None
        for line in process.stdout:
            if cancel_event is not None and cancel_event.is_set():
                process.terminate()
                return
            key, _, value = line.strip().partition("=")
            if key == "out_time_us" and total_us > 0 and on_progress is not None:
                try:
                    elapsed = int(value)
                except ValueError:
                    continue
                on_progress(max(0.0, min(100.0, elapsed / total_us * 100)))


__all__ = [
    "DEFAULT_SPECTRUM",
    "ProgressCallback",
    "RenderFailure",
    "SpectrumPreset",
    "WaveformRenderer",
    "drawtext_filter",
]

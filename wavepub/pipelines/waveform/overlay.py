"""Overlay construction (Stage 03 of the waveform pipeline).

Builds the title/artist banner steps that the asset store (or the renderer,
for render-side compositing) draws on top of the waveform video.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, Optional

from wavepub.domain import BannerStep, OverlaySpec, PlacementStep

DEFAULT_TITLE: Final[str] = "The Song Name"
DEFAULT_ARTIST: Final[str] = "Artist"


@dataclass(frozen=True)
class BannerStyle:
    """Colours and font for one banner."""

    background: str = "#1DB954"
    color: str = "#191414"
    font_family: str = "Arial"
    font_size: int = 100
    font_weight: str = "bold"
    font_style: str = "italic"


@dataclass(frozen=True)
class OverlayStyle:
    """Layout preset: banner styles plus where the first band sits."""

    title: BannerStyle = BannerStyle()
    artist: BannerStyle = BannerStyle(font_size=80)
    gravity: str = "north_west"
    inset_x: float = 0.05
    top_y: float = 0.06
    band_spacing: float = 0.14


DEFAULT_STYLE: Final[OverlayStyle] = OverlayStyle()


def _banner(text: str, style: BannerStyle) -> BannerStep:
    return BannerStep(
        text=text,
        background=style.background,
        color=style.color,
        font_family=style.font_family,
        font_size=style.font_size,
        font_weight=style.font_weight,
        font_style=style.font_style,
    )


def build_pairs(
    labels: Iterable[tuple[str, BannerStyle]],
    *,
    style: OverlayStyle = DEFAULT_STYLE,
) -> OverlaySpec:
    """Stack any number of banners top to bottom, one band apart."""

    steps = []
    for index, (text, banner_style) in enumerate(labels):
        steps.append(_banner(text, banner_style))
        steps.append(
            PlacementStep(
                gravity=style.gravity,
                x=style.inset_x,
                y=round(style.top_y + index * style.band_spacing, 4),
            )
        )
    return OverlaySpec(steps)


def build(
    title: Optional[str] = None,
    artist: Optional[str] = None,
    *,
    style: OverlayStyle = DEFAULT_STYLE,
) -> OverlaySpec:
    """Return the title banner followed by the artist banner."""

    return build_pairs(
        [
            (title if title is not None else DEFAULT_TITLE, style.title),
            (artist if artist is not None else DEFAULT_ARTIST, style.artist),
        ],
        style=style,
    )


__all__ = [
    "BannerStyle",
    "OverlayStyle",
    "DEFAULT_STYLE",
    "DEFAULT_TITLE",
    "DEFAULT_ARTIST",
    "build",
    "build_pairs",
]

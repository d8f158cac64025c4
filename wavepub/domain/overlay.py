"""Overlay transformation steps composited onto published videos."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Union


@dataclass(frozen=True)
class BannerStep:
    """A text label drawn on a solid background band."""

    text: str
    background: str
    color: str
    font_family: str
    font_size: int
    font_weight: str = "bold"
    font_style: str = "italic"

    def to_directive(self) -> dict[str, Any]:
        return {
            "background": self.background,
            "color": self.color,
            "overlay": {
                "font_family": self.font_family,
                "font_size": str(self.font_size),
                "font_weight": self.font_weight,
                "font_style": self.font_style,
                "text": self.text,
            },
        }


@dataclass(frozen=True)
class PlacementStep:
    """Positions the banner that immediately precedes it."""

    gravity: str
    x: float
    y: float

    def to_directive(self) -> dict[str, Any]:
        return {
            "flags": "layer_apply",
            "gravity": self.gravity,
            "x": f"{self.x:.2f}",
            "y": f"{self.y:.2f}",
        }


OverlayStep = Union[BannerStep, PlacementStep]


class OverlaySpecError(ValueError):
    """Raised when overlay steps do not alternate banner/placement."""


class OverlaySpec:
    """Ordered banner/placement pairs, always starting with a banner."""

    __slots__ = ("_steps",)

    def __init__(self, steps: Sequence[OverlayStep]) -> None:
        steps = tuple(steps)
        if len(steps) % 2:
            raise OverlaySpecError("Every banner needs a placement step.")
        for index, step in enumerate(steps):
            expected = BannerStep if index % 2 == 0 else PlacementStep
            if not isinstance(step, expected):
                raise OverlaySpecError(
                    f"Step {index} must be a {expected.__name__}, got {type(step).__name__}."
                )
        self._steps = steps

    @property
    def steps(self) -> tuple[OverlayStep, ...]:
        return self._steps

    def pairs(self) -> Iterator[tuple[BannerStep, PlacementStep]]:
        """Yield (banner, placement) tuples in draw order."""

        for index in range(0, len(self._steps), 2):
            yield self._steps[index], self._steps[index + 1]  # type: ignore[misc]

    def texts(self) -> list[str]:
        return [banner.text for banner, _ in self.pairs()]

    def to_transformation(self) -> list[dict[str, Any]]:
        """Render the steps as store-side transformation directives."""

        return [step.to_directive() for step in self._steps]

    def __len__(self) -> int:
        return len(self._steps)

    def __bool__(self) -> bool:
        return bool(self._steps)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OverlaySpec):
            return NotImplemented
        return self._steps == other._steps

    def __hash__(self) -> int:
        return hash(self._steps)

    def __repr__(self) -> str:
        return f"OverlaySpec({list(self._steps)!r})"


__all__ = [
    "BannerStep",
    "PlacementStep",
    "OverlayStep",
    "OverlaySpec",
    "OverlaySpecError",
]

"""Overlay construction."""

from __future__ import annotations

import pytest

from wavepub.domain import BannerStep, OverlaySpec, OverlaySpecError, PlacementStep
from wavepub.pipelines.waveform.overlay import (
    DEFAULT_ARTIST,
    DEFAULT_TITLE,
    BannerStyle,
    OverlayStyle,
    build,
    build_pairs,
)


@pytest.mark.parametrize(
    ("title", "artist", "expected"),
    [
        ("Test", "Band", ["Test", "Band"]),
        (None, "Band", [DEFAULT_TITLE, "Band"]),
        ("Test", None, ["Test", DEFAULT_ARTIST]),
        (None, None, ["The Song Name", "Artist"]),
    ],
)
def test_build_emits_title_then_artist(title, artist, expected):
    spec = build(title, artist)

    assert len(spec) == 4
    assert [type(step) for step in spec.steps] == [BannerStep, PlacementStep, BannerStep, PlacementStep]
    assert spec.texts() == expected


def test_build_keeps_empty_strings_instead_of_placeholders():
    assert build("", "").texts() == ["", ""]


def test_default_layout_stacks_artist_band_below_title():
    (title, title_at), (artist, artist_at) = list(build("Test", "Band").pairs())

    assert (title_at.gravity, title_at.x, title_at.y) == ("north_west", 0.05, 0.06)
    assert (artist_at.gravity, artist_at.x, artist_at.y) == ("north_west", 0.05, 0.2)
    assert title.font_size == 100
    assert artist.font_size == 80
    assert title.background == artist.background == "#1DB954"
    assert title.color == artist.color == "#191414"


def test_build_is_deterministic():
    assert build("Test", "Band") == build("Test", "Band")
    assert hash(build(None, None)) == hash(build(None, None))


def test_transformation_matches_store_directives():
    directives = build("Test", "Band").to_transformation()

    assert directives[0] == {
        "background": "#1DB954",
        "color": "#191414",
        "overlay": {
            "font_family": "Arial",
            "font_size": "100",
            "font_weight": "bold",
            "font_style": "italic",
            "text": "Test",
        },
    }
    assert directives[1] == {"flags": "layer_apply", "gravity": "north_west", "x": "0.05", "y": "0.06"}
    assert directives[2]["overlay"]["text"] == "Band"
    assert directives[3]["y"] == "0.20"


def test_custom_style_restyles_without_touching_layout_logic():
    style = OverlayStyle(
        title=BannerStyle(background="#000000", color="#FFFFFF", font_family="Roboto", font_size=64),
        artist=BannerStyle(background="#000000", color="#FFFFFF", font_family="Roboto", font_size=48),
        gravity="south_west",
        top_y=0.1,
        band_spacing=0.1,
    )
    (title, title_at), (_, artist_at) = list(build("Test", "Band", style=style).pairs())

    assert title.font_family == "Roboto"
    assert title.background == "#000000"
    assert title_at.gravity == "south_west"
    assert artist_at.y == 0.2


def test_build_pairs_supports_more_banners():
    labels = [(text, BannerStyle()) for text in ("One", "Two", "Three")]
    spec = build_pairs(labels)

    assert spec.texts() == ["One", "Two", "Three"]
    assert [placement.y for _, placement in spec.pairs()] == [0.06, 0.2, 0.34]


def test_overlay_spec_requires_alternating_steps():
    banner = build("a", "b").steps[0]
    placement = build("a", "b").steps[1]

    with pytest.raises(OverlaySpecError):
        OverlaySpec([placement, banner])
    with pytest.raises(OverlaySpecError):
        OverlaySpec([banner])
    with pytest.raises(OverlaySpecError):
        OverlaySpec([banner, banner])

    assert not OverlaySpec([])

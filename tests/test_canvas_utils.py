"""
Tests for the drawing helpers.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from canvas_utils import (
    Shadow,
    clamp_radius,
    composite_at,
    draw_image_with_shadow,
    draw_line,
    draw_rect,
    draw_rounded_rect,
    draw_tinted_icon,
    load_image,
)


def _black(w: int = 60, h: int = 60) -> Image.Image:
    return Image.new("RGBA", (w, h), (0, 0, 0, 255))


def test_clamp_radius():
    assert clamp_radius(2300, 50, 50) == 25
    assert clamp_radius(100, 100, 10) == 10
    assert clamp_radius(10, 10, -3) == 0


def test_composite_at_clips_negative_offsets():
    surface = _black(10, 10)
    layer = Image.new("RGBA", (8, 8), (255, 0, 0, 255))
    layer.putpixel((5, 5), (0, 255, 0, 255))
    composite_at(surface, layer, -5, -5)
    assert surface.getpixel((0, 0)) == (0, 255, 0, 255)
    assert surface.getpixel((2, 2)) == (255, 0, 0, 255)
    assert surface.getpixel((3, 3)) == (0, 0, 0, 255)


def test_composite_at_outside_is_noop():
    surface = _black(10, 10)
    composite_at(surface, Image.new("RGBA", (4, 4), (255, 255, 255, 255)), 50, 50)
    assert np.all(np.asarray(surface) == (0, 0, 0, 255))


def test_draw_rect_with_outline():
    surface = _black()
    draw_rect(surface, (10, 10, 20, 20), "#ff0000", outline="#ffffff", outline_width=2)
    assert surface.getpixel((10, 10)) == (255, 255, 255, 255)
    assert surface.getpixel((20, 20)) == (255, 0, 0, 255)
    assert surface.getpixel((31, 31)) == (0, 0, 0, 255)


def test_draw_rect_blends_transparent_color():
    surface = _black()
    draw_rect(surface, (0, 0, 60, 60), (255, 255, 255, 128))
    r, _, _, a = surface.getpixel((30, 30))
    assert 120 <= r <= 135
    assert a == 255


def test_draw_rounded_rect_clamps_radius():
    surface = _black()
    draw_rounded_rect(surface, (0, 20, 60, 10), 50, "#00ff00")
    assert surface.getpixel((30, 25)) == (0, 255, 0, 255)
    assert surface.getpixel((0, 20)) == (0, 0, 0, 255)


def test_draw_rounded_rect_empty_box():
    surface = _black()
    draw_rounded_rect(surface, (5, 5, 0, 10), 5, "#00ff00")
    assert np.all(np.asarray(surface) == (0, 0, 0, 255))


def test_draw_line():
    surface = _black()
    draw_line(surface, (5, 30), (55, 30), "#ffffff", 5)
    assert surface.getpixel((30, 30)) == (255, 255, 255, 255)
    assert surface.getpixel((30, 10)) == (0, 0, 0, 255)


def test_image_with_shadow_rounded():
    surface = Image.new("RGBA", (100, 100), (255, 255, 255, 255))
    cover = Image.new("RGB", (40, 40), (0, 0, 255))
    draw_image_with_shadow(surface, cover, (30, 30, 40, 40), Shadow(blur=10), radius=10)
    assert surface.getpixel((50, 50)) == (0, 0, 255, 255)
    # the rounded corner reveals the shadow instead of the cover
    corner = surface.getpixel((30, 30))
    assert corner[2] < 255 or corner[0] < 255
    assert corner != (0, 0, 255, 255)
    # shadow darkens just below the card
    assert surface.getpixel((50, 72))[0] < 255


def test_image_without_shadow():
    surface = Image.new("RGBA", (50, 50), (255, 255, 255, 255))
    draw_image_with_shadow(surface, Image.new("RGB", (10, 20), (255, 0, 0)), (10, 10, 20, 20), None)
    assert surface.getpixel((20, 20)) == (255, 0, 0, 255)
    assert surface.getpixel((5, 5)) == (255, 255, 255, 255)


def test_tinted_icon(tmp_path: Path):
    icon = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    for x in range(10):
        icon.putpixel((x, 5), (255, 255, 255, 255))
    p = tmp_path / "icon.png"
    icon.save(p)

    surface = _black(20, 20)
    assert draw_tinted_icon(surface, p, (0, 0, 20, 20), "#00ff00")
    assert surface.getpixel((10, 11))[1] > 150
    assert surface.getpixel((10, 2)) == (0, 0, 0, 255)


def test_tinted_icon_missing_file(tmp_path: Path, caplog):
    surface = _black(20, 20)
    with caplog.at_level(logging.WARNING):
        assert draw_tinted_icon(surface, tmp_path / "missing.png", (0, 0, 20, 20), "#ffffff") is False
    assert "Could not load icon" in caplog.text
    assert np.all(np.asarray(surface) == (0, 0, 0, 255))


def test_load_image_converts_to_rgba(cover_path: Path):
    img = load_image(cover_path)
    assert img.mode == "RGBA"
    assert img.size == (200, 200)

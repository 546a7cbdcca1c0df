"""
Tests for palette extraction and the color helpers.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from color_palette import (
    contrasting_text_color,
    extract_palette,
    extract_palette_from_path,
    hex_to_rgb,
    is_light_color,
    lightness,
    parse_color,
    rgb_to_hex,
    with_alpha,
)


class TestExtractPalette:
    def test_striped_cover(self, striped_cover):
        # equal band sizes keep first-seen order; green has the same lightness
        # as red so it only comes back through the backfill
        assert extract_palette(striped_cover, 5) == ["#e0c060", "#4040c0", "#606060", "#c02020", "#20a040"]

    def test_sorted_lightest_first(self, striped_cover):
        palette = extract_palette(striped_cover, 5)
        values = [lightness(hex_to_rgb(c)) for c in palette]
        assert values == sorted(values, reverse=True)

    def test_deterministic(self, striped_cover):
        assert extract_palette(striped_cover) == extract_palette(striped_cover)

    def test_two_tone_image_gives_empty_palette(self, two_tone_cover):
        assert extract_palette(two_tone_cover, 5) == []

    def test_transparent_pixels_ignored(self):
        img = Image.new("RGBA", (50, 50), (200, 40, 40, 0))
        assert extract_palette(img) == []

    def test_fewer_distinct_colors_than_requested(self):
        img = Image.new("RGB", (40, 40), (100, 100, 100))
        assert extract_palette(img, 5) == ["#606060"]

    def test_diversity_prefers_distinct_lightness(self):
        arr = np.zeros((100, 100, 3), dtype=np.uint8)
        arr[:60] = (128, 128, 128)
        arr[60:90] = (160, 128, 128)  # frequent, but within 20 lightness of the gray
        arr[90:] = (64, 64, 64)
        palette = extract_palette(Image.fromarray(arr), 2)
        assert palette == ["#808080", "#404040"]

    def test_quantization_can_reach_256(self):
        img = Image.new("RGB", (30, 30), (250, 100, 100))
        assert extract_palette(img, 1) == ["#ff6060"]

    def test_rejects_non_positive_count(self, striped_cover):
        with pytest.raises(ValueError):
            extract_palette(striped_cover, 0)

    def test_from_path(self, cover_path: Path, striped_cover):
        assert extract_palette_from_path(cover_path) == extract_palette(striped_cover)

    def test_from_path_decode_failure_propagates(self, tmp_path: Path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        with pytest.raises(OSError):
            extract_palette_from_path(bad)


class TestColorHelpers:
    def test_hex_round_trip(self):
        assert hex_to_rgb("#1E1E1E") == (30, 30, 30)
        assert hex_to_rgb("ff0080") == (255, 0, 128)
        assert rgb_to_hex((30, 30, 30)) == "#1e1e1e"

    def test_invalid_hex(self):
        assert hex_to_rgb("#12345") is None
        assert hex_to_rgb("") is None

    def test_rgb_to_hex_clamps(self):
        assert rgb_to_hex((256, -4, 128)) == "#ff0080"

    def test_light_and_contrast(self):
        assert is_light_color("#ffffff")
        assert not is_light_color("#000000")
        assert contrasting_text_color("#f0f0f0") == "#000000"
        assert contrasting_text_color("#202020") == "#ffffff"

    def test_parse_color(self):
        assert parse_color("#ff0000") == (255, 0, 0, 255)
        assert parse_color("rgb(0, 128, 0)") == (0, 128, 0, 255)
        assert parse_color((1, 2, 3)) == (1, 2, 3, 255)
        assert parse_color((1, 2, 3, 4)) == (1, 2, 3, 4)
        with pytest.raises(ValueError):
            parse_color("not-a-color")
        with pytest.raises(ValueError):
            parse_color((1, 2))

    def test_with_alpha(self):
        assert with_alpha("#102030", 0.8) == (16, 32, 48, 204)
        assert with_alpha("#102030", 1) == (16, 32, 48, 255)

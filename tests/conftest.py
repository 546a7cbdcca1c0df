"""
Shared fixtures: synthetic cover images and metadata files written to tmp_path.
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from poster_core import PosterConfig


def _stripes(colors: list[tuple[int, int, int]], size: int = 200) -> Image.Image:
    """Horizontal bands of equal height, one per color."""
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    band = size // len(colors)
    for i, (r, g, b) in enumerate(colors):
        arr[i * band : (i + 1) * band if i < len(colors) - 1 else size] = (r, g, b, 255)
    return Image.fromarray(arr)


@pytest.fixture
def monospace_measure():
    """Every character is 10px wide."""
    return lambda s: len(s) * 10


@pytest.fixture
def striped_cover() -> Image.Image:
    return _stripes([(200, 40, 40), (40, 160, 60), (60, 60, 200), (224, 192, 96), (96, 96, 96)])


@pytest.fixture
def two_tone_cover() -> Image.Image:
    return _stripes([(0, 0, 0), (255, 255, 255)])


@pytest.fixture
def cover_path(tmp_path: Path, striped_cover: Image.Image) -> Path:
    p = tmp_path / "cover.png"
    striped_cover.save(p)
    return p


@pytest.fixture
def small_config():
    return PosterConfig(width=270, height=360, margin=20)


@pytest.fixture
def album_metadata(tmp_path: Path, cover_path: Path) -> Path:
    raw = {
        "cover": cover_path.name,
        "title": "Test Album",
        "artist": "Test Artist",
        "release_date": "2021-03-05",
        "copyright": "© 2021 Test Records",
        "tracks": ["Intro", {"title": "Second Song", "duration": 201}, "Outro"],
    }
    p = tmp_path / "album.json"
    p.write_text(json.dumps(raw), encoding="utf-8")
    return p


@pytest.fixture
def song_metadata(tmp_path: Path, cover_path: Path) -> Path:
    raw = {
        "cover": str(cover_path),
        "title": "Some Song (feat. Someone)",
        "artist": "Test Artist",
        "release_date": "2020-11-20",
        "duration": 200,
        "progress": 0.25,
        "track_number": 3,
        "total_tracks": 12,
    }
    p = tmp_path / "song.json"
    p.write_text(json.dumps(raw), encoding="utf-8")
    return p

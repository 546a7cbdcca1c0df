#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dominant-color palette extraction and small color helpers.
"""

from __future__ import annotations

import re
from pathlib import Path

import numpy as np
from PIL import Image, ImageColor


SAMPLE_STRIDE = 10
QUANT_STEP = 32
DIVERSITY_THRESHOLD = 20
OVERSAMPLE = 3

MIN_ALPHA = 128
NEAR_BLACK = 20
NEAR_WHITE = 235

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]


def _quantize(v: np.ndarray) -> np.ndarray:
    # half-up, so 16 -> 32 and 240 -> 256 (clamped only when formatting)
    return (np.floor(v / QUANT_STEP + 0.5) * QUANT_STEP).astype(np.int32)


def _clamp255(v: int) -> int:
    return max(0, min(255, int(v)))


def hex_to_rgb(value: str) -> RGB | None:
    m = _HEX_RE.match((value or "").strip())
    if not m:
        return None
    return int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16)


def rgb_to_hex(rgb: tuple[int, ...]) -> str:
    r, g, b = (_clamp255(c) for c in rgb[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def lightness(rgb: tuple[int, ...]) -> float:
    return (rgb[0] + rgb[1] + rgb[2]) / 3.0


def relative_luminance(value: str) -> float:
    rgb = hex_to_rgb(value)
    if rgb is None:
        return 0.0
    r, g, b = (c / 255.0 for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def is_light_color(value: str) -> bool:
    return relative_luminance(value) > 0.5


def contrasting_text_color(background: str) -> str:
    return "#000000" if is_light_color(background) else "#ffffff"


def parse_color(value: str | tuple[int, ...]) -> RGBA:
    """Accept ``#rrggbb``, CSS ``rgb()``/``rgba()`` strings or 3/4-tuples."""
    if isinstance(value, tuple):
        if len(value) == 3:
            return (_clamp255(value[0]), _clamp255(value[1]), _clamp255(value[2]), 255)
        if len(value) == 4:
            return tuple(_clamp255(c) for c in value)  # type: ignore[return-value]
        raise ValueError(f"Color tuple must have 3 or 4 components: {value!r}")
    return ImageColor.getcolor(value, "RGBA")  # type: ignore[return-value]


def with_alpha(value: str | tuple[int, ...], alpha: float) -> RGBA:
    r, g, b, _ = parse_color(value)
    return (r, g, b, _clamp255(round(alpha * 255)))


def _count_quantized(image: Image.Image) -> dict[RGB, int]:
    pixels = np.asarray(image.convert("RGBA"), dtype=np.uint8).reshape(-1, 4)
    samples = pixels[::SAMPLE_STRIDE]

    r, g, b, a = samples[:, 0], samples[:, 1], samples[:, 2], samples[:, 3]
    skip = (a < MIN_ALPHA) | ((r < NEAR_BLACK) & (g < NEAR_BLACK) & (b < NEAR_BLACK)) | (
        (r > NEAR_WHITE) & (g > NEAR_WHITE) & (b > NEAR_WHITE)
    )
    kept = samples[~skip, :3].astype(np.int32)
    quantized = _quantize(kept)

    # dict keeps first-seen order, which breaks frequency ties deterministically
    counts: dict[RGB, int] = {}
    for qr, qg, qb in quantized.tolist():
        key = (qr, qg, qb)
        counts[key] = counts.get(key, 0) + 1
    return counts


def extract_palette(image: Image.Image, count: int = 5) -> list[str]:
    """
    Return up to ``count`` dominant colors of ``image`` as ``#rrggbb``, lightest first.

    Samples every 10th pixel, drops transparent, near-black and near-white
    samples, quantizes to multiples of 32, then picks the most frequent colors
    whose lightness differs by more than 20 from every color already picked.
    Frequent leftovers backfill the result when too few diverse colors exist.
    """
    if count < 1:
        raise ValueError(f"Palette size must be >= 1, got {count}")

    counts = _count_quantized(image)
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[: count * OVERSAMPLE]
    candidates = [rgb for rgb, _ in ranked]

    chosen: list[RGB] = []
    for rgb in candidates:
        if not chosen or all(abs(lightness(rgb) - lightness(c)) > DIVERSITY_THRESHOLD for c in chosen):
            chosen.append(rgb)
        if len(chosen) >= count:
            break

    if len(chosen) < count:
        for rgb in candidates:
            if rgb not in chosen:
                chosen.append(rgb)
                if len(chosen) >= count:
                    break

    chosen.sort(key=lightness, reverse=True)
    return [rgb_to_hex(rgb) for rgb in chosen]


def extract_palette_from_path(path: str | Path, count: int = 5) -> list[str]:
    with Image.open(path) as img:
        img.load()
        return extract_palette(img, count)

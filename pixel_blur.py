#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Approximate Gaussian blur over raw RGBA pixel buffers.

A pixel buffer is a ``uint8`` array of shape ``(height, width, 4)``. The blur
runs three box-blur passes whose sizes come from the closed-form box-size
formula, each pass split into a horizontal and a vertical sliding-window sum
with clamp-to-edge borders. Every channel, alpha included, is blurred the
same way.
"""

from __future__ import annotations

import math

import numpy as np
from PIL import Image


PASSES = 3
# Rows per numpy block; bounds the int64 scratch arrays on poster-sized buffers.
_BLOCK_ROWS = 256


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def boxes_for_gaussian(sigma: float, n: int = PASSES) -> list[int]:
    """Return ``n`` box radii whose cascade approximates a Gaussian of ``sigma``."""
    w_ideal = math.sqrt((12.0 * sigma * sigma / n) + 1.0)
    wl = int(math.floor(w_ideal))
    if wl % 2 == 0:
        wl -= 1
    wu = wl + 2

    m_ideal = (12.0 * sigma * sigma - n * wl * wl - 4 * n * wl - 3 * n) / (-4 * wl - 4)
    m = _round_half_up(m_ideal)

    sizes = [wl if i < m else wu for i in range(n)]
    return [(s - 1) // 2 for s in sizes]


def _check_buffer(pixels: np.ndarray) -> None:
    if not isinstance(pixels, np.ndarray) or pixels.dtype != np.uint8:
        raise ValueError("Pixel buffer must be a uint8 numpy array")
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Pixel buffer must have shape (height, width, 4), got {pixels.shape}")


def box_blur_horizontal(src: np.ndarray, out: np.ndarray, radius: int) -> None:
    """Running-sum box blur along each row of ``src``, written into ``out``."""
    if radius <= 0:
        out[...] = src
        return

    size = radius + radius + 1
    iarr = 1.0 / size
    height, width = src.shape[:2]

    # window of x covers [x - r, x + r]; the part outside the row repeats the edge pixel
    xs = np.arange(width, dtype=np.int64)
    lo = np.clip(xs - radius, 0, width)
    hi = np.clip(xs + radius + 1, 0, width)
    left = np.clip(radius - xs, 0, None)[None, :, None]
    right = np.clip(xs + radius - (width - 1), 0, None)[None, :, None]

    for y0 in range(0, height, _BLOCK_ROWS):
        block = src[y0 : y0 + _BLOCK_ROWS].astype(np.int64)
        lead = np.zeros((block.shape[0], 1, 4), dtype=np.int64)
        csum = np.concatenate([lead, np.cumsum(block, axis=1)], axis=1)
        window = csum[:, hi] - csum[:, lo] + left * block[:, :1] + right * block[:, -1:]
        # uint8 store rounds half to even, like a clamped 8-bit canvas buffer
        out[y0 : y0 + block.shape[0]] = np.clip(np.rint(window * iarr), 0, 255).astype(np.uint8)


def box_blur_vertical(src: np.ndarray, out: np.ndarray, radius: int) -> None:
    """Running-sum box blur along each column of ``src``, written into ``out``."""
    transposed = np.empty((src.shape[1], src.shape[0], 4), dtype=np.uint8)
    box_blur_horizontal(np.ascontiguousarray(src.transpose(1, 0, 2)), transposed, radius)
    out[...] = transposed.transpose(1, 0, 2)


def box_blur(src: np.ndarray, out: np.ndarray, radius: int) -> None:
    temp = np.empty_like(src)
    box_blur_horizontal(src, temp, radius)
    box_blur_vertical(temp, out, radius)


def gaussian_blur(pixels: np.ndarray, radius: float) -> np.ndarray:
    """
    Blur an RGBA buffer with three box passes approximating sigma=``radius``.

    The input is left untouched. A radius that is not a positive finite number
    is a no-op and returns a copy.
    """
    _check_buffer(pixels)
    if not (radius > 0) or not math.isfinite(radius):
        return pixels.copy()

    source = pixels.copy()
    target = np.empty_like(source)
    for r in boxes_for_gaussian(radius, PASSES):
        box_blur(source, target, r)
        source, target = target, source
    return source


def scale_brightness(pixels: np.ndarray, factor: float) -> np.ndarray:
    """Multiply the RGB samples (not alpha) by ``factor`` in (0, 1]."""
    _check_buffer(pixels)
    if not (0.0 < factor <= 1.0):
        raise ValueError(f"Brightness must be in (0, 1], got {factor}")
    out = pixels.copy()
    rgb = out[..., :3].astype(np.float64) * factor
    out[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return out


def image_to_pixels(image: Image.Image) -> np.ndarray:
    return np.array(image.convert("RGBA"), dtype=np.uint8)


def pixels_to_image(pixels: np.ndarray) -> Image.Image:
    _check_buffer(pixels)
    return Image.fromarray(pixels)


def blur_image(image: Image.Image, radius: float) -> Image.Image:
    return pixels_to_image(gaussian_blur(image_to_pixels(image), radius))

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Drawing helpers shared by the poster designs.

Everything semi-transparent is painted on a separate layer and
alpha-composited onto the surface, so helpers never leave drawing state
behind on the caller's surface.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from PIL import Image, ImageDraw, ImageFilter

from color_palette import parse_color


logger = logging.getLogger(__name__)

Box = tuple[int, int, int, int]  # x, y, width, height


@dataclass(frozen=True)
class Shadow:
    offset_x: int = 0
    offset_y: int = 4
    blur: int = 100
    color: tuple[int, int, int, int] = (0, 0, 0, 191)


COVER_SHADOW = Shadow()


def load_image(path: str | Path) -> Image.Image:
    with Image.open(path) as img:
        return img.convert("RGBA")


def fit_cover_to_box(img: Image.Image, w: int, h: int) -> Image.Image:
    src_w, src_h = img.size
    src_ratio = src_w / max(1, src_h)
    dst_ratio = w / max(1, h)
    if src_ratio > dst_ratio:
        new_h = h
        new_w = max(w, int(h * src_ratio))
    else:
        new_w = w
        new_h = max(h, int(w / max(0.0001, src_ratio)))
    resized = img.resize((new_w, new_h), Image.Resampling.LANCZOS)
    x = (new_w - w) // 2
    y = (new_h - h) // 2
    return resized.crop((x, y, x + w, y + h))


def rounded_mask(size: tuple[int, int], radius: int) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, size[0] - 1, size[1] - 1), radius=radius, fill=255)
    return mask


def clamp_radius(width: float, height: float, radius: float) -> int:
    return int(max(0, min(radius, width / 2, height / 2)))


def composite_at(surface: Image.Image, layer: Image.Image, x: int, y: int) -> None:
    """alpha_composite ``layer`` at (x, y), clipping whatever falls outside the surface."""
    sx0, sy0 = max(0, -x), max(0, -y)
    sx1 = min(layer.width, surface.width - x)
    sy1 = min(layer.height, surface.height - y)
    if sx1 <= sx0 or sy1 <= sy0:
        return
    if (sx0, sy0, sx1, sy1) != (0, 0, layer.width, layer.height):
        layer = layer.crop((sx0, sy0, sx1, sy1))
    surface.alpha_composite(layer, (x + sx0, y + sy0))


def _paint_layer(
    surface: Image.Image,
    bounds: tuple[float, float, float, float],
    paint: Callable[[ImageDraw.ImageDraw, int, int], None],
) -> None:
    x0, y0 = int(math.floor(bounds[0])), int(math.floor(bounds[1]))
    x1, y1 = int(math.ceil(bounds[2])), int(math.ceil(bounds[3]))
    if x1 <= x0 or y1 <= y0:
        return
    layer = Image.new("RGBA", (x1 - x0, y1 - y0), (0, 0, 0, 0))
    paint(ImageDraw.Draw(layer), x0, y0)
    composite_at(surface, layer, x0, y0)


def draw_line(surface: Image.Image, start: tuple[float, float], end: tuple[float, float], color, width: int = 1) -> None:
    fill = parse_color(color)
    half = width / 2 + 1
    bounds = (
        min(start[0], end[0]) - half,
        min(start[1], end[1]) - half,
        max(start[0], end[0]) + half,
        max(start[1], end[1]) + half,
    )

    def paint(d: ImageDraw.ImageDraw, ox: int, oy: int) -> None:
        d.line([(start[0] - ox, start[1] - oy), (end[0] - ox, end[1] - oy)], fill=fill, width=width)

    _paint_layer(surface, bounds, paint)


def draw_rect(surface: Image.Image, box: Box, color, outline=None, outline_width: int = 0) -> None:
    x, y, w, h = box
    fill = parse_color(color)
    stroke = parse_color(outline) if outline is not None and outline_width > 0 else None

    def paint(d: ImageDraw.ImageDraw, ox: int, oy: int) -> None:
        d.rectangle(
            (x - ox, y - oy, x + w - ox - 1, y + h - oy - 1),
            fill=fill,
            outline=stroke,
            width=outline_width if stroke else 0,
        )

    _paint_layer(surface, (x, y, x + w, y + h), paint)


def draw_rounded_rect(surface: Image.Image, box: Box, radius: float, color) -> None:
    x, y, w, h = box
    if w <= 0 or h <= 0:
        return
    r = clamp_radius(w, h, radius)
    fill = parse_color(color)

    def paint(d: ImageDraw.ImageDraw, ox: int, oy: int) -> None:
        d.rounded_rectangle((x - ox, y - oy, x + w - ox - 1, y + h - oy - 1), radius=r, fill=fill)

    _paint_layer(surface, (x, y, x + w, y + h), paint)


def draw_shadow(surface: Image.Image, box: Box, shadow: Shadow, radius: int = 0) -> None:
    """Blurred silhouette of ``box``; the blur value follows canvas shadowBlur (sigma = blur / 2)."""
    x, y, w, h = box
    sigma = shadow.blur / 2
    pad = int(math.ceil(sigma * 3)) + 2

    layer = Image.new("RGBA", (w + 2 * pad, h + 2 * pad), (0, 0, 0, 0))
    ImageDraw.Draw(layer).rounded_rectangle(
        (pad, pad, pad + w - 1, pad + h - 1),
        radius=clamp_radius(w, h, radius),
        fill=parse_color(shadow.color),
    )
    if sigma > 0:
        layer = layer.filter(ImageFilter.GaussianBlur(radius=sigma))
    composite_at(surface, layer, x - pad + shadow.offset_x, y - pad + shadow.offset_y)


def draw_image_with_shadow(
    surface: Image.Image,
    image: Image.Image,
    box: Box,
    shadow: Shadow | None = COVER_SHADOW,
    radius: int = 0,
) -> None:
    x, y, w, h = box
    if shadow is not None:
        draw_shadow(surface, box, shadow, radius)

    card = fit_cover_to_box(image.convert("RGBA"), w, h)
    if radius > 0:
        mask = rounded_mask((w, h), clamp_radius(w, h, radius))
        alpha = Image.new("L", (w, h), 0)
        alpha.paste(card.getchannel("A"), (0, 0), mask)
        card.putalpha(alpha)
    composite_at(surface, card, x, y)


def draw_tinted_icon(surface: Image.Image, path: str | Path, box: Box, color) -> bool:
    """
    Draw a monochrome icon recolored to ``color``, contained and centered in ``box``.

    The icon's alpha channel is used as the mask. Returns False (and logs a
    warning) when the icon cannot be loaded so callers can carry on without it.
    """
    try:
        icon = load_image(path)
    except OSError as e:
        logger.warning("Could not load icon %s: %s", path, e)
        return False

    x, y, w, h = box
    scale = min(w / max(1, icon.width), h / max(1, icon.height))
    iw = max(1, int(round(icon.width * scale)))
    ih = max(1, int(round(icon.height * scale)))
    icon = icon.resize((iw, ih), Image.Resampling.LANCZOS)

    r, g, b, a = parse_color(color)
    mask = icon.getchannel("A")
    if a < 255:
        mask = mask.point(lambda v: v * a // 255)
    tinted = Image.new("RGBA", (iw, ih), (r, g, b, 0))
    tinted.putalpha(mask)
    composite_at(surface, tinted, x + (w - iw) // 2, y + (h - ih) // 2)
    return True

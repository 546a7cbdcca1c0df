#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Poster background modes.

Every mode is an immutable value validated on construction. Rendering goes
through ``render_background`` which fills the whole ``width x height`` area of
an RGBA Pillow surface in place; it is always the first paint on the surface.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence, Union

import numpy as np
from PIL import Image

from canvas_utils import load_image
from color_palette import RGBA, parse_color, with_alpha
from pixel_blur import gaussian_blur, image_to_pixels, pixels_to_image, scale_brightness


logger = logging.getLogger(__name__)

PALETTE_BASE_COLOR = "#1e1e1e"
GRADIENT_DIRECTIONS = ("topDown", "bottomUp")
CUSTOM_GRADIENT_DIRECTIONS = ("vertical", "horizontal", "diagonal")
IMAGE_FITS = ("fill", "fit", "stretch")
BLURRED_FITS = ("fill", "fit")
PALETTE_STYLES = ("emphasized", "smooth")
PALETTE_DIRECTIONS = ("lightToDark", "darkToLight")

_BLOCK_ROWS = 256


class BackgroundConfigError(ValueError):
    pass


ColorValue = Union[str, tuple]


@dataclass(frozen=True)
class GradientStop:
    position: float
    color: ColorValue


# ---------------------------------------------------------------------------
# Gradient primitive
# ---------------------------------------------------------------------------


def gradient_ramp(stops: Sequence[tuple[float, RGBA]], t: np.ndarray) -> np.ndarray:
    """
    Sample color stops at offsets ``t`` and return ``t.shape + (4,)`` uint8 RGBA.

    Follows canvas color-stop rules: stops are ordered by offset keeping
    insertion order for equal offsets, the first/last color extends past the
    ends, and at a shared offset the later stop wins.
    """
    ordered = sorted(stops, key=lambda s: s[0])
    positions = np.array([p for p, _ in ordered], dtype=np.float64)
    colors = np.array([c for _, c in ordered], dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)

    if len(ordered) == 1:
        out = np.broadcast_to(colors[0], t.shape + (4,))
        return np.rint(out).astype(np.uint8)

    k = len(ordered)
    hi = np.clip(np.searchsorted(positions, t, side="right"), 1, k - 1)
    lo = hi - 1
    p0 = positions[lo]
    span = positions[hi] - p0
    safe_span = np.where(span > 0, span, 1.0)
    frac = np.where(span > 0, (t - p0) / safe_span, np.where(t < p0, 0.0, 1.0))
    frac = np.clip(frac, 0.0, 1.0)[..., None]

    out = colors[lo] + (colors[hi] - colors[lo]) * frac
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def _blank_pixels(width: int, height: int) -> np.ndarray:
    return np.zeros((height, width, 4), dtype=np.uint8)


def linear_gradient_layer(
    width: int,
    height: int,
    start: tuple[float, float],
    end: tuple[float, float],
    stops: Sequence[tuple[float, RGBA]],
) -> Image.Image:
    out = _blank_pixels(width, height)
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0 or not stops:
        return pixels_to_image(out)

    xs = (np.arange(width, dtype=np.float64) + 0.5)[None, :]
    for y0 in range(0, height, _BLOCK_ROWS):
        ys = (np.arange(y0, min(height, y0 + _BLOCK_ROWS), dtype=np.float64) + 0.5)[:, None]
        t = ((xs - start[0]) * dx + (ys - start[1]) * dy) / length_sq
        out[y0 : y0 + ys.shape[0]] = gradient_ramp(stops, t)
    return pixels_to_image(out)


def radial_gradient_layer(
    width: int,
    height: int,
    center: tuple[float, float],
    radius: float,
    stops: Sequence[tuple[float, RGBA]],
) -> Image.Image:
    out = _blank_pixels(width, height)
    if radius <= 0 or not stops:
        return pixels_to_image(out)

    xs = (np.arange(width, dtype=np.float64) + 0.5)[None, :] - center[0]
    for y0 in range(0, height, _BLOCK_ROWS):
        ys = (np.arange(y0, min(height, y0 + _BLOCK_ROWS), dtype=np.float64) + 0.5)[:, None] - center[1]
        t = np.sqrt(xs * xs + ys * ys) / radius
        out[y0 : y0 + ys.shape[0]] = gradient_ramp(stops, t)
    return pixels_to_image(out)


def even_stops(colors: Sequence[ColorValue]) -> list[tuple[float, RGBA]]:
    if len(colors) == 1:
        return [(0.0, parse_color(colors[0]))]
    step = 1.0 / (len(colors) - 1)
    return [(i * step, parse_color(c)) for i, c in enumerate(colors)]


def place_image(image: Image.Image, width: int, height: int, fit: str) -> Image.Image:
    """
    Return an RGBA ``width x height`` layer holding ``image``.

    ``stretch`` ignores aspect ratio, ``fit`` scales to contain (transparent
    letterbox, centered), ``fill`` scales to cover and crops centered.
    """
    src = image.convert("RGBA")
    if fit == "stretch":
        return src.resize((width, height), Image.Resampling.LANCZOS)

    iw, ih = src.size
    ratios = (width / max(1, iw), height / max(1, ih))
    scale = min(ratios) if fit == "fit" else max(ratios)
    sw = max(1, int(round(iw * scale)))
    sh = max(1, int(round(ih * scale)))
    resized = src.resize((sw, sh), Image.Resampling.LANCZOS)

    if fit == "fit":
        layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        layer.alpha_composite(resized, (max(0, (width - sw) // 2), max(0, (height - sh) // 2)))
        return layer

    x = (sw - width) // 2
    y = (sh - height) // 2
    return resized.crop((x, y, x + width, y + height))


def _fill_layer(surface: Image.Image, layer: Image.Image) -> None:
    surface.alpha_composite(layer, (0, 0))


def _require_colors(colors: Sequence[ColorValue]) -> tuple:
    colors = tuple(colors)
    if len(colors) < 2:
        raise BackgroundConfigError("Gradient requires at least 2 colors")
    for c in colors:
        try:
            parse_color(c)
        except ValueError as e:
            raise BackgroundConfigError(f"Invalid gradient color {c!r}: {e}") from e
    return colors


def _require_choice(value: str, choices: tuple[str, ...], what: str) -> None:
    if value not in choices:
        raise BackgroundConfigError(f"Unknown {what} {value!r}; expected one of: {', '.join(choices)}")


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolidBackground:
    color: ColorValue = "#000000"

    def __post_init__(self) -> None:
        try:
            parse_color(self.color)
        except ValueError as e:
            raise BackgroundConfigError(f"Invalid color {self.color!r}: {e}") from e

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class LinearGradientBackground:
    colors: tuple
    direction: str = "topDown"

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", _require_colors(self.colors))
        _require_choice(self.direction, GRADIENT_DIRECTIONS, "gradient direction")

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class CustomGradientBackground:
    stops: tuple
    direction: str = "vertical"

    def __post_init__(self) -> None:
        stops = tuple(s if isinstance(s, GradientStop) else GradientStop(*s) for s in self.stops)
        if len(stops) < 2:
            raise BackgroundConfigError("Gradient requires at least 2 color stops")
        for s in stops:
            if not isinstance(s.position, (int, float)) or not math.isfinite(s.position) or not 0.0 <= s.position <= 1.0:
                raise BackgroundConfigError(f"Gradient stop position must be within [0, 1], got {s.position!r}")
            try:
                parse_color(s.color)
            except ValueError as e:
                raise BackgroundConfigError(f"Invalid gradient color {s.color!r}: {e}") from e
        object.__setattr__(self, "stops", stops)
        _require_choice(self.direction, CUSTOM_GRADIENT_DIRECTIONS, "gradient direction")

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class RadialGradientBackground:
    colors: tuple
    center_x: float = 0.5
    center_y: float = 0.5

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", _require_colors(self.colors))

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class ImageBackground:
    image_path: str | Path
    fit: str = "fill"

    def __post_init__(self) -> None:
        _require_choice(self.fit, IMAGE_FITS, "image fit")

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class BlurredImageBackground:
    image_path: str | Path
    blur_radius: float = 20
    brightness: float = 0.7
    fit: str = "fill"

    def __post_init__(self) -> None:
        _require_choice(self.fit, BLURRED_FITS, "image fit")
        if not (0.0 < self.brightness <= 1.0):
            raise BackgroundConfigError(f"Brightness must be in (0, 1], got {self.brightness}")

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class PaletteGradientBackground:
    palette: tuple
    style: str = "emphasized"
    direction: str = "lightToDark"

    def __post_init__(self) -> None:
        object.__setattr__(self, "palette", tuple(self.palette))
        for c in self.palette:
            try:
                parse_color(c)
            except ValueError as e:
                raise BackgroundConfigError(f"Invalid palette color {c!r}: {e}") from e
        _require_choice(self.style, PALETTE_STYLES, "palette style")
        _require_choice(self.direction, PALETTE_DIRECTIONS, "palette direction")

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


@dataclass(frozen=True)
class CustomBackground:
    render_fn: Callable[[Image.Image, int, int], object] = field(compare=False)
    description: str = "Custom background"

    def render(self, surface: Image.Image, width: int, height: int) -> None:
        render_background(self, surface, width, height)

    def describe(self) -> str:
        return describe_background(self)


BackgroundMode = Union[
    SolidBackground,
    LinearGradientBackground,
    CustomGradientBackground,
    RadialGradientBackground,
    ImageBackground,
    BlurredImageBackground,
    PaletteGradientBackground,
    CustomBackground,
]

BLACK_BACKGROUND = SolidBackground("#000000")
WHITE_BACKGROUND = SolidBackground("#ffffff")


def emphasized_stops(palette: Sequence[str], direction: str) -> list[tuple[float, RGBA]]:
    """Fixed stop table of the emphasized palette style; only the first five colors are used."""
    colors = list(palette)
    if direction == "darkToLight":
        colors.reverse()
    last = colors[min(len(colors), 5) - 1]

    if direction == "lightToDark":
        stops = [(0.0, parse_color(colors[0]))]
        if len(colors) > 1:
            stops.append((0.2, parse_color(colors[1])))
        if len(colors) > 2:
            stops.append((0.4, parse_color(colors[2])))
        if len(colors) > 3:
            stops.append((0.6, with_alpha(colors[3], 0.8)))
        stops.append((0.8, with_alpha(last, 0.6)))
        stops.append((1.0, with_alpha(last, 0.5)))
        return stops

    stops = [(0.0, with_alpha(colors[0], 0.5)), (0.2, with_alpha(colors[0], 0.6))]
    if len(colors) > 1:
        stops.append((0.4, with_alpha(colors[1], 0.8)))
    if len(colors) > 2:
        stops.append((0.6, parse_color(colors[2])))
    if len(colors) > 3:
        stops.append((0.8, parse_color(colors[3])))
    stops.append((1.0, parse_color(last)))
    return stops


def _render_palette(mode: PaletteGradientBackground, surface: Image.Image, width: int, height: int) -> None:
    if not mode.palette:
        _fill_layer(surface, Image.new("RGBA", (width, height), (0, 0, 0, 255)))
        return

    _fill_layer(surface, Image.new("RGBA", (width, height), parse_color(PALETTE_BASE_COLOR)))
    if mode.style == "emphasized":
        stops = emphasized_stops(mode.palette, mode.direction)
    else:
        colors = list(mode.palette)
        if mode.direction == "darkToLight":
            colors.reverse()
        stops = even_stops(colors)
    _fill_layer(surface, linear_gradient_layer(width, height, (0, 0), (0, height), stops))


def _render_blurred(mode: BlurredImageBackground, surface: Image.Image, width: int, height: int) -> None:
    source = load_image(mode.image_path)
    if mode.fit == "fit":
        offscreen = Image.new("RGBA", (width, height), (0, 0, 0, 255))
    else:
        offscreen = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    offscreen.alpha_composite(place_image(source, width, height, mode.fit), (0, 0))

    pixels = gaussian_blur(image_to_pixels(offscreen), mode.blur_radius)
    if mode.brightness != 1:
        pixels = scale_brightness(pixels, mode.brightness)
    surface.paste(pixels_to_image(pixels), (0, 0))


def render_background(mode: BackgroundMode, surface: Image.Image, width: int, height: int) -> None:
    if isinstance(mode, SolidBackground):
        _fill_layer(surface, Image.new("RGBA", (width, height), parse_color(mode.color)))
    elif isinstance(mode, LinearGradientBackground):
        start, end = ((0, 0), (0, height)) if mode.direction == "topDown" else ((0, height), (0, 0))
        _fill_layer(surface, linear_gradient_layer(width, height, start, end, even_stops(mode.colors)))
    elif isinstance(mode, CustomGradientBackground):
        if mode.direction == "horizontal":
            end = (width, 0)
        elif mode.direction == "diagonal":
            end = (width, height)
        else:
            end = (0, height)
        stops = [(s.position, parse_color(s.color)) for s in mode.stops]
        _fill_layer(surface, linear_gradient_layer(width, height, (0, 0), end, stops))
    elif isinstance(mode, RadialGradientBackground):
        center = (width * mode.center_x, height * mode.center_y)
        layer = radial_gradient_layer(width, height, center, max(width, height), even_stops(mode.colors))
        _fill_layer(surface, layer)
    elif isinstance(mode, ImageBackground):
        _fill_layer(surface, place_image(load_image(mode.image_path), width, height, mode.fit))
    elif isinstance(mode, BlurredImageBackground):
        _render_blurred(mode, surface, width, height)
    elif isinstance(mode, PaletteGradientBackground):
        _render_palette(mode, surface, width, height)
    elif isinstance(mode, CustomBackground):
        mode.render_fn(surface, width, height)
    else:
        raise TypeError(f"Unsupported background mode: {type(mode).__name__}")


def describe_background(mode: BackgroundMode) -> str:
    if isinstance(mode, SolidBackground):
        if mode == BLACK_BACKGROUND:
            return "Solid black background"
        if mode == WHITE_BACKGROUND:
            return "Solid white background"
        return f"Solid color background: {mode.color}"
    if isinstance(mode, LinearGradientBackground):
        where = "top to bottom" if mode.direction == "topDown" else "bottom to top"
        return f"Gradient from {where}: {' → '.join(str(c) for c in mode.colors)}"
    if isinstance(mode, CustomGradientBackground):
        return f"Custom {mode.direction} gradient with {len(mode.stops)} stops"
    if isinstance(mode, RadialGradientBackground):
        return f"Radial gradient: {' → '.join(str(c) for c in mode.colors)}"
    if isinstance(mode, ImageBackground):
        return f"Image background ({mode.fit}): {mode.image_path}"
    if isinstance(mode, BlurredImageBackground):
        return (
            f"Blurred album cover (Gaussian-like blur: {mode.blur_radius:g}px, "
            f"brightness: {mode.brightness * 100:g}%)"
        )
    if isinstance(mode, PaletteGradientBackground):
        return f"Album color palette gradient ({mode.style}, {mode.direction})"
    if isinstance(mode, CustomBackground):
        return mode.description
    raise TypeError(f"Unsupported background mode: {type(mode).__name__}")


BACKGROUND_PRESETS = ("auto", "black", "white", "solid", "gradient-top", "gradient-bottom", "radial", "image", "blurred", "palette")


def background_from_name(
    name: str,
    *,
    colors: Sequence[str] = (),
    image_path: str | Path | None = None,
    palette: Sequence[str] = (),
    style: str = "emphasized",
    direction: str = "lightToDark",
    blur_radius: float = 20,
    brightness: float = 0.7,
    fit: str = "fill",
) -> BackgroundMode | None:
    """Build a mode from a preset name; ``auto`` returns None (orchestrator decides)."""
    n = (name or "auto").strip().lower()
    if n == "auto":
        return None
    if n == "black":
        return BLACK_BACKGROUND
    if n == "white":
        return WHITE_BACKGROUND
    if n == "solid":
        if not colors:
            raise BackgroundConfigError("Solid background requires a color")
        return SolidBackground(colors[0])
    if n == "gradient-top":
        return LinearGradientBackground(tuple(colors), "topDown")
    if n == "gradient-bottom":
        return LinearGradientBackground(tuple(colors), "bottomUp")
    if n == "radial":
        return RadialGradientBackground(tuple(colors))
    if n in ("image", "blurred"):
        if image_path is None:
            raise BackgroundConfigError(f"{n} background requires an image path")
        if n == "image":
            return ImageBackground(image_path, fit)
        return BlurredImageBackground(image_path, blur_radius, brightness, fit)
    if n == "palette":
        return PaletteGradientBackground(tuple(palette), style, direction)
    raise BackgroundConfigError(f"Unknown background preset {name!r}; expected one of: {', '.join(BACKGROUND_PRESETS)}")

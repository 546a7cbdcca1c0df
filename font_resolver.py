#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import platform
from functools import lru_cache
from pathlib import Path

from PIL import ImageFont


logger = logging.getLogger(__name__)


class FontResolutionError(RuntimeError):
    pass


def _platform_family() -> str:
    name = platform.system().lower()
    if "windows" in name:
        return "windows"
    if "darwin" in name or "mac" in name:
        return "mac"
    return "linux"


def _candidates_for_role(role: str) -> list[str]:
    bold = role == "bold"
    pf = _platform_family()

    if pf == "windows":
        if bold:
            return [
                "C:/Windows/Fonts/segoeuib.ttf",
                "C:/Windows/Fonts/arialbd.ttf",
                "C:/Windows/Fonts/calibrib.ttf",
            ]
        return [
            "C:/Windows/Fonts/segoeui.ttf",
            "C:/Windows/Fonts/arial.ttf",
            "C:/Windows/Fonts/calibri.ttf",
        ]

    if pf == "mac":
        if bold:
            return [
                "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
                "/System/Library/Fonts/Helvetica.ttc",
            ]
        return [
            "/System/Library/Fonts/Supplemental/Arial.ttf",
            "/System/Library/Fonts/Helvetica.ttc",
        ]

    # Linux: Ubuntu first, DejaVu as the near-universal fallback
    if bold:
        return [
            "/usr/share/fonts/truetype/ubuntu/Ubuntu-B.ttf",
            "/usr/share/fonts/truetype/ubuntu-font-family/Ubuntu-B.ttf",
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
        ]
    return [
        "/usr/share/fonts/truetype/ubuntu/Ubuntu-R.ttf",
        "/usr/share/fonts/truetype/ubuntu-font-family/Ubuntu-R.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    ]


def _resolve_single_font(override_path: str | None, role: str) -> str | None:
    if override_path:
        p = Path(override_path).expanduser()
        if not p.exists():
            raise FontResolutionError(f"Requested {role} font does not exist: {p}")
        return str(p.resolve())

    for candidate in _candidates_for_role(role):
        p = Path(candidate)
        if p.exists():
            return str(p.resolve())
    return None


def resolve_font_paths(font_regular: str | None = None, font_bold: str | None = None) -> dict[str, str | None]:
    return {
        "regular": _resolve_single_font(font_regular, "regular"),
        "bold": _resolve_single_font(font_bold, "bold"),
    }


@lru_cache(maxsize=64)
def load_font(font_path: str | None, size: int) -> ImageFont.ImageFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size=size)
        except OSError as e:
            logger.warning("Could not load font %s (%s); using Pillow default", font_path, e)
    return ImageFont.load_default(size=size)


class FontSet:
    """Font paths for both roles, resolved once per design."""

    def __init__(self, font_regular: str | None = None, font_bold: str | None = None) -> None:
        paths = resolve_font_paths(font_regular, font_bold)
        self.regular_path = paths["regular"]
        self.bold_path = paths["bold"] or paths["regular"]
        if self.regular_path is None:
            logger.warning("No system font found; text uses Pillow's built-in font")

    def regular(self, size: int) -> ImageFont.ImageFont:
        return load_font(self.regular_path, size)

    def bold(self, size: int) -> ImageFont.ImageFont:
        return load_font(self.bold_path, size)

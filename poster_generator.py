#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

from PIL import Image

from background_modes import BLACK_BACKGROUND, BackgroundMode, PaletteGradientBackground, render_background
from poster_designs import PosterDesign


logger = logging.getLogger(__name__)


class PosterGenerator:
    """
    Ties a design and a background together.

    Each render allocates a fresh surface, lets the design prepare its context
    (validation, palette extraction), paints the background and then the
    design content on top.
    """

    def __init__(self) -> None:
        self.design: PosterDesign | None = None
        self.background: BackgroundMode | None = None
        self.auto_background = False
        self.auto_style = "emphasized"
        self.auto_direction = "lightToDark"

    def with_design(self, design: PosterDesign) -> "PosterGenerator":
        self.design = design
        return self

    def with_background(self, mode: BackgroundMode) -> "PosterGenerator":
        self.background = mode
        self.auto_background = False
        return self

    def with_auto_background(self, style: str = "emphasized", direction: str = "lightToDark") -> "PosterGenerator":
        self.auto_background = True
        self.background = None
        self.auto_style = style
        self.auto_direction = direction
        return self

    def _select_background(self, palette: list[str]) -> BackgroundMode:
        if self.auto_background:
            if palette:
                mode = PaletteGradientBackground(tuple(palette), self.auto_style, self.auto_direction)
                logger.info("Using auto background: %s", mode.describe())
                return mode
            logger.warning("No colors extracted from the cover; falling back to a black background")
            return BLACK_BACKGROUND
        if self.background is None:
            logger.warning("No background mode set; using a black background")
            return BLACK_BACKGROUND
        return self.background

    def render(self, data: Any) -> Image.Image:
        if self.design is None:
            raise ValueError("No design set. Use with_design() first.")

        config = self.design.config
        surface = Image.new("RGBA", (config.width, config.height), (0, 0, 0, 0))
        context = self.design.prepare(data, surface)

        background = self._select_background(context.palette)
        logger.info("Rendering background: %s", background.describe())
        render_background(background, surface, config.width, config.height)

        logger.info("Rendering design: %s", self.design.name)
        self.design.render_content(context)
        return surface

    def generate(self, data: Any, output_path: str | Path) -> Path:
        out_path = Path(output_path)
        image = self.render(data)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(out_path, format="PNG")
        logger.info("Poster saved to %s", out_path)
        return out_path

    def generate_bytes(self, data: Any) -> bytes:
        buf = io.BytesIO()
        self.render(data).save(buf, format="PNG")
        return buf.getvalue()

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fixed-layout poster designs.

Coordinates are absolute pixels on the default 2700x3600 poster; only the
margin, the cover size and the colors are configurable.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from PIL import Image, ImageDraw

from canvas_utils import COVER_SHADOW, composite_at, draw_image_with_shadow, draw_line, draw_rect, draw_rounded_rect, draw_tinted_icon, load_image
from color_palette import extract_palette, parse_color
from font_resolver import FontSet
from poster_core import AlbumData, PosterConfig, SongData, clean_title, format_copyright_label, format_duration, format_release_date
from text_layout import COLUMN_GAP, MAX_LISTED_TRACKS, font_measure, layout_track_columns, track_listing_right_edge, truncate_with_ellipsis


logger = logging.getLogger(__name__)

PALETTE_SIZE = 5


@dataclass
class RenderContext:
    surface: Image.Image
    config: PosterConfig
    data: Any
    cover: Image.Image
    palette: list[str]


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


class PosterDesign:
    name = "Poster design"
    description = ""
    data_type: type = object

    def __init__(self, config: PosterConfig | None = None, *, font_regular: str | None = None, font_bold: str | None = None) -> None:
        self.config = config or PosterConfig()
        self.fonts = FontSet(font_regular, font_bold)

    def validate_data(self, data: Any) -> None:
        if not isinstance(data, self.data_type):
            raise ValueError(f"{type(self).__name__} expects {self.data_type.__name__}, got {type(data).__name__}")
        if not data.cover_image_path:
            raise ValueError("Album cover image path is required")

    def prepare(self, data: Any, surface: Image.Image) -> RenderContext:
        self.validate_data(data)
        cover = load_image(data.cover_image_path)
        logger.info("Extracting color palette from album cover...")
        palette = extract_palette(cover, PALETTE_SIZE)
        logger.info("Color palette: %s", ", ".join(palette) or "(empty)")
        return RenderContext(surface=surface, config=self.config, data=data, cover=cover, palette=palette)

    def render_content(self, context: RenderContext) -> None:
        raise NotImplementedError


class Album1Design(PosterDesign):
    name = "Album Design #1"
    description = "Classic album poster with cover art, track listing, and color palette"
    data_type = AlbumData

    DIVIDER_Y = 2640
    INFO_TITLE_Y = 2780
    INFO_ARTIST_Y = 2860
    LISTING_Y = 2780
    LISTING_WIDTH = 1150
    LISTING_LINE_HEIGHT = 62
    PALETTE_X = 2000
    PALETTE_Y = 2980
    SWATCH_SIZE = 100
    RELEASE_Y = 3128

    def __init__(self, config: PosterConfig | None = None, *, album_cover_size: int = 2300, **fonts: Any) -> None:
        super().__init__(config, **fonts)
        self.album_cover_size = album_cover_size

    def validate_data(self, data: Any) -> None:
        super().validate_data(data)
        if not data.title:
            raise ValueError("Album title is required")
        if not data.artist:
            raise ValueError("Album artist is required")
        if not data.tracks:
            raise ValueError("At least one track is required")

    def render_content(self, context: RenderContext) -> None:
        surface, config = context.surface, context.config
        album: AlbumData = context.data
        size = self.album_cover_size
        right_x = config.margin + size

        draw_image_with_shadow(surface, context.cover, (config.margin, config.margin, size, size), COVER_SHADOW)
        draw_line(surface, (config.margin, self.DIVIDER_Y), (right_x, self.DIVIDER_Y), config.divider_color, 5)

        draw = ImageDraw.Draw(surface)
        fill = parse_color(config.text_color)

        listing_font = self.fonts.bold(52)
        listing_measure = font_measure(draw, listing_font)
        titles = [t.title for t in album.tracks]
        for line in layout_track_columns(listing_measure, titles, config.margin, self.LISTING_Y, self.LISTING_WIDTH, self.LISTING_LINE_HEIGHT):
            draw.text((line.x, line.y), line.text, font=listing_font, fill=fill, anchor="la")
        if len(titles) > MAX_LISTED_TRACKS:
            logger.info("Track listing shows %d of %d tracks", MAX_LISTED_TRACKS, len(titles))

        listing_right = track_listing_right_edge(listing_measure, titles, config.margin, self.LISTING_WIDTH)
        info_width = right_x - listing_right - COLUMN_GAP
        self._draw_album_info(draw, album.title, album.artist, right_x, info_width, fill)

        for i, color in enumerate(context.palette):
            box = (self.PALETTE_X + i * self.SWATCH_SIZE, self.PALETTE_Y, self.SWATCH_SIZE, self.SWATCH_SIZE)
            draw_rect(surface, box, color, outline=config.text_color, outline_width=2)

        draw = ImageDraw.Draw(surface)
        self._draw_release_info(draw, album, right_x, fill)

    def _draw_album_info(self, draw: ImageDraw.ImageDraw, title: str, artist: str, x: int, max_width: float, fill) -> None:
        title_font = self.fonts.bold(62)
        artist_font = self.fonts.regular(62)
        title = truncate_with_ellipsis(draw, title, title_font, max_width)
        artist = truncate_with_ellipsis(draw, artist, artist_font, max_width)
        draw.text((x, self.INFO_TITLE_Y), title, font=title_font, fill=fill, anchor="ra")
        draw.text((x, self.INFO_ARTIST_Y), artist, font=artist_font, fill=fill, anchor="ra")

    def _draw_release_info(self, draw: ImageDraw.ImageDraw, album: AlbumData, x: int, fill) -> None:
        bold = self.fonts.bold(50)
        regular = self.fonts.regular(50)
        y = self.RELEASE_Y
        draw.text((x, y), "Release Date", font=bold, fill=fill, anchor="ra")
        draw.text((x, y + 66), format_release_date(album.release_date), font=regular, fill=fill, anchor="ra")
        draw.text((x, y + 149), "Released by", font=bold, fill=fill, anchor="ra")
        draw.text((x, y + 215), album.copyright or album.label, font=regular, fill=fill, anchor="ra")


class Song1Design(PosterDesign):
    name = "Song Design #1"
    description = "Modern song poster with rounded album cover"
    data_type = SongData

    TITLE_Y = 2560
    ARTIST_Y = 2670
    TRACK_LABEL_GAP = 100
    BAR_Y = 2820
    BAR_HEIGHT = 50
    BAR_INSET = 5
    BAR_COLOR = "#b3b3b3"
    PROGRESS_COLOR = "#1e1e1e"
    TIMES_Y = 2885
    ICONS_BOX = (400, 2950, 1900, 300)
    FOOTER_Y = 3343

    def __init__(
        self,
        config: PosterConfig | None = None,
        *,
        album_cover_size: int = 2300,
        border_radius: int = 50,
        icon_color: str = "#ffffff",
        icon_path: str | Path | None = None,
        **fonts: Any,
    ) -> None:
        super().__init__(config, **fonts)
        self.album_cover_size = album_cover_size
        self.border_radius = border_radius
        self.icon_color = icon_color
        self.icon_path = icon_path

    def validate_data(self, data: Any) -> None:
        super().validate_data(data)
        if not data.title:
            raise ValueError("Song title is required")
        if not data.artist:
            raise ValueError("Artist is required")

    def render_content(self, context: RenderContext) -> None:
        surface, config = context.surface, context.config
        song: SongData = context.data
        left = config.margin
        right = config.width - config.margin
        size = self.album_cover_size

        draw_image_with_shadow(surface, context.cover, (left, left, size, size), COVER_SHADOW, radius=self.border_radius)

        draw = ImageDraw.Draw(surface)
        fill = parse_color(config.text_color)
        text_width = config.width - 2 * config.margin

        title_font = self.fonts.bold(92)
        title = truncate_with_ellipsis(draw, clean_title(song.title), title_font, text_width)
        draw.text((left, self.TITLE_Y), title, font=title_font, fill=fill, anchor="la")

        label_font = self.fonts.bold(78)
        artist_font = self.fonts.regular(78)
        track_label = self._track_label(song)
        artist_width = text_width
        if track_label:
            artist_width = text_width - draw.textlength(track_label, font=label_font) - self.TRACK_LABEL_GAP
        artist = truncate_with_ellipsis(draw, song.artist, artist_font, artist_width)
        draw.text((left, self.ARTIST_Y), artist, font=artist_font, fill=fill, anchor="la")
        if track_label:
            draw.text((right, self.ARTIST_Y), track_label, font=label_font, fill=fill, anchor="ra")

        self._draw_progress(surface, song.progress, left, text_width)

        progress = min(1.0, max(0.0, song.progress))
        elapsed = _round_half_up(song.duration * progress)
        remaining = song.duration - elapsed
        draw = ImageDraw.Draw(surface)
        draw.text((left, self.TIMES_Y), format_duration(elapsed), font=label_font, fill=fill, anchor="la")
        draw.text((right, self.TIMES_Y), f"-{format_duration(remaining)}", font=label_font, fill=fill, anchor="ra")

        if self.icon_path:
            draw_tinted_icon(surface, self.icon_path, self.ICONS_BOX, self.icon_color)
        else:
            draw_playback_controls(surface, self.ICONS_BOX, self.icon_color)

        draw = ImageDraw.Draw(surface)
        footer_font = self.fonts.regular(50)
        draw.text((left, self.FOOTER_Y), format_copyright_label(song), font=footer_font, fill=fill, anchor="la")
        if song.release_date:
            draw.text((right, self.FOOTER_Y), format_release_date(song.release_date), font=footer_font, fill=fill, anchor="ra")

    @staticmethod
    def _track_label(song: SongData) -> str:
        if not song.track_number:
            return ""
        if song.total_tracks:
            return f"Track {song.track_number} of {song.total_tracks}"
        return f"Track {song.track_number}"

    def _draw_progress(self, surface: Image.Image, progress: float, x: int, width: int) -> None:
        draw_rounded_rect(surface, (x, self.BAR_Y, width, self.BAR_HEIGHT), self.BAR_HEIGHT, self.BAR_COLOR)

        inner = width - 2 * self.BAR_INSET
        filled = _round_half_up(min(1.0, max(0.0, progress)) * inner)
        if filled > 0:
            box = (x + self.BAR_INSET, self.BAR_Y + self.BAR_INSET, filled, self.BAR_HEIGHT - 2 * self.BAR_INSET)
            draw_rounded_rect(surface, box, self.BAR_HEIGHT, self.PROGRESS_COLOR)


def draw_playback_controls(surface: Image.Image, box: tuple[int, int, int, int], color) -> None:
    """Previous / pause / next glyphs, used when no icon strip image is given."""
    x, y, w, h = box
    layer = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    d = ImageDraw.Draw(layer)
    fill = parse_color(color)

    cy = h // 2
    tri = h // 4
    centers = (w // 4, w // 2, 3 * w // 4)

    # previous: bar plus two left-pointing triangles
    cx = centers[0]
    d.rectangle((cx - 2 * tri - 14, cy - tri, cx - 2 * tri, cy + tri), fill=fill)
    d.polygon([(cx - 2 * tri, cy), (cx, cy - tri), (cx, cy + tri)], fill=fill)
    d.polygon([(cx, cy), (cx + 2 * tri, cy - tri), (cx + 2 * tri, cy + tri)], fill=fill)

    cx = centers[1]
    bar = tri // 2
    d.rectangle((cx - 2 * bar, cy - tri - 20, cx - bar // 2, cy + tri + 20), fill=fill)
    d.rectangle((cx + bar // 2, cy - tri - 20, cx + 2 * bar, cy + tri + 20), fill=fill)

    cx = centers[2]
    d.polygon([(cx - 2 * tri, cy - tri), (cx - 2 * tri, cy + tri), (cx, cy)], fill=fill)
    d.polygon([(cx, cy - tri), (cx, cy + tri), (cx + 2 * tri, cy)], fill=fill)
    d.rectangle((cx + 2 * tri, cy - tri, cx + 2 * tri + 14, cy + tri), fill=fill)

    composite_at(surface, layer, x, y)


@dataclass(frozen=True)
class DesignInfo:
    factory: Callable[..., PosterDesign]
    display_name: str
    description: str
    category: str


DESIGNS: dict[str, DesignInfo] = {
    "album-1": DesignInfo(Album1Design, Album1Design.name, Album1Design.description, "album"),
    "song-1": DesignInfo(Song1Design, Song1Design.name, Song1Design.description, "song"),
}


def list_designs(category: str | None = None) -> list[str]:
    return [name for name, info in DESIGNS.items() if category is None or info.category == category]


def create_design(name: str, config: PosterConfig | None = None, **options: Any) -> PosterDesign:
    info = DESIGNS.get(name)
    if info is None:
        raise KeyError(f'Design "{name}" not found. Available designs: {", ".join(DESIGNS)}')
    return info.factory(config, **options)

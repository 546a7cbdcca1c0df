#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from PIL import ImageDraw, ImageFont


ELLIPSIS = "..."
COLUMN_GAP = 50
TRACKS_PER_COLUMN = 10
MAX_LISTED_TRACKS = 20

Measure = Callable[[str], float]


def truncate_text(measure: Measure, text: str, max_width: float) -> str:
    """
    Shorten ``text`` one character at a time until ``text + "..."`` fits.

    Text that already fits comes back unchanged. When no prefix fits, the bare
    ellipsis is returned if it fits on its own, otherwise an empty string.
    """
    if max_width <= 0:
        return ""
    if measure(text) <= max_width:
        return text

    out = text
    while out:
        out = out[:-1]
        if out and measure(out + ELLIPSIS) <= max_width:
            return out + ELLIPSIS

    if measure(ELLIPSIS) <= max_width:
        return ELLIPSIS
    return ""


def font_measure(draw: ImageDraw.ImageDraw, font: ImageFont.ImageFont) -> Measure:
    return lambda s: draw.textlength(s, font=font)


def truncate_with_ellipsis(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, max_width: float) -> str:
    return truncate_text(font_measure(draw, font), text, max_width)


@dataclass(frozen=True)
class TrackLine:
    text: str
    x: float
    y: float
    column: int


def _fitted_entries(
    measure: Measure, titles: Sequence[str], start_x: float, section_width: float
) -> tuple[list[str], float]:
    column_width = (section_width - COLUMN_GAP) / 2
    entries = [
        truncate_text(measure, f"{i + 1}. {t}", column_width)
        for i, t in enumerate(titles[:MAX_LISTED_TRACKS])
    ]

    first_width = 0.0
    for entry in entries[:TRACKS_PER_COLUMN]:
        first_width = max(first_width, measure(entry))
    second_x = start_x + min(first_width, column_width) + COLUMN_GAP
    return entries, second_x


def layout_track_columns(
    measure: Measure,
    titles: Sequence[str],
    start_x: float,
    start_y: float,
    section_width: float,
    line_height: float,
) -> list[TrackLine]:
    """
    Place up to 20 numbered track titles in two columns of ten.

    The second column starts one gap to the right of the widest first-column
    entry (capped at the column width). Entries wider than their column are
    truncated; tracks past the twentieth are not listed.
    """
    entries, second_x = _fitted_entries(measure, titles, start_x, section_width)

    lines: list[TrackLine] = []
    for i, entry in enumerate(entries):
        column = 0 if i < TRACKS_PER_COLUMN else 1
        x = start_x if column == 0 else second_x
        y = start_y + (i % TRACKS_PER_COLUMN) * line_height
        lines.append(TrackLine(entry, x, y, column))
    return lines


def track_listing_right_edge(measure: Measure, titles: Sequence[str], start_x: float, section_width: float) -> float:
    """Rightmost x covered by the listing, using the same measurements as the layout."""
    entries, second_x = _fitted_entries(measure, titles, start_x, section_width)

    right = float(start_x)
    for i, entry in enumerate(entries):
        x = start_x if i < TRACKS_PER_COLUMN else second_x
        right = max(right, x + measure(entry))
    return right

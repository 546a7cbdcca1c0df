#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class PosterConfig:
    width: int = 2700
    height: int = 3600
    margin: int = 200
    text_color: str = "#ffffff"
    divider_color: str = "#ffffff"

    def replace(self, **changes: Any) -> "PosterConfig":
        return dataclasses.replace(self, **changes)


@dataclass
class TrackData:
    title: str
    artist: str = ""
    duration: int = 0
    track_number: int | None = None
    disc_number: int | None = None


@dataclass
class AlbumData:
    cover_image_path: str
    title: str
    artist: str
    release_date: str = ""
    tracks: list[TrackData] = field(default_factory=list)
    copyright: str = ""
    label: str = ""
    genres: tuple[str, ...] = ()


@dataclass
class SongData:
    cover_image_path: str
    title: str
    artist: str
    release_date: str = ""
    duration: int = 0
    progress: float = 0.0
    album: str = ""
    copyright: str = ""
    label: str = ""
    track_number: int | None = None
    total_tracks: int | None = None


class UserFacingError(RuntimeError):
    pass


def raise_user_error(code: str, message: str, details: str = "", hint: str = "") -> None:
    lines = [f"{code}: {message}"]
    if details:
        lines.append(f"Details: {details}")
    if hint:
        lines.append(f"Hint: {hint}")
    raise UserFacingError("\n".join(lines))


MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_FEATURING_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\s*\(feat\.?\s+[^)]+\)",
        r"\s*\(ft\.?\s+[^)]+\)",
        r"\s*\(featuring\s+[^)]+\)",
        r"\s*\(with\s+[^)]+\)",
        r"\s*\[feat\.?\s+[^\]]+\]",
        r"\s*\[ft\.?\s+[^\]]+\]",
        r"\s*\[featuring\s+[^\]]+\]",
        r"\s*\[with\s+[^\]]+\]",
        r"\s*\bfeat\.?\s+.+$",
        r"\s*\bft\.?\s+.+$",
    )
]


def format_duration(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


def _parse_iso_date(value: str) -> date | None:
    try:
        return date.fromisoformat((value or "").strip()[:10])
    except ValueError:
        return None


def format_release_date(value: str) -> str:
    """``2021-03-05`` -> ``March 5, 2021``; anything unparsable is returned as given."""
    d = _parse_iso_date(value)
    if d is None:
        return value or ""
    return f"{MONTHS[d.month - 1]} {d.day}, {d.year}"


def release_year(value: str) -> str:
    m = re.match(r"^\s*(\d{4})", value or "")
    return m.group(1) if m else ""


def format_copyright_label(song: SongData) -> str:
    year = release_year(song.release_date)
    label = song.label or song.artist or ""
    if year and label:
        return f"© {year} {label}"
    if year:
        return f"© {year}"
    return label


def clean_title(title: str) -> str:
    cleaned = title or ""
    for pattern in _FEATURING_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip()


def sanitize_filename(s: str) -> str:
    s = re.sub(r"\s+", " ", (s or "").strip())
    if not s:
        return "output"
    s = re.sub(r'[\\/:*?"<>|\x00-\x1f]', "_", s)
    return s[:120]


def _opt_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _track_from_dict(raw: Any) -> TrackData:
    if isinstance(raw, str):
        return TrackData(title=raw)
    return TrackData(
        title=str(raw["title"]),
        artist=str(raw.get("artist", "")),
        duration=int(raw.get("duration", 0) or 0),
        track_number=_opt_int(raw.get("track_number")),
        disc_number=_opt_int(raw.get("disc_number")),
    )


def album_from_dict(raw: dict[str, Any], cover_override: str | Path | None = None) -> AlbumData:
    """
    Build album data from the metadata JSON. Tracks may be plain title strings
    or objects with at least a ``title``. Missing keys raise ``KeyError``.
    """
    return AlbumData(
        cover_image_path=str(cover_override or raw["cover"]),
        title=str(raw["title"]),
        artist=str(raw["artist"]),
        release_date=str(raw.get("release_date", "")),
        tracks=[_track_from_dict(t) for t in raw.get("tracks", [])],
        copyright=str(raw.get("copyright", "")),
        label=str(raw.get("label", "")),
        genres=tuple(raw.get("genres", ())),
    )


def song_from_dict(raw: dict[str, Any], cover_override: str | Path | None = None) -> SongData:
    return SongData(
        cover_image_path=str(cover_override or raw["cover"]),
        title=str(raw["title"]),
        artist=str(raw["artist"]),
        release_date=str(raw.get("release_date", "")),
        duration=int(raw.get("duration", 0) or 0),
        progress=float(raw.get("progress", 0.0) or 0.0),
        album=str(raw.get("album", "")),
        copyright=str(raw.get("copyright", "")),
        label=str(raw.get("label", "")),
        track_number=_opt_int(raw.get("track_number")),
        total_tracks=_opt_int(raw.get("total_tracks")),
    )

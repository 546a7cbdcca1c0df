#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Render an album or song poster (PNG, 2700x3600 by default) from a metadata
JSON file and a cover image.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from background_modes import BACKGROUND_PRESETS, BackgroundConfigError, background_from_name
from font_resolver import FontResolutionError
from poster_core import PosterConfig, UserFacingError, album_from_dict, raise_user_error, sanitize_filename, song_from_dict
from poster_designs import DESIGNS, create_design
from poster_generator import PosterGenerator


def _split_colors(value: str) -> list[str]:
    return [c.strip() for c in (value or "").split(",") if c.strip()]


def _load_metadata(path: Path) -> dict:
    if not path.exists():
        raise_user_error("METADATA_NOT_FOUND", f"Metadata file was not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise_user_error("INVALID_METADATA", "Metadata file is not valid JSON.", details=str(e))
    if not isinstance(raw, dict):
        raise_user_error("INVALID_METADATA", "Metadata must be a JSON object.")
    return raw


def _resolve_cover(explicit: str, raw: dict, metadata_path: Path) -> Path:
    if explicit:
        cover = Path(explicit).expanduser()
    else:
        value = raw.get("cover")
        if not value:
            raise_user_error("INVALID_METADATA", "No cover image given.", hint="Set \"cover\" in the metadata or pass --cover.")
        cover = Path(value).expanduser()
        if not cover.is_absolute():
            cover = metadata_path.parent / cover
    cover = cover.resolve()
    if not cover.exists():
        raise_user_error("COVER_NOT_FOUND", f"Cover image was not found: {cover}")
    return cover


def main() -> int:
    ap = argparse.ArgumentParser(description="Generate a music poster from metadata and cover art.")
    ap.add_argument("--metadata", required=True, help="Album/song metadata JSON file")
    ap.add_argument("--design", default="album-1", help=f"Design name ({', '.join(DESIGNS)})")
    ap.add_argument("--cover", default="", help="Cover image path (overrides the metadata 'cover')")
    ap.add_argument("--background", default="auto", help=f"Background preset ({', '.join(BACKGROUND_PRESETS)})")
    ap.add_argument("--colors", default="", help="Comma-separated colors for solid/gradient/radial backgrounds")
    ap.add_argument("--style", default="emphasized", choices=["emphasized", "smooth"], help="Palette gradient style")
    ap.add_argument("--direction", default="lightToDark", choices=["lightToDark", "darkToLight"], help="Palette gradient direction")
    ap.add_argument("--blur", type=float, default=20.0, help="Blur radius for the blurred background")
    ap.add_argument("--brightness", type=float, default=0.7, help="Brightness (0-1] for the blurred background")
    ap.add_argument("--fit", default="fill", choices=["fill", "fit", "stretch"], help="Image fit for image backgrounds")
    ap.add_argument("--icons", default="", help="Monochrome icon strip image for song designs")
    ap.add_argument("--font-regular", default="", help="Optional regular font path override")
    ap.add_argument("--font-bold", default="", help="Optional bold font path override")
    ap.add_argument("--width", type=int, default=2700)
    ap.add_argument("--height", type=int, default=3600)
    ap.add_argument("--outdir", default="output", help="Output directory")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(message)s",
    )

    try:
        if args.width < 1 or args.height < 1:
            raise_user_error("INVALID_ARG", "--width and --height must be >= 1.")

        info = DESIGNS.get(args.design)
        if info is None:
            raise_user_error("UNKNOWN_DESIGN", f"Unknown design: {args.design}", hint=f"Available designs: {', '.join(DESIGNS)}")

        metadata_path = Path(args.metadata).expanduser().resolve()
        raw = _load_metadata(metadata_path)
        cover = _resolve_cover(args.cover, raw, metadata_path)

        loader = album_from_dict if info.category == "album" else song_from_dict
        try:
            data = loader(raw, cover_override=cover)
        except KeyError as e:
            raise_user_error("INVALID_METADATA", f"Metadata is missing required field {e}.")
        except (TypeError, ValueError) as e:
            raise_user_error("INVALID_METADATA", "Metadata has an invalid value.", details=str(e))

        config = PosterConfig().replace(width=args.width, height=args.height)
        options = {"font_regular": args.font_regular or None, "font_bold": args.font_bold or None}
        if info.category == "song" and args.icons:
            options["icon_path"] = args.icons
        try:
            design = create_design(args.design, config, **options)
        except FontResolutionError as e:
            raise_user_error("FONT_RESOLUTION_FAILED", "Could not resolve requested font path(s).", details=str(e))

        generator = PosterGenerator().with_design(design)
        preset = args.background.strip().lower()
        if preset in ("auto", "palette"):
            # the design extracts the cover palette while preparing; reuse it
            generator.with_auto_background(style=args.style, direction=args.direction)
        else:
            try:
                mode = background_from_name(
                    preset,
                    colors=_split_colors(args.colors),
                    image_path=cover,
                    style=args.style,
                    direction=args.direction,
                    blur_radius=args.blur,
                    brightness=args.brightness,
                    fit=args.fit,
                )
            except BackgroundConfigError as e:
                raise_user_error("INVALID_BACKGROUND", "Background could not be configured.", details=str(e))
            generator.with_background(mode)

        outdir = Path(args.outdir).expanduser().resolve()
        out_path = outdir / f"{sanitize_filename(f'{data.artist} - {data.title}')}_{args.design}.png"
        try:
            generator.generate(data, out_path)
        except (ValueError, OSError) as e:
            raise_user_error("RENDER_FAILED", "Poster could not be rendered.", details=str(e))

        print("============================================")
        print("Music Poster Generator")
        print(f"Design    : {info.display_name}")
        print(f"Title     : {data.title}")
        print(f"Artist    : {data.artist}")
        print(f"Cover     : {cover}")
        print(f"Background: {args.background}")
        print(f"Out       : {out_path}")
        print("============================================")
        return 0
    except UserFacingError as e:
        print(f"\n[ERROR] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

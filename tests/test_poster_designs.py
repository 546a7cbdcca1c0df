"""
Tests for the design table and the two fixed-layout designs.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from poster_core import AlbumData, SongData, TrackData
from poster_designs import DESIGNS, Album1Design, Song1Design, create_design, list_designs
from poster_generator import PosterGenerator


def _album(cover: Path, tracks: int = 3) -> AlbumData:
    return AlbumData(
        cover_image_path=str(cover),
        title="Test Album",
        artist="Test Artist",
        release_date="2021-03-05",
        tracks=[TrackData(f"Track {i + 1}") for i in range(tracks)],
        copyright="© 2021 Test Records",
    )


def _song(cover: Path) -> SongData:
    return SongData(
        cover_image_path=str(cover),
        title="Some Song (feat. Someone)",
        artist="Test Artist",
        release_date="2020-11-20",
        duration=200,
        progress=0.25,
        track_number=3,
        total_tracks=12,
    )


class TestDesignTable:
    def test_names(self):
        assert list(DESIGNS) == ["album-1", "song-1"]
        assert list_designs("album") == ["album-1"]
        assert list_designs("song") == ["song-1"]
        assert list_designs() == ["album-1", "song-1"]

    def test_metadata(self):
        info = DESIGNS["song-1"]
        assert info.display_name == "Song Design #1"
        assert info.category == "song"

    def test_create(self, small_config):
        design = create_design("album-1", small_config, album_cover_size=100)
        assert isinstance(design, Album1Design)
        assert design.config is small_config
        assert design.album_cover_size == 100

    def test_unknown_design(self):
        with pytest.raises(KeyError) as exc:
            create_design("poster-9")
        assert "album-1" in str(exc.value)
        assert "song-1" in str(exc.value)


class TestValidation:
    def test_album_requires_tracks(self, cover_path):
        album = _album(cover_path, tracks=0)
        with pytest.raises(ValueError, match="At least one track"):
            Album1Design().validate_data(album)

    def test_album_requires_title(self, cover_path):
        album = _album(cover_path)
        album.title = ""
        with pytest.raises(ValueError, match="Album title"):
            Album1Design().validate_data(album)

    def test_song_requires_artist(self, cover_path):
        song = _song(cover_path)
        song.artist = ""
        with pytest.raises(ValueError, match="Artist is required"):
            Song1Design().validate_data(song)

    def test_wrong_data_type(self, cover_path):
        with pytest.raises(ValueError, match="expects AlbumData"):
            Album1Design().validate_data(_song(cover_path))

    def test_prepare_extracts_palette(self, cover_path, small_config):
        design = Album1Design(small_config)
        surface = Image.new("RGBA", (270, 360))
        context = design.prepare(_album(cover_path), surface)
        assert context.palette == ["#e0c060", "#4040c0", "#606060", "#c02020", "#20a040"]
        assert context.surface is surface
        assert context.cover.mode == "RGBA"


class TestRendering:
    def test_album_full_size(self, cover_path):
        image = PosterGenerator().with_design(Album1Design()).with_auto_background().render(_album(cover_path, tracks=25))
        assert image.size == (2700, 3600)
        # divider line
        assert image.getpixel((1000, 2640)) == (255, 255, 255, 255)
        # first palette swatch is the lightest extracted color
        assert image.getpixel((2050, 3030)) == (0xE0, 0xC0, 0x60, 255)

    def test_song_full_size(self, cover_path):
        image = PosterGenerator().with_design(Song1Design()).with_auto_background().render(_song(cover_path))
        assert image.size == (2700, 3600)
        # progress bar track and the filled quarter
        assert image.getpixel((1500, 2845)) == (0xB3, 0xB3, 0xB3, 255)
        assert image.getpixel((400, 2845)) == (0x1E, 0x1E, 0x1E, 255)
        assert image.getpixel((900, 2845)) == (0xB3, 0xB3, 0xB3, 255)

    def test_song_with_missing_icon_strip(self, cover_path, small_config, caplog):
        design = Song1Design(small_config, album_cover_size=100, icon_path=cover_path.parent / "nope.png")
        image = PosterGenerator().with_design(design).with_auto_background().render(_song(cover_path))
        assert image.size == (270, 360)
        assert "Could not load icon" in caplog.text

    def test_song_zero_progress_has_no_fill(self, cover_path):
        song = _song(cover_path)
        song.progress = 0
        image = PosterGenerator().with_design(Song1Design()).with_auto_background().render(song)
        assert image.getpixel((210, 2845)) == (0xB3, 0xB3, 0xB3, 255)

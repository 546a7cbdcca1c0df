"""
Tests for the data model loaders and formatting helpers.
"""

from __future__ import annotations

import pytest

from poster_core import (
    PosterConfig,
    SongData,
    UserFacingError,
    album_from_dict,
    clean_title,
    format_copyright_label,
    format_duration,
    format_release_date,
    raise_user_error,
    sanitize_filename,
    song_from_dict,
)


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0:00"), (59, "0:59"), (200, "3:20"), (3725, "62:05"), (-4, "0:00")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_release_date(self):
        assert format_release_date("2021-03-05") == "March 5, 2021"
        assert format_release_date("1999-12-31") == "December 31, 1999"

    def test_format_release_date_passthrough(self):
        assert format_release_date("2021") == "2021"
        assert format_release_date("") == ""

    def test_copyright_label(self):
        song = SongData("c.png", "T", "Artist", release_date="2020-11-20", label="Label Co")
        assert format_copyright_label(song) == "© 2020 Label Co"

    def test_copyright_label_falls_back_to_artist(self):
        song = SongData("c.png", "T", "Artist", release_date="2020-11-20")
        assert format_copyright_label(song) == "© 2020 Artist"

    def test_copyright_label_without_date(self):
        assert format_copyright_label(SongData("c.png", "T", "Artist")) == "Artist"
        assert format_copyright_label(SongData("c.png", "T", "", release_date="2001-01-01")) == "© 2001"

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Song (feat. Someone)", "Song"),
            ("Song (ft. A & B)", "Song"),
            ("Song [Featuring X]", "Song"),
            ("Song (with Friend)", "Song"),
            ("Song feat. Somebody Else", "Song"),
            ("Defeated Hearts", "Defeated Hearts"),
            ("Plain", "Plain"),
        ],
    )
    def test_clean_title(self, title, expected):
        assert clean_title(title) == expected

    def test_sanitize_filename(self):
        assert sanitize_filename('AC/DC: "Live"') == "AC_DC_ _Live_"
        assert sanitize_filename("   ") == "output"


class TestLoaders:
    def test_album_from_dict(self):
        album = album_from_dict(
            {
                "cover": "cover.png",
                "title": "Album",
                "artist": "Artist",
                "tracks": ["One", {"title": "Two", "duration": 180, "track_number": "2"}],
            }
        )
        assert album.cover_image_path == "cover.png"
        assert [t.title for t in album.tracks] == ["One", "Two"]
        assert album.tracks[1].duration == 180
        assert album.tracks[1].track_number == 2

    def test_cover_override(self):
        album = album_from_dict({"title": "Album", "artist": "Artist"}, cover_override="other.png")
        assert album.cover_image_path == "other.png"
        assert album.tracks == []

    def test_missing_field_raises_key_error(self):
        with pytest.raises(KeyError):
            song_from_dict({"cover": "c.png", "title": "Song"})

    def test_song_from_dict(self):
        song = song_from_dict(
            {"cover": "c.png", "title": "Song", "artist": "A", "duration": 200, "progress": 0.5, "track_number": 3}
        )
        assert song.duration == 200
        assert song.progress == 0.5
        assert song.track_number == 3
        assert song.total_tracks is None


def test_config_replace():
    config = PosterConfig()
    assert (config.width, config.height, config.margin) == (2700, 3600, 200)
    smaller = config.replace(width=100)
    assert smaller.width == 100
    assert config.width == 2700


def test_raise_user_error_formats_lines():
    with pytest.raises(UserFacingError) as exc:
        raise_user_error("CODE", "Something failed.", details="more", hint="try again")
    assert str(exc.value) == "CODE: Something failed.\nDetails: more\nHint: try again"

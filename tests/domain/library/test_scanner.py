"""
Tests for media library scanning.
"""

import random

import pytest

from cinema_pi.core.exceptions import MediaNotFound
from cinema_pi.domain.library import (
    display_name,
    find_by_display_name,
    list_media,
    pick_random,
    search_media,
)

EXTENSIONS = [".mp4", ".mkv"]


@pytest.fixture
def films_dir(tmp_path):
    """Flat movie directory with some noise."""
    root = tmp_path / "Movies"
    root.mkdir()
    for name in ["Heat.mkv", "Alien.mp4", "Casablanca.MKV", "notes.txt", ".hidden.mkv"]:
        (root / name).write_bytes(b"")
    (root / "Extras.mkv").mkdir()
    (root / "sub").mkdir()
    (root / "sub" / "Nested.mkv").write_bytes(b"")
    return root


class TestListMedia:
    def test_lists_playable_files_sorted(self, films_dir):
        """Test only visible files with allowed extensions are listed, sorted."""
        names = [p.name for p in list_media(str(films_dir), EXTENSIONS)]
        assert names == ["Alien.mp4", "Casablanca.MKV", "Heat.mkv"]

    def test_missing_dir(self, tmp_path):
        with pytest.raises(MediaNotFound) as exc_info:
            list_media(str(tmp_path / "nope"), EXTENSIONS)
        assert exc_info.value.code == "media_not_found"

    def test_empty_dir(self, tmp_path):
        assert list_media(str(tmp_path), EXTENSIONS) == []


class TestSearch:
    def test_display_name_drops_extension(self, films_dir):
        assert display_name(films_dir / "Heat.mkv") == "Heat"

    def test_case_insensitive_substring(self, films_dir):
        assert search_media(str(films_dir), EXTENSIONS, "HEA").name == "Heat.mkv"

    def test_first_match_in_sorted_order(self, films_dir):
        """Test 'a' matches Alien before Casablanca and Heat."""
        assert search_media(str(films_dir), EXTENSIONS, "a").name == "Alien.mp4"

    def test_no_match(self, films_dir):
        with pytest.raises(MediaNotFound):
            search_media(str(films_dir), EXTENSIONS, "Zardoz")

    def test_find_by_display_name(self, films_dir):
        files = list_media(str(films_dir), EXTENSIONS)
        assert find_by_display_name(files, "Heat").name == "Heat.mkv"
        assert find_by_display_name(files, "heat") is None


class TestPickRandom:
    def test_picks_from_library(self, films_dir):
        path = pick_random(str(films_dir), EXTENSIONS, rng=random.Random(7))
        assert path in list_media(str(films_dir), EXTENSIONS)

    def test_empty_library(self, tmp_path):
        with pytest.raises(MediaNotFound):
            pick_random(str(tmp_path), EXTENSIONS)

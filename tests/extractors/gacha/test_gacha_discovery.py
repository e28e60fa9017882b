"""
Tests for locating the live data_2 file under webCaches.
"""
import logging

from extractors.gacha._discovery import (
    RELATIVE_PATH_TO_DATA2,
    WEB_CACHE_DIR_NAME,
    locate_latest_cache,
)


def _make_generation(web_caches, version, with_data=True):
    cache_data = web_caches / version / "Cache" / "Cache_Data"
    cache_data.mkdir(parents=True)
    data2 = cache_data / "data_2"
    if with_data:
        data2.write_bytes(b"\x00")
    return data2


class TestLocateLatestCache:

    def test_constants(self):
        assert WEB_CACHE_DIR_NAME == "webCaches"
        assert RELATIVE_PATH_TO_DATA2 == ("Cache", "Cache_Data", "data_2")

    def test_single_generation(self, tmp_path):
        data2 = _make_generation(tmp_path, "4.5.6.7")
        assert locate_latest_cache(tmp_path) == data2

    def test_picks_highest_version(self, tmp_path):
        _make_generation(tmp_path, "1.2.3.5000")
        newest = _make_generation(tmp_path, "1.2.4.0")
        assert locate_latest_cache(tmp_path) == newest

    def test_numeric_ordering_of_components(self, tmp_path):
        _make_generation(tmp_path, "2.9.0.0")
        newest = _make_generation(tmp_path, "2.10.0.0")
        assert locate_latest_cache(tmp_path) == newest

    def test_ignores_non_version_entries(self, tmp_path):
        newest = _make_generation(tmp_path, "1.0.0.0")
        (tmp_path / "9.9.9").mkdir()
        (tmp_path / "tmp").mkdir()
        assert locate_latest_cache(tmp_path) == newest

    def test_newest_without_data_file_returns_none(self, tmp_path):
        """Older generations are not consulted when the newest lacks data_2."""
        _make_generation(tmp_path, "1.0.0.0")
        _make_generation(tmp_path, "2.0.0.0", with_data=False)
        assert locate_latest_cache(tmp_path) is None

    def test_data_2_directory_is_not_a_file(self, tmp_path):
        (tmp_path / "1.0.0.0" / "Cache" / "Cache_Data" / "data_2").mkdir(parents=True)
        assert locate_latest_cache(tmp_path) is None

    def test_empty_directory_returns_none(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="pullfinder"):
            assert locate_latest_cache(tmp_path) is None
        assert "Failed to find any versioned directories" in caplog.text

    def test_missing_directory_returns_none(self, tmp_path):
        assert locate_latest_cache(tmp_path / "absent") is None

    def test_equal_versions_tie_break_on_name(self, tmp_path):
        _make_generation(tmp_path, "01.0.0.0")
        winner = _make_generation(tmp_path, "1.0.0.0")
        # "1.0.0.0" > "01.0.0.0" as strings, independent of listing order.
        assert locate_latest_cache(tmp_path) == winner

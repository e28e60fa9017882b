"""
Cache file discovery utilities.

Resolves the live ``data_2`` block file of the game's embedded Chromium
cache:

    <data_dir>/webCaches/<a.b.c.d>/Cache/Cache_Data/data_2
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from core.logging import get_logger
from ._versioning import VersionedEntry, scan_versioned_entries

LOGGER = get_logger("extractors.gacha.discovery")

WEB_CACHE_DIR_NAME = "webCaches"
RELATIVE_PATH_TO_DATA2 = ("Cache", "Cache_Data", "data_2")


def _newest_first(entry: VersionedEntry):
    # Equal versions (e.g. "2.1.0.0" and "02.1.0.0") fall back to the entry name.
    return (entry.version, entry.path.name)


def locate_latest_cache(web_cache_dir: Path) -> Optional[Path]:
    """
    Return the ``data_2`` file under the newest versioned directory.

    Args:
        web_cache_dir: The ``webCaches`` directory of a game install

    Returns:
        Path to the data file, or None when there is no versioned
        directory or the newest one holds no data file.
    """
    versioned = scan_versioned_entries(web_cache_dir)
    if not versioned:
        LOGGER.warning("Failed to find any versioned directories in %s", web_cache_dir)
        return None

    latest = max(versioned, key=_newest_first)
    LOGGER.debug(
        "Newest cache generation %s out of %d in %s",
        latest.version, len(versioned), web_cache_dir,
    )

    data2_path = latest.path.joinpath(*RELATIVE_PATH_TO_DATA2)
    if not data2_path.is_file():
        LOGGER.debug("No data file at %s", data2_path)
        return None
    return data2_path

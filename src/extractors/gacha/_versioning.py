"""
Version-named directory handling.

The game client writes its embedded browser cache under
``webCaches/<major>.<minor>.<patch>.<other>/``; a new directory appears with
each client update and old ones are left behind. The directory with the
greatest version holds the live cache.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from core.logging import get_logger

LOGGER = get_logger("extractors.gacha.versioning")

VERSION_COMPONENTS = 4
_COMPONENT_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, order=True)
class VersionKey:
    """
    Four-part version of a cache generation directory.

    Field order defines the ordering: major, then minor, then patch, then
    other. Components compare as integers, so ``4 < 10``.
    """

    major: int
    minor: int
    patch: int
    other: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}.{self.other}"


@dataclass(frozen=True)
class VersionedEntry:
    """A directory entry whose name parsed as a VersionKey."""

    path: Path
    version: VersionKey


def parse_version(name: str) -> Optional[VersionKey]:
    """
    Parse a directory name such as ``"2.21.0.0"`` into a VersionKey.

    Returns None unless the name has exactly four dot-separated components
    made only of ASCII digits.
    """
    parts = name.split(".")
    if len(parts) != VERSION_COMPONENTS:
        return None
    if not all(_COMPONENT_RE.fullmatch(part) for part in parts):
        return None
    major, minor, patch, other = (int(part) for part in parts)
    return VersionKey(major=major, minor=minor, patch=patch, other=other)


def scan_versioned_entries(path: Path) -> List[VersionedEntry]:
    """
    List the immediate children of *path* whose names are versions.

    Files and directories are treated alike. A missing or unreadable *path*
    yields an empty list.
    """
    try:
        names = os.listdir(path)
    except OSError as exc:
        LOGGER.debug("Cannot list %s: %s", path, exc)
        return []

    entries: List[VersionedEntry] = []
    for name in names:
        version = parse_version(name)
        if version is None:
            LOGGER.debug("Skipping non-version entry %r in %s", name, path)
            continue
        entries.append(VersionedEntry(path=Path(path) / name, version=version))
    return entries

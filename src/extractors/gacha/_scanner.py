"""
Marker-bounded URL carving over raw cache bytes.

The cache block file is not parsed structurally. Instead the URL is found
by three textual anchors:

- presence marker: a substring that only appears inside the wanted URL
  (e.g. the banner event id ``e20190909gacha-v3``)
- end marker: the last query parameter of the URL (``game_biz=...``)
- start token: the scheme and host the URL begins with

From each presence marker the scan moves forward to the end marker, then
backwards inside a window of at most MAX_URL_LENGTH bytes to the nearest
start token. Earlier start tokens in the window belong to unrelated cached
requests, so the rightmost one is taken.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Sequence

from core.logging import get_logger
from ..exceptions import ConfigurationError, DecodingFailedError, ExtractionFailedError

LOGGER = get_logger("extractors.gacha.scanner")

MAX_URL_LENGTH = 2048


def _require_token(name: str, value: str) -> bytes:
    if not value:
        raise ConfigurationError(f"{name} must not be empty")
    return value.encode("utf-8")


def iter_marker_offsets(content: bytes, marker: bytes) -> Iterator[int]:
    """Yield the end offset of each non-overlapping occurrence of *marker*."""
    pos = content.find(marker)
    while pos != -1:
        end = pos + len(marker)
        yield end
        pos = content.find(marker, end)


def _carve_at(content: bytes, marker_end: int, url_start: str, end_marker: str) -> str:
    """Carve the URL whose presence marker ends at *marker_end*."""
    end_bytes = end_marker.encode("utf-8")
    end_pos = content.find(end_bytes, marker_end)
    if end_pos == -1:
        raise ExtractionFailedError(f"Failed to find {end_marker} in file")

    url_end = end_pos + len(end_bytes)
    window_start = max(0, url_end - MAX_URL_LENGTH)
    window = content[window_start:url_end]

    start_pos = window.rfind(url_start.encode("utf-8"))
    if start_pos == -1:
        raise ExtractionFailedError(
            f"Failed to find {url_start} within {MAX_URL_LENGTH} bytes before offset {url_end}"
        )

    raw = window[start_pos:]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodingFailedError(window_start + start_pos, exc.reason) from exc


def extract_url(content: bytes, marker: str, url_start: str, end_marker: str) -> str:
    """
    Return the URL around the first occurrence of *marker*.

    Fail-fast variant: any missing anchor raises.

    Raises:
        ExtractionFailedError: A marker or token could not be found
        DecodingFailedError: The carved bytes are not UTF-8
        ConfigurationError: An anchor string is empty
    """
    marker_bytes = _require_token("Presence marker", marker)
    _require_token("URL start token", url_start)
    _require_token("URL end marker", end_marker)

    marker_end = next(iter_marker_offsets(content, marker_bytes), None)
    if marker_end is None:
        raise ExtractionFailedError(f"Failed to find pattern {marker}")
    return _carve_at(content, marker_end, url_start, end_marker)


def extract_all_urls(content: bytes, marker: str, url_start: str, end_marker: str) -> List[str]:
    """
    Return one URL per occurrence of *marker*, in order of appearance.

    Best-effort variant: occurrences whose anchors are missing or whose bytes
    do not decode are logged and skipped.

    Raises:
        ExtractionFailedError: No occurrence produced a URL
        ConfigurationError: An anchor string is empty
    """
    marker_bytes = _require_token("Presence marker", marker)
    _require_token("URL start token", url_start)
    _require_token("URL end marker", end_marker)

    urls: List[str] = []
    occurrences = 0
    last_error = None
    for marker_end in iter_marker_offsets(content, marker_bytes):
        occurrences += 1
        try:
            urls.append(_carve_at(content, marker_end, url_start, end_marker))
        except ExtractionFailedError as exc:
            LOGGER.debug("Skipping %s occurrence ending at %d: %s", marker, marker_end, exc)
            last_error = exc

    if not urls:
        if occurrences == 0:
            raise ExtractionFailedError(f"Failed to find pattern {marker}")
        raise ExtractionFailedError(
            f"None of {occurrences} occurrence(s) of {marker} yielded a URL: {last_error}"
        )

    LOGGER.debug("Carved %d URL(s) from %d occurrence(s) of %s", len(urls), occurrences, marker)
    return urls


def extract_profile_urls(
    content: bytes,
    markers: Sequence[str],
    url_start: str,
    end_marker: str,
) -> List[str]:
    """
    Run best-effort extraction for every marker variant in turn.

    URLs keep the order of the markers and, within a marker, the order of
    appearance. A URL found more than once is kept at its first position.

    Raises:
        ExtractionFailedError: No marker variant produced a URL
    """
    if not markers:
        raise ConfigurationError("At least one presence marker is required")

    found: Dict[str, None] = {}
    errors: List[str] = []
    for marker in markers:
        try:
            urls = extract_all_urls(content, marker, url_start, end_marker)
        except ExtractionFailedError as exc:
            errors.append(str(exc))
            continue
        for url in urls:
            found.setdefault(url, None)

    if not found:
        raise ExtractionFailedError("; ".join(errors))
    return list(found)

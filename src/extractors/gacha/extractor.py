"""
Pull history URL extractor.

Ties the pieces together for one game install:

1. select the game profile from the data directory present
2. find the newest ``webCaches`` generation and its ``data_2`` file
3. carve candidate URLs out of the file
4. hand candidates to a validator until one is accepted
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from core.logging import get_logger
from ..exceptions import LookupFailedError, NoValidUrlError, ValidationFailedError
from ._discovery import WEB_CACHE_DIR_NAME, locate_latest_cache
from ._profiles import GAME_PROFILES, GameProfile, select_profile
from ._scanner import extract_profile_urls
from ._validation import UrlValidator, build_validator

LOGGER = get_logger("extractors.gacha.extractor")


@dataclass(frozen=True)
class PullUrlResult:
    """An accepted URL and where it came from."""

    url: str
    candidate: str
    profile: GameProfile
    cache_path: Path


class PullUrlExtractor:
    """
    Locates and validates the pull history URL of one game install.

    Args:
        install_path: Game install root (the directory holding ``*_Data``)
        profiles: Game profiles in priority order

    Raises:
        LookupFailedError: No profile matches the install
    """

    def __init__(
        self,
        install_path: Union[str, Path],
        profiles: Iterable[GameProfile] = GAME_PROFILES,
    ) -> None:
        self.install_path = Path(install_path)
        self.profile = select_profile(self.install_path, profiles)
        self.data_dir = self.install_path / self.profile.data_dir

    @property
    def web_cache_dir(self) -> Path:
        return self.data_dir / WEB_CACHE_DIR_NAME

    def locate_cache_file(self) -> Path:
        """Return the live ``data_2`` file or raise LookupFailedError."""
        if not self.web_cache_dir.is_dir():
            raise LookupFailedError(f"{self.web_cache_dir} is not a directory")

        data2_path = locate_latest_cache(self.web_cache_dir)
        if data2_path is None:
            raise LookupFailedError(f"Failed to find data_2 file under {self.web_cache_dir}")
        return data2_path

    def extract_candidates(self, cache_path: Optional[Path] = None) -> List[str]:
        """
        Read the cache file and return every carved URL, in order.

        Raises:
            LookupFailedError: The cache file is missing or unreadable
            ExtractionFailedError: No URL could be carved
        """
        cache_path = cache_path or self.locate_cache_file()
        try:
            content = cache_path.read_bytes()
        except OSError as exc:
            raise LookupFailedError(f"Failed to read data_2 file {cache_path}: {exc}") from exc

        LOGGER.info("Scanning %s (%d bytes) for %s", cache_path, len(content), self.profile.name)
        candidates = extract_profile_urls(
            content,
            self.profile.markers,
            self.profile.url_start,
            self.profile.url_end,
        )
        LOGGER.info("Found %d candidate URL(s)", len(candidates))
        return candidates

    def find_url(self, validator: UrlValidator) -> PullUrlResult:
        """
        Return the first candidate the validator accepts.

        Candidates are tried in order; rejected ones are logged.

        Raises:
            LookupFailedError, ExtractionFailedError: As extract_candidates
            NoValidUrlError: Every candidate was rejected
        """
        cache_path = self.locate_cache_file()
        candidates = self.extract_candidates(cache_path)

        last_error = ""
        for index, candidate in enumerate(candidates, start=1):
            try:
                accepted = validator.validate(candidate)
            except ValidationFailedError as exc:
                LOGGER.warning("Candidate %d/%d rejected: %s", index, len(candidates), exc)
                last_error = str(exc)
                continue
            LOGGER.info("Candidate %d/%d accepted", index, len(candidates))
            return PullUrlResult(
                url=accepted,
                candidate=candidate,
                profile=self.profile,
                cache_path=cache_path,
            )

        raise NoValidUrlError(len(candidates), last_error)


def find_pull_url(
    install_path: Union[str, Path],
    validator: Optional[UrlValidator] = None,
    profiles: Iterable[GameProfile] = GAME_PROFILES,
    timeout_s: float = 10.0,
) -> str:
    """
    Convenience wrapper returning only the accepted URL.

    Without an explicit *validator* the profile's API endpoint is used.
    """
    extractor = PullUrlExtractor(install_path, profiles)
    if validator is None:
        validator = build_validator(extractor.profile, timeout_s=timeout_s)
    return extractor.find_url(validator).url

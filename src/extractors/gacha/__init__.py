"""
Game pull history URL extraction.

Finds the pull history ("gacha log") URL that a game's embedded browser left
in its Chromium disk cache, and checks it against the game's API.
"""

from .extractor import PullUrlExtractor, PullUrlResult, find_pull_url
from ._profiles import (
    GAME_PROFILES,
    ApiEndpoint,
    GameProfile,
    merge_profiles,
    profile_from_mapping,
    select_profile,
)
from ._validation import GachaLogValidator, PassthroughValidator, UrlValidator, build_validator

__all__ = [
    "GAME_PROFILES",
    "ApiEndpoint",
    "GachaLogValidator",
    "GameProfile",
    "PassthroughValidator",
    "PullUrlExtractor",
    "PullUrlResult",
    "UrlValidator",
    "build_validator",
    "find_pull_url",
    "merge_profiles",
    "profile_from_mapping",
    "select_profile",
]

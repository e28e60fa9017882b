"""
Game profiles.

Each supported game is a tagged configuration entry: the data directory that
identifies an install, the anchors used to carve the pull history URL out of
the cache, and the API endpoint used to check that the URL still works.

Profiles are tried in declaration order. Add new games to GAME_PROFILES, or
declare them under ``profiles:`` in config.yml.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from core.logging import get_logger
from ..exceptions import ConfigurationError, LookupFailedError

LOGGER = get_logger("extractors.gacha.profiles")

# Query parameters the log API needs; everything else in the cached URL
# (device info, timestamps, webview flags) is dropped.
DEFAULT_RETAINED_PARAMS: Tuple[str, ...] = (
    "authkey_ver",
    "sign_type",
    "auth_appid",
    "init_type",
    "gacha_id",
    "lang",
    "region",
    "authkey",
    "game_biz",
)


@dataclass(frozen=True)
class ApiEndpoint:
    """Where and how a candidate URL is checked against the backend."""

    host: str
    path: str
    retained_params: Tuple[str, ...] = DEFAULT_RETAINED_PARAMS
    extra_params: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class GameProfile:
    """
    Static configuration of one game.

    Attributes
    ----------
    name       : Identifier used in logs and config files.
    data_dir   : Directory under the install root that marks this game.
    markers    : Presence markers, tried in order (one per page revision).
    url_start  : Scheme and host the pull history URL begins with.
    url_end    : Text the pull history URL ends with.
    endpoint   : Backend used for validation, None to skip validation.
    """

    name: str
    data_dir: str
    markers: Tuple[str, ...]
    url_start: str
    url_end: str
    endpoint: Optional[ApiEndpoint] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.markers or not all(self.markers):
            raise ConfigurationError(f"Profile {self.name!r} needs non-empty presence markers")
        if not self.data_dir or not self.url_start or not self.url_end:
            raise ConfigurationError(
                f"Profile {self.name!r} needs data_dir, url_start and url_end"
            )


GAME_PROFILES: Tuple[GameProfile, ...] = (
    GameProfile(
        name="genshin_global",
        data_dir="GenshinImpact_Data",
        markers=("e20190909gacha-v3", "e20190909gacha-v2"),
        url_start="https://gs.hoyoverse.com/",
        url_end="game_biz=hk4e_global",
        endpoint=ApiEndpoint(
            host="public-operation-hk4e-sg.hoyoverse.com",
            path="/gacha_info/api/getGachaLog",
            extra_params=(("gacha_type", "301"), ("size", "5")),
        ),
    ),
    GameProfile(
        name="zenless_zone_zero_global",
        data_dir="ZenlessZoneZero_Data",
        markers=("e20230424gacha",),
        url_start="https://gs.hoyoverse.com/",
        url_end="game_biz=nap_global",
        endpoint=ApiEndpoint(
            host="public-operation-nap-sg.hoyoverse.com",
            path="/common/gacha_record/api/getGachaLog",
            extra_params=(("real_gacha_type", "2001"), ("size", "5")),
        ),
    ),
)


def profile_from_mapping(data: Mapping[str, Any]) -> GameProfile:
    """
    Build a GameProfile from a ``profiles:`` entry of config.yml.

    The mapping is expected to have passed schema validation already.
    """
    endpoint = None
    api = data.get("api")
    if api:
        endpoint = ApiEndpoint(
            host=api["host"],
            path=api.get("path", "/"),
            retained_params=tuple(api.get("retained_params", DEFAULT_RETAINED_PARAMS)),
            extra_params=tuple((str(k), str(v)) for k, v in api.get("extra_params", {}).items()),
        )
    markers = data["markers"]
    if isinstance(markers, str):
        markers = [markers]
    return GameProfile(
        name=data["name"],
        data_dir=data["data_dir"],
        markers=tuple(markers),
        url_start=data["url_start"],
        url_end=data["url_end"],
        endpoint=endpoint,
    )


def select_profile(
    install_path: Path,
    profiles: Iterable[GameProfile] = GAME_PROFILES,
) -> GameProfile:
    """
    Return the first profile whose data directory exists under *install_path*.

    When more than one matches, the first in declaration order is used and
    the others are logged.

    Raises:
        LookupFailedError: No profile matches
    """
    candidates = list(profiles)
    matches: List[GameProfile] = [
        profile for profile in candidates if (install_path / profile.data_dir).is_dir()
    ]
    if not matches:
        dirs = " ".join(profile.data_dir for profile in candidates)
        raise LookupFailedError(
            f"Failed to find one of the following directories:\n{dirs}"
        )

    selected = matches[0]
    if len(matches) > 1:
        LOGGER.warning(
            "Several games found under %s; using %s and ignoring %s",
            install_path,
            selected.name,
            ", ".join(profile.name for profile in matches[1:]),
        )
    LOGGER.debug("Selected profile %s for %s", selected.name, install_path)
    return selected


def merge_profiles(
    builtin: Iterable[GameProfile],
    extra: Iterable[GameProfile],
) -> Tuple[GameProfile, ...]:
    """
    Combine built-in and configured profiles.

    A configured profile with the name of a built-in one replaces it at the
    same priority; new names are appended in the order given.
    """
    overrides = {profile.name: profile for profile in extra}
    merged = [overrides.pop(profile.name, profile) for profile in builtin]
    merged.extend(overrides.values())
    return tuple(merged)

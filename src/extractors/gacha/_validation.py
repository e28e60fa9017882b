"""
Validation of carved URLs against the game's pull history API.

A cached URL may belong to an expired session. The validator rebuilds the
URL on the log API host, keeping only the query parameters the API reads,
and issues one request. A zero ``retcode`` in the JSON reply means the
authkey is still accepted; the rebuilt URL is then the canonical form handed
to the user.
"""

from __future__ import annotations

import ipaddress
from typing import Any, List, Optional, Protocol, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from core.logging import get_logger
from ..exceptions import ConfigurationError, ValidationFailedError
from ._profiles import ApiEndpoint, GameProfile

LOGGER = get_logger("extractors.gacha.validation")

DEFAULT_TIMEOUT_S = 10.0
LOCALHOST_NAME = "localhost"
REQUIRED_PARAM = "authkey"


class UrlValidator(Protocol):
    """Accepts or rejects one candidate URL."""

    def validate(self, candidate_url: str) -> str:
        """
        Return the accepted, possibly rewritten, URL.

        Raises ValidationFailedError when the candidate is rejected.
        """
        ...


class PassthroughValidator:
    """Accepts every candidate unchanged."""

    def validate(self, candidate_url: str) -> str:
        return candidate_url


def _split_host(host: str) -> Tuple[str, str]:
    """Split ``host[:port]`` into hostname and port. Bare IPv6 literals carry no port."""
    if host.startswith("["):
        hostname, _, rest = host[1:].partition("]")
        return hostname, rest[1:] if rest.startswith(":") else ""
    if host.count(":") > 1:
        return host, ""
    hostname, _, port = host.partition(":")
    return hostname, port


def is_loopback_host(host: str) -> bool:
    """Return True for localhost addresses, with or without a port."""
    hostname, _ = _split_host(host)
    if hostname.lower() == LOCALHOST_NAME:
        return True
    try:
        return ipaddress.ip_address(hostname).is_loopback
    except ValueError:
        return False


def _netloc(host: str) -> str:
    hostname, port = _split_host(host)
    if ":" in hostname:
        hostname = f"[{hostname}]"
    return f"{hostname}:{port}" if port else hostname


def build_api_url(candidate_url: str, endpoint: ApiEndpoint) -> str:
    """
    Rebuild *candidate_url* on the API endpoint.

    Only ``endpoint.retained_params`` survive, in their original order;
    ``endpoint.extra_params`` are appended unless already present. Loopback
    hosts are addressed over plain http.

    Raises:
        ValidationFailedError: The candidate carries no authkey
    """
    query = parse_qsl(urlsplit(candidate_url).query, keep_blank_values=True)
    params: List[Tuple[str, str]] = [
        (key, value) for key, value in query if key in endpoint.retained_params
    ]
    present = {key for key, _ in params}
    if REQUIRED_PARAM not in present:
        raise ValidationFailedError(f"Candidate URL has no {REQUIRED_PARAM} parameter")

    params.extend((key, value) for key, value in endpoint.extra_params if key not in present)
    scheme = "http" if is_loopback_host(endpoint.host) else "https"
    return urlunsplit((scheme, _netloc(endpoint.host), endpoint.path, urlencode(params), ""))


class GachaLogValidator:
    """
    Checks candidates against a pull history log API.

    Args:
        endpoint: API host, path and query parameter policy
        timeout_s: Per-request timeout in seconds
        session: Object with a requests-compatible ``get``; defaults to the
                 ``requests`` module
    """

    def __init__(
        self,
        endpoint: ApiEndpoint,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: Optional[Any] = None,
    ) -> None:
        if not timeout_s > 0:
            raise ConfigurationError(f"Validation timeout must be positive, got {timeout_s}")
        self.endpoint = endpoint
        self.timeout_s = timeout_s
        self._http = session if session is not None else requests

    def validate(self, candidate_url: str) -> str:
        api_url = build_api_url(candidate_url, self.endpoint)
        LOGGER.debug("Checking candidate against %s", self.endpoint.host)

        try:
            response = self._http.get(api_url, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise ValidationFailedError(
                f"Request to {self.endpoint.host} failed: {exc}"
            ) from exc

        if response.status_code >= 400:
            raise ValidationFailedError(
                f"HTTP {response.status_code} from {self.endpoint.host}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ValidationFailedError(
                f"Non-JSON response from {self.endpoint.host}: {exc}"
            ) from exc

        if not isinstance(payload, dict):
            raise ValidationFailedError(f"Unexpected response from {self.endpoint.host}")

        retcode = payload.get("retcode")
        if retcode != 0:
            message = payload.get("message") or "unknown error"
            raise ValidationFailedError(f"API rejected URL (retcode {retcode}): {message}")

        return api_url


def build_validator(
    profile: GameProfile,
    enabled: bool = True,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    session: Optional[Any] = None,
) -> UrlValidator:
    """Return the validator for *profile*, or a passthrough when disabled."""
    if not enabled or profile.endpoint is None:
        return PassthroughValidator()
    return GachaLogValidator(profile.endpoint, timeout_s=timeout_s, session=session)

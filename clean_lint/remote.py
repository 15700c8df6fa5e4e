"""Client for shared configuration files served over HTTP.

Usage:
    client = RemoteConfigClient(token="xyz")
    raw    = client.fetch("https://lint.example.com/team.yaml")   # -> dict
"""

from typing import Any

import requests
import yaml

from clean_lint import __version__

DEFAULT_TIMEOUT = 30


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class RemoteConfigError(Exception):
    """Base exception for all remote config errors."""


class AuthenticationError(RemoteConfigError):
    """Raised on HTTP 401/403: missing, invalid or insufficient token."""


class NotFoundError(RemoteConfigError):
    """Raised on HTTP 404: no config at that URL."""


class NetworkError(RemoteConfigError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class RemoteConfigClient:
    """Fetches a YAML config document from a URL."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, token: str | None = None) -> None:
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["User-Agent"] = f"clean-lint/{__version__}"
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def fetch(self, url: str) -> dict[str, Any]:
        """GET *url* and return its body parsed as a YAML mapping.

        Raises:
            AuthenticationError: HTTP 401 or 403
            NotFoundError:       HTTP 404
            RemoteConfigError:   Any other non-2xx response, or a body that is
                                 not a YAML mapping
            NetworkError:        Timeout or connection failure
        """
        text = self._request(url)
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise RemoteConfigError(f"Invalid YAML served at {url}: {exc}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise RemoteConfigError(f"Config served at {url} must be a YAML mapping at the top level.")
        return raw

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, url: str) -> str:
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while fetching '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(f"Unable to reach '{url}'") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Access denied to {url} (HTTP {response.status_code}); "
                "check the CLEAN_LINT_TOKEN environment variable."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Config not found: {url}")
        if not response.ok:
            raise RemoteConfigError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        return response.text

"""requests-based gateway implementing GatewayPort."""

from __future__ import annotations

import logging

import requests

from dexcache.core.models import FetchResult


logger = logging.getLogger(__name__)

USER_AGENT = "dexcache/0.1 (+https://pokeapi.co)"


class RequestsGateway:
    """Pure transport adapter over a shared requests.Session.

    Failures never raise; they come back as FetchResult.failure so the data
    cache decides what a failure means for the caller.
    """

    def __init__(
        self,
        *,
        timeout: float | None = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            timeout: Per-request timeout in seconds for data and media fetches.
                None waits indefinitely.
            session: Session to reuse (connection pooling, tests).
        """
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def _get(self, url: str, timeout: float | None) -> requests.Response | FetchResult:
        try:
            resp = self._session.get(url, timeout=timeout)
        except requests.RequestException as exc:
            logger.debug("GET %s failed: %s", url, exc)
            return FetchResult.failure(str(exc))

        if not 200 <= resp.status_code < 300:
            reason = getattr(resp, "reason", "") or ""
            return FetchResult.failure(
                f"HTTP {resp.status_code}: {reason}".rstrip(": "),
                status_code=resp.status_code,
            )
        return resp

    def fetch_json(self, url: str) -> FetchResult:
        """GET a URL and decode the JSON body."""
        resp = self._get(url, self._timeout)
        if isinstance(resp, FetchResult):
            return resp
        try:
            data = resp.json()
        except ValueError:
            return FetchResult.failure(
                f"Invalid JSON from {url}", status_code=resp.status_code
            )
        return FetchResult.ok(data, status_code=resp.status_code)

    def fetch_binary(self, url: str) -> FetchResult:
        """GET a URL and return the body bytes."""
        resp = self._get(url, self._timeout)
        if isinstance(resp, FetchResult):
            return resp
        return FetchResult.ok(resp.content, status_code=resp.status_code)

    def probe(self, url: str, timeout: float) -> bool:
        """Check connectivity with a single bounded GET."""
        resp = self._get(url, timeout)
        return not isinstance(resp, FetchResult)

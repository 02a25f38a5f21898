"""
Funda mobile API (v4) client for listing detail payloads.

The client issues single requests and maps every failure to a typed
FetchError. It does not pace itself: request spacing is owned by the batch
coordinator's shared RequestThrottle.
"""

from __future__ import annotations

from typing import Any

import requests

from funda_ingest.core.log import get_logger
from funda_ingest.schemas.models import ApiPolicy

from .errors import EmptyPayloadError, FetchError, HttpStatusError, InvalidPayloadError, fetch_error_guard

logger = get_logger(__name__)


class ListingApiClient:
    """Thin requests-based client; one method per lookup key."""

    def __init__(self, policy: ApiPolicy | None = None, *, session: requests.Session | None = None) -> None:
        self.policy = policy or ApiPolicy()
        self._session = session or requests.Session()
        self._session.headers.update(self._default_headers())
        self.request_count = 0
        logger.debug("listing API client initialized (base_url=%s)", self.policy.base_url)

    # -------------------------
    # Internal HTTP helpers
    # -------------------------

    def _default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.policy.user_agent,
            "X-Funda-App-Platform": self.policy.platform,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _get_json(self, path: str) -> dict[str, Any]:
        url = f"{self.policy.base_url.rstrip('/')}{path}"
        self.request_count += 1
        logger.debug("GET %s", url)

        with fetch_error_guard():
            resp = self._session.get(url, timeout=self.policy.timeout_s)

        if resp.status_code != 200:
            raise HttpStatusError(resp.status_code, url)
        if not resp.content:
            raise EmptyPayloadError(f"empty response for {url}")

        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidPayloadError(f"response for {url} is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise InvalidPayloadError(f"response for {url} is not a JSON object ({type(data).__name__})")
        if not data:
            raise EmptyPayloadError(f"empty listing object for {url}")
        return data

    # -------------------------
    # Public API
    # -------------------------

    def get_listing_by_tiny_id(self, tiny_id: str | int) -> dict[str, Any]:
        """Listing by public tiny id (the number at the end of listing URLs)."""
        return self._get_json(f"/api/v4/listing/object/{self.policy.country}/tinyId/{tiny_id}")

    def get_listing_by_global_id(self, global_id: str | int) -> dict[str, Any]:
        """Listing by internal global id."""
        return self._get_json(f"/api/v4/listing/object/{self.policy.country}/{global_id}")

    def fetch_or_none(self, tiny_id: str | int) -> dict[str, Any] | None:
        """Fetch collaborator for batch runs: payload on success, None on any FetchError."""
        try:
            data = self.get_listing_by_tiny_id(tiny_id)
        except FetchError as e:
            logger.warning("failed to fetch listing %s: %s", tiny_id, e)
            return None
        logger.info("fetched listing %s", tiny_id)
        return data

    def stats(self) -> dict[str, int | float]:
        return {"request_count": self.request_count, "avg_delay_s": self.policy.min_delay_s}

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> ListingApiClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["ListingApiClient"]

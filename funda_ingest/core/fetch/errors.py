# funda_ingest/core/fetch/errors.py
"""
Typed errors + utilities for the listing API client.

Exports
-------
- FetchError, NetworkError, HttpStatusError, EmptyPayloadError, InvalidPayloadError
- FETCH_ERRORS
- classify_fetch_error(exc)
- fetch_error_guard()
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import requests

# =========================
# Exception types
# =========================


class FetchError(RuntimeError):
    """Base class for listing fetch failures (one identifier, never the batch)."""


class NetworkError(FetchError):
    """HTTP/transport failure (connection, timeout, TLS) while requesting a listing."""


class HttpStatusError(FetchError):
    """The API answered with a non-success status code."""

    def __init__(self, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code} for {url}" if url else f"HTTP {status_code}")


class EmptyPayloadError(FetchError):
    """The API answered 200 but with no listing data."""


class InvalidPayloadError(FetchError):
    """The response body is not a JSON object."""


# Selector tuple for grouped exception handling
FETCH_ERRORS = (
    NetworkError,
    HttpStatusError,
    EmptyPayloadError,
    InvalidPayloadError,
)

# =========================
# Classification helpers
# =========================


def classify_fetch_error(exc: Exception) -> FetchError:
    """
    Map arbitrary exceptions raised inside the client to a typed FetchError.

    Heuristics:
      - Any FetchError subclass → passed through
      - requests.HTTPError with a response → HttpStatusError
      - other requests.* errors → NetworkError
      - JSON decode failures (ValueError) → InvalidPayloadError
      - Fallback → FetchError
    """
    if isinstance(exc, FetchError):
        return exc

    # requests' JSONDecodeError is both a RequestException and a ValueError
    if isinstance(exc, requests.exceptions.JSONDecodeError):
        return InvalidPayloadError(f"{type(exc).__name__}: {exc}")

    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return HttpStatusError(exc.response.status_code, str(exc.response.url or ""))

    if isinstance(exc, requests.RequestException):
        return NetworkError(f"{type(exc).__name__}: {exc}")

    if isinstance(exc, ValueError):
        return InvalidPayloadError(f"{type(exc).__name__}: {exc}")

    return FetchError(f"{type(exc).__name__}: {exc}")


@contextmanager
def fetch_error_guard() -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from client internals."""
    try:
        yield
    except FETCH_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_fetch_error(exc) from exc


__all__ = [
    "FetchError",
    "NetworkError",
    "HttpStatusError",
    "EmptyPayloadError",
    "InvalidPayloadError",
    "FETCH_ERRORS",
    "classify_fetch_error",
    "fetch_error_guard",
]

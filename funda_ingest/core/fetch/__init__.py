from .api_client import ListingApiClient
from .errors import (
    FETCH_ERRORS,
    EmptyPayloadError,
    FetchError,
    HttpStatusError,
    InvalidPayloadError,
    NetworkError,
    classify_fetch_error,
    fetch_error_guard,
)
from .throttle import RequestThrottle
from .urls import extract_tiny_id, extract_tiny_ids

__all__ = [
    "FetchError",
    "NetworkError",
    "HttpStatusError",
    "EmptyPayloadError",
    "InvalidPayloadError",
    "FETCH_ERRORS",
    "classify_fetch_error",
    "fetch_error_guard",
    "ListingApiClient",
    "RequestThrottle",
    "extract_tiny_id",
    "extract_tiny_ids",
]

"""
Batch fetch tool (listing identifiers → normalized CanonicalRecords).

Pipeline per identifier (strictly sequential, input order):
  1) RequestThrottle.wait()            → global minimum spacing between request starts
  2) fetch(identifier)                 → raw payload | None | exception
  3) core.normalize.normalize_listing  → CanonicalRecord
  4) counters updated, progress logged

A failed identifier is recorded and skipped; it never aborts the batch and is
never retried here (callers re-submit `BatchResult.failed_ids` if they want to).
No timeout is enforced at this level: the fetch callable owns its timeouts.

This tool is the single integration point for the CLI and Python callers.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from funda_ingest.core.fetch import ListingApiClient, RequestThrottle, extract_tiny_ids
from funda_ingest.core.fetch.throttle import Clock, Sleep
from funda_ingest.core.log import get_logger
from funda_ingest.core.normalize import normalize_listing
from funda_ingest.schemas.models import (
    ApiPolicy,
    BatchResult,
    BatchStats,
    BenchmarkReport,
    CanonicalRecord,
    SourceRecord,
)

logger = get_logger(__name__)

RawPayload = SourceRecord | Mapping[str, Any]
FetchFn = Callable[[str], RawPayload | None]
NormalizeFn = Callable[[Any], CanonicalRecord]


def _is_empty(payload: object) -> bool:
    if payload is None:
        return True
    if isinstance(payload, Mapping):
        return len(payload) == 0
    return not isinstance(payload, SourceRecord)


class BatchFetchCoordinator:
    """
    Drives fetch → normalize for an ordered list of identifiers.

    One instance owns one RequestThrottle, so consecutive `run()` calls on the
    same coordinator keep the spacing guarantee across batches as well.
    """

    def __init__(
        self,
        fetch: FetchFn,
        *,
        min_delay_s: float = 0.5,
        normalizer: NormalizeFn = normalize_listing,
        throttle: RequestThrottle | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = time.sleep,
        progress_every: int = 10,
    ) -> None:
        self._fetch = fetch
        self._normalizer = normalizer
        self._clock = clock
        self.throttle = throttle or RequestThrottle(min_delay_s, clock=clock, sleep=sleep)
        self.progress_every = max(1, int(progress_every))

    def _fetch_one(self, identifier: str) -> RawPayload | None:
        try:
            payload = self._fetch(identifier)
        except Exception as e:  # noqa: BLE001  fetch collaborators may raise anything
            logger.warning("fetch failed for %s: %s: %s", identifier, type(e).__name__, e)
            return None
        if _is_empty(payload):
            logger.warning("no listing data for %s", identifier)
            return None
        return payload

    def run(self, identifiers: Iterable[str | int]) -> BatchResult:
        ids = [str(i).strip() for i in identifiers]
        total = len(ids)
        logger.info("starting batch fetch of %d listings", total)

        records: list[CanonicalRecord] = []
        failed: list[str] = []
        requests_issued = 0
        started = self._clock()

        for idx, identifier in enumerate(ids, start=1):
            self.throttle.wait()
            requests_issued += 1
            payload = self._fetch_one(identifier)

            if payload is None:
                failed.append(identifier)
            else:
                try:
                    records.append(self._normalizer(payload))
                except Exception:  # noqa: BLE001  a custom normalizer must not sink the batch
                    logger.exception("normalization failed for %s", identifier)
                    failed.append(identifier)

            if idx % self.progress_every == 0 or idx == total:
                elapsed = self._clock() - started
                rate = idx / elapsed if elapsed > 0 else 0.0
                logger.info("progress %d/%d: %d parsed, ~%.1f/sec", idx, total, len(records), rate)

        stats = BatchStats.from_counts(
            requests_issued=requests_issued,
            succeeded=len(records),
            failed=len(failed),
            elapsed_s=self._clock() - started,
        )
        if failed:
            logger.warning("failed to fetch %d listings: %s", len(failed), ", ".join(failed))
        logger.info(
            "batch complete: %d parsed, %d failed, %.2fs (avg %.3fs/listing)",
            stats.succeeded,
            stats.failed,
            stats.elapsed_s,
            stats.avg_time_per_item_s,
        )
        return BatchResult(records=records, failed_ids=failed, stats=stats)


def run_batch(
    identifiers: Iterable[str | int],
    fetch: FetchFn,
    *,
    min_delay_s: float = 0.5,
    normalizer: NormalizeFn = normalize_listing,
    clock: Clock = time.monotonic,
    sleep: Sleep = time.sleep,
) -> BatchResult:
    """One-shot batch with a fresh throttle."""
    coordinator = BatchFetchCoordinator(fetch, min_delay_s=min_delay_s, normalizer=normalizer, clock=clock, sleep=sleep)
    return coordinator.run(identifiers)


def benchmark(
    identifiers: Iterable[str | int],
    fetch: FetchFn,
    *,
    min_delay_s: float = 0.5,
    clock: Clock = time.monotonic,
    sleep: Sleep = time.sleep,
) -> BenchmarkReport:
    """Run a batch and report throughput figures."""
    result = run_batch(identifiers, fetch, min_delay_s=min_delay_s, clock=clock, sleep=sleep)
    s = result.stats
    return BenchmarkReport(
        total_s=s.elapsed_s,
        requests_issued=s.requests_issued,
        avg_time_per_request_s=s.elapsed_s / s.requests_issued if s.requests_issued else 0.0,
        success_rate=s.success_rate,
        estimated_s_per_1000=s.estimated_s_per_1000,
    )


# ---------------------------
# Client-backed wrapper
# ---------------------------


def _policy_from_dict(d: Mapping[str, Any] | ApiPolicy | None) -> ApiPolicy:
    """
    Normalize an incoming policy that may be:
      - an ApiPolicy instance,
      - a plain dict of policy fields,
      - or None (use defaults).
    """
    if isinstance(d, ApiPolicy):
        return d
    if not d:
        return ApiPolicy()
    return ApiPolicy.model_validate(dict(d))


def run_batch_fetch_tool(
    *,
    tiny_ids: Iterable[str | int] | None = None,
    urls: Iterable[str] | None = None,
    policy: Mapping[str, Any] | ApiPolicy | None = None,
    client: ListingApiClient | None = None,
) -> BatchResult:
    """
    Fetch and normalize listings through the mobile API.

    Identifiers are the given tiny ids followed by ids parsed from `urls`
    (duplicates keep their first position).
    """
    pol = _policy_from_dict(policy)
    ids: list[str] = [str(t).strip() for t in (tiny_ids or []) if str(t).strip()]
    ids.extend(extract_tiny_ids(urls or []))
    ids = list(dict.fromkeys(ids))

    if not ids:
        logger.warning("no tiny ids provided")
        return BatchResult()

    api = client or ListingApiClient(pol)
    try:
        coordinator = BatchFetchCoordinator(
            api.fetch_or_none,
            min_delay_s=pol.min_delay_s,
            normalizer=lambda raw: normalize_listing(raw, policy=pol),
        )
        return coordinator.run(ids)
    finally:
        if client is None:
            api.close()


def write_result(result: BatchResult, path: Path) -> Path:
    """Persist a BatchResult as JSON (UTF-8)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.model_dump_json(indent=2), encoding="utf-8")
    return path


__all__ = [
    "BatchFetchCoordinator",
    "FetchFn",
    "run_batch",
    "benchmark",
    "run_batch_fetch_tool",
    "write_result",
]

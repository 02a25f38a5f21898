# tests/unit/test_batch_coordinator.py
from __future__ import annotations

import logging
import time

import pytest

from funda_ingest.schemas.models import SourceRecord
from funda_ingest.tools.batch_fetch import BatchFetchCoordinator, benchmark, run_batch
from tests.utils import FakeClock, make_raw_listing


def _listing(tiny_id: str) -> dict:
    return make_raw_listing(Identifiers={"TinyId": tiny_id})


def _coordinator(fetch, clock: FakeClock, *, min_delay_s: float = 0.5, **kwargs) -> BatchFetchCoordinator:
    return BatchFetchCoordinator(fetch, min_delay_s=min_delay_s, clock=clock, sleep=clock.sleep, **kwargs)


def test_middle_failure_is_skipped_and_order_kept(fake_clock):
    def fetch(tiny_id):
        if tiny_id == "2":
            raise RuntimeError("connection reset")
        return _listing(tiny_id)

    result = _coordinator(fetch, fake_clock).run(["1", "2", "3"])

    assert [r.tiny_id for r in result.records] == ["1", "3"]
    assert result.failed_ids == ["2"]
    assert result.stats.requests_issued == 3
    assert result.stats.processed == 3
    assert result.stats.succeeded == 2
    assert result.stats.failed == 1
    assert result.stats.success_rate == pytest.approx(2 / 3)


@pytest.mark.parametrize("payload", [None, {}])
def test_absent_payload_counts_as_failure(fake_clock, payload):
    result = _coordinator(lambda _: payload, fake_clock).run(["1"])
    assert result.records == []
    assert result.failed_ids == ["1"]


def test_source_record_payload_is_accepted(fake_clock):
    model = SourceRecord.model_validate(_listing("9"))
    result = _coordinator(lambda _: model, fake_clock).run(["9"])
    assert [r.tiny_id for r in result.records] == ["9"]


def test_failing_normalizer_counts_as_failure(fake_clock):
    def boom(_raw):
        raise ValueError("bad record")

    result = _coordinator(lambda t: _listing(t), fake_clock, normalizer=boom).run(["1", "2"])
    assert result.records == []
    assert result.failed_ids == ["1", "2"]


def test_request_starts_are_spaced_by_min_delay(fake_clock):
    starts: list[float] = []

    def fetch(tiny_id):
        starts.append(fake_clock())
        fake_clock.advance(0.1)  # simulated network latency
        return _listing(tiny_id)

    n, d = 5, 0.5
    result = _coordinator(fetch, fake_clock, min_delay_s=d).run([str(i) for i in range(n)])

    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert all(g >= d - 1e-9 for g in gaps)
    assert result.stats.elapsed_s >= (n - 1) * d - 1e-9
    # latency counts toward the gap, so each wait is only the remainder
    assert all(s == pytest.approx(0.4) for s in fake_clock.sleeps)


def test_slow_fetch_needs_no_extra_wait(fake_clock):
    def fetch(tiny_id):
        fake_clock.advance(2.0)
        return _listing(tiny_id)

    _coordinator(fetch, fake_clock).run(["1", "2", "3"])
    assert fake_clock.sleeps == []


def test_zero_delay_never_sleeps(fake_clock):
    result = _coordinator(lambda t: _listing(t), fake_clock, min_delay_s=0.0).run(["1", "2", "3"])
    assert fake_clock.sleeps == []
    assert result.stats.succeeded == 3


def test_spacing_holds_across_consecutive_runs(fake_clock):
    coordinator = _coordinator(lambda t: _listing(t), fake_clock)
    coordinator.run(["1"])
    coordinator.run(["2"])
    assert fake_clock.sleeps == [pytest.approx(0.5)]


def test_real_clock_spacing_small_batch():
    d = 0.05
    result = run_batch(["1", "2", "3"], lambda t: _listing(t), min_delay_s=d)
    assert result.stats.succeeded == 3
    assert result.stats.elapsed_s >= 2 * d


def test_empty_batch(fake_clock):
    calls: list[str] = []
    result = _coordinator(lambda t: calls.append(t), fake_clock).run([])

    assert calls == []
    assert result.records == [] and result.failed_ids == []
    assert result.stats.processed == 0
    assert result.stats.success_rate == 0.0


def test_identifiers_are_coerced_to_text(fake_clock):
    seen: list[str] = []

    def fetch(tiny_id):
        seen.append(tiny_id)
        return _listing(tiny_id)

    _coordinator(fetch, fake_clock, min_delay_s=0.0).run([43117443, " 43117444 "])
    assert seen == ["43117443", "43117444"]


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        BatchFetchCoordinator(lambda _: None, min_delay_s=-1.0)


def test_progress_and_failures_are_logged(fake_clock, caplog):
    caplog.set_level(logging.INFO, logger="funda_ingest")

    def fetch(tiny_id):
        return None if tiny_id == "2" else _listing(tiny_id)

    _coordinator(fetch, fake_clock, min_delay_s=0.0, progress_every=2).run(["1", "2", "3"])

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("progress 2/3") for m in messages)
    assert any(m.startswith("progress 3/3") for m in messages)
    assert any("failed to fetch 1 listings: 2" in m for m in messages)


def test_stats_from_fake_clock(fake_clock):
    def fetch(tiny_id):
        fake_clock.advance(1.0)
        return _listing(tiny_id)

    stats = _coordinator(fetch, fake_clock, min_delay_s=0.0).run(["1", "2"]).stats
    assert stats.elapsed_s == pytest.approx(2.0)
    assert stats.avg_time_per_item_s == pytest.approx(1.0)
    assert stats.rate_per_s == pytest.approx(1.0)
    assert stats.estimated_s_per_1000 == pytest.approx(1000.0)


def test_benchmark_report(fake_clock):
    def fetch(tiny_id):
        fake_clock.advance(0.2)
        return None if tiny_id == "4" else _listing(tiny_id)

    report = benchmark(["1", "2", "3", "4"], fetch, min_delay_s=0.5, clock=fake_clock, sleep=fake_clock.sleep)

    assert report.requests_issued == 4
    assert report.success_rate == pytest.approx(0.75)
    # three full gaps plus the last request's latency
    assert report.total_s == pytest.approx(3 * 0.5 + 0.2)
    assert report.avg_time_per_request_s == pytest.approx(report.total_s / 4)
    assert report.estimated_s_per_1000 == pytest.approx(report.avg_time_per_request_s * 1000)


def test_default_clock_is_monotonic():
    coordinator = BatchFetchCoordinator(lambda _: None, min_delay_s=0.0)
    assert coordinator.throttle._clock is time.monotonic

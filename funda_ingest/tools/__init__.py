"""
funda_ingest — tools package

Exports only modules that live under `funda_ingest/tools`:
  - BatchFetchCoordinator, run_batch, benchmark   (from .batch_fetch)
  - run_batch_fetch_tool, write_result            (from .batch_fetch)

Core building blocks (extractor, classifier, normalizer, client) should be
imported from `funda_ingest.core.*` directly.
"""

from __future__ import annotations

from .batch_fetch import (
    BatchFetchCoordinator,
    benchmark,
    run_batch,
    run_batch_fetch_tool,
    write_result,
)

__all__ = ["BatchFetchCoordinator", "run_batch", "benchmark", "run_batch_fetch_tool", "write_result"]

# tests/conftest.py
from __future__ import annotations

import logging

import pytest

from funda_ingest.core.log import ROOT_LOGGER_NAME
from funda_ingest.schemas.models import ApiPolicy
from tests.utils import FakeClock, FakeSession, make_raw_listing


# -------- Environment isolation --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "FUNDA_INGEST_DEBUG",
        "FUNDA_INGEST_LOG_FILE",
        "FUNDA_DELAY_S",
        "FUNDA_TIMEOUT_S",
        "FUNDA_BASE_URL",
        "FUNDA_OUT",
        "FUNDA_TINY_IDS",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """configure_logging() installs handlers on the package logger; drop them after each test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)


# -------- Domain fixtures --------
@pytest.fixture
def raw_listing():
    """Factory for a complete listing payload (top-level keys overridable)."""

    def _factory(**overrides):
        return make_raw_listing(**overrides)

    return _factory


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_session():
    def _factory(routes=None):
        return FakeSession(routes)

    return _factory


@pytest.fixture
def fast_policy() -> ApiPolicy:
    return ApiPolicy(min_delay_s=0.0, timeout_s=5.0)

"""
Minimum-spacing gate between request starts.

One gate is shared by everything that talks to the listing source, so the
spacing is global rather than per caller. `clock` and `sleep` are injectable
to keep tests fast and deterministic.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from funda_ingest.core.log import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], None]


class RequestThrottle:
    """Blocks until at least `min_interval_s` has passed since the previous start."""

    def __init__(self, min_interval_s: float, *, clock: Clock = time.monotonic, sleep: Sleep = time.sleep) -> None:
        if min_interval_s < 0:
            raise ValueError(f"min_interval_s must be >= 0, got {min_interval_s}")
        self.min_interval_s = float(min_interval_s)
        self._clock = clock
        self._sleep = sleep
        self._last_start: float | None = None
        self.total_waited_s = 0.0

    @property
    def last_start(self) -> float | None:
        return self._last_start

    def wait(self) -> float:
        """
        Suspend until the next request may start, then mark it as started.
        Returns the seconds spent waiting (0.0 for the first request).
        """
        waited = 0.0
        now = self._clock()
        if self._last_start is not None:
            deadline = self._last_start + self.min_interval_s
            while now < deadline:
                remaining = deadline - now
                logger.debug("rate limit: waiting %.3fs", remaining)
                self._sleep(remaining)
                waited += remaining
                now = self._clock()
        self._last_start = now
        self.total_waited_s += waited
        return waited

    def reset(self) -> None:
        self._last_start = None
        self.total_waited_s = 0.0


__all__ = ["Clock", "Sleep", "RequestThrottle"]

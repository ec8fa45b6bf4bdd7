# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Coalescing rate limiter.

The first call runs immediately. Calls arriving within ``interval`` seconds
of the last run are collapsed into one pending call carrying the latest
arguments, which runs once the interval has elapsed. There is no timer
thread: the owner drives pending calls with ``poll()`` (from its event loop)
or ``flush()``.

Usage:
    throttled = Throttle(scroll_to, 0.05)
    throttled(10)       # runs now
    throttled(11)       # pending
    throttled(12)       # replaces 11
    throttled.poll()    # runs scroll_to(12) once 50 ms have passed
"""

from __future__ import annotations

import time
from typing import Any, Callable


class Throttle:

    def __init__(self, func: Callable[..., Any], interval: float,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.func = func
        self.interval = interval
        self.clock = clock
        self._last_run: float | None = None
        self._pending: tuple[tuple, dict] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def _ready(self) -> bool:
        return self._last_run is None or self.clock() - self._last_run >= self.interval

    def _run(self, args: tuple, kwargs: dict) -> Any:
        self._last_run = self.clock()
        self._pending = None
        return self.func(*args, **kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self._ready():
            return self._run(args, kwargs)
        self._pending = (args, kwargs)
        return None

    def poll(self) -> Any:
        """Run the pending call if the interval has elapsed."""
        if self._pending is not None and self._ready():
            return self._run(*self._pending)
        return None

    def flush(self) -> Any:
        """Run the pending call now, regardless of the interval."""
        if self._pending is not None:
            return self._run(*self._pending)
        return None

    def cancel(self) -> None:
        self._pending = None

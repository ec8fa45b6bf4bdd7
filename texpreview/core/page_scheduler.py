# TeXPreview - Incremental LaTeX Preview Engine
# Copyright (c) 2025-2026 The TeXPreview Authors
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Page Render Scheduler

Per-page render state machine plus the pending render queue. The scheduler
never talks to the rendering target itself: every event method returns the
list of page indices that just entered RENDERING, and the caller dispatches
them. A dispatch that fails is reported back with ``fail()``.

States and transitions::

    UNRENDERED/QUEUED --request-->     RENDERING
    RENDERING         --acknowledge--> RENDERED   (then pop and request next)
    RENDERING         --fail-->        UNRENDERED
    any               --reset-->       UNRENDERED (queue cleared)

The queue is popped from the end, so the most recently enqueued page renders
first. Entries whose page has since been requested directly are skipped when
popped.
"""

import logging

from . import types as tp

logger = logging.getLogger(__name__)


class PageRenderScheduler:

    def __init__(self, page_count: int = 0, buffer_size: int = tp.DEFAULT_PAGE_BUFFER_SIZE) -> None:
        self.buffer_size = buffer_size
        self._states: list[int] = []
        self._queue: list[int] = []
        self.dispatched = 0
        self.reset(page_count)

    def reset(self, page_count: int) -> None:
        """Forget every page state; used on document regeneration."""
        self._states = [tp.PAGE_UNRENDERED] * page_count
        self._queue = []

    @property
    def page_count(self) -> int:
        return len(self._states)

    @property
    def queue(self) -> tuple[int, ...]:
        return tuple(self._queue)

    def state(self, page_index: int) -> int:
        return self._states[page_index]

    def in_range(self, page_index: int) -> bool:
        return 0 <= page_index < len(self._states)

    def is_busy(self, page_index: int) -> bool:
        """True if the page is rendering or already rendered."""
        return self._states[page_index] in (tp.PAGE_RENDERING, tp.PAGE_RENDERED)

    def enqueue(self, page_index: int) -> bool:
        if not self.in_range(page_index) or self._states[page_index] != tp.PAGE_UNRENDERED:
            return False
        self._states[page_index] = tp.PAGE_QUEUED
        self._queue.append(page_index)
        return True

    def request(self, page_index: int) -> list[int]:
        """Move a page straight to RENDERING, bypassing the queue."""
        if not self.in_range(page_index) or self.is_busy(page_index):
            return []
        # pop_next() has already taken the page off the queue
        if self._states[page_index] == tp.PAGE_QUEUED and page_index in self._queue:
            self._queue.remove(page_index)
        self._states[page_index] = tp.PAGE_RENDERING
        self.dispatched += 1
        logger.debug("Page %d -> rendering", page_index)
        return [page_index]

    def pop_next(self) -> int | None:
        """Pop the most recently queued page that is still waiting."""
        while self._queue:
            page_index = self._queue.pop()
            if self._states[page_index] == tp.PAGE_QUEUED:
                return page_index
        return None

    def render_from(self, page_index: int, direction: int) -> list[int]:
        """
        Prefetch around ``page_index`` in the scroll direction.

        Enqueues ``page_index + step * direction`` for step = buffer_size..1,
        then requests the anchor page if it is not yet rendering or rendered,
        otherwise requests one queued page.

        Returns:
            Page indices to dispatch (zero or one)
        """
        for step in range(self.buffer_size, 0, -1):
            self.enqueue(page_index + step * direction)

        if self.in_range(page_index) and not self.is_busy(page_index):
            return self.request(page_index)

        next_page = self.pop_next()
        if next_page is not None:
            return self.request(next_page)
        return []

    def acknowledge(self, page_index: int) -> list[int]:
        """
        Mark a page rendered and chain the next queued page.

        Acknowledgements for pages that are not RENDERING (stale, duplicate,
        or from before a reset) are ignored.
        """
        if not self.in_range(page_index) or self._states[page_index] != tp.PAGE_RENDERING:
            logger.debug("Ignoring acknowledgement for page %d", page_index)
            return []
        self._states[page_index] = tp.PAGE_RENDERED
        logger.debug("Page %d -> rendered", page_index)

        next_page = self.pop_next()
        if next_page is not None:
            return self.request(next_page)
        return []

    def fail(self, page_index: int) -> None:
        """Revert a page whose dispatch failed so a later window retries it."""
        if self.in_range(page_index) and self._states[page_index] == tp.PAGE_RENDERING:
            self._states[page_index] = tp.PAGE_UNRENDERED
            logger.debug("Page %d -> unrendered after failed dispatch", page_index)

    def stats(self) -> dict:
        counts = {name: 0 for name in tp.PAGE_STATE_NAMES}
        for state in self._states:
            counts[tp.PAGE_STATE_NAMES[state]] += 1
        counts['pending'] = len(self._queue)
        counts['dispatched'] = self.dispatched
        return counts

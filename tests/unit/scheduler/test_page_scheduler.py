from __future__ import annotations

import random

from texpreview.core import types as tp
from texpreview.core.page_scheduler import PageRenderScheduler


def test_prefetch_forward_and_chain() -> None:
    scheduler = PageRenderScheduler(10, 2)

    assert scheduler.render_from(5, 1) == [5]
    assert scheduler.queue == (7, 6)
    assert scheduler.state(5) == tp.PAGE_RENDERING
    assert scheduler.state(6) == tp.PAGE_QUEUED

    assert scheduler.acknowledge(5) == [6]
    assert scheduler.queue == (7,)
    assert scheduler.acknowledge(6) == [7]
    assert scheduler.acknowledge(7) == []
    assert scheduler.state(5) == tp.PAGE_RENDERED


def test_prefetch_backward() -> None:
    scheduler = PageRenderScheduler(10, 2)
    assert scheduler.render_from(5, -1) == [5]
    assert scheduler.queue == (3, 4)
    assert scheduler.acknowledge(5) == [4]
    assert scheduler.acknowledge(4) == [3]


def test_busy_anchor_pops_queued_page() -> None:
    scheduler = PageRenderScheduler(10, 2)
    scheduler.render_from(5, 1)
    assert scheduler.render_from(5, 1) == [6]
    assert scheduler.queue == (7,)


def test_zero_direction_requests_anchor_only() -> None:
    scheduler = PageRenderScheduler(10, 2)
    assert scheduler.render_from(3, 0) == [3]
    assert scheduler.queue == ()


def test_first_page_is_chained() -> None:
    scheduler = PageRenderScheduler(3, 2)
    assert scheduler.render_from(2, -1) == [2]
    assert scheduler.queue == (0, 1)
    assert scheduler.acknowledge(2) == [1]
    assert scheduler.acknowledge(1) == [0]
    assert scheduler.acknowledge(0) == []


def test_out_of_range_pages_are_ignored() -> None:
    scheduler = PageRenderScheduler(10, 2)
    assert scheduler.render_from(9, 1) == [9]
    assert scheduler.queue == ()
    assert scheduler.render_from(20, 1) == []
    assert scheduler.acknowledge(-1) == []


def test_stale_and_duplicate_acknowledgements() -> None:
    scheduler = PageRenderScheduler(5, 1)
    assert scheduler.acknowledge(3) == []
    assert scheduler.state(3) == tp.PAGE_UNRENDERED

    scheduler.render_from(0, 1)
    assert scheduler.acknowledge(0) == [1]
    assert scheduler.acknowledge(0) == []
    assert scheduler.state(1) == tp.PAGE_RENDERING


def test_request_removes_page_from_queue() -> None:
    scheduler = PageRenderScheduler(10, 2)
    scheduler.render_from(5, 1)
    assert scheduler.request(6) == [6]
    assert scheduler.queue == (7,)
    assert scheduler.request(6) == []


def test_failed_page_is_retried() -> None:
    scheduler = PageRenderScheduler(5, 0)
    assert scheduler.render_from(2, 1) == [2]
    scheduler.fail(2)
    assert scheduler.state(2) == tp.PAGE_UNRENDERED
    assert scheduler.render_from(2, 1) == [2]


def test_reset_forgets_everything() -> None:
    scheduler = PageRenderScheduler(10, 2)
    scheduler.render_from(5, 1)
    scheduler.reset(3)
    assert scheduler.page_count == 3
    assert scheduler.queue == ()
    assert scheduler.acknowledge(5) == []
    assert all(scheduler.state(i) == tp.PAGE_UNRENDERED for i in range(3))


def test_stats() -> None:
    scheduler = PageRenderScheduler(10, 2)
    scheduler.render_from(5, 1)
    scheduler.acknowledge(5)
    stats = scheduler.stats()
    assert stats == {'unrendered': 7, 'queued': 1, 'rendering': 1, 'rendered': 1,
                     'pending': 1, 'dispatched': 2}


def test_random_event_sequences_keep_queue_consistent() -> None:
    rng = random.Random(1234)
    for _ in range(50):
        scheduler = PageRenderScheduler(8, rng.randint(0, 3))
        rendered: set[int] = set()
        for _ in range(60):
            event = rng.random()
            page = rng.randint(-1, 8)
            if event < 0.5:
                started = scheduler.render_from(page, rng.choice((-1, 0, 1)))
            elif event < 0.9:
                started = scheduler.acknowledge(page)
                if scheduler.in_range(page) and scheduler.state(page) == tp.PAGE_RENDERED:
                    rendered.add(page)
            else:
                scheduler.fail(page)
                started = []

            assert len(started) <= 1
            for index in started:
                assert scheduler.state(index) == tp.PAGE_RENDERING
            queue = scheduler.queue
            assert len(queue) == len(set(queue))
            queued = {i for i in range(8) if scheduler.state(i) == tp.PAGE_QUEUED}
            assert set(queue) == queued
            # rendered pages stay rendered until reset
            assert all(scheduler.state(i) == tp.PAGE_RENDERED for i in rendered)

"""Unit tests for the bounded-concurrency frontier."""

import asyncio
import logging

import pytest

from docs_scraper.domain.model import WorkItem
from docs_scraper.utils.frontier import Frontier


pytestmark = pytest.mark.unit


class TestFrontierConstruction:
    def test_rejects_zero_concurrency(self):
        async def handler(item):
            return None

        with pytest.raises(ValueError):
            Frontier(handler, max_concurrency=0)


class TestFrontierRun:
    async def test_processes_every_submitted_item(self):
        seen: list[str] = []

        async def handler(item: WorkItem):
            seen.append(item.url)

        frontier = Frontier(handler, max_concurrency=2)
        for index in range(5):
            frontier.submit(WorkItem(f"https://example.test/{index}"))

        await frontier.run()

        assert sorted(seen) == [f"https://example.test/{index}" for index in range(5)]
        assert frontier.is_idle

    async def test_concurrency_never_exceeds_limit(self):
        running = 0
        peak = 0

        async def handler(item: WorkItem):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        frontier = Frontier(handler, max_concurrency=3)
        for index in range(12):
            frontier.submit(WorkItem(f"https://example.test/{index}"))

        await frontier.run()

        assert peak == 3

    async def test_handlers_can_grow_the_frontier(self):
        seen: list[str] = []
        frontier: Frontier

        async def handler(item: WorkItem):
            seen.append(item.url)
            depth = item.url.count("/x")
            if depth < 3:
                frontier.submit(WorkItem(item.url + "/x"))
                frontier.submit(WorkItem(item.url + "/x" + "y"))

        frontier = Frontier(handler, max_concurrency=4)
        frontier.submit(WorkItem("https://example.test"))

        await frontier.run()

        assert "https://example.test/x/x/x" in seen
        assert len(seen) == len(set(seen))

    async def test_empty_run_fires_idle_immediately(self):
        calls: list[str] = []

        async def handler(item: WorkItem):
            raise AssertionError("handler must not run")

        frontier = Frontier(handler, max_concurrency=2)
        frontier.on_idle(lambda: calls.append("idle"))

        await asyncio.wait_for(frontier.run(), timeout=1)

        assert calls == ["idle"]

    async def test_idle_callbacks_run_once_in_registration_order(self):
        calls: list[str] = []

        async def handler(item: WorkItem):
            await asyncio.sleep(0)

        async def async_callback():
            calls.append("async")

        frontier = Frontier(handler, max_concurrency=2)
        frontier.on_idle(lambda: calls.append("sync"))
        frontier.on_idle(async_callback)
        for index in range(4):
            frontier.submit(WorkItem(f"https://example.test/{index}"))

        await frontier.run()

        assert calls == ["sync", "async"]

    async def test_idle_waits_for_running_handlers(self):
        finished: list[str] = []
        idle_saw: list[list[str]] = []

        async def handler(item: WorkItem):
            await asyncio.sleep(0.02)
            finished.append(item.url)

        frontier = Frontier(handler, max_concurrency=2)
        frontier.on_idle(lambda: idle_saw.append(list(finished)))
        frontier.submit(WorkItem("https://example.test/slow"))

        await frontier.run()

        assert idle_saw == [["https://example.test/slow"]]

    async def test_submit_after_keeps_frontier_busy(self):
        attempts: list[int] = []
        frontier: Frontier

        async def handler(item: WorkItem):
            attempts.append(item.retry_count)
            if item.retry_count < 2:
                frontier.submit_after(item.next_attempt(), 0.02)

        frontier = Frontier(handler, max_concurrency=1)
        frontier.submit(WorkItem("https://example.test/flaky"))

        await frontier.run()

        assert attempts == [0, 1, 2]
        assert frontier.delayed == 0

    async def test_submit_after_zero_delay_is_plain_submit(self):
        attempts: list[int] = []
        frontier: Frontier

        async def handler(item: WorkItem):
            attempts.append(item.retry_count)
            if item.retry_count == 0:
                frontier.submit_after(item.next_attempt(), 0)
                assert frontier.delayed == 0
                assert frontier.queue_length == 1

        frontier = Frontier(handler, max_concurrency=1)
        frontier.submit(WorkItem("https://example.test/a"))

        await frontier.run()

        assert attempts == [0, 1]

    async def test_handler_exception_is_contained(self, caplog):
        seen: list[str] = []

        async def handler(item: WorkItem):
            if item.url.endswith("boom"):
                raise RuntimeError("kaboom")
            seen.append(item.url)

        frontier = Frontier(handler, max_concurrency=1)
        frontier.submit(WorkItem("https://example.test/boom"))
        frontier.submit(WorkItem("https://example.test/ok"))

        with caplog.at_level(logging.ERROR, logger="docs_scraper.utils.frontier"):
            await frontier.run()

        assert seen == ["https://example.test/ok"]
        assert "Error processing https://example.test/boom" in caplog.text
        assert frontier.in_flight == 0

    async def test_submit_after_idle_raises(self):
        async def handler(item: WorkItem):
            return None

        frontier = Frontier(handler, max_concurrency=1)
        await frontier.run()

        with pytest.raises(RuntimeError):
            frontier.submit(WorkItem("https://example.test/late"))
        with pytest.raises(RuntimeError):
            frontier.submit_after(WorkItem("https://example.test/late"), 1.0)

    async def test_run_twice_raises(self):
        async def handler(item: WorkItem):
            return None

        frontier = Frontier(handler, max_concurrency=1)
        await frontier.run()

        with pytest.raises(RuntimeError):
            await frontier.run()

    async def test_counters_while_running(self):
        snapshots: list[tuple[int, int]] = []
        frontier: Frontier

        async def handler(item: WorkItem):
            snapshots.append((frontier.in_flight, frontier.outstanding))

        frontier = Frontier(handler, max_concurrency=1)
        frontier.submit(WorkItem("https://example.test/a"))
        frontier.submit(WorkItem("https://example.test/b"))
        assert frontier.queue_length == 2
        assert frontier.outstanding == 2

        await frontier.run()

        assert snapshots == [(1, 2), (1, 1)]

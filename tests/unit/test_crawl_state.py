"""Unit tests for the dedup ledger and crawl state."""

import asyncio

import pytest

from docs_scraper.domain.crawl_state import CrawlState, DedupLedger
from docs_scraper.domain.model import PageRecord, WorkItem
from docs_scraper.utils.path_builder import PathBuilder


pytestmark = pytest.mark.unit


class TestDedupLedger:
    def test_admit_once(self):
        ledger = DedupLedger()

        assert ledger.admit("https://example.test/a") is True
        assert ledger.admit("https://example.test/a") is False
        assert ledger.seen_count == 1

    def test_begin_visit_once(self):
        ledger = DedupLedger()
        ledger.admit("https://example.test/a")

        assert ledger.begin_visit("https://example.test/a") is True
        assert ledger.begin_visit("https://example.test/a") is False
        assert ledger.visited_count == 1

    def test_visited_is_subset_of_seen(self):
        ledger = DedupLedger()

        ledger.begin_visit("https://example.test/never-admitted")

        assert ledger.is_seen("https://example.test/never-admitted")
        assert ledger.is_visited("https://example.test/never-admitted")
        assert ledger.admit("https://example.test/never-admitted") is False

    async def test_concurrent_admission_admits_exactly_once(self):
        ledger = DedupLedger()
        url = "https://example.test/contended"

        async def attempt() -> bool:
            await asyncio.sleep(0)
            return ledger.admit(url)

        results = await asyncio.gather(*(attempt() for _ in range(200)))

        assert results.count(True) == 1


class TestWorkItem:
    def test_next_attempt_is_new_item(self):
        item = WorkItem("https://example.test/a")

        retry = item.next_attempt()

        assert retry == WorkItem("https://example.test/a", 1)
        assert item.retry_count == 0
        assert retry.is_retry and not item.is_retry

    def test_immutable(self):
        item = WorkItem("https://example.test/a")
        with pytest.raises(AttributeError):
            item.retry_count = 5  # type: ignore[misc]

    def test_negative_retry_count_rejected(self):
        with pytest.raises(ValueError):
            WorkItem("https://example.test/a", -1)


class TestCrawlState:
    def test_record_page_appends_in_order_and_counts(self):
        state = CrawlState()

        assert state.record_page(PageRecord(url="https://example.test/b", path="b", title="B")) == 1
        assert state.record_page(PageRecord(url="https://example.test/a", path="a", title="A")) == 2

        assert [r.path for r in state.records] == ["b", "a"]
        assert state.success_count == 2

    def test_claim_identifier_first_come(self):
        state = CrawlState()
        builder = PathBuilder()

        assert state.claim_identifier("a-b", "https://example.test/a-b", builder.disambiguate) == "a-b"
        assert state.identifier_owner("a-b") == "https://example.test/a-b"

    def test_claim_identifier_same_url_twice_returns_none(self):
        state = CrawlState()
        builder = PathBuilder()
        state.claim_identifier("a", "https://example.test/a", builder.disambiguate)

        assert state.claim_identifier("a", "https://example.test/a", builder.disambiguate) is None

    def test_claim_identifier_collision_disambiguates(self):
        state = CrawlState()
        builder = PathBuilder()
        state.claim_identifier("a-b", "https://example.test/a-b", builder.disambiguate)

        claimed = state.claim_identifier("a-b", "https://example.test/a/b", builder.disambiguate)

        assert claimed == builder.disambiguate("a-b", "https://example.test/a/b")
        assert state.claim_identifier("a-b", "https://example.test/a/b", builder.disambiguate) is None

    def test_claim_identifier_keeps_disambiguating_until_free(self):
        state = CrawlState()
        builder = PathBuilder()
        url = "https://example.test/a/b"
        first_choice = builder.disambiguate("a-b", url)
        state.claim_identifier("a-b", "https://example.test/a-b", builder.disambiguate)
        state.claim_identifier(first_choice, "https://example.test/other", builder.disambiguate)

        claimed = state.claim_identifier("a-b", url, builder.disambiguate)

        assert claimed == builder.disambiguate(first_choice, url)
        assert state.identifier_owner(claimed) == url
        assert state.claim_identifier("a-b", url, builder.disambiguate) is None

    def test_release_identifier_only_by_owner(self):
        state = CrawlState()
        builder = PathBuilder()
        state.claim_identifier("a", "https://example.test/a", builder.disambiguate)

        state.release_identifier("a", "https://example.test/other")
        assert state.identifier_owner("a") == "https://example.test/a"

        state.release_identifier("a", "https://example.test/a")
        assert state.identifier_owner("a") is None

    def test_elapsed_is_non_negative(self):
        assert CrawlState().elapsed() >= 0

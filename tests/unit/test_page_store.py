"""Unit tests for the filesystem page store."""

import orjson
import pytest

from docs_scraper.domain.errors import PersistenceFailure
from docs_scraper.domain.model import PageRecord, RenderedPage
from docs_scraper.utils.page_store import PageStore


pytestmark = pytest.mark.unit

RENDERED = RenderedPage(markdown="# md\n", html="<p>html</p>\n", text="text\n")


@pytest.fixture
def store(tmp_path):
    return PageStore(tmp_path / "data")


async def test_reset_removes_previous_output(store):
    stale = store.output_dir / "old-page"
    stale.mkdir(parents=True)
    (stale / "index.md").write_text("stale")

    await store.reset()

    assert store.output_dir.is_dir()
    assert list(store.output_dir.iterdir()) == []


async def test_reset_creates_missing_root(store):
    await store.reset()

    assert store.output_dir.is_dir()


async def test_write_page_creates_three_files(store):
    await store.reset()

    target = await store.write_page("docs-a", "https://example.test/docs/a", RENDERED)

    assert target == store.output_dir / "docs-a"
    assert (target / "index.md").read_text(encoding="utf-8") == "# md\n"
    assert (target / "index.html").read_text(encoding="utf-8") == "<p>html</p>\n"
    assert (target / "index.txt").read_text(encoding="utf-8") == "text\n"


async def test_root_page_written_in_output_root(store):
    await store.reset()

    target = await store.write_page("", "https://example.test/", RENDERED)

    assert target == store.output_dir
    assert (store.output_dir / "index.md").exists()


async def test_page_exists_uses_marker(store):
    await store.reset()
    assert await store.page_exists("docs-a") is False
    assert await store.page_exists("") is False

    (store.output_dir / "docs-a").mkdir()
    assert await store.page_exists("docs-a") is False

    await store.write_page("docs-a", "https://example.test/docs/a", RENDERED)
    assert await store.page_exists("docs-a") is True


async def test_write_page_wraps_os_errors(store):
    await store.reset()
    # A regular file where the page directory should go
    (store.output_dir / "blocked").write_text("not a directory")

    with pytest.raises(PersistenceFailure) as exc_info:
        await store.write_page("blocked", "https://example.test/blocked", RENDERED)

    assert exc_info.value.url == "https://example.test/blocked"
    assert isinstance(exc_info.value.cause, OSError)


async def test_write_metadata_in_record_order(store):
    await store.reset()
    records = [
        PageRecord(url="https://example.test/b", path="b", title="B"),
        PageRecord(url="https://example.test/", path="", title="Home"),
    ]

    path = await store.write_metadata(records)

    assert path == store.output_dir / "metadata.json"
    assert orjson.loads(path.read_bytes()) == [
        {"url": "https://example.test/b", "path": "b", "title": "B"},
        {"url": "https://example.test/", "path": "", "title": "Home"},
    ]


async def test_write_metadata_empty(store):
    await store.reset()

    path = await store.write_metadata([])

    assert orjson.loads(path.read_bytes()) == []

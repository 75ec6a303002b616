"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from docs_scraper.config import Settings  # noqa: E402
from tests.fixtures.fake_site import SITE, FakeSite  # noqa: E402


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep DOCS_SCRAPER_* variables and stray .env files out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("DOCS_SCRAPER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def settings(output_dir: Path) -> Settings:
    return Settings(
        site_url=SITE,
        output_dir=output_dir,
        max_concurrency=4,
        max_retries=3,
        retry_delay_seconds=0.0,
        fetch_timeout=5.0,
        user_agent="docs-scraper-tests/1.0",
    )

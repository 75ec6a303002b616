"""Centralized configuration for docs-scraper using Pydantic Settings."""

from pathlib import Path
import random
from typing import Literal
from urllib.parse import urlsplit

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``DOCS_SCRAPER_*`` environment variables.

    Every value can also be overridden from the command line; see ``docs_scraper.cli``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCS_SCRAPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Site
    site_url: str = Field(default="https://shopify.dev", description="Root URL; its origin bounds the crawl")
    content_selector: str = Field(
        default=".article--docs", min_length=1, description="CSS selector for the content region of a page"
    )

    # Output
    output_dir: Path = Field(default=Path("data"), description="Output root, deleted at the start of every run")
    archive_path: Path | None = Field(
        default=None, description="Archive file; defaults to <output_dir>.tar.gz next to the output root"
    )

    # Crawl engine
    max_concurrency: int = Field(default=100, ge=1, description="Maximum pages processed concurrently")
    max_retries: int = Field(default=3, ge=0, description="Retries after the first failed attempt")
    retry_delay_seconds: float = Field(default=1.0, ge=0.0, description="Delay before a retry is resubmitted")
    retry_backoff: Literal["constant", "exponential"] = Field(
        default="constant", description="constant: fixed delay; exponential: delay * 2**retry_count"
    )
    fetch_timeout: float = Field(default=30.0, gt=0.0, description="Per-fetch timeout in seconds")
    user_agent: str = Field(default="", description="User-Agent header; random from the pool when empty")

    # Observability
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=False, description="Emit structured JSON log lines")
    metrics_file: Path | None = Field(
        default=None, description="Write Prometheus text exposition here when the crawl finishes"
    )

    USER_AGENTS: list[str] = [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:143.0) Gecko/20100101 Firefox/143.0",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/18.6 Safari/605.1.15",
    ]

    @model_validator(mode="after")
    def _check_site_url(self) -> "Settings":
        parsed = urlsplit(self.site_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(
                f"DOCS_SCRAPER_SITE_URL must be an absolute http(s) URL with a host, got {self.site_url!r}"
            )
        return self

    def get_user_agent(self) -> str:
        """Configured User-Agent, or a random one from the pool."""
        return self.user_agent or random.choice(self.USER_AGENTS)

    def get_archive_path(self) -> Path:
        """Resolved archive location (sibling of the output root unless configured)."""
        if self.archive_path is not None:
            return self.archive_path
        output = self.output_dir.resolve()
        return output.parent / f"{output.name}.tar.gz"

    def get_retry_delay(self, retry_count: int) -> float:
        """Delay before resubmitting an item that has failed ``retry_count + 1`` times."""
        if self.retry_backoff == "exponential":
            return self.retry_delay_seconds * (2**retry_count)
        return self.retry_delay_seconds

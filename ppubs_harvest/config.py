"""Configuration for ppubs-harvest using pydantic-settings.

All settings are driven by environment variables with the PPUBS_ prefix.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Harvest configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PPUBS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    output_dir: Path = Path("PDFs")
    access_token: str = ""

    user_agent: str = "ppubs-harvest/0.1 (contact: your-email@example.com)"

    search_url: str = "https://ppubs.uspto.gov/api/searches/generic"
    search_query: str = "a"
    search_sort: str = "date_publ desc"
    page_size: int = Field(default=100, ge=1)
    search_timeout_seconds: float = 60.0
    search_max_attempts: int = 1
    backoff_min: float = 1.0
    backoff_max: float = 30.0

    pdf_url_template: str = (
        "https://ppubs.uspto.gov/api/pdf/downloadPdf/{identifier}"
        "?requestToken={token}"
    )
    html_url_template: str = (
        "https://ppubs.uspto.gov/api/patents/html/{identifier}"
        "?source=US-PGPUB&requestToken={token}"
    )

    download_timeout_seconds: float = 180.0
    navigation_timeout_ms: float = 180_000
    headless: bool = True
    chromium_args: List[str] = [
        "--disable-gpu",
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
    ]

    cooldown_seconds: float = 60.0
    rate_limit_markers: List[str] = [
        "Rate limit exceeded",
        "Too Many Requests",
    ]

    def pdf_url(self, identifier: str) -> str:
        return self.pdf_url_template.format(identifier=identifier, token=self.access_token)

    def html_url(self, identifier: str) -> str:
        return self.html_url_template.format(identifier=identifier, token=self.access_token)

    def ensure_dirs(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("Ensured directory: %s", self.output_dir)


def get_settings() -> Settings:
    """Load settings from environment and ensure the output directory exists."""
    s = Settings()
    s.ensure_dirs()
    return s

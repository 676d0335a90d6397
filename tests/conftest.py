"""Shared test fixtures for ppubs-harvest tests."""

from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Tuple

import httpx
import pytest
from playwright.sync_api import Error as PlaywrightError

from ppubs_harvest.config import Settings
from ppubs_harvest.store import ArtifactStore

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings writing under tmp_path, with retry waits disabled."""
    return Settings(
        output_dir=tmp_path / "PDFs",
        access_token="tok",
        backoff_min=0,
        backoff_max=0,
    )


@pytest.fixture
def store(settings: Settings) -> ArtifactStore:
    return ArtifactStore(settings.output_dir)


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture
def mock_client():
    """Build an httpx.Client whose requests are answered by ``handler``.

    Every request is recorded on ``client.seen``.
    """
    clients: List[httpx.Client] = []

    def _make(handler) -> httpx.Client:
        seen: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_record))
        client.seen = seen
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()


# ---------------------------------------------------------------------------
# Fake Playwright
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, url: str, status: int) -> None:
        self.url = url
        self.status = status


class FakePage:
    """Replays a scripted navigation through registered ``response`` listeners.

    ``responses`` holds ``(url, status)`` pairs; a ``None`` url stands for the
    navigation target.
    """

    def __init__(
        self,
        responses: List[Tuple[Optional[str], int]],
        html: str,
        pdf: bytes,
        goto_error: Optional[str] = None,
        pdf_error: Optional[str] = None,
    ) -> None:
        self.responses = responses
        self.html = html
        self.pdf_bytes = pdf
        self.goto_error = goto_error
        self.pdf_error = pdf_error
        self.listeners = {}
        self.listeners_at_goto = 0
        self.goto_url: Optional[str] = None
        self.goto_kwargs = {}
        self.pdf_kwargs: Optional[dict] = None
        self.waited_for: Optional[str] = None
        self.closed = False

    def on(self, event: str, callback) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def goto(self, url: str, **kwargs):
        self.goto_url = url
        self.goto_kwargs = kwargs
        self.listeners_at_goto = len(self.listeners.get("response", []))
        for resp_url, status in self.responses:
            for cb in self.listeners.get("response", []):
                cb(FakeResponse(resp_url or url, status))
        if self.goto_error:
            raise PlaywrightError(self.goto_error)
        return None

    def wait_for_selector(self, selector: str, **kwargs) -> None:
        self.waited_for = selector

    def content(self) -> str:
        return self.html

    def pdf(self, **kwargs) -> bytes:
        self.pdf_kwargs = kwargs
        if self.pdf_error:
            raise PlaywrightError(self.pdf_error)
        return self.pdf_bytes

    def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.closed = False

    def new_page(self) -> FakePage:
        return self.page

    def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, factory: "FakePlaywrightFactory") -> None:
        self.factory = factory

    def launch(self, **kwargs) -> FakeBrowser:
        self.factory.launch_kwargs.append(kwargs)
        page = FakePage(**self.factory.script)
        browser = FakeBrowser(page)
        self.factory.pages.append(page)
        self.factory.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, factory: "FakePlaywrightFactory") -> None:
        self.chromium = FakeChromium(factory)


class FakePlaywrightFactory:
    """Stands in for ``sync_playwright``; one fresh browser per call."""

    def __init__(self, **script) -> None:
        self.script = script
        self.calls = 0
        self.exits = 0
        self.launch_kwargs: List[dict] = []
        self.pages: List[FakePage] = []
        self.browsers: List[FakeBrowser] = []

    @contextmanager
    def __call__(self):
        self.calls += 1
        try:
            yield FakePlaywright(self)
        finally:
            self.exits += 1


@pytest.fixture
def fake_browser(pdf_bytes: bytes):
    """Build a FakePlaywrightFactory; defaults to a clean 200 navigation."""

    def _make(
        responses: Optional[List[Tuple[Optional[str], int]]] = None,
        html: str = "<html><body><h1>US-1</h1><p>Claims</p></body></html>",
        pdf: Optional[bytes] = None,
        goto_error: Optional[str] = None,
        pdf_error: Optional[str] = None,
    ) -> FakePlaywrightFactory:
        return FakePlaywrightFactory(
            responses=[(None, 200)] if responses is None else responses,
            html=html,
            pdf=pdf_bytes if pdf is None else pdf,
            goto_error=goto_error,
            pdf_error=pdf_error,
        )

    return _make

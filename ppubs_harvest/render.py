"""Browser-rendered PDF capture of the HTML view of a document.

The HTTP status of the page is learned from the browser's own ``response``
events during navigation rather than from a separate request, which would
spend a second unit of rate-limit quota and could disagree with what the
browser actually loaded.

Per invocation:

1. navigation in flight: a fresh Chromium is launched, a ``response``
   listener is attached, then ``goto`` runs. The listener must be attached
   before ``goto`` or the document response can be missed.
2. loaded: the ``body`` element is present; the rendered markup is captured.
3. gated: the render proceeds only for status 200 and content without the
   rate-limit message.
4. done: the page is printed to PDF and stored, or an outcome explains why
   not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import Settings
from .errors import is_rate_limit_message
from .models import ArtifactKind, FetchOutcome, OutcomeKind, redact_url
from .store import ArtifactStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """What one browser session produced: PDF bytes, or the gate that refused."""

    pdf: Optional[bytes] = None
    refused: Optional[Tuple[OutcomeKind, str]] = None


class NavigationStatus:
    """Records the status of the response whose URL is exactly the target.

    Sub-resource responses (scripts, styles, images) are ignored.
    """

    def __init__(self, target_url: str) -> None:
        self.target_url = target_url
        self.status: Optional[int] = None

    def on_response(self, response) -> None:
        if response.url == self.target_url:
            self.status = response.status


def check_capture_gate(
    status: Optional[int], content: str, markers
) -> Optional[Tuple[OutcomeKind, str]]:
    """Decide whether a loaded page may be rendered.

    Returns ``None`` to render, otherwise ``(outcome kind, gate name)``. The
    status is checked first, so a non-200 page is refused on status no matter
    what it contains.
    """
    if status == 429:
        return OutcomeKind.RATE_LIMITED, "status"
    if status != 200:
        return OutcomeKind.BAD_STATUS, "status"
    if is_rate_limit_message(content, markers):
        return OutcomeKind.RATE_LIMITED, "content"
    return None


class RenderedCaptureEngine:
    """Print the HTML view of ``identifier`` to ``{identifier}_html.pdf``."""

    def __init__(
        self,
        settings: Settings,
        store: ArtifactStore,
        playwright_factory: Callable = sync_playwright,
    ) -> None:
        self.settings = settings
        self.store = store
        self._playwright_factory = playwright_factory

    def capture(self, identifier: str) -> FetchOutcome:
        kind = ArtifactKind.RENDERED
        path = self.store.path_for(identifier, kind)
        url = self.settings.html_url(identifier)
        shown = redact_url(url)

        def outcome(result: OutcomeKind, **extra) -> FetchOutcome:
            return FetchOutcome(
                identifier=identifier, artifact=kind, kind=result, url=shown, path=path, **extra
            )

        if self.store.exists(identifier, kind):
            return outcome(OutcomeKind.ALREADY_PRESENT)

        recorder = NavigationStatus(url)
        try:
            rendered = self._render(url, recorder)
        except PlaywrightError as exc:
            return outcome(
                OutcomeKind.NAVIGATION_FAILED, status=recorder.status, error=exc.message
            )

        if rendered.refused is not None:
            result, gate = rendered.refused
            error = None
            if gate == "content":
                error = "rendered page carries the rate-limit message"
            return outcome(result, status=recorder.status, gate=gate, error=error)

        pdf = rendered.pdf
        if not pdf:
            return outcome(OutcomeKind.EMPTY_BODY, status=recorder.status)

        try:
            self.store.write_atomic(identifier, kind, pdf)
        except OSError as exc:
            return outcome(OutcomeKind.WRITE_FAILED, status=recorder.status, error=str(exc))

        return outcome(OutcomeKind.SAVED, status=recorder.status, size=len(pdf))

    def _render(self, url: str, recorder: NavigationStatus) -> RenderResult:
        """Drive one browser session and report what it produced.

        The driver, browser and page live only for this call and are closed
        on every exit path.
        """
        s = self.settings
        with self._playwright_factory() as pw:
            browser = pw.chromium.launch(headless=s.headless, args=list(s.chromium_args))
            try:
                page = browser.new_page()
                try:
                    page.on("response", recorder.on_response)
                    logger.debug("Navigating to %s", redact_url(url))
                    page.goto(url, wait_until="domcontentloaded", timeout=s.navigation_timeout_ms)
                    page.wait_for_selector("body", state="attached", timeout=s.navigation_timeout_ms)
                    content = page.content()

                    refused = check_capture_gate(recorder.status, content, s.rate_limit_markers)
                    if refused is not None:
                        return RenderResult(refused=refused)
                    return RenderResult(pdf=page.pdf(print_background=False))
                finally:
                    page.close()
            finally:
                browser.close()

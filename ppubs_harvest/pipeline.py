"""Per-identifier acquisition workflow and the run entry point."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import httpx

from .backoff import BackoffController
from .config import Settings, get_settings
from .direct import DirectFetcher, build_client
from .models import FetchOutcome, RunSummary
from .render import RenderedCaptureEngine
from .search import dedupe_identifiers, fetch_identifiers
from .store import ArtifactStore

logger = logging.getLogger(__name__)


def _log_outcome(outcome: FetchOutcome) -> None:
    if outcome.is_success:
        logger.info("%s", outcome.summary())
    else:
        logger.error("%s", outcome.summary())


class AcquisitionPipeline:
    """Direct download then rendered capture for each identifier, in order.

    Failures never stop the run and nothing is retried within it; re-running
    skips artifacts that are already on disk.
    """

    def __init__(
        self,
        direct: DirectFetcher,
        renderer: RenderedCaptureEngine,
        backoff: BackoffController,
    ) -> None:
        self.direct = direct
        self.renderer = renderer
        self.backoff = backoff

    def process(self, identifier: str, summary: RunSummary) -> None:
        for attempt in (self.direct.fetch_binary, self.renderer.capture):
            outcome = attempt(identifier)
            _log_outcome(outcome)
            summary.outcomes.append(outcome)
            if self.backoff.maybe_cool_down(outcome):
                summary.cooldowns += 1

    def run(self, identifiers: Iterable[str]) -> RunSummary:
        idents = list(identifiers)
        summary = RunSummary(identifiers_found=len(idents), identifiers_unique=len(idents))
        total = len(idents)
        for i, identifier in enumerate(idents, 1):
            logger.info("[%d/%d] %s", i, total, identifier)
            self.process(identifier, summary)
        return summary


def run_harvest(
    settings: Optional[Settings] = None,
    *,
    page_size: Optional[int] = None,
    client: Optional[httpx.Client] = None,
    renderer: Optional[RenderedCaptureEngine] = None,
    backoff: Optional[BackoffController] = None,
) -> RunSummary:
    """Search, dedupe, and acquire both artifacts for every identifier.

    An empty search result (including a failed search) is a normal, empty run.
    """
    s = settings or get_settings()
    s.ensure_dirs()
    size = page_size if page_size is not None else s.page_size

    owns_client = client is None
    http = client or build_client(s)
    try:
        raw = fetch_identifiers(size, settings=s, client=http)
        unique = dedupe_identifiers(raw)
        logger.info("%d identifiers (%d unique)", len(raw), len(unique))
        if not unique:
            logger.warning("Nothing to do this run")
            return RunSummary(identifiers_found=len(raw))

        store = ArtifactStore(s.output_dir)
        pipeline = AcquisitionPipeline(
            direct=DirectFetcher(s, store, client=http),
            renderer=renderer or RenderedCaptureEngine(s, store),
            backoff=backoff or BackoffController(s.cooldown_seconds),
        )
        summary = pipeline.run(unique)
        summary.identifiers_found = len(raw)
        return summary
    finally:
        if owns_client:
            http.close()

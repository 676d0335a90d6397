"""Direct PDF download with validation and all-or-nothing persistence."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from .config import Settings
from .models import ArtifactKind, FetchOutcome, OutcomeKind, redact_url
from .store import ArtifactStore

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def build_client(settings: Settings) -> httpx.Client:
    return httpx.Client(
        timeout=settings.download_timeout_seconds,
        follow_redirects=True,
        headers={
            "user-agent": settings.user_agent,
            "accept": "application/pdf,*/*;q=0.8",
        },
    )


class DirectFetcher:
    """Download ``{identifier}.pdf`` from the PDF endpoint.

    The client is shared across identifiers; pass one in to control its
    lifetime, otherwise one is created and closed by :meth:`close`.
    """

    def __init__(
        self,
        settings: Settings,
        store: ArtifactStore,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self._owns_client = client is None
        self.client = client or build_client(settings)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "DirectFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch_binary(self, identifier: str) -> FetchOutcome:
        kind = ArtifactKind.DIRECT
        path = self.store.path_for(identifier, kind)
        url = self.settings.pdf_url(identifier)
        shown = redact_url(url)

        def outcome(result: OutcomeKind, **extra) -> FetchOutcome:
            return FetchOutcome(
                identifier=identifier, artifact=kind, kind=result, url=shown, path=path, **extra
            )

        if self.store.exists(identifier, kind):
            return outcome(OutcomeKind.ALREADY_PRESENT)

        logger.debug("GET %s", shown)
        timeout = self.settings.download_timeout_seconds
        deadline = time.monotonic() + timeout
        try:
            with self.client.stream("GET", url, timeout=timeout) as resp:
                status = resp.status_code
                if status == 429:
                    return outcome(OutcomeKind.RATE_LIMITED, status=429, error="Too Many Requests")
                if status != 200:
                    return outcome(OutcomeKind.BAD_STATUS, status=status)

                content_type = resp.headers.get("content-type", "")
                if PDF_CONTENT_TYPE not in content_type.lower():
                    return outcome(
                        OutcomeKind.BAD_CONTENT_TYPE,
                        status=status,
                        error=f"content-type {content_type!r}, expected {PDF_CONTENT_TYPE}",
                    )

                # The client timeout bounds each read, not the whole transfer.
                chunks = []
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        return outcome(
                            OutcomeKind.TRANSPORT_ERROR,
                            status=status,
                            error=f"download exceeded {timeout:.0f}s",
                        )
        except httpx.HTTPError as exc:
            return outcome(OutcomeKind.TRANSPORT_ERROR, error=f"{type(exc).__name__}: {exc}")

        body = b"".join(chunks)
        if not body:
            return outcome(OutcomeKind.EMPTY_BODY, status=status)

        try:
            self.store.write_atomic(identifier, kind, body)
        except OSError as exc:
            return outcome(OutcomeKind.WRITE_FAILED, status=status, error=str(exc))

        return outcome(OutcomeKind.SAVED, status=status, size=len(body))

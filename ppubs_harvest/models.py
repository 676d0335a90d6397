"""Pydantic models shared across the harvester."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

_TOKEN_RE = re.compile(r"(requestToken=)[^&]*")


def redact_url(url: str) -> str:
    """Hide the access token in a request URL before it is logged."""
    return _TOKEN_RE.sub(r"\1***", url)


class ArtifactKind(str, Enum):
    """The two artifacts acquired per identifier."""

    DIRECT = "direct"
    RENDERED = "rendered"

    @property
    def suffix(self) -> str:
        return ".pdf" if self is ArtifactKind.DIRECT else "_html.pdf"


class OutcomeKind(str, Enum):
    SAVED = "saved"
    ALREADY_PRESENT = "already_present"
    BAD_STATUS = "bad_status"
    BAD_CONTENT_TYPE = "bad_content_type"
    EMPTY_BODY = "empty_body"
    WRITE_FAILED = "write_failed"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_ERROR = "transport_error"
    NAVIGATION_FAILED = "navigation_failed"


class SearchRecord(BaseModel):
    """One document in the search response. Only the patent number is used."""

    patent_number: Optional[str] = Field(default=None, alias="patentNumber")


class SearchResponse(BaseModel):
    docs: List[SearchRecord] = Field(default_factory=list)


class FetchOutcome(BaseModel):
    """Result of one acquisition attempt for one artifact."""

    identifier: str
    artifact: ArtifactKind
    kind: OutcomeKind
    url: Optional[str] = None
    path: Optional[Path] = None
    size: int = 0
    status: Optional[int] = None
    gate: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Return True when the artifact is on disk after this attempt."""
        return self.kind in (OutcomeKind.SAVED, OutcomeKind.ALREADY_PRESENT)

    @property
    def gate_failed(self) -> bool:
        """Return True when the rendered capture gate refused to render."""
        return self.gate is not None

    def summary(self) -> str:
        """One human-readable line describing the attempt."""
        label = f"[{self.kind.value}] {self.artifact.value} {self.identifier}"
        if self.kind is OutcomeKind.SAVED:
            return f"{label}: {self.size} bytes -> {self.path}"
        if self.kind is OutcomeKind.ALREADY_PRESENT:
            return f"{label}: skipping, {self.path} exists"
        parts = []
        if self.status is not None:
            parts.append(f"HTTP {self.status}")
        if self.gate:
            parts.append(f"gate={self.gate}")
        if self.error:
            parts.append(self.error)
        if self.url:
            parts.append(f"url={self.url}")
        return f"{label}: " + " | ".join(parts)


class RunSummary(BaseModel):
    """Aggregated result of one harvest run."""

    identifiers_found: int = 0
    identifiers_unique: int = 0
    outcomes: List[FetchOutcome] = Field(default_factory=list)
    cooldowns: int = 0

    @property
    def attempts(self) -> int:
        return len(self.outcomes)

    def counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for o in self.outcomes:
            out[o.kind.value] = out.get(o.kind.value, 0) + 1
        return out

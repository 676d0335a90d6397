"""Tests for ppubs_harvest.models."""

from pathlib import Path

from ppubs_harvest.models import (
    ArtifactKind,
    FetchOutcome,
    OutcomeKind,
    RunSummary,
    redact_url,
)


def _make_outcome(**overrides) -> FetchOutcome:
    defaults = {
        "identifier": "US-1",
        "artifact": ArtifactKind.DIRECT,
        "kind": OutcomeKind.SAVED,
        "path": Path("PDFs/US-1.pdf"),
        "size": 10,
    }
    defaults.update(overrides)
    return FetchOutcome(**defaults)


class TestArtifactKind:
    def test_suffixes(self):
        assert ArtifactKind.DIRECT.suffix == ".pdf"
        assert ArtifactKind.RENDERED.suffix == "_html.pdf"


class TestFetchOutcome:
    def test_saved_is_success(self):
        assert _make_outcome().is_success is True

    def test_already_present_is_success(self):
        assert _make_outcome(kind=OutcomeKind.ALREADY_PRESENT).is_success is True

    def test_failure_is_not_success(self):
        assert _make_outcome(kind=OutcomeKind.BAD_STATUS, status=404).is_success is False

    def test_gate_failed(self):
        assert _make_outcome(kind=OutcomeKind.RATE_LIMITED, gate="content").gate_failed is True
        assert _make_outcome(kind=OutcomeKind.RATE_LIMITED).gate_failed is False

    def test_summary_saved(self):
        line = _make_outcome().summary()
        assert line.startswith("[saved] direct US-1")
        assert "10 bytes" in line

    def test_summary_failure_parts(self):
        line = _make_outcome(
            kind=OutcomeKind.BAD_STATUS, status=503, url="https://x/y?requestToken=***"
        ).summary()
        assert "HTTP 503" in line
        assert "requestToken=***" in line


class TestRunSummary:
    def test_counts(self):
        summary = RunSummary(
            outcomes=[
                _make_outcome(),
                _make_outcome(identifier="US-2"),
                _make_outcome(kind=OutcomeKind.EMPTY_BODY),
            ]
        )
        assert summary.attempts == 3
        assert summary.counts() == {"saved": 2, "empty_body": 1}


class TestRedactUrl:
    def test_token_hidden(self):
        url = "https://h/api/patents/html/US-1?source=US-PGPUB&requestToken=secret"
        assert redact_url(url) == "https://h/api/patents/html/US-1?source=US-PGPUB&requestToken=***"

    def test_no_token_untouched(self):
        assert redact_url("https://h/a") == "https://h/a"

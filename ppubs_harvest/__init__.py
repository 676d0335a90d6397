"""ppubs-harvest: resumable bulk retrieval of USPTO patent documents."""

from .backoff import BackoffController, should_cool_down
from .config import Settings, get_settings
from .direct import DirectFetcher
from .models import ArtifactKind, FetchOutcome, OutcomeKind, RunSummary
from .pipeline import AcquisitionPipeline, run_harvest
from .render import RenderedCaptureEngine
from .search import dedupe_identifiers, fetch_identifiers, query_identifiers
from .store import ArtifactStore

__all__ = [
    "Settings",
    "get_settings",
    "ArtifactKind",
    "OutcomeKind",
    "FetchOutcome",
    "RunSummary",
    "ArtifactStore",
    "query_identifiers",
    "fetch_identifiers",
    "dedupe_identifiers",
    "DirectFetcher",
    "RenderedCaptureEngine",
    "BackoffController",
    "should_cool_down",
    "AcquisitionPipeline",
    "run_harvest",
]

"""Fixed-cooldown circuit breaker for upstream rate limiting."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .errors import is_connection_closed
from .models import ArtifactKind, FetchOutcome, OutcomeKind

logger = logging.getLogger(__name__)


def should_cool_down(outcome: FetchOutcome) -> bool:
    """Return True when an attempt's outcome means the upstream wants a pause.

    Rate limiting on either path counts, as does a dropped connection during
    rendered navigation. Nothing is remembered between calls.
    """
    if outcome.kind is OutcomeKind.RATE_LIMITED:
        return True
    return (
        outcome.artifact is ArtifactKind.RENDERED
        and outcome.kind is OutcomeKind.NAVIGATION_FAILED
        and is_connection_closed(outcome.error)
    )


class BackoffController:
    """Blocks the whole pipeline for a fixed cooldown when asked to."""

    def __init__(self, cooldown_seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.cooldown_seconds = cooldown_seconds
        self._sleep = sleep

    def maybe_cool_down(self, outcome: FetchOutcome) -> bool:
        if not should_cool_down(outcome):
            return False
        logger.warning(
            "Upstream pushback on %s (%s); cooling down for %.0fs",
            outcome.identifier, outcome.kind.value, self.cooldown_seconds,
        )
        self._sleep(self.cooldown_seconds)
        return True

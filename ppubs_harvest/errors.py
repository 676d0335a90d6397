"""Failure signals shared by the fetch paths.

The upstream does not document its rate-limit response, so recognising it is a
text match. Both predicates below are the only places that pattern-match on
upstream text; harden them here rather than at the call sites.
"""

from __future__ import annotations

from typing import Iterable

from bs4 import BeautifulSoup

CONNECTION_CLOSED_MARKERS = (
    "forcibly closed",
    "ERR_CONNECTION_CLOSED",
    "ERR_CONNECTION_RESET",
    "ERR_EMPTY_RESPONSE",
    "connection reset",
    "Connection closed",
)


class FetchFailed(RuntimeError):
    """The search query could not produce a list of identifiers."""


def is_rate_limit_message(content: str, markers: Iterable[str]) -> bool:
    """Return True when a rendered page carries the upstream rate-limit message.

    A rate-limited navigation can come back as HTTP 200 wrapping a JSON error,
    which Chromium renders inside a ``<pre>``. The markers are matched against
    both the raw markup and its visible text so entity-escaping in either form
    does not hide them.
    """
    if not content:
        return False
    text = BeautifulSoup(content, "html.parser").get_text(" ", strip=True)
    for marker in markers:
        if marker and (marker in content or marker in text):
            return True
    return False


def is_connection_closed(error: str | None) -> bool:
    """Return True when an error text says the upstream dropped the connection."""
    if not error:
        return False
    lowered = error.lower()
    return any(m.lower() in lowered for m in CONNECTION_CLOSED_MARKERS)

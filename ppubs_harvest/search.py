"""Identifier source: one search query per run, plus first-seen dedupe."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings, get_settings
from .errors import FetchFailed
from .models import SearchResponse

logger = logging.getLogger(__name__)

DATABASES = ("USPAT", "US-PGPUB", "USOCR")
FIELDS = (
    "documentId",
    "patentNumber",
    "title",
    "datePublished",
    "inventors",
    "pageCount",
    "type",
)


def build_query(page_size: int, settings: Settings) -> Dict[str, Any]:
    """Build the generic-search payload."""
    return {
        "cursorMarker": "*",
        "databaseFilters": [{"databaseName": name} for name in DATABASES],
        "fields": list(FIELDS),
        "op": "AND",
        "pageSize": page_size,
        "q": settings.search_query,
        "searchType": 0,
        "sort": settings.search_sort,
    }


def _client(settings: Settings) -> httpx.Client:
    return httpx.Client(
        timeout=settings.search_timeout_seconds,
        follow_redirects=True,
        headers={
            "user-agent": settings.user_agent,
            "accept": "application/json",
        },
    )


def _retry_decorator(settings: Settings):
    return retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(settings.search_max_attempts),
        wait=wait_exponential(min=settings.backoff_min, max=settings.backoff_max),
        reraise=True,
    )


def extract_identifiers(payload: Any) -> List[str]:
    """Pull patent numbers out of a decoded search response, in order.

    Raises:
        FetchFailed: If the payload does not have the expected shape.
    """
    try:
        parsed = SearchResponse.model_validate(payload)
    except ValidationError as exc:
        raise FetchFailed(f"Unexpected search response shape: {exc}") from exc

    out: List[str] = []
    for doc in parsed.docs:
        number = (doc.patent_number or "").strip()
        if not number:
            logger.warning("Search record without a patent number, skipping")
            continue
        out.append(number)
    return out


def query_identifiers(
    page_size: int,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> List[str]:
    """Run the search query and return raw identifiers, duplicates included.

    Raises:
        FetchFailed: On transport errors, non-2xx responses, or a body that
            is not the expected JSON.
    """
    s = settings or get_settings()
    payload = build_query(page_size, s)
    headers = {
        "x-access-token": s.access_token,
        "content-type": "application/json",
        "accept": "application/json",
    }

    logger.info("Searching %s (pageSize=%d)", s.search_url, page_size)

    @_retry_decorator(s)
    def _do_request(c: httpx.Client) -> httpx.Response:
        return c.post(
            s.search_url, json=payload, headers=headers, timeout=s.search_timeout_seconds
        )

    try:
        if client is not None:
            resp = _do_request(client)
        else:
            with _client(s) as c:
                resp = _do_request(c)
    except httpx.HTTPError as exc:
        raise FetchFailed(f"Search request failed: {exc}") from exc

    if not resp.is_success:
        raise FetchFailed(f"Search returned HTTP {resp.status_code}")

    try:
        body = resp.json()
    except ValueError as exc:
        raise FetchFailed(f"Search response is not JSON: {exc}") from exc

    identifiers = extract_identifiers(body)
    logger.info("Search returned %d identifiers", len(identifiers))
    return identifiers


def fetch_identifiers(
    page_size: int,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> List[str]:
    """Like :func:`query_identifiers`, but a failed search yields ``[]``."""
    try:
        return query_identifiers(page_size, settings=settings, client=client)
    except FetchFailed as exc:
        logger.error("No identifiers this run: %s", exc)
        return []


def dedupe_identifiers(identifiers: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping the first occurrence of each identifier."""
    seen = set()
    out: List[str] = []
    for ident in identifiers:
        if ident not in seen:
            seen.add(ident)
            out.append(ident)
    return out

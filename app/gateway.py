# gateway.py
# Upstream fetch for GIS / Overpass sources.
# - fetch_first_available: try candidate endpoints in order, first good JSON object wins
# - fetch_all_pages: ArcGIS resultOffset paging while exceededTransferLimit is set
# - fresh/stale payload copies in Redis (see cache.py); never raises to the caller

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

import cache
from settings import HTTP_TIMEOUT, MAX_PAGES, PAGE_SIZE, USER_AGENT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    url: str
    method: str = "GET"
    params: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def digest(self) -> str:
        return cache.source_digest(self.method, self.url, self.params, self.data)

    def with_params(self, **extra: Any) -> "Endpoint":
        return Endpoint(url=self.url, method=self.method, params={**self.params, **extra}, data=dict(self.data))


def new_client(**kwargs: Any) -> httpx.AsyncClient:
    kwargs.setdefault("timeout", HTTP_TIMEOUT)
    kwargs.setdefault("headers", {"User-Agent": USER_AGENT})
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("http2", True)
    return httpx.AsyncClient(**kwargs)


async def _get_json(client: httpx.AsyncClient, endpoint: Endpoint) -> Optional[dict]:
    try:
        resp = await client.request(
            endpoint.method,
            endpoint.url,
            params=endpoint.params or None,
            data=endpoint.data or None,
        )
        resp.raise_for_status()
        payload = resp.json()
    except Exception as exc:
        logger.warning("[gateway] %s %s failed: %s", endpoint.method, endpoint.url, exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("[gateway] %s: response is not a JSON object", endpoint.url)
        return None
    # ArcGIS reports query errors with HTTP 200 and an "error" member
    if payload.get("error"):
        logger.warning("[gateway] %s: error body %s", endpoint.url, payload.get("error"))
        return None
    return payload


async def _serve_stale(candidates: Sequence[Endpoint], digests: Sequence[str]) -> Optional[dict]:
    for endpoint, digest in zip(candidates, digests):
        stale = await cache.get_stale(digest)
        if isinstance(stale, dict):
            logger.warning("[gateway] all candidates failed; serving stale copy of %s", endpoint.url)
            stale["_stale"] = True
            return stale
    return None


async def fetch_first_available(client: httpx.AsyncClient, candidates: Sequence[Endpoint]) -> Optional[dict]:
    digests = [endpoint.digest for endpoint in candidates]
    for endpoint, digest in zip(candidates, digests):
        cached = await cache.get_fresh(digest)
        if cached is not None:
            return cached
        payload = await _get_json(client, endpoint)
        if payload is not None:
            await cache.put_payload(digest, payload)
            return payload
    return await _serve_stale(candidates, digests)


def _more_data(page: Dict[str, Any]) -> bool:
    if page.get("exceededTransferLimit"):
        return True
    props = page.get("properties")
    return isinstance(props, dict) and bool(props.get("exceededTransferLimit"))


async def fetch_all_pages(
    client: httpx.AsyncClient,
    endpoint: Endpoint,
    page_size: int = PAGE_SIZE,
) -> Optional[List[Any]]:
    """
    Concatenate every page of an ArcGIS query. A failed page fails the whole fetch (None)
    so the caller can move on to the next candidate.
    """
    records: List[Any] = []
    offset = 0
    for page_no in range(MAX_PAGES):
        page = await _get_json(client, endpoint.with_params(resultOffset=offset, resultRecordCount=page_size))
        if page is None:
            return None
        features = page.get("features")
        if not isinstance(features, list):
            logger.warning("[gateway] %s: page %d has no features list", endpoint.url, page_no)
            return None
        records.extend(features)
        if not features or not _more_data(page):
            logger.debug("[gateway] %s: %d records in %d pages", endpoint.url, len(records), page_no + 1)
            return records
        offset += len(features)
    logger.warning("[gateway] %s: stopped after %d pages (%d records)", endpoint.url, MAX_PAGES, len(records))
    return records


async def fetch_first_available_pages(
    client: httpx.AsyncClient,
    candidates: Sequence[Endpoint],
    page_size: int = PAGE_SIZE,
) -> Optional[dict]:
    digests = [endpoint.with_params(resultRecordCount=page_size).digest for endpoint in candidates]
    for endpoint, digest in zip(candidates, digests):
        cached = await cache.get_fresh(digest)
        if cached is not None:
            return cached
        records = await fetch_all_pages(client, endpoint, page_size)
        if records is not None:
            payload = {"features": records}
            await cache.put_payload(digest, payload)
            return payload
    return await _serve_stale(candidates, digests)

# loader.py
# Load pipeline: fetch feeds -> normalize -> dedupe -> fallback -> atomic slot write.
# Every category loads as its own task; load_all waits for all of them before reporting.

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import httpx

from cache import STAT_FALLBACKS, STAT_LOADS, incr
from category_store import CategorySlot, CategoryStore
from dedupe import KeyFn, dedupe, place_key
from fallback import LoadResult, Resolution, SourceError, copy_items, resolve
from gateway import Endpoint, fetch_first_available, fetch_first_available_pages, new_client
from models import CategoryStatus, Item, LoadReport

logger = logging.getLogger(__name__)

Adapter = Callable[[dict], List[Item]]


@dataclass(frozen=True)
class Feed:
    """One upstream dataset: candidate endpoints in priority order + the adapter for its payload."""

    name: str
    candidates: Tuple[Endpoint, ...]
    adapter: Adapter
    paged: bool = False


@dataclass(frozen=True)
class Source:
    key: str
    feeds: Tuple[Feed, ...] = ()
    key_fn: KeyFn = place_key

    @property
    def static(self) -> bool:
        return not self.feeds


async def _load_feed(client: httpx.AsyncClient, feed: Feed) -> Tuple[List[Item], bool]:
    if feed.paged:
        payload = await fetch_first_available_pages(client, feed.candidates)
    else:
        payload = await fetch_first_available(client, feed.candidates)
    if payload is None:
        raise SourceError(feed.name)
    return feed.adapter(payload), bool(payload.get("_stale"))


async def load_source(client: httpx.AsyncClient, source: Source) -> LoadResult:
    """Fetch and normalize every feed of a source. Never raises; failures come back as result.error."""
    outcomes = await asyncio.gather(
        *(_load_feed(client, feed) for feed in source.feeds),
        return_exceptions=True,
    )

    items: List[Item] = []
    errors: List[SourceError] = []
    stale = False
    for feed, outcome in zip(source.feeds, outcomes):
        if isinstance(outcome, SourceError):
            errors.append(outcome)
            continue
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error("[load] %s/%s: %s: %s", source.key, feed.name, type(outcome).__name__, outcome)
            errors.append(SourceError(feed.name, f"{type(outcome).__name__}: {outcome}"))
            continue
        feed_items, feed_stale = outcome
        logger.debug("[load] %s/%s: %d items", source.key, feed.name, len(feed_items))
        items.extend(feed_items)
        stale = stale or feed_stale

    if errors and len(errors) == len(source.feeds):
        message = "; ".join(str(e) for e in errors)
        return LoadResult(key=source.key, error=SourceError(source.key, message))
    for err in errors:
        logger.warning("[load] %s: partial failure: %s", source.key, err)

    merged = dedupe(items, source.key_fn)
    if len(merged) != len(items):
        logger.debug("[load] %s: dedupe dropped %d of %d", source.key, len(items) - len(merged), len(items))
    return LoadResult(key=source.key, items=merged, stale=stale)


async def load_category(client: httpx.AsyncClient, slot: CategorySlot, source: Source) -> Resolution:
    fallback_items = slot.category.fallback_items
    if source.static:
        resolution = Resolution(items=copy_items(fallback_items), used_fallback=False, reason="static")
    else:
        result = await load_source(client, source)
        resolution = resolve(result, fallback_items)

    slot.replace(resolution.items)
    await incr(STAT_LOADS)
    if resolution.used_fallback:
        await incr(STAT_FALLBACKS)
        logger.warning(
            "[load] %s: using %d sample items (%s)%s",
            slot.key,
            len(resolution.items),
            resolution.reason,
            f": {resolution.error}" if resolution.error else "",
        )
    else:
        logger.info("[load] %s: %d items (%s)", slot.key, len(resolution.items), resolution.reason)
    return resolution


def build_report(store: CategoryStore, resolutions: Dict[str, Resolution]) -> LoadReport:
    statuses: Dict[str, CategoryStatus] = {}
    for key, res in resolutions.items():
        statuses[key] = CategoryStatus(
            key=key,
            status=res.reason,
            item_count=len(res.items),
            error=str(res.error) if res.error else None,
        )

    fallback_labels = [store.get(k).label for k, res in resolutions.items() if res.used_fallback]
    stale_labels = [store.get(k).label for k, res in resolutions.items() if res.reason == "stale"]
    parts = [f"Loaded {len(statuses)} categories."]
    if fallback_labels:
        parts.append("Live data unavailable; showing sample data for: " + ", ".join(fallback_labels) + ".")
    if stale_labels:
        parts.append("Using cached data for: " + ", ".join(stale_labels) + ".")
    return LoadReport(
        degraded=bool(fallback_labels or stale_labels),
        message=" ".join(parts),
        categories=statuses,
    )


async def load_all(
    store: CategoryStore,
    sources: Iterable[Source],
    client: Optional[httpx.AsyncClient] = None,
) -> LoadReport:
    sources = list(sources)
    slots = [store.slot(source.key) for source in sources]

    own_client = client is None
    if own_client:
        client = new_client()
    try:
        resolutions = await asyncio.gather(
            *(load_category(client, slot, source) for slot, source in zip(slots, sources))
        )
    finally:
        if own_client:
            await client.aclose()

    report = build_report(store, {source.key: res for source, res in zip(sources, resolutions)})
    store.last_report = report
    if report.degraded:
        logger.warning("[load] %s", report.message)
    else:
        logger.info("[load] %s", report.message)
    return report

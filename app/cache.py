# cache.py
# Async Redis cache for upstream source payloads: fresh copy with TTL+jitter,
# long-lived stale copy for outages, and stats counters. Fail-open everywhere.

import hashlib
import json
import random
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError, TimeoutError, BusyLoadingError

from settings import CACHE_ENABLED, REDIS_URL, SOURCE_CACHE_TTL, STALE_CACHE_TTL

_pool = redis.ConnectionPool.from_url(
    REDIS_URL,
    max_connections=50,
    socket_connect_timeout=1.0,
    socket_timeout=1.5,
    health_check_interval=30,
    retry_on_timeout=True,
    decode_responses=True,
)
r = redis.Redis(connection_pool=_pool)

STAT_QUERIES    = "stats:nearby:queries"
STAT_LOADS      = "stats:nearby:loads"
STAT_FALLBACKS  = "stats:nearby:fallbacks"
STAT_CACHE_HIT  = "stats:nearby:source_cache_hits"
STAT_CACHE_MISS = "stats:nearby:source_cache_misses"
STAT_STALE      = "stats:nearby:stale_served"
STAT_KEYS = {
    "queries": STAT_QUERIES,
    "loads": STAT_LOADS,
    "fallbacks": STAT_FALLBACKS,
    "source_cache_hits": STAT_CACHE_HIT,
    "source_cache_misses": STAT_CACHE_MISS,
    "stale_served": STAT_STALE,
}

FRESH_KEY = "nearby:v1:src:{digest}"
STALE_KEY = "nearby:v1:stale:{digest}"

_CACHE_ERRORS = (ConnectionError, TimeoutError, BusyLoadingError, OSError)


def _dump(v: Any) -> str:
    return json.dumps(v, separators=(",", ":"), ensure_ascii=False, sort_keys=True)


def _load(s: Optional[str]) -> Any:
    return None if s is None else json.loads(s)


def _jitter(ttl: int, max_j: int = 30) -> int:
    return ttl + random.randint(0, max_j)


def source_digest(method: str, url: str, params: Optional[Dict[str, Any]], data: Optional[Dict[str, Any]]) -> str:
    raw = _dump({"m": method.upper(), "u": url, "p": params or {}, "d": data or {}})
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


async def incr(key: str, by: int = 1) -> None:
    if not CACHE_ENABLED:
        return
    try:
        await r.incrby(key, by)
    except Exception:
        pass  # fail-open


async def cache_get(key: str) -> Optional[Any]:
    if not CACHE_ENABLED:
        return None
    try:
        return _load(await r.get(key))
    except _CACHE_ERRORS:
        return None
    except ValueError:
        return None


async def cache_set(key: str, value: Any, ttl: int) -> None:
    if not CACHE_ENABLED:
        return
    try:
        await r.setex(key, ttl, _dump(value))
    except _CACHE_ERRORS:
        pass


# ---- Source payloads ----

async def get_fresh(digest: str) -> Optional[Any]:
    val = await cache_get(FRESH_KEY.format(digest=digest))
    await incr(STAT_CACHE_HIT if val is not None else STAT_CACHE_MISS)
    return val


async def get_stale(digest: str) -> Optional[Any]:
    val = await cache_get(STALE_KEY.format(digest=digest))
    if val is not None:
        await incr(STAT_STALE)
    return val


async def put_payload(digest: str, payload: Any) -> None:
    await cache_set(FRESH_KEY.format(digest=digest), payload, _jitter(SOURCE_CACHE_TTL))
    await cache_set(STALE_KEY.format(digest=digest), payload, STALE_CACHE_TTL)


# ---- Health & stats ----

async def redis_ok() -> bool:
    if not CACHE_ENABLED:
        return False
    try:
        await r.ping()
        return True
    except Exception:
        return False


async def stats() -> Dict[str, Any]:
    out: Dict[str, Any] = {name: 0 for name in STAT_KEYS}
    if not CACHE_ENABLED:
        return out
    try:
        pipe = r.pipeline()
        for key in STAT_KEYS.values():
            pipe.get(key)
        values = await pipe.execute()
    except _CACHE_ERRORS:
        return out
    for name, val in zip(STAT_KEYS, values):
        out[name] = int(val or 0)
    hits, misses = out["source_cache_hits"], out["source_cache_misses"]
    out["source_hit_ratio"] = (hits / (hits + misses)) if (hits + misses) else None
    return out

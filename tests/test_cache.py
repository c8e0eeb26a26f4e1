import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from redis.exceptions import ConnectionError

import cache


def _redis(**methods):
    r = MagicMock()
    for name, mock in methods.items():
        setattr(r, name, mock)
    return r


def test_disabled_cache_is_a_no_op():
    r = _redis(get=AsyncMock(), setex=AsyncMock())
    with patch.object(cache, "CACHE_ENABLED", False), patch.object(cache, "r", r):
        assert asyncio.run(cache.get_fresh("abc")) is None
        asyncio.run(cache.put_payload("abc", {"x": 1}))
    r.get.assert_not_called()
    r.setex.assert_not_called()


def test_fresh_hit_counts_and_decodes():
    r = _redis(get=AsyncMock(return_value='{"features":[1]}'), incrby=AsyncMock())
    with patch.object(cache, "CACHE_ENABLED", True), patch.object(cache, "r", r):
        assert asyncio.run(cache.get_fresh("abc")) == {"features": [1]}
    r.get.assert_awaited_once_with("nearby:v1:src:abc")
    r.incrby.assert_awaited_once_with(cache.STAT_CACHE_HIT, 1)


def test_put_payload_writes_fresh_and_stale_copies():
    r = _redis(setex=AsyncMock())
    with patch.object(cache, "CACHE_ENABLED", True), patch.object(cache, "r", r):
        asyncio.run(cache.put_payload("abc", {"elements": []}))
    keys = [call.args[0] for call in r.setex.await_args_list]
    assert keys == ["nearby:v1:src:abc", "nearby:v1:stale:abc"]
    fresh_ttl = r.setex.await_args_list[0].args[1]
    assert cache.SOURCE_CACHE_TTL <= fresh_ttl <= cache.SOURCE_CACHE_TTL + 30
    assert r.setex.await_args_list[1].args[1] == cache.STALE_CACHE_TTL


def test_redis_down_fails_open():
    r = _redis(
        get=AsyncMock(side_effect=ConnectionError("refused")),
        setex=AsyncMock(side_effect=ConnectionError("refused")),
        incrby=AsyncMock(side_effect=ConnectionError("refused")),
    )
    with patch.object(cache, "CACHE_ENABLED", True), patch.object(cache, "r", r):
        assert asyncio.run(cache.get_stale("abc")) is None
        asyncio.run(cache.put_payload("abc", {"x": 1}))
        asyncio.run(cache.incr(cache.STAT_QUERIES))


def test_source_digest_is_stable_across_dict_order():
    a = cache.source_digest("get", "https://x.test", {"a": 1, "b": 2}, None)
    b = cache.source_digest("GET", "https://x.test", {"b": 2, "a": 1}, {})
    assert a == b

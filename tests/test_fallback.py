from fallback import LoadResult, SourceError, resolve
from models import Item

FALLBACK = (
    Item(name="Union Station (RTD)", details="Rail + bus hub", lat=39.7527, lng=-105.0008),
    Item(name="16th & California", details="Free MallRide stop", lat=39.7448, lng=-104.9903),
)


def test_live_items_are_kept():
    live = [Item(name="Live stop", lat=39.7, lng=-105.0)]
    res = resolve(LoadResult(key="transit_stops", items=live), FALLBACK)
    assert res.items == live
    assert res.used_fallback is False
    assert res.reason == "live"


def test_stale_items_are_kept_but_flagged():
    live = [Item(name="Cached stop", lat=39.7, lng=-105.0)]
    res = resolve(LoadResult(key="transit_stops", items=live, stale=True), FALLBACK)
    assert res.items == live
    assert res.reason == "stale"


def test_empty_result_uses_fallback_by_value():
    res = resolve(LoadResult(key="transit_stops", items=[]), FALLBACK)
    assert res.used_fallback is True
    assert res.reason == "empty"
    assert res.items == list(FALLBACK)


def test_error_uses_fallback_and_keeps_error():
    err = SourceError("overpass_transit")
    res = resolve(LoadResult(key="transit_stops", error=err), FALLBACK)
    assert res.used_fallback is True
    assert res.reason == "error"
    assert res.error is err
    assert res.items == list(FALLBACK)


def test_fallback_items_are_copies():
    res = resolve(LoadResult(key="transit_stops"), FALLBACK)
    assert all(a is not b for a, b in zip(res.items, FALLBACK))
    res.items[0].name = "mutated"
    res.items.append(Item(name="extra", lat=0.0, lng=0.0))
    assert FALLBACK[0].name == "Union Station (RTD)"
    assert len(FALLBACK) == 2


def test_source_error_message():
    err = SourceError("rno", "HTTP 500")
    assert str(err) == "rno: HTTP 500"
    assert err.source == "rno"

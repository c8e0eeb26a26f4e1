# provider_overpass.py
# Overpass QL for the OSM-backed categories; one POST endpoint per mirror.

from typing import Iterable, List, Tuple

from gateway import Endpoint

BBox = Tuple[float, float, float, float]  # south, west, north, east


def _bbox(bbox: BBox) -> str:
    return ",".join(f"{v:.4f}" for v in bbox)


def _compact(query: str) -> str:
    return "\n".join(line.strip() for line in query.splitlines() if line.strip())


def transit_query(bbox: BBox, timeout: int = 60) -> str:
    """Stop nodes, then the route relations that reference them (for line lists)."""
    b = _bbox(bbox)
    return _compact(f"""
    [out:json][timeout:{timeout}];
    (
      node["highway"="bus_stop"]({b});
      node["public_transport"="platform"]({b});
      node["railway"~"^(station|halt|tram_stop)$"]({b});
    )->.stops;
    .stops out body;
    rel(bn.stops)["type"="route"];
    out body;
    """)


def places_query(bbox: BBox, selectors: Iterable[str], timeout: int = 60) -> str:
    """nodes/ways/relations matching any tag selector, e.g. '["shop"="supermarket"]'."""
    b = _bbox(bbox)
    body = "\n".join(f"nwr{sel}({b});" for sel in selectors)
    return _compact(f"""
    [out:json][timeout:{timeout}];
    (
    {body}
    );
    out center;
    """)


def grocery_query(bbox: BBox) -> str:
    return places_query(bbox, ['["shop"~"^(supermarket|grocery|greengrocer)$"]'])


def library_query(bbox: BBox) -> str:
    return places_query(bbox, ['["amenity"="library"]'])


def interpreter_candidates(urls: Iterable[str], query: str) -> List[Endpoint]:
    return [Endpoint(url=url, method="POST", data={"data": query}) for url in urls]

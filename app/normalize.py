# normalize.py
# Provider payloads -> Item. One adapter per upstream shape:
# - GeoJSON FeatureCollection (ArcGIS f=geojson)
# - ArcGIS attribute records {features: [{attributes, geometry: {x, y}}]}
# - Overpass transit stop nodes + route relations
# - Overpass places (nodes, or ways/relations with "out center")
#
# Adapters never raise on a bad record; records without finite coordinates are dropped.

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from models import Item

logger = logging.getLogger(__name__)

SEP = " · "
MAX_ROUTE_REFS = 12
ROUTE_REF_TAGS = ("route_ref", "routes", "lines")

_REF_SPLIT = re.compile(r"[;,/|]")
_NUMERIC = re.compile(r"-?\d+(\.\d+)?")
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
)


@dataclass(frozen=True)
class FieldRules:
    """Candidate keys per logical field, in priority order (first non-empty wins)."""

    name: Tuple[str, ...] = ("name", "NAME", "Name")
    status: Tuple[str, ...] = ()
    date: Tuple[str, ...] = ()
    number: Tuple[str, ...] = ()
    website: Tuple[str, ...] = ()


def first_present(record: Any, keys: Iterable[str]) -> Any:
    if not isinstance(record, dict):
        return None
    for key in keys:
        val = record.get(key)
        if val is None:
            continue
        if isinstance(val, str):
            val = val.strip()
            if not val:
                continue
        return val
    return None


def _as_text(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val).strip()


def _finite(val: Any) -> Optional[float]:
    if val is None or isinstance(val, bool):
        return None
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _make_item(name: str, details: str, lat: Any, lng: Any) -> Optional[Item]:
    lat_f = _finite(lat)
    lng_f = _finite(lng)
    if lat_f is None or lng_f is None:
        return None
    try:
        return Item(name=name, details=details, lat=lat_f, lng=lng_f)
    except ValidationError:
        return None


def _details(*parts: str) -> str:
    return SEP.join(p for p in parts if p)


def _log_skipped(source: str, skipped: int) -> None:
    if skipped:
        logger.debug("[normalize] %s: skipped %d malformed records", source, skipped)


# ----------------- Dates -----------------

def _short_date(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return f"{dt.month}/{dt.day}/{dt.year}"


def _from_epoch_ms(ms: float) -> str:
    if not math.isfinite(ms):
        return ""
    try:
        dt = datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return ""
    return _short_date(dt)


def format_date(value: Any) -> str:
    """
    Format an epoch-millisecond number or a date string as M/D/YYYY (UTC).
    Unparseable input gives "".
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return _from_epoch_ms(float(value))
    if not isinstance(value, str):
        return ""
    text = value.strip()
    if not text:
        return ""
    if _NUMERIC.fullmatch(text):
        return _from_epoch_ms(float(text))
    try:
        return _short_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return _short_date(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return ""


def _updated(raw_date: Any) -> str:
    formatted = format_date(raw_date)
    return f"Updated {formatted}" if formatted else ""


# ----------------- GeoJSON -----------------

def _features(payload: Any) -> List[Any]:
    features = payload.get("features") if isinstance(payload, dict) else None
    return features if isinstance(features, list) else []


def _geojson_item(feature: Any, rules: FieldRules, default_name: str) -> Optional[Item]:
    if not isinstance(feature, dict):
        return None
    geometry = feature.get("geometry")
    coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    props = feature.get("properties")
    name = _as_text(first_present(props, rules.name)) or default_name
    details = _details(_as_text(first_present(props, rules.status)), _updated(first_present(props, rules.date)))
    return _make_item(name, details, lat=coords[1], lng=coords[0])


def from_geojson(payload: Any, rules: FieldRules, default_name: str) -> List[Item]:
    items: List[Item] = []
    skipped = 0
    for feature in _features(payload):
        item = _geojson_item(feature, rules, default_name)
        if item is None:
            skipped += 1
            continue
        items.append(item)
    _log_skipped("geojson", skipped)
    return items


# ----------------- ArcGIS attribute records -----------------

def _xy(feature: Dict[str, Any]) -> Tuple[Any, Any]:
    for key in ("geometry", "centroid"):
        point = feature.get(key)
        if isinstance(point, dict) and "x" in point and "y" in point:
            return point.get("x"), point.get("y")
    return None, None


def _arcgis_item(
    feature: Any,
    rules: FieldRules,
    default_name: str,
    number_label: Optional[str],
    plain_label: Optional[str],
) -> Optional[Item]:
    if not isinstance(feature, dict):
        return None
    x, y = _xy(feature)
    attrs = feature.get("attributes")
    name = _as_text(first_present(attrs, rules.name)) or default_name

    prefix = ""
    if number_label:
        number = _as_text(first_present(attrs, rules.number))
        prefix = f"{number_label} #{number}" if number else (plain_label or number_label)

    details = _details(
        prefix,
        _as_text(first_present(attrs, rules.status)),
        _updated(first_present(attrs, rules.date)),
        _as_text(first_present(attrs, rules.website)),
    )
    return _make_item(name, details, lat=y, lng=x)


def from_arcgis(
    payload: Any,
    rules: FieldRules,
    default_name: str,
    number_label: Optional[str] = None,
    plain_label: Optional[str] = None,
) -> List[Item]:
    items: List[Item] = []
    skipped = 0
    for feature in _features(payload):
        item = _arcgis_item(feature, rules, default_name, number_label, plain_label)
        if item is None:
            skipped += 1
            continue
        items.append(item)
    _log_skipped("arcgis", skipped)
    return items


# ----------------- Overpass -----------------

def _elements(payload: Any) -> List[Any]:
    elements = payload.get("elements") if isinstance(payload, dict) else None
    return elements if isinstance(elements, list) else []


def _tags(element: Dict[str, Any]) -> Dict[str, Any]:
    tags = element.get("tags")
    return tags if isinstance(tags, dict) else {}


def classify_stop(tags: Dict[str, Any]) -> str:
    railway = tags.get("railway")
    if tags.get("station") == "light_rail" or tags.get("light_rail") == "yes" or railway == "tram_stop":
        return "Light Rail Station"
    if railway in ("station", "halt") or tags.get("train") == "yes":
        return "Rail Station"
    if tags.get("highway") == "bus_stop" or tags.get("bus") == "yes":
        return "Bus Stop"
    return "Transit Platform"


def split_refs(value: Any) -> List[str]:
    out: List[str] = []
    if value is None:
        return out
    for part in _REF_SPLIT.split(str(value)):
        part = part.strip()
        if part and part not in out:
            out.append(part)
    return out


def route_refs_by_node(elements: Iterable[Any]) -> Dict[int, List[str]]:
    """Map stop node id -> refs of the route relations that list it as a member."""
    by_node: Dict[int, List[str]] = {}
    for el in elements:
        if not isinstance(el, dict) or el.get("type") != "relation":
            continue
        tags = _tags(el)
        if tags.get("type") not in ("route", None) and "route" not in tags:
            continue
        ref = _as_text(tags.get("ref") or tags.get("name"))
        members = el.get("members")
        if not ref or not isinstance(members, list):
            continue
        for member in members:
            if not isinstance(member, dict) or member.get("type") != "node":
                continue
            node_id = member.get("ref")
            if node_id is None:
                continue
            refs = by_node.setdefault(node_id, [])
            if ref not in refs:
                refs.append(ref)
    return by_node


def stop_lines(tags: Dict[str, Any], inferred: Iterable[str]) -> List[str]:
    lines: List[str] = []
    for key in ROUTE_REF_TAGS:
        for ref in split_refs(tags.get(key)):
            if ref not in lines:
                lines.append(ref)
    for ref in inferred:
        if ref not in lines:
            lines.append(ref)
    return lines[:MAX_ROUTE_REFS]


def from_overpass_stops(payload: Any, default_name: str = "Transit Stop") -> List[Item]:
    elements = _elements(payload)
    relation_refs = route_refs_by_node(elements)
    items: List[Item] = []
    skipped = 0
    for el in elements:
        if not isinstance(el, dict) or el.get("type", "node") != "node":
            continue
        tags = _tags(el)
        stop_type = classify_stop(tags)
        lines = stop_lines(tags, relation_refs.get(el.get("id"), []))
        details = f"{stop_type}{SEP}Lines: {', '.join(lines) or 'unavailable'}"
        name = _as_text(first_present(tags, ("name", "ref"))) or default_name
        item = _make_item(name, details, lat=el.get("lat"), lng=el.get("lon"))
        if item is None:
            skipped += 1
            continue
        items.append(item)
    _log_skipped("overpass stops", skipped)
    return items


def _street_address(tags: Dict[str, Any]) -> str:
    number = _as_text(tags.get("addr:housenumber"))
    street = _as_text(tags.get("addr:street"))
    return " ".join(p for p in (number, street) if p)


def from_overpass_places(payload: Any, default_name: str) -> List[Item]:
    items: List[Item] = []
    skipped = 0
    for el in _elements(payload):
        if not isinstance(el, dict):
            skipped += 1
            continue
        lat, lon = el.get("lat"), el.get("lon")
        if lat is None or lon is None:
            center = el.get("center")
            if isinstance(center, dict):
                lat, lon = center.get("lat"), center.get("lon")
        tags = _tags(el)
        name = _as_text(first_present(tags, ("name", "brand"))) or default_name
        details = _street_address(tags) or _as_text(tags.get("shop")).replace("_", " ")
        item = _make_item(name, details, lat=lat, lng=lon)
        if item is None:
            skipped += 1
            continue
        items.append(item)
    _log_skipped("overpass places", skipped)
    return items

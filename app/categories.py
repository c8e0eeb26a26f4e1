# categories.py
# Category registry for the Denver viewer: presentation metadata, search radius,
# sample (fallback) items and the live feeds behind each category.

from functools import partial
from typing import Dict, List, Tuple

import provider_arcgis as arcgis
import provider_overpass as overpass
from category_store import Category, CategoryStore
from dedupe import place_key
from fallback import copy_items
from loader import Feed, Source
from models import Item
from normalize import FieldRules, from_arcgis, from_geojson, from_overpass_places, from_overpass_stops
from settings import (
    CONSTRUCTION_LAYER_URLS,
    DEFAULT_RADIUS_MILES,
    DENVER_BBOX,
    OVERPASS_URLS,
    RNO_LAYER_URLS,
    ROW_PERMIT_LAYER_URLS,
    SDP_LAYER_URLS,
    TRANSIT_RADIUS_MILES,
)


def _items(*rows: Tuple[str, str, float, float]) -> Tuple[Item, ...]:
    return tuple(Item(name=name, details=details, lat=lat, lng=lng) for name, details, lat, lng in rows)


SAMPLES: Dict[str, Tuple[Item, ...]] = {
    "site_development_plans": _items(
        ("Broadway Mixed-Use SDP", "Approved 2025", 39.7206, -104.9873),
        ("RiNo Yard Redevelopment SDP", "Under review", 39.7594, -104.9808),
        ("Lowry East Parcel SDP", "Concept submitted", 39.7145, -104.8922),
    ),
    "construction": _items(
        ("Colfax Streetscape", "Roadway + ADA upgrades", 39.7402, -104.9563),
        ("South Platte Greenway Improvements", "Trail enhancement", 39.7526, -105.006),
        ("Auraria Utilities Relocation", "Underground utility work", 39.7432, -105.0068),
    ),
    "rnos": _items(
        ("Capitol Hill United Neighborhoods", "RNO #102", 39.7318, -104.9806),
        ("Five Points Business District", "RNO #247", 39.7598, -104.9775),
        ("West Highland Neighbors", "RNO #367", 39.7647, -105.045),
    ),
    "grocery_stores": _items(
        ("King Soopers - Speer", "1155 E 9th Ave", 39.7316, -104.9739),
        ("Safeway - Corona", "560 N Corona St", 39.7266, -104.9747),
        ("Natural Grocers - Colfax", "1433 N Washington St", 39.7402, -104.9781),
    ),
    "transit_stops": _items(
        ("Union Station (RTD)", "Rail + bus hub", 39.7527, -105.0008),
        ("16th & California", "Free MallRide stop", 39.7448, -104.9903),
        ("Broadway & Alameda", "Frequent bus corridor", 39.7101, -104.987),
    ),
    "libraries": _items(
        ("Denver Central Library", "10 W 14th Ave Pkwy", 39.7377, -104.9882),
        ("Ross-Cherry Creek Library", "305 Milwaukee St", 39.7207, -104.9539),
        ("Eugene Field Branch", "810 S University Blvd", 39.7026, -104.9595),
    ),
    "restaurants": _items(
        ("Mercantile Dining & Provision", "1701 Wynkoop St", 39.753, -105.0005),
        ("Potager", "1109 N Ogden St", 39.7347, -104.9745),
        ("Cart-Driver RiNo", "2500 Larimer St", 39.7581, -104.9844),
    ),
}

# ---- Field rules (first non-empty key wins) ----
SDP_RULES = FieldRules(
    name=("PROJECT_NAME", "PROJECTNAME", "SDP_NAME", "NAME", "ADDRESS"),
    status=("STATUS", "PROJECT_STATUS", "CASE_STATUS"),
    date=("LAST_UPDATED", "STATUS_DATE", "UPDATED", "EDITDATE", "last_edited_date"),
)
CONSTRUCTION_RULES = FieldRules(
    name=("PROJECT_NAME", "PROJECT", "NAME", "LOCATION"),
    status=("PROJECT_STATUS", "STATUS", "PHASE"),
    date=("LAST_UPDATED", "UPDATED", "END_DATE", "EDITDATE"),
)
ROW_PERMIT_RULES = FieldRules(
    name=("PERMIT_DESCRIPTION", "WORK_DESCRIPTION", "LOCATION", "ADDRESS"),
    status=("PERMIT_STATUS", "STATUS"),
    date=("END_DATE", "EXPIRATION_DATE", "ISSUE_DATE"),
)
RNO_RULES = FieldRules(
    name=("RNO_NAME", "ORGANIZATION_NAME", "ORG_NAME", "NAME", "Name"),
    number=("RNO_ID", "RNO_NUMBER", "REG_NUM", "ID"),
    website=("WEBSITE", "Website", "URL", "WEB_URL"),
)


def build_registry() -> List[Category]:
    """Fresh categories, each seeded with a copy of its samples."""
    rows = [
        ("site_development_plans", "Site Development Plans", "#2f6ee4",
         "Denver Open Data: Site Development Plans", DEFAULT_RADIUS_MILES),
        ("construction", "Construction", "#f18f01",
         "Denver Open Data: capital projects + right-of-way permits", DEFAULT_RADIUS_MILES),
        ("rnos", "RNOs", "#6a4c93",
         "Denver Open Data: Registered Neighborhood Organizations", DEFAULT_RADIUS_MILES),
        ("grocery_stores", "Grocery Stores", "#1b9e77",
         "OpenStreetMap (Overpass)", DEFAULT_RADIUS_MILES),
        ("transit_stops", "Transit Stops", "#e63946",
         "OpenStreetMap (Overpass): stops + route relations", TRANSIT_RADIUS_MILES),
        ("libraries", "Libraries", "#3a86ff",
         "OpenStreetMap (Overpass)", DEFAULT_RADIUS_MILES),
        ("restaurants", "Restaurants", "#ef476f",
         "Sample data", DEFAULT_RADIUS_MILES),
    ]
    return [
        Category(
            key=key,
            label=label,
            color=color,
            source_label=source_label,
            radius_miles=radius,
            fallback_items=SAMPLES[key],
            items=copy_items(SAMPLES[key]),
        )
        for key, label, color, source_label, radius in rows
    ]


def build_store() -> CategoryStore:
    return CategoryStore(build_registry())


def build_sources() -> List[Source]:
    return [
        Source(
            key="site_development_plans",
            feeds=(
                Feed(
                    name="sdp",
                    candidates=tuple(arcgis.query_candidates(SDP_LAYER_URLS, out_format="geojson")),
                    adapter=partial(from_geojson, rules=SDP_RULES, default_name="Site Development Plan"),
                    paged=True,
                ),
            ),
            key_fn=partial(place_key, generic_name="Site Development Plan"),
        ),
        Source(
            key="construction",
            feeds=(
                Feed(
                    name="capital_projects",
                    candidates=tuple(arcgis.query_candidates(CONSTRUCTION_LAYER_URLS, out_format="geojson")),
                    adapter=partial(from_geojson, rules=CONSTRUCTION_RULES, default_name="Construction Project"),
                    paged=True,
                ),
                Feed(
                    name="row_permits",
                    candidates=tuple(arcgis.query_candidates(ROW_PERMIT_LAYER_URLS, out_format="geojson")),
                    adapter=partial(from_geojson, rules=ROW_PERMIT_RULES, default_name="Construction Project"),
                    paged=True,
                ),
            ),
            key_fn=partial(place_key, generic_name="Construction Project"),
        ),
        Source(
            key="rnos",
            feeds=(
                Feed(
                    name="rno",
                    candidates=tuple(arcgis.query_candidates(RNO_LAYER_URLS, out_format="json", return_centroid=True)),
                    adapter=partial(
                        from_arcgis,
                        rules=RNO_RULES,
                        default_name="Neighborhood Organization",
                        number_label="RNO",
                        plain_label="Registered Neighborhood Organization",
                    ),
                    paged=True,
                ),
            ),
            key_fn=partial(place_key, generic_name="Neighborhood Organization"),
        ),
        Source(
            key="grocery_stores",
            feeds=(
                Feed(
                    name="overpass_grocery",
                    candidates=tuple(overpass.interpreter_candidates(OVERPASS_URLS, overpass.grocery_query(DENVER_BBOX))),
                    adapter=partial(from_overpass_places, default_name="Grocery Store"),
                ),
            ),
            key_fn=partial(place_key, generic_name="Grocery Store"),
        ),
        Source(
            key="transit_stops",
            feeds=(
                Feed(
                    name="overpass_transit",
                    candidates=tuple(overpass.interpreter_candidates(OVERPASS_URLS, overpass.transit_query(DENVER_BBOX))),
                    adapter=from_overpass_stops,
                ),
            ),
            key_fn=partial(place_key, generic_name="Transit Stop"),
        ),
        Source(
            key="libraries",
            feeds=(
                Feed(
                    name="overpass_libraries",
                    candidates=tuple(overpass.interpreter_candidates(OVERPASS_URLS, overpass.library_query(DENVER_BBOX))),
                    adapter=partial(from_overpass_places, default_name="Library"),
                ),
            ),
            key_fn=partial(place_key, generic_name="Library"),
        ),
        Source(key="restaurants"),
    ]

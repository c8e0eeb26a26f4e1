# settings.py
# Environment-driven configuration for the nearby service.

import os
from typing import List


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _as_list(val: str | None, default: List[str]) -> List[str]:
    if not val:
        return list(default)
    out: List[str] = []
    for part in val.split(","):
        part = part.strip()
        if part and part not in out:
            out.append(part)
    return out or list(default)


# ---- Search ----
DEFAULT_RADIUS_MILES = float(os.getenv("DEFAULT_RADIUS_MILES", "1.5"))
TRANSIT_RADIUS_MILES = float(os.getenv("TRANSIT_RADIUS_MILES", "0.25"))
RESULT_CAP = int(os.getenv("RESULT_CAP", "25"))

# ---- Upstream fetch ----
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "20.0"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "2000"))
MAX_PAGES = int(os.getenv("MAX_PAGES", "50"))
USER_AGENT = os.getenv("USER_AGENT", "denver-nearby/0.1")

OVERPASS_URLS = _as_list(
    os.getenv("OVERPASS_URLS"),
    [
        "https://overpass-api.de/api/interpreter",
        "https://overpass.kumi.systems/api/interpreter",
        "https://z.overpass-api.de/api/interpreter",
    ],
)

# ArcGIS layer URLs (".../FeatureServer/<n>"); the "/query" suffix is added by the provider.
ARCGIS_BASE = os.getenv(
    "ARCGIS_BASE",
    "https://services1.arcgis.com/zdB7qR0BtYrg0Xpl/arcgis/rest/services",
)
SDP_LAYER_URLS = _as_list(
    os.getenv("SDP_LAYER_URLS"),
    [
        f"{ARCGIS_BASE}/ODC_DEV_SITEDEVELOPMENTPLAN_P/FeatureServer/0",
        f"{ARCGIS_BASE}/Site_Development_Plans/FeatureServer/0",
    ],
)
CONSTRUCTION_LAYER_URLS = _as_list(
    os.getenv("CONSTRUCTION_LAYER_URLS"),
    [
        f"{ARCGIS_BASE}/ODC_TRANS_CAPITALPROJECTS_P/FeatureServer/0",
        f"{ARCGIS_BASE}/Capital_Projects/FeatureServer/0",
    ],
)
ROW_PERMIT_LAYER_URLS = _as_list(
    os.getenv("ROW_PERMIT_LAYER_URLS"),
    [f"{ARCGIS_BASE}/ODC_TRANS_ROWPERMITS_P/FeatureServer/0"],
)
RNO_LAYER_URLS = _as_list(
    os.getenv("RNO_LAYER_URLS"),
    [
        f"{ARCGIS_BASE}/ODC_ADMN_REGNEIGHBORHOODORG_A/FeatureServer/0",
        f"{ARCGIS_BASE}/Registered_Neighborhood_Organizations/FeatureServer/0",
    ],
)

# Overpass bounding box: south, west, north, east
DENVER_BBOX = (39.614, -105.110, 39.914, -104.600)

# ---- Cache (Redis) ----
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CACHE_ENABLED = _as_bool(os.getenv("CACHE_ENABLED"), True)
SOURCE_CACHE_TTL = int(os.getenv("SOURCE_CACHE_TTL", "900"))
STALE_CACHE_TTL = int(os.getenv("STALE_CACHE_TTL", str(7 * 24 * 3600)))

# ---- Service ----
LOAD_ON_STARTUP = _as_bool(os.getenv("LOAD_ON_STARTUP"), True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = _as_list(
    os.getenv("CORS_ORIGINS"),
    ["http://127.0.0.1:5500", "http://localhost:5500"],
)

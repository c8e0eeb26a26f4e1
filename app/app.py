# app.py
# FastAPI nearby-search service over the Denver category store.
# - /nearby?lat=...&lng=...  ranked, capped results per category + total
# - /categories, /status, /reload
# - /stats and /healthz

import asyncio
import logging
import math
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from cache import STAT_QUERIES, incr, redis_ok, stats as cache_stats
from categories import build_sources, build_store
from loader import load_all
from models import CategoryInfo, LoadReport, NearbyResponse
from nearby import query_nearby
from settings import CORS_ORIGINS, LOAD_ON_STARTUP, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

store = build_store()
sources = build_sources()
_load_task: Optional[asyncio.Task] = None


async def _background_load() -> None:
    try:
        await load_all(store, sources)
    except Exception:
        logger.exception("[load] background load failed")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    global _load_task
    if LOAD_ON_STARTUP:
        _load_task = asyncio.create_task(_background_load())
    yield


app = FastAPI(title="Denver Nearby Service", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
async def healthz():
    return {"redis_ok": await redis_ok(), "categories": len(store.keys())}


@app.get("/nearby", response_model=NearbyResponse)
async def nearby(
    lat: float = Query(..., description="Latitude in degrees, e.g. 39.7316"),
    lng: float = Query(..., description="Longitude in degrees, e.g. -104.9739"),
):
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise HTTPException(status_code=422, detail="lat/lng must be finite numbers")
    await incr(STAT_QUERIES)
    return query_nearby(store.view(), lat, lng)


@app.get("/categories", response_model=List[CategoryInfo])
async def categories():
    return [
        CategoryInfo(
            key=c.key,
            label=c.label,
            color=c.color,
            source_label=c.source_label,
            radius_miles=c.radius_miles,
            item_count=len(c.items),
        )
        for c in store.get_all()
    ]


@app.get("/status", response_model=LoadReport)
async def status():
    if store.last_report is not None:
        return store.last_report
    loading = _load_task is not None and not _load_task.done()
    message = "Loading live data; showing sample data meanwhile." if loading else "Showing sample data."
    return LoadReport(degraded=False, message=message, categories={})


@app.post("/reload", response_model=LoadReport)
async def reload():
    if _load_task is not None and not _load_task.done():
        # startup load still running; finish it first
        await asyncio.shield(_load_task)
    try:
        return await load_all(store, sources)
    except Exception as e:
        logger.exception("[load] reload failed")
        raise HTTPException(status_code=500, detail=f"reload_failed:{type(e).__name__}")


@app.get("/stats")
async def stats():
    return await cache_stats()

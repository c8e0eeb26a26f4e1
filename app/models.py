from typing import Optional, List, Dict
from pydantic import BaseModel, Field


class Item(BaseModel):
    name: str = Field(min_length=1)
    details: str = ""
    lat: float = Field(allow_inf_nan=False)
    lng: float = Field(allow_inf_nan=False)


class NearbyItem(Item):
    distance: float  # miles, computed per query


class CategoryResult(BaseModel):
    label: str
    color: str
    source_label: str
    radius_miles: float
    match_count: int
    items: List[NearbyItem] = Field(default_factory=list)


class NearbyResponse(BaseModel):
    lat: float
    lng: float
    total: int
    summary: str
    categories: Dict[str, CategoryResult]


class CategoryInfo(BaseModel):
    key: str
    label: str
    color: str
    source_label: str
    radius_miles: float
    item_count: int


class CategoryStatus(BaseModel):
    key: str
    status: str  # "live" | "stale" | "static" | "empty" | "error"
    item_count: int
    error: Optional[str] = None


class LoadReport(BaseModel):
    degraded: bool
    message: str
    categories: Dict[str, CategoryStatus]

# fallback.py
# Load outcome + the rule that swaps in sample data when live data is missing or empty.

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from models import Item


class SourceError(Exception):
    """Every candidate endpoint for a feed failed (network, HTTP status, bad JSON, ArcGIS error body)."""

    def __init__(self, source: str, message: str = "all candidate endpoints failed"):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


@dataclass
class LoadResult:
    key: str
    items: List[Item] = field(default_factory=list)
    error: Optional[SourceError] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Resolution:
    items: List[Item]
    used_fallback: bool
    reason: str  # "live" | "stale" | "static" | "empty" | "error"
    error: Optional[SourceError] = None


def copy_items(items: Sequence[Item]) -> List[Item]:
    return [item.model_copy(deep=True) for item in items]


def resolve(result: LoadResult, fallback_items: Sequence[Item]) -> Resolution:
    if result.error is not None:
        return Resolution(items=copy_items(fallback_items), used_fallback=True, reason="error", error=result.error)
    if not result.items:
        return Resolution(items=copy_items(fallback_items), used_fallback=True, reason="empty")
    return Resolution(items=list(result.items), used_fallback=False, reason="stale" if result.stale else "live")

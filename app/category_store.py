# category_store.py
# Category registry holder. Loaders write through a per-category slot; queries read a frozen view.

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from models import Item, LoadReport
from settings import DEFAULT_RADIUS_MILES


@dataclass
class Category:
    key: str
    label: str
    color: str
    source_label: str
    fallback_items: Tuple[Item, ...]
    radius_miles: float = DEFAULT_RADIUS_MILES
    items: List[Item] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not math.isfinite(self.radius_miles) or self.radius_miles <= 0:
            raise ValueError(f"radius_miles must be > 0 for category {self.key!r}")
        self.fallback_items = tuple(self.fallback_items)
        if not self.fallback_items:
            raise ValueError(f"fallback_items must not be empty for category {self.key!r}")


class CategorySlot:
    """Write access to exactly one category's items."""

    def __init__(self, store: "CategoryStore", key: str):
        self._store = store
        self.key = key

    @property
    def category(self) -> Category:
        return self._store.get(self.key)

    def replace(self, items: Iterable[Item]) -> None:
        self._store.set_category_items(self.key, items)


class CategoryStore:
    def __init__(self, categories: Iterable[Category]):
        self._categories: Dict[str, Category] = {}
        for category in categories:
            if category.key in self._categories:
                raise ValueError(f"duplicate category key {category.key!r}")
            self._categories[category.key] = category
        self.last_report: Optional[LoadReport] = None

    def set_category_items(self, key: str, items: Iterable[Item]) -> None:
        category = self._categories[key]
        # whole-list swap; readers holding the old list are unaffected
        category.items = list(items)

    def get(self, key: str) -> Category:
        return self._categories[key]

    def get_all(self) -> List[Category]:
        return list(self._categories.values())

    def keys(self) -> List[str]:
        return list(self._categories)

    def slot(self, key: str) -> CategorySlot:
        if key not in self._categories:
            raise KeyError(key)
        return CategorySlot(self, key)

    def view(self) -> Mapping[str, Category]:
        return MappingProxyType(self._categories)

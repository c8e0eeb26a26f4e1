# dedupe.py
# Key-based, order-preserving dedup for items merged from several feeds/pages.

from typing import Callable, Hashable, Iterable, List, Optional

from models import Item

KeyFn = Callable[[Item], Optional[Hashable]]


def place_key(item: Item, generic_name: Optional[str] = None) -> Optional[str]:
    """name-or-brand + coordinates rounded to 6 places; None when only the generic noun is known."""
    name = item.name.strip().lower()
    if not name or (generic_name and name == generic_name.strip().lower()):
        return None
    return f"{name}|{item.lat:.6f}|{item.lng:.6f}"


def dedupe(items: Iterable[Item], key_fn: KeyFn = place_key) -> List[Item]:
    seen = set()
    out: List[Item] = []
    for item in items:
        key = key_fn(item)
        if key is None:
            out.append(item)
            continue
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out

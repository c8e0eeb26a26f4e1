import pytest

from categories import SAMPLES, build_registry, build_store
from category_store import Category, CategoryStore
from models import Item
from settings import DEFAULT_RADIUS_MILES, TRANSIT_RADIUS_MILES


def _category(key="grocery_stores", radius=1.5, items=None):
    fallback = (Item(name="Sample", lat=39.7, lng=-105.0),)
    return Category(
        key=key,
        label=key.title(),
        color="#000000",
        source_label="test",
        radius_miles=radius,
        fallback_items=fallback,
        items=list(items or []),
    )


class TestCategory:
    def test_default_radius(self):
        c = Category(key="k", label="K", color="#fff", source_label="s",
                     fallback_items=(Item(name="x", lat=0.0, lng=0.0),))
        assert c.radius_miles == DEFAULT_RADIUS_MILES

    @pytest.mark.parametrize("radius", [0, -1.0, float("nan"), float("inf")])
    def test_radius_must_be_positive(self, radius):
        with pytest.raises(ValueError):
            _category(radius=radius)

    def test_fallback_must_not_be_empty(self):
        with pytest.raises(ValueError):
            Category(key="k", label="K", color="#fff", source_label="s", fallback_items=())


class TestCategoryStore:
    def test_set_category_items_replaces_whole_list(self):
        store = CategoryStore([_category(items=[Item(name="old", lat=1.0, lng=1.0)])])
        before = store.get("grocery_stores").items
        new_items = [Item(name="new", lat=2.0, lng=2.0)]
        store.set_category_items("grocery_stores", new_items)
        after = store.get("grocery_stores").items
        assert [i.name for i in after] == ["new"]
        assert after is not new_items
        # old list untouched for any reader still holding it
        assert [i.name for i in before] == ["old"]

    def test_unknown_key(self):
        store = CategoryStore([_category()])
        with pytest.raises(KeyError):
            store.set_category_items("nope", [])
        with pytest.raises(KeyError):
            store.slot("nope")

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValueError):
            CategoryStore([_category(), _category()])

    def test_slot_writes_only_its_category(self):
        store = CategoryStore([_category("a"), _category("b", items=[Item(name="b1", lat=0.0, lng=0.0)])])
        store.slot("a").replace([Item(name="a1", lat=0.0, lng=0.0)])
        assert [i.name for i in store.get("a").items] == ["a1"]
        assert [i.name for i in store.get("b").items] == ["b1"]

    def test_view_is_read_only(self):
        store = CategoryStore([_category()])
        view = store.view()
        assert list(view) == ["grocery_stores"]
        with pytest.raises(TypeError):
            view["other"] = _category("other")  # type: ignore[index]

    def test_get_all_preserves_registry_order(self):
        store = CategoryStore([_category("b"), _category("a")])
        assert [c.key for c in store.get_all()] == ["b", "a"]


class TestRegistry:
    def test_every_category_seeded_with_sample_copies(self):
        registry = build_registry()
        assert [c.key for c in registry] == list(SAMPLES)
        for category in registry:
            assert category.items == list(SAMPLES[category.key])
            assert all(a is not b for a, b in zip(category.items, SAMPLES[category.key]))

    def test_transit_uses_transit_radius(self):
        store = build_store()
        assert store.get("transit_stops").radius_miles == TRANSIT_RADIUS_MILES
        assert store.get("grocery_stores").radius_miles == DEFAULT_RADIUS_MILES

    def test_stores_do_not_share_item_lists(self):
        a, b = build_store(), build_store()
        a.set_category_items("libraries", [])
        assert len(b.get("libraries").items) == 3

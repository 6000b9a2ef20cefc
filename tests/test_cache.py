"""Unit tests for RefCache (pure state, no browser)."""

from __future__ import annotations

import pytest

from reflens.cache.ref_cache import RefCache
from reflens.core.errors import RefNotFound
from reflens.core.types import SemanticDescriptor, StructuralDescriptor


def make_table(*names: str) -> dict:
    return {f"e{i}": SemanticDescriptor(role="button", name=name) for i, name in enumerate(names, start=1)}


class TestRefCache:
    def setup_method(self):
        self.cache = RefCache()

    def test_starts_empty_at_version_zero(self):
        assert self.cache.version == 0
        assert self.cache.list_available() == []
        assert len(self.cache) == 0

    def test_replace_increments_version(self):
        self.cache.replace(make_table("OK"))
        assert self.cache.version == 1
        self.cache.replace(make_table("OK"))
        assert self.cache.version == 2

    def test_get_returns_descriptor(self):
        self.cache.replace(make_table("OK", "Cancel"))
        assert self.cache.get("e2") == SemanticDescriptor(role="button", name="Cancel")

    def test_replace_does_not_merge(self):
        self.cache.replace(make_table("A", "B", "C"))
        self.cache.replace({"e1": StructuralDescriptor(selector="#x", role="clickable")})
        assert self.cache.list_available() == ["e1"]
        assert isinstance(self.cache.get("e1"), StructuralDescriptor)
        with pytest.raises(RefNotFound):
            self.cache.get("e3")

    def test_replace_copies_table(self):
        table = make_table("OK")
        self.cache.replace(table)
        table["e9"] = SemanticDescriptor(role="link", name="Late")
        assert not self.cache.is_valid("e9")

    def test_is_valid(self):
        self.cache.replace(make_table("OK"))
        assert self.cache.is_valid("e1")
        assert not self.cache.is_valid("e2")
        assert not self.cache.is_valid("@e1")

    def test_list_available_keeps_insertion_order(self):
        table = {
            "e1": SemanticDescriptor(role="link", name="a"),
            "e2": SemanticDescriptor(role="link", name="b"),
            "e10": SemanticDescriptor(role="link", name="c"),
        }
        self.cache.replace(table)
        assert self.cache.list_available() == ["e1", "e2", "e10"]

    def test_invalidate_clears_everything(self):
        self.cache.replace(make_table("A", "B"))
        self.cache.invalidate()
        assert self.cache.version == 0
        assert self.cache.list_available() == []
        for ref in ("e1", "e2"):
            with pytest.raises(RefNotFound):
                self.cache.get(ref)

    def test_version_restarts_after_invalidate(self):
        self.cache.replace(make_table("A"))
        self.cache.replace(make_table("A"))
        self.cache.invalidate()
        self.cache.replace(make_table("A"))
        assert self.cache.version == 1

    def test_ref_map_is_a_copy(self):
        self.cache.replace(make_table("A"))
        snapshot = self.cache.ref_map()
        snapshot.clear()
        assert self.cache.is_valid("e1")

    def test_get_miss_lists_available_refs(self):
        self.cache.replace(make_table(*[str(i) for i in range(12)]))
        with pytest.raises(RefNotFound) as exc_info:
            self.cache.get("e99")
        err = exc_info.value
        assert err.available == [f"e{i}" for i in range(1, 13)]
        assert "e1, e2" in err.message
        assert "e10, ..." in err.message
        assert "e11" not in err.message

    def test_listed_ref_limit_is_configurable(self):
        cache = RefCache(max_listed_refs=2)
        cache.replace(make_table("A", "B", "C"))
        with pytest.raises(RefNotFound) as exc_info:
            cache.get("e9")
        assert "Available refs: e1, e2, ..." in exc_info.value.message

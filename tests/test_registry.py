from __future__ import annotations

from fastapi_dto import SchemaRegistry


def test_equal_claims_are_recorded_once() -> None:
    registry = SchemaRegistry()

    registry.register("Author", {"type": "object"})
    registry.register("Author", {"type": "object"})

    assert registry.claims("Author") == [{"type": "object"}]
    assert "Author" in registry
    assert len(registry) == 1


def test_distinct_claims_are_all_kept() -> None:
    registry = SchemaRegistry()

    registry.register_all({"Thing": {"type": "string"}})
    registry.register("Thing", {"type": "integer"})

    assert registry.claims("Thing") == [{"type": "string"}, {"type": "integer"}]


def test_claims_are_copies() -> None:
    registry = SchemaRegistry()
    definition = {"type": "object", "properties": {}}

    registry.register("Box", definition)
    definition["properties"]["x"] = {"type": "string"}

    assert registry.claims("Box") == [{"type": "object", "properties": {}}]
    registry.clear()
    assert list(registry) == []

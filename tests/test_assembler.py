from __future__ import annotations

import pytest

from fastapi_dto import SchemaCollisionError, SchemaRegistry, create_dto
from fastapi_dto.const import PARENT_ID_KEY
from fastapi_dto.legacy import integer, obj, string
from fastapi_dto.openapi.assembler import DocumentAssembler, OperationBinding, ResponseSpec

ItemDto = create_dto(obj(name=string(), count=integer().optional()), name="ItemDto")
ItemPathDto = create_dto(obj(item_id=string().optional()), name="ItemPathDto")


def test_component_is_an_object_with_required_list() -> None:
    component = DocumentAssembler(SchemaRegistry()).component(ItemDto)

    assert component == {
        "type": "object",
        "properties": {
            "name": {"type": "string", PARENT_ID_KEY: "ItemDto"},
            "count": {"type": "integer", PARENT_ID_KEY: "ItemDto"},
        },
        "required": ["name"],
    }


def test_path_parameters_are_always_required() -> None:
    [parameter] = DocumentAssembler(SchemaRegistry()).parameters(ItemPathDto, "path")

    assert parameter["name"] == "item_id"
    assert parameter["in"] == "path"
    assert parameter["required"] is True


def test_apply_merges_into_an_existing_operation() -> None:
    assembler = DocumentAssembler(SchemaRegistry())
    operation = {
        "parameters": [{"name": "item_id", "in": "path", "required": True, "schema": {"type": "string"}}],
        "responses": {"422": {"description": "Validation Error"}},
    }

    assembler.apply(
        operation,
        OperationBinding(
            body=ItemDto,
            parameters=[(ItemPathDto, "path")],
            responses=[ResponseSpec(status=200, dto=ItemDto, is_array=True)],
        ),
    )

    assert [p["name"] for p in operation["parameters"]] == ["item_id"]
    assert operation["requestBody"]["required"] is True
    assert operation["responses"]["200"]["description"] == "OK"
    assert operation["responses"]["200"]["content"]["application/json"]["schema"] == {
        "type": "array",
        "items": {"$ref": "#/components/schemas/ItemDto"},
    }
    assert "422" in operation["responses"]
    assert set(assembler.components) == {"ItemDto"}


def test_two_dtos_with_one_class_name_collide() -> None:
    other = create_dto(obj(label=string()), name="ItemDto")
    assembler = DocumentAssembler(SchemaRegistry())
    assembler.component_ref(ItemDto)

    with pytest.raises(SchemaCollisionError):
        assembler.component_ref(other)


def test_finish_leaves_documents_without_dtos_alone() -> None:
    doc = {"openapi": "3.1.0", "paths": {}}

    assert DocumentAssembler(SchemaRegistry()).finish(doc) is doc

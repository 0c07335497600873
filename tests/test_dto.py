from __future__ import annotations

import pytest
from pydantic import BaseModel

from fastapi_dto import CapabilityError, Dto, SchemaRegistry, create_dto, is_dto, schema_id
from fastapi_dto.const import EMPTY_TYPE_KEY, PARENT_ID_KEY, REF_KEY, UNWRAP_ROOT_KEY
from fastapi_dto.legacy import array, lazy, obj, string


class Author(BaseModel):
    model_config = schema_id("Author")

    name: str


class Book(BaseModel):
    model_config = schema_id("Book")

    title: str
    author: Author


class BookDto(Dto, schema=Book):
    pass


class Upper:
    def parse(self, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("expected a string")
        return value.upper()


def test_legacy_object_metadata_marks_nested_objects_self_required() -> None:
    UserDto = create_dto(obj(username=string(), nestedObject=obj(a=string())), name="UserDto")

    assert UserDto.metadata(SchemaRegistry()) == {
        "username": {"type": "string", "required": True, PARENT_ID_KEY: "UserDto"},
        "nestedObject": {
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "required": ["a"],
            "selfRequired": True,
            PARENT_ID_KEY: "UserDto",
        },
    }
    assert UserDto.root_metadata() == {}


def test_non_object_root_is_stored_under_the_unwrap_marker() -> None:
    SlugDto = create_dto(string(min_length=1), name="SlugDto")

    assert SlugDto.metadata(SchemaRegistry()) == {
        UNWRAP_ROOT_KEY: {"type": "string", "minLength": 1, PARENT_ID_KEY: "SlugDto"}
    }


def test_references_are_parked_under_markers() -> None:
    record = BookDto.metadata(SchemaRegistry())

    assert record["author"] == {
        REF_KEY: "#/$defs/Author",
        "type": "",
        EMPTY_TYPE_KEY: True,
        "required": True,
        PARENT_ID_KEY: "Book",
    }
    assert BookDto.root_metadata() == {"id": "Book"}


def test_metadata_registers_named_definitions() -> None:
    registry = SchemaRegistry()

    BookDto.metadata(registry)

    assert list(registry) == ["Author"]
    assert registry.claims("Author")[0]["id"] == "Author"


def test_output_dto_is_derived_once() -> None:
    output = BookDto.Output

    assert output is BookDto.Output
    assert output.__name__ == "BookDto_Output"
    assert output.io == "output"
    assert output.schema_id() == "Book_Output"
    assert is_dto(output)


def test_output_of_output_is_rejected() -> None:
    with pytest.raises(CapabilityError):
        BookDto.Output.Output


def test_legacy_dto_has_no_output_variant() -> None:
    PlainDto = create_dto(obj(a=string()), name="PlainDto")

    with pytest.raises(CapabilityError):
        PlainDto.Output


def test_lazy_named_root_is_inlined() -> None:
    node = lazy()
    node.define(obj(name=string(), children=array(node)).named("Category"))
    CategoryDto = create_dto(node, name="CategoryDto")

    projection = CategoryDto.projection()

    assert projection.schema_id == "Category"
    assert projection.defs == {}
    assert projection.schema["id"] == "Category"
    assert projection.schema["properties"]["children"]["items"] == {"$ref": "#/$defs/Category"}


def test_create_validates_and_instantiation_is_refused() -> None:
    book = BookDto.create({"title": "Dune", "author": {"name": "Frank Herbert"}})

    assert isinstance(book, Book)
    assert BookDto.safe_parse({"title": "Dune"}).success is False
    with pytest.raises(TypeError):
        BookDto()


def test_dto_requires_a_schema() -> None:
    with pytest.raises(TypeError):

        class Unbound(Dto):
            pass


def test_parser_objects_can_be_bound() -> None:
    UpperDto = create_dto(Upper(), name="UpperDto")

    assert UpperDto.create("abc") == "ABC"
    result = UpperDto.safe_parse(1)
    assert result.success is False
    assert result.issues == [{"type": "value_error", "loc": (), "msg": "expected a string"}]
    assert UpperDto.metadata(SchemaRegistry()) == {}


def test_is_dto() -> None:
    assert is_dto(BookDto)
    assert not is_dto(Book)
    assert not is_dto(object())

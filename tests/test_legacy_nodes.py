from __future__ import annotations

from enum import Enum

import pytest

from fastapi_dto.exceptions import CapabilityError, SchemaParseError
from fastapi_dto.legacy import (
    array,
    bigint,
    boolean,
    discriminated_union,
    enum,
    integer,
    intersection,
    lazy,
    literal,
    native_enum,
    null,
    number,
    obj,
    record,
    set_of,
    string,
    tuple_of,
    union,
)


class Color(Enum):
    red = "red"
    blue = "blue"


def test_object_strips_unknown_keys_and_applies_defaults() -> None:
    schema = obj(
        name=string(),
        nickname=string().optional(),
        role=enum("admin", "member").default("member"),
    )

    assert schema.parse({"name": "Ada", "extra": 1}) == {"name": "Ada", "role": "member"}


def test_missing_required_key_is_reported_with_its_location() -> None:
    result = obj(user=obj(name=string())).safe_parse({"user": {}})

    assert result.success is False
    assert result.issues == [{"type": "missing", "loc": ("user", "name"), "msg": "Field required"}]


def test_parse_raises_schema_parse_error_with_issues() -> None:
    with pytest.raises(SchemaParseError) as exc:
        string(min_length=3).parse("ab")

    assert exc.value.issues[0]["type"] == "string_too_short"
    assert "at least 3 characters" in str(exc.value)


@pytest.mark.parametrize(
    ("fmt", "good", "bad"),
    [
        ("email", "ada@example.com", "ada"),
        ("uuid", "1b4e28ba-2fa1-11d2-883f-0016d3cca427", "nope"),
        ("uri", "https://example.com/x", "example.com"),
        ("cuid", "cjld2cjxh0000qzrmn831i7rn", "xyz"),
        ("date-time", "2024-01-02T03:04:05Z", "2024-01-02"),
    ],
)
def test_string_formats(fmt: str, good: str, bad: str) -> None:
    schema = string(format=fmt)

    assert schema.safe_parse(good).success is True
    assert schema.safe_parse(bad).success is False


def test_number_bounds_and_integer_check() -> None:
    schema = number(minimum=0, minimum_inclusive=False, maximum=10, multiple_of=0.5)

    assert schema.parse(2.5) == 2.5
    assert schema.safe_parse(0).issues[0]["type"] == "greater_than"
    assert schema.safe_parse(10.5).issues[0]["type"] == "less_than_equal"
    assert schema.safe_parse(0.3).issues[0]["type"] == "multiple_of"
    assert integer().safe_parse(1.5).success is False
    assert integer().safe_parse(True).success is False


def test_boolean_and_null() -> None:
    assert boolean().parse(False) is False
    assert boolean().safe_parse(0).success is False
    assert null().parse(None) is None
    assert null().safe_parse("").success is False


def test_array_set_and_tuple() -> None:
    assert array(integer(), min_items=1).parse([1, 2]) == [1, 2]
    assert array(integer(), min_items=1).safe_parse([]).issues[0]["type"] == "too_short"
    assert array(integer()).safe_parse([1, "x"]).issues[0]["loc"] == (1,)
    assert set_of(string()).safe_parse(["a", "a"]).issues[0]["type"] == "set_unique"
    assert tuple_of(string(), integer()).parse(("a", 1)) == ["a", 1]
    assert tuple_of(string(), integer()).safe_parse(["a"]).success is False


def test_record_validates_keys_and_values() -> None:
    schema = record(integer())

    assert schema.parse({"a": 1}) == {"a": 1}
    assert schema.safe_parse({"a": "1"}).issues[0]["loc"] == ("a",)


def test_union_picks_first_matching_option() -> None:
    schema = union(integer(), string())

    assert schema.parse("x") == "x"
    assert schema.safe_parse(1.5).issues[0]["type"] == "invalid_union"


def test_discriminated_union_dispatches_on_tag() -> None:
    schema = discriminated_union(
        "kind",
        obj(kind=literal("cat"), lives=integer()),
        obj(kind=literal("dog"), good=boolean()),
    )

    assert schema.parse({"kind": "dog", "good": True}) == {"kind": "dog", "good": True}
    assert schema.safe_parse({"kind": "cow"}).issues[0]["type"] == "union_tag_invalid"
    assert schema.safe_parse({}).issues[0]["type"] == "union_tag_not_found"


def test_intersection_merges_objects() -> None:
    schema = intersection(obj(a=string()), obj(b=integer()))

    assert schema.parse({"a": "x", "b": 1}) == {"a": "x", "b": 1}
    assert schema.safe_parse({"a": "x"}).success is False


def test_literals_and_enums() -> None:
    assert literal(1).safe_parse(True).success is False
    assert literal("a").parse("a") == "a"
    assert enum("a", "b").safe_parse("c").issues[0]["type"] == "literal_error"
    assert native_enum(Color).parse("red") is Color.red
    assert native_enum(Color).safe_parse("green").issues[0]["type"] == "enum"


def test_nullable_and_transform() -> None:
    assert string().nullable().parse(None) is None
    assert string().transform(len).parse("abc") == 3
    assert string().transform(int).safe_parse("x").issues[0]["type"] == "value_error"


def test_lazy_recursive_schema_parses_nested_values() -> None:
    node = lazy()
    node.define(obj(name=string(), children=array(node)))

    value = {"name": "root", "children": [{"name": "leaf", "children": []}]}

    assert node.parse(value) == value
    assert node.safe_parse({"name": "root", "children": [{"name": 1, "children": []}]}).issues[0][
        "loc"
    ] == ("children", 0, "name")


def test_lazy_can_only_be_defined_once() -> None:
    node = lazy()
    node.define(string())

    with pytest.raises(ValueError):
        node.define(integer())


def test_legacy_nodes_cannot_encode() -> None:
    with pytest.raises(CapabilityError):
        string().encode("x")


def test_integers_beyond_float_range_are_validated_not_raised() -> None:
    huge = 10**400

    assert obj(n=integer()).parse({"n": huge}) == {"n": huge}
    assert integer(maximum=10).safe_parse(huge).issues[0]["type"] == "less_than_equal"
    assert bigint().parse(huge) == huge


def test_scalars_are_not_coerced() -> None:
    assert integer().safe_parse("1").issues[0]["type"] == "int_type"
    assert string().safe_parse(1).issues[0]["type"] == "string_type"
    assert number().parse(2) == 2


def test_issues_match_the_pydantic_shape() -> None:
    issue = string(max_length=2).safe_parse("abc").issues[0]

    assert issue == {
        "type": "string_too_long",
        "loc": (),
        "msg": "String should have at most 2 characters",
    }


def test_discriminated_union_requires_a_literal_tag() -> None:
    with pytest.raises(CapabilityError):
        discriminated_union("kind", obj(kind=string())).safe_parse({"kind": "x"})


def test_validator_is_compiled_once_per_node() -> None:
    schema = obj(name=string())

    assert schema.validator is schema.validator

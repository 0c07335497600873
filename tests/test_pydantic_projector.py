from __future__ import annotations

from pydantic import BaseModel, Field, TypeAdapter, computed_field

from fastapi_dto.openapi.pydantic_projector import project_pydantic, schema_id


class Author(BaseModel):
    model_config = schema_id("Author")

    name: str


class Book(BaseModel):
    model_config = schema_id("Book")

    title: str = Field(min_length=1)
    author: Author

    @computed_field  # type: ignore[prop-decorator]
    @property
    def slug(self) -> str:
        return self.title.lower()


class Tag(BaseModel):
    label: str


class Post(BaseModel):
    tags: list[Tag]


class Node(BaseModel):
    value: int
    children: list[Node] = []


class Tree(BaseModel):
    branches: list[Branch] = []


class Branch(BaseModel):
    tree: Tree | None = None


Tree.model_rebuild()


def test_explicit_ids_name_the_root_and_its_definitions() -> None:
    projection = project_pydantic(TypeAdapter(Book), io="input", name="BookDto")

    assert projection.schema_id == "Book"
    assert projection.schema["id"] == "Book"
    assert "title" not in projection.schema
    assert projection.schema["properties"]["title"] == {"type": "string", "minLength": 1}
    assert projection.schema["properties"]["author"] == {"$ref": "#/$defs/Author"}
    assert "slug" not in projection.schema["properties"]
    assert projection.defs == {
        "Author": {
            "type": "object",
            "properties": {"name": {"type": "string"}},
            "required": ["name"],
            "id": "Author",
        }
    }


def test_output_variant_suffixes_every_public_id() -> None:
    projection = project_pydantic(TypeAdapter(Book), io="output", name="BookDto_Output")

    assert projection.schema_id == "Book_Output"
    assert projection.schema["id"] == "Book_Output"
    assert projection.schema["properties"]["author"] == {"$ref": "#/$defs/Author_Output"}
    assert projection.schema["properties"]["slug"]["readOnly"] is True
    assert set(projection.defs) == {"Author_Output"}
    assert projection.defs["Author_Output"]["id"] == "Author_Output"


def test_unnamed_models_keep_their_definition_key() -> None:
    projection = project_pydantic(TypeAdapter(Post), io="input", name="PostDto")

    assert projection.schema_id == "PostDto"
    assert "id" not in projection.schema
    assert projection.schema["properties"]["tags"]["items"] == {"$ref": "#/$defs/Tag"}
    assert projection.defs == {
        "Tag": {"type": "object", "properties": {"label": {"type": "string"}}, "required": ["label"]}
    }


def test_anonymous_recursive_root_refers_to_its_dto_name() -> None:
    projection = project_pydantic(TypeAdapter(Node), io="input", name="NodeDto")

    assert projection.schema_id == "NodeDto"
    assert projection.defs == {}
    assert projection.schema["properties"]["children"]["items"] == {"$ref": "#/$defs/NodeDto"}


def test_definitions_reaching_an_anonymous_root_are_namespaced() -> None:
    projection = project_pydantic(TypeAdapter(Tree), io="input", name="TreeDto")

    assert set(projection.defs) == {"TreeDto__Branch"}
    tree = projection.defs["TreeDto__Branch"]["properties"]["tree"]
    assert tree["anyOf"][0] == {"$ref": "#/$defs/TreeDto"}
    assert projection.schema["properties"]["branches"]["items"] == {
        "$ref": "#/$defs/TreeDto__Branch"
    }


def test_schema_id_keeps_other_config() -> None:
    config = schema_id("Thing", extra="forbid", json_schema_extra={"examples": [{"a": 1}]})

    assert config["extra"] == "forbid"
    assert config["json_schema_extra"] == {"examples": [{"a": 1}], "id": "Thing"}

from __future__ import annotations

import os
from typing import Any

import pytest
from fastapi.testclient import TestClient

from _support import assert_marker_free, assert_refs_resolve


@pytest.fixture
def client() -> Any:
    # Import inside the fixture so the app is only built for these tests.
    from fastapi_dto_demo.api import books, people
    from fastapi_dto_demo.main import app

    books.store.clear()
    people._people.clear()
    return TestClient(app)


def test_health(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "ok"


def test_book_lifecycle(client: TestClient) -> None:
    r = client.post(
        "/books",
        json={"title": "The Left Hand of Darkness", "author": {"name": "Ursula K. Le Guin", "born": 1929}},
    )
    assert r.status_code == 201
    created = r.json()
    assert created["slug"] == "the-left-hand-of-darkness"
    assert created["published"] is None

    fetched = client.get(f"/books/{created['id']}")
    assert fetched.json() == created

    client.post("/books", json={"title": "Dune", "author": {"name": "Frank Herbert"}})
    listed = client.get("/books", params={"author": "Frank Herbert"}).json()
    assert [b["title"] for b in listed] == ["Dune"]

    assert client.get("/books/missing").status_code == 404
    assert client.post("/books", json={"title": "", "author": {}}).status_code == 400


def test_people_defaults_and_guard(client: TestClient) -> None:
    r = client.post("/people", json={"name": "Ada", "email": "ada@example.com"})
    assert r.status_code == 201
    assert r.json() == {"name": "Ada", "email": "ada@example.com", "role": "member", "children": []}

    assert client.post("/people", json={"name": "Ada", "email": "nope"}).status_code == 400
    assert client.get("/people", params={"role": "owner"}).status_code == 400
    assert len(client.get("/people", params={"role": "member"}).json()) == 1


def test_demo_openapi_document(client: TestClient) -> None:
    doc = client.get("/openapi.json").json()

    schemas = doc["components"]["schemas"]
    assert {"Book", "Author", "Book_Output", "Author_Output", "Person"} <= set(schemas)
    person = schemas["Person"]
    assert person["properties"]["name"]["description"] == "Full name"
    assert person["properties"]["children"]["items"] == {"$ref": "#/components/schemas/Person"}
    assert [p["name"] for p in doc["paths"]["/books/{book_id}"]["get"]["parameters"]] == ["book_id"]
    assert_refs_resolve(doc)
    assert_marker_free(doc)


def test_load_env_keeps_existing_variables(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
    from fastapi_dto_demo.services.env import load_env

    (tmp_path / ".env").write_text("DEMO_FROM_SHELL=file\nDEMO_FROM_FILE=file\n")
    monkeypatch.setenv("DEMO_FROM_SHELL", "shell")
    # Registers the variable with monkeypatch so it is removed afterwards.
    monkeypatch.setenv("DEMO_FROM_FILE", "")
    monkeypatch.delenv("DEMO_FROM_FILE")

    assert load_env(tmp_path) == [tmp_path / ".env"]
    assert os.environ["DEMO_FROM_SHELL"] == "shell"
    assert os.environ["DEMO_FROM_FILE"] == "file"

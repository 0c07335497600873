"""Book endpoints: pydantic-backed DTOs.

Endpoint annotations are evaluated eagerly here: the response decorators wrap
the endpoints, and FastAPI resolves string annotations against the wrapper.
"""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, computed_field

from fastapi_dto import Dto, ValidationPipe, dto_response, schema_id

from ..services.book_store import BookStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["books"])

store = BookStore()


class Author(BaseModel):
    model_config = schema_id("Author")

    name: str
    born: int | None = None


class Book(BaseModel):
    model_config = schema_id("Book")

    id: str | None = None
    title: str = Field(min_length=1)
    author: Author
    published: date | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def slug(self) -> str:
        return self.title.lower().replace(" ", "-")


class BookFilter(BaseModel):
    author: str | None = None


class BookPath(BaseModel):
    book_id: str


class BookDto(Dto, schema=Book):
    pass


class BookFilterDto(Dto, schema=BookFilter):
    pass


class BookPathDto(Dto, schema=BookPath):
    pass


@router.post("", status_code=201, response_model=None)
@dto_response(201, BookDto, "Created book")
def create_book(book: Book = Depends(ValidationPipe(BookDto))) -> dict[str, Any]:
    data = book.model_dump(exclude={"id", "slug"})
    created = store.create(data)
    logger.info("books.create id=%s", created["id"])
    return created


@router.get("", response_model=None)
@dto_response(200, [BookDto], "Books, optionally filtered by author name")
def list_books(
    filters: BookFilter = Depends(ValidationPipe(BookFilterDto, source="query")),
) -> list[dict[str, Any]]:
    return store.list(author=filters.author)


@router.get("/{book_id}", response_model=None)
@dto_response(200, BookDto)
def get_book(path: BookPath = Depends(ValidationPipe(BookPathDto, source="params"))) -> dict[str, Any]:
    try:
        return store.get(path.book_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Book not found: {path.book_id}") from e

"""In-memory book store used by the demo routes."""

from __future__ import annotations

import threading
import uuid
from typing import Any


class BookStore:
    def __init__(self) -> None:
        self._books: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        book = {"id": uuid.uuid4().hex, **data}
        with self._lock:
            self._books[book["id"]] = book
        return book

    def get(self, book_id: str) -> dict[str, Any]:
        """Raises KeyError if the book does not exist."""

        return self._books[book_id]

    def list(self, *, author: str | None = None) -> list[dict[str, Any]]:
        books = list(self._books.values())
        if author is not None:
            books = [b for b in books if b["author"]["name"] == author]
        return books

    def clear(self) -> None:
        with self._lock:
            self._books.clear()

"""Bookshelf — a small JSON API over an in-memory shelf.

Demonstrates path variables, query parameters bound by name, the
reserved ``request`` parameter, and (value, status) returns.

Run:
    cd examples/bookshelf && perch run app:app
"""

import logging
import threading
from dataclasses import dataclass

from perch import App, AppConfig, HTTPError

app = App(AppConfig(debug=True))

audit_log: list[str] = []


# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Book:
    id: int
    title: str
    author: str


_books: dict[int, Book] = {}
_next_id = 1
_lock = threading.Lock()


def _to_dict(book: Book) -> dict:
    return {"id": book.id, "title": book.title, "author": book.author}


def _find(id: str) -> Book:
    try:
        book = _books.get(int(id))
    except ValueError:
        book = None
    if book is None:
        raise HTTPError(status=404, detail=f"No book with id {id!r}")
    return book


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/books")
def list_books(author):
    books = [_to_dict(b) for b in _books.values()]
    if author is not None:
        books = [b for b in books if b["author"] == author]
    return books


@app.post("/books")
def create_book(title, author):
    global _next_id
    if not title:
        return ({"error": "title is required"}, 400)
    with _lock:
        book = Book(id=_next_id, title=title, author=author or "unknown")
        _books[book.id] = book
        _next_id += 1
    return (_to_dict(book), 201)


@app.get("/books/:id")
def show_book(id):
    return _to_dict(_find(id))


@app.delete("/books/:id")
def delete_book(id):
    book = _find(id)
    with _lock:
        _books.pop(book.id, None)
    return None


@app.get("/books/:id/audit")
def audit(id, request):
    audit_log.append(f"{request.method} {request.path}")
    return {"id": id, "seen": len(audit_log)}


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    app.run()

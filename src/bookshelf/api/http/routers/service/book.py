"""Book API router with CRUD operations."""

import re
from collections.abc import Iterable
from json import JSONDecodeError
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger

from src.bookshelf.api.http.deps import get_book_repository
from src.bookshelf.core.errors import (
    BookshelfError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.bookshelf.entities.service.book import Book, BookInput, BookRepository

router = APIRouter(prefix="/books", tags=["books"])

_BOOK_ID = re.compile(r"[+-]?[0-9]+")
_BOOK_ID_MIN = -(2**63)
_BOOK_ID_MAX = 2**63 - 1
_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_book_input(request: Request) -> BookInput:
    """Collect ``title``, ``author`` and ``description`` from the request.

    Values come from a JSON object body or a form body, falling back to the
    query string. A key repeated in the query string or form keeps its first
    value. Required-field checks are left to the handlers.
    """
    values: dict[str, Any] = _first_values(request.query_params.multi_items())
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except (JSONDecodeError, UnicodeDecodeError):
            raise _bad_request("request body is not valid JSON") from None
        if not isinstance(body, dict):
            raise _bad_request("request body must be a JSON object")
        values.update(body)
    elif content_type.startswith(_FORM_TYPES):
        form = await request.form()
        values.update(
            _first_values(
                (key, value) for key, value in form.multi_items() if isinstance(value, str)
            )
        )

    fields = {}
    for name in BookInput.model_fields:
        value = values.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise _bad_request(f"{name} must be a string")
        try:
            # JSON escapes can smuggle in lone surrogates the driver cannot bind
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise _bad_request(f"{name} is not valid UTF-8") from None
        fields[name] = value
    return BookInput(**fields)


def _first_values(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, value in items:
        values.setdefault(key, value)
    return values


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def parse_book_id(raw: str) -> int:
    """Parse a path id as a signed 64-bit integer."""
    if not _BOOK_ID.fullmatch(raw):
        raise ValidationError("invalid book id")
    book_id = int(raw)
    if not _BOOK_ID_MIN <= book_id <= _BOOK_ID_MAX:
        raise ValidationError("invalid book id")
    return book_id


def require_fields(data: BookInput) -> None:
    if data.missing_required():
        raise ValidationError("title and author are required")


def _as_http_error(exc: BookshelfError, action: str) -> HTTPException:
    """Map a domain error onto the HTTP status it stands for."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        logger.info("{} failed: {}", action, exc)
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    if isinstance(exc, StorageError):
        logger.error("{} failed: {}", action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{action} failed: {exc}",
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_book(
    data: BookInput = Depends(read_book_input),
    repository: BookRepository = Depends(get_book_repository),
) -> dict[str, int]:
    """Create a new book and return its id."""
    try:
        require_fields(data)
        book_id = repository.create(data)
    except BookshelfError as e:
        raise _as_http_error(e, "Create book") from e
    logger.info("Created book {}", book_id)
    return {"id": book_id}


@router.get("", response_model=list[Book])
def list_books(
    repository: BookRepository = Depends(get_book_repository),
) -> list[Book]:
    """List all books."""
    try:
        return repository.list_all()
    except BookshelfError as e:
        raise _as_http_error(e, "List books") from e


@router.get("/{book_id}", response_model=Book)
def get_book(
    book_id: str,
    repository: BookRepository = Depends(get_book_repository),
) -> Book:
    """Get a book by ID."""
    try:
        return repository.get_by_id(parse_book_id(book_id))
    except BookshelfError as e:
        raise _as_http_error(e, "Get book") from e


@router.put("/{book_id}")
def update_book(
    book_id: str,
    data: BookInput = Depends(read_book_input),
    repository: BookRepository = Depends(get_book_repository),
) -> dict[str, str]:
    """Replace the title, author and description of a book."""
    try:
        parsed_id = parse_book_id(book_id)
        require_fields(data)
        repository.update(parsed_id, data)
    except BookshelfError as e:
        raise _as_http_error(e, "Update book") from e
    logger.info("Updated book {}", parsed_id)
    return {"message": f"Book {parsed_id} updated"}


@router.delete("/{book_id}")
def delete_book(
    book_id: str,
    repository: BookRepository = Depends(get_book_repository),
) -> dict[str, str]:
    """Delete a book."""
    try:
        parsed_id = parse_book_id(book_id)
        repository.delete(parsed_id)
    except BookshelfError as e:
        raise _as_http_error(e, "Delete book") from e
    logger.info("Deleted book {}", parsed_id)
    return {"message": f"Book {parsed_id} deleted"}

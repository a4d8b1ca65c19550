"""Data-access layer for books."""

from sqlalchemy import delete, insert, update
from sqlmodel import select

from src.bookshelf.core.errors import NotFoundError
from src.bookshelf.core.services.database.db_gateway import StorageGateway

from .entity import Book, BookInput
from .table import BookTable

_BOOK_COLUMNS = (BookTable.id, BookTable.title, BookTable.author, BookTable.description)


class BookRepository:
    """Translates book operations into storage gateway calls.

    ``NotFoundError`` means a point query returned no row or a write touched
    no row; ``StorageError`` from the gateway propagates unchanged.
    """

    def __init__(self, gateway: StorageGateway) -> None:
        self._gateway = gateway

    def create(self, data: BookInput) -> int:
        statement = (
            insert(BookTable)
            .values(title=data.title, author=data.author, description=data.description)
            .returning(BookTable.id)
        )
        row = self._gateway.query_one(statement)
        return int(row.id)

    def get_by_id(self, book_id: int) -> Book:
        statement = select(*_BOOK_COLUMNS).where(BookTable.id == book_id)
        try:
            row = self._gateway.query_one(statement)
        except NotFoundError:
            raise NotFoundError(f"Book {book_id} not found") from None
        return Book.model_validate(dict(row._mapping))

    def list_all(self) -> list[Book]:
        statement = select(*_BOOK_COLUMNS).order_by(BookTable.id)
        rows = self._gateway.query_many(statement)
        return [Book.model_validate(dict(row._mapping)) for row in rows]

    def update(self, book_id: int, data: BookInput) -> None:
        """Replace every mutable field of the book in one statement."""
        statement = (
            update(BookTable)
            .where(BookTable.id == book_id)
            .values(title=data.title, author=data.author, description=data.description)
        )
        if self._gateway.execute(statement) == 0:
            raise NotFoundError(f"Book {book_id} not found")

    def delete(self, book_id: int) -> None:
        statement = delete(BookTable).where(BookTable.id == book_id)
        if self._gateway.execute(statement) == 0:
            raise NotFoundError(f"Book {book_id} not found")

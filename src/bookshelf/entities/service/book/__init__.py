"""Entity package: Book."""

from .entity import Book, BookInput
from .repository import BookRepository
from .table import BookTable

__all__ = ["Book", "BookInput", "BookRepository", "BookTable"]

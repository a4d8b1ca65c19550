"""Entities module with an entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model and client input model
- table.py: Database persistence model
- repository.py: Data access layer over the storage gateway
"""

from .service.book import Book, BookInput, BookRepository, BookTable

__all__ = [
    "Book",
    "BookInput",
    "BookRepository",
    "BookTable",
]

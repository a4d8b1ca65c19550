"""Bookshelf: CRUD HTTP service over a relational catalog of books.

The package is layered leaf-first: a storage gateway over a pooled SQLAlchemy
engine, a book repository on top of it, and FastAPI handlers mounted at
``/books``.
"""

__version__ = "0.1.0"

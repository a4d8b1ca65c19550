"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Depends, Request

from src.bookshelf.api.http.app_data import ApplicationDependencies
from src.bookshelf.core.services import StorageGateway
from src.bookshelf.entities.service.book import BookRepository


def get_storage_gateway(request: Request) -> StorageGateway:
    """Get the storage gateway shared by every request."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.storage


def get_book_repository(
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> BookRepository:
    """Get a book repository bound to the shared storage gateway."""
    return BookRepository(gateway)

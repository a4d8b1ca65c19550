"""Core services exports."""

from .database.db_gateway import StorageGateway
from .database.db_manage import DbManageService

__all__ = [
    "DbManageService",
    "StorageGateway",
]

"""Database initialization script."""

from src.bookshelf.core.services import DbManageService, StorageGateway
from src.bookshelf.runtime.config.config_data import ConfigData
from src.bookshelf.runtime.context import get_config


def init_db(config: ConfigData | None = None) -> None:
    """Create the books table if it does not exist yet."""
    storage = StorageGateway.from_config(config or get_config())
    try:
        DbManageService(storage.engine).create_all()
    finally:
        storage.dispose()


if __name__ == "__main__":
    init_db()

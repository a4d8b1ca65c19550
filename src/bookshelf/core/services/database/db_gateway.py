"""Storage gateway over the shared, pooled database engine."""

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable
from sqlmodel import create_engine

from src.bookshelf.core.errors import NotFoundError, StorageError
from src.bookshelf.runtime.config.config_data import ConfigData

Statement = Executable | str
Params = Mapping[str, Any] | None


class StorageGateway:
    """Runs parameterized statements against a pooled engine.

    Every call checks a connection out of the pool for the duration of a
    single transaction and returns it on exit, so one instance can be shared
    by concurrent requests. Driver failures are surfaced as ``StorageError``
    and never retried.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_config(cls, config: ConfigData) -> "StorageGateway":
        """Build the engine and its connection pool from configuration."""
        db_config = config.database
        logger.info(
            "Configuring database engine for environment: {}", config.app.environment
        )

        engine_kwargs: dict[str, Any] = {
            "echo": False,
            "echo_pool": False,
            "pool_pre_ping": True,  # Validate connections before use
            "connect_args": cls._get_connect_args(config),
        }
        if not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        engine = create_engine(db_config.connection_string, **engine_kwargs)
        logger.info(
            "Database engine initialized",
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
        )
        return cls(engine)

    @staticmethod
    def _get_connect_args(config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        db_config = config.database

        if db_config.is_sqlite:
            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )
            return {
                "check_same_thread": False,  # Connections move between worker threads
                "timeout": db_config.connect_timeout,
            }

        return {
            "application_name": f"{config.app.environment}_bookshelf",
            "connect_timeout": db_config.connect_timeout,
        }

    @property
    def engine(self) -> Engine:
        return self._engine

    def execute(self, statement: Statement, params: Params = None) -> int:
        """Run a write statement and return the number of affected rows."""
        result = self._run(statement, params, lambda r: r.rowcount)
        return int(result)

    def query_one(self, statement: Statement, params: Params = None) -> Row:
        """Return the first row produced by ``statement``.

        Raises:
            NotFoundError: If the statement produced no rows
        """
        row = self._run(statement, params, lambda r: r.first())
        if row is None:
            raise NotFoundError("no rows returned")
        return row

    def query_many(self, statement: Statement, params: Params = None) -> Sequence[Row]:
        """Return every row produced by ``statement``."""
        return self._run(statement, params, lambda r: r.all())

    def _run(self, statement: Statement, params: Params, consume):
        if isinstance(statement, str):
            statement = text(statement)
        try:
            # begin() commits on success and rolls back on error
            with self._engine.begin() as connection:
                result = connection.execute(statement, dict(params) if params else None)
                return consume(result)
        except SQLAlchemyError as e:
            logger.error(
                "Database statement failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise StorageError(f"{type(e).__name__}: {e}") from e

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()

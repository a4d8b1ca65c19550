"""Domain error taxonomy shared by the gateway, repositories and routers."""


class BookshelfError(Exception):
    """Base bookshelf exception."""


class ValidationError(BookshelfError):
    """Client input malformed or missing a required field (-> HTTP 400)."""


class NotFoundError(BookshelfError):
    """Referenced resource does not exist (-> HTTP 404)."""


class StorageError(BookshelfError):
    """Connection, constraint or unexpected database failure (-> HTTP 500)."""

"""Entity: Book."""

from pydantic import BaseModel, Field


class BookInput(BaseModel):
    """Writable fields of a book, as supplied by a client on create or update."""

    title: str = Field(default="", description="Title")
    author: str = Field(default="", description="Author")
    description: str = Field(default="", description="Free-text description")

    def missing_required(self) -> list[str]:
        """Names of required fields that are empty."""
        return [name for name in ("title", "author") if not getattr(self, name)]


class Book(BaseModel):
    """Book entity representing a catalog record.

    Field order is the serialized key order: ``id``, ``title``, ``author``,
    ``description``.
    """

    id: int = Field(description="Storage-assigned identifier")
    title: str = Field(description="Title")
    author: str = Field(description="Author")
    description: str = Field(default="", description="Free-text description")

"""Publication metadata (Dublin Core subset)."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class Metadata(BaseModel):
    """Book-level metadata written into the package document."""

    title: str = ""
    authors: list[str] = Field(default_factory=list)
    language: str = ""  # BCP 47, e.g. "en", "en-US"
    identifier: str = ""  # URN, ISBN, ...
    description: str = ""
    publisher: str = ""
    date: datetime | None = None
    rights: str = ""
    cover_image: str = ""  # Path to an image promoted to cover upstream

    def ensure_identifier(self) -> None:
        """Generate a UUID URN identifier if none is set."""
        if not self.identifier:
            self.identifier = f"urn:uuid:{uuid.uuid4()}"

    def ensure_defaults(self) -> None:
        """Fill language, identifier and date when unset."""
        if not self.language:
            self.language = "en"
        self.ensure_identifier()
        if self.date is None:
            self.date = datetime.now()

    def merge(self, override: "Metadata | None") -> None:
        """Overlay non-empty fields of ``override`` onto this metadata."""
        if override is None:
            return
        if override.title:
            self.title = override.title
        if override.authors:
            self.authors = list(override.authors)
        if override.language:
            self.language = override.language
        if override.identifier:
            self.identifier = override.identifier
        if override.description:
            self.description = override.description
        if override.publisher:
            self.publisher = override.publisher
        if override.date is not None:
            self.date = override.date
        if override.rights:
            self.rights = override.rights
        if override.cover_image:
            self.cover_image = override.cover_image

    def valid(self) -> bool:
        return bool(self.title)

    def primary_author(self) -> str:
        """Return the first author, or an empty string."""
        return self.authors[0] if self.authors else ""

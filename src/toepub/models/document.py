"""Intermediate document model shared by parsers and the EPUB builder."""

from pydantic import BaseModel, Field, field_validator

from toepub.models.metadata import Metadata
from toepub.models.toc import TableOfContents

SUPPORTED_MEDIA_TYPES = frozenset(
    {
        "image/png",
        "image/jpeg",
        "image/gif",
        "image/svg+xml",
        "text/css",
    }
)


class Chapter(BaseModel):
    """Content section of the book, one XHTML file in the EPUB."""

    id: str  # e.g. "chapter-001"
    title: str = ""
    level: int = Field(default=1, ge=1, le=6)
    content: str = ""  # XHTML body fragment
    file_name: str  # e.g. "content/chapter-001.xhtml"
    order: int = 0  # Spine position


class Resource(BaseModel):
    """Embedded media file (image or stylesheet)."""

    id: str
    file_name: str  # e.g. "images/photo.png"
    media_type: str
    data: bytes
    is_cover: bool = False

    @field_validator("media_type")
    @classmethod
    def _check_media_type(cls, value: str) -> str:
        if value not in SUPPORTED_MEDIA_TYPES:
            raise ValueError(f"unsupported media type: {value}")
        return value

    @field_validator("data")
    @classmethod
    def _check_data(cls, value: bytes) -> bytes:
        if not value:
            raise ValueError("resource data must not be empty")
        return value


class Document(BaseModel):
    """Parsed content ready for EPUB generation."""

    metadata: Metadata = Field(default_factory=Metadata)
    chapters: list[Chapter] = Field(default_factory=list)
    resources: list[Resource] = Field(default_factory=list)
    toc: TableOfContents = Field(default_factory=TableOfContents)

    def add_chapter(self, chapter: Chapter) -> None:
        self.chapters.append(chapter)

    def add_resource(self, resource: Resource) -> None:
        self.resources.append(resource)

    def valid(self) -> bool:
        """A document is buildable when it has a title and chapters."""
        return self.metadata.valid() and bool(self.chapters)

    def ordered_chapters(self) -> list[Chapter]:
        """Chapters in reading order (by ``order``, stable for ties)."""
        return sorted(self.chapters, key=lambda c: c.order)

    def cover_resource(self) -> Resource | None:
        for resource in self.resources:
            if resource.is_cover:
                return resource
        return None

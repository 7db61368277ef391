"""Data models handed from input parsers to the converter."""

from enum import Enum

from pydantic import BaseModel, Field

from toepub.models.document import Document


class InputFormat(str, Enum):
    """Supported input formats."""

    MARKDOWN = "markdown"
    HTML = "html"
    PDF = "pdf"
    UNKNOWN = "unknown"


class Heading(BaseModel):
    """A heading found in the source, used to build the TOC."""

    level: int
    title: str
    id: str


class ImageReference(BaseModel):
    """A local image referenced by chapter content, loaded later."""

    src: str  # As written in the source
    source_path: str  # Resolved path on disk
    file_name: str  # Target path in the EPUB, e.g. "images/photo.png"


class ParseOutput(BaseModel):
    """Result of parsing one input file."""

    document: Document
    images: list[ImageReference] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

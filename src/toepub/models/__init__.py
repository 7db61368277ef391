"""Data models."""

from toepub.models.document import (
    SUPPORTED_MEDIA_TYPES,
    Chapter,
    Document,
    Resource,
)
from toepub.models.extraction import (
    Heading,
    ImageReference,
    InputFormat,
    ParseOutput,
)
from toepub.models.metadata import Metadata
from toepub.models.result import ConversionResult, ConversionStats
from toepub.models.toc import TableOfContents, TOCEntry, build_from_headings

__all__ = [
    # Document models
    "SUPPORTED_MEDIA_TYPES",
    "Chapter",
    "Document",
    "Resource",
    "Metadata",
    # Navigation
    "TOCEntry",
    "TableOfContents",
    "build_from_headings",
    # Parser output
    "InputFormat",
    "Heading",
    "ImageReference",
    "ParseOutput",
    # Results
    "ConversionResult",
    "ConversionStats",
]

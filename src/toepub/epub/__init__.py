"""EPUB 3 package generation."""

from toepub.epub.builder import EpubBuilder, build_epub
from toepub.epub.content import generate_content_document
from toepub.epub.errors import (
    ArchiveWriteError,
    EpubError,
    InvalidDocumentError,
    MissingTitleError,
    NoChaptersError,
    RenderError,
)
from toepub.epub.metadata import merge_metadata, validate_metadata
from toepub.epub.navigation import generate_nav_document
from toepub.epub.package import generate_package_document

__all__ = [
    # Builder
    "EpubBuilder",
    "build_epub",
    # Generators
    "generate_content_document",
    "generate_nav_document",
    "generate_package_document",
    # Metadata
    "merge_metadata",
    "validate_metadata",
    # Errors
    "EpubError",
    "InvalidDocumentError",
    "MissingTitleError",
    "NoChaptersError",
    "RenderError",
    "ArchiveWriteError",
]

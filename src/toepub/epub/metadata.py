"""Metadata merging and validation."""

from toepub.epub.errors import MissingTitleError
from toepub.models.metadata import Metadata


def merge_metadata(source: Metadata | None, override: Metadata | None) -> Metadata:
    """Combine source metadata with overrides; overrides take precedence.

    Returns a new object with defaults ensured; neither input is modified.
    """
    result = source.model_copy(deep=True) if source is not None else Metadata()
    result.merge(override)
    result.ensure_defaults()
    return result


def validate_metadata(meta: Metadata) -> None:
    """Raise ``MissingTitleError`` if required fields are missing."""
    if not meta.valid():
        raise MissingTitleError()

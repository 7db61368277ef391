"""EPUB generation errors."""


class EpubError(Exception):
    """Base error for EPUB generation.

    ``kind`` is a stable machine-readable identifier, ``phase`` names the
    build step that failed and ``item_id`` the chapter or resource involved.
    """

    kind = "epub_error"

    def __init__(
        self,
        message: str,
        phase: str | None = None,
        item_id: str | None = None,
    ):
        self.message = message
        self.phase = phase
        self.item_id = item_id
        super().__init__(self._format())

    def _format(self) -> str:
        parts = []
        if self.phase:
            parts.append(self.phase)
        if self.item_id:
            parts.append(f"[{self.item_id}]")
        prefix = " ".join(parts)
        return f"{prefix}: {self.message}" if prefix else self.message


class InvalidDocumentError(EpubError):
    """Document cannot be packaged."""

    kind = "invalid_document"


class MissingTitleError(InvalidDocumentError):
    """Title is empty after defaults were applied."""

    kind = "missing_title"

    def __init__(self, phase: str | None = None):
        super().__init__("missing required title metadata", phase=phase)


class NoChaptersError(InvalidDocumentError):
    """Document has nothing to put in the spine."""

    kind = "no_chapters"

    def __init__(self, phase: str | None = None):
        super().__init__("document has no chapters", phase=phase)


class RenderError(EpubError):
    """A package, navigation or content document failed to render."""

    kind = "render_failed"


class ArchiveWriteError(EpubError):
    """Writing an entry into the ZIP container failed."""

    kind = "archive_write_failed"

"""Factory for creating document parsers based on input format."""

from abc import ABC, abstractmethod
from pathlib import Path

from toepub.models.extraction import InputFormat, ParseOutput


class DocumentParser(ABC):
    """Abstract base class for input parsers.

    Parsers turn raw file content into a Document whose chapters carry
    XHTML body fragments and whose TOC is already built.
    """

    @abstractmethod
    def parse(self, content: bytes, base_path: Path) -> ParseOutput:
        """Parse content; ``base_path`` resolves relative image paths."""
        pass

    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """File extensions this parser handles."""
        pass


class ParserFactory:
    """Factory for creating the appropriate parser for an input."""

    SUPPORTED_FORMATS = {
        ".md": InputFormat.MARKDOWN,
        ".markdown": InputFormat.MARKDOWN,
        ".html": InputFormat.HTML,
        ".htm": InputFormat.HTML,
        ".pdf": InputFormat.PDF,
    }

    FORMAT_NAMES = {
        "md": InputFormat.MARKDOWN,
        "markdown": InputFormat.MARKDOWN,
        "html": InputFormat.HTML,
        "htm": InputFormat.HTML,
        "pdf": InputFormat.PDF,
    }

    @classmethod
    def create(cls, input_format: InputFormat) -> DocumentParser:
        """Create a parser for the given format.

        Raises:
            ValueError: If the format has no parser
        """
        if input_format == InputFormat.MARKDOWN:
            from toepub.core.markdown_parser import MarkdownParser

            return MarkdownParser()
        elif input_format == InputFormat.HTML:
            from toepub.core.html_parser import HtmlParser

            return HtmlParser()
        elif input_format == InputFormat.PDF:
            from toepub.core.pdf_parser import PdfParser

            return PdfParser()

        raise ValueError(f"Unsupported format: {input_format.value}")

    @classmethod
    def detect_format(cls, path: Path, explicit: str | None = None) -> InputFormat:
        """Detect the format from an explicit name or the file extension."""
        if explicit:
            return cls.format_from_name(explicit)
        return cls.SUPPORTED_FORMATS.get(path.suffix.lower(), InputFormat.UNKNOWN)

    @classmethod
    def format_from_name(cls, name: str) -> InputFormat:
        """Map a user-supplied format name ("md", "html", ...) to a format."""
        return cls.FORMAT_NAMES.get(name.strip().lower(), InputFormat.UNKNOWN)

    @classmethod
    def is_supported(cls, path: Path) -> bool:
        return path.suffix.lower() in cls.SUPPORTED_FORMATS

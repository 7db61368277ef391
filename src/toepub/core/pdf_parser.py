"""PDF parsing with font-size based heading detection."""

import io
import logging
import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

# Suppress warnings about malformed PDF object references from PDF libraries
logging.getLogger("pdfminer").setLevel(logging.ERROR)
logging.getLogger("pypdf").setLevel(logging.ERROR)

import pdfplumber
import pypdf
from markupsafe import escape
from pypdf.errors import EmptyFileError, FileNotDecryptedError, PdfReadError

from toepub.core.errors import ParseError
from toepub.core.parser_factory import DocumentParser
from toepub.core.xhtml import (
    FIRST_CHAPTER_FILE,
    FIRST_CHAPTER_ID,
    generate_heading_id,
    headings_to_toc,
    unique_id,
)
from toepub.models.document import Chapter, Document
from toepub.models.extraction import Heading, ParseOutput
from toepub.models.metadata import Metadata

log = logging.getLogger(__name__)

# Words whose tops differ by less than this belong to the same line
LINE_TOLERANCE = 3.0
# Minimum size ratio against body text for a heading
HEADING_SIZE_RATIO = 1.15
MAX_HEADING_LENGTH = 200
MAX_TITLE_LINE_LENGTH = 100
UNTITLED = "Untitled Document"


@dataclass
class TextLine:
    """A line of text on a page with its largest font size."""

    text: str
    size: float
    top: float
    bottom: float


@dataclass
class Block:
    """A heading or paragraph in reading order."""

    kind: str  # "heading" | "paragraph"
    text: str
    level: int = 0


# =============================================================================
# Line extraction
# =============================================================================


def group_words_into_lines(words: list[dict]) -> list[TextLine]:
    """Group pdfplumber words into lines by vertical position."""
    lines: list[TextLine] = []
    current: list[dict] = []

    for word in sorted(words, key=lambda w: (round(w["top"]), w["x0"])):
        if current and abs(word["top"] - current[0]["top"]) > LINE_TOLERANCE:
            lines.append(_make_line(current))
            current = []
        current.append(word)

    if current:
        lines.append(_make_line(current))

    return [line for line in lines if line.text]


def _make_line(words: list[dict]) -> TextLine:
    words = sorted(words, key=lambda w: w["x0"])
    return TextLine(
        text=" ".join(w["text"] for w in words).strip(),
        size=max(float(w.get("size") or 0) for w in words),
        top=min(w["top"] for w in words),
        bottom=max(w["bottom"] for w in words),
    )


def body_font_size(lines: list[TextLine]) -> float:
    """Most common font size, weighted by characters."""
    sizes: Counter[float] = Counter()
    for line in lines:
        sizes[round(line.size, 1)] += len(line.text)
    if not sizes:
        return 0.0
    return sizes.most_common(1)[0][0]


# =============================================================================
# Heading detection
# =============================================================================


def looks_like_heading(text: str) -> bool:
    """Check that text has the shape of a heading."""
    text = text.strip()
    if not text or len(text) > MAX_HEADING_LENGTH:
        return False
    if text.endswith((",", ";")):
        return False
    if is_page_number(text):
        return False
    if text.lower().startswith(("http://", "https://", "www.")):
        return False
    return any(ch.isalpha() for ch in text)


def is_page_number(text: str) -> bool:
    """Check if text is likely a page number."""
    text = text.strip().lower()
    if text.isdigit():
        return True
    if re.match(r"^[ivxlc]+$", text):
        return True
    return bool(re.match(r"^page\s+\d+$", text))


def infer_heading_level(size: float, body_size: float) -> int:
    """Infer heading level from font size ratio; 0 means body text."""
    ratio = size / body_size if body_size else 1.0
    if ratio >= 1.5:
        return 1
    elif ratio >= 1.3:
        return 2
    elif ratio >= HEADING_SIZE_RATIO:
        return 3
    return 0


def lines_to_blocks(pages: list[list[TextLine]], body_size: float) -> list[Block]:
    """Classify lines as headings or paragraph text.

    Paragraphs break at headings, page boundaries and vertical gaps larger
    than one and a half lines.
    """
    blocks: list[Block] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(Block(kind="paragraph", text=" ".join(paragraph)))
            paragraph.clear()

    for page_lines in pages:
        previous: TextLine | None = None
        for line in page_lines:
            level = infer_heading_level(line.size, body_size)
            if level and looks_like_heading(line.text):
                flush()
                blocks.append(Block(kind="heading", text=line.text, level=level))
                previous = line
                continue

            if previous is not None and line.top - previous.bottom > line.size * 1.5:
                flush()
            paragraph.append(line.text)
            previous = line
        flush()

    return blocks


def blocks_to_xhtml(blocks: list[Block]) -> tuple[str, list[Heading]]:
    """Render blocks as an XHTML fragment; text is escaped."""
    parts: list[str] = []
    headings: list[Heading] = []
    used: set[str] = set()

    for block in blocks:
        if block.kind == "heading":
            heading_id = unique_id(generate_heading_id(block.text), used)
            headings.append(Heading(level=block.level, title=block.text, id=heading_id))
            parts.append(
                f'<h{block.level} id="{heading_id}">{escape(block.text)}</h{block.level}>'
            )
        else:
            parts.append(f"<p>{escape(block.text)}</p>")

    return "\n".join(parts), headings


def extract_title(blocks: list[Block], headings: list[Heading]) -> str:
    """Pick a title: first h1, first heading, first short line, or a default."""
    for heading in headings:
        if heading.level == 1:
            return heading.title
    if headings:
        return headings[0].title
    for block in blocks:
        first_line = block.text.strip()
        if first_line and len(first_line) < MAX_TITLE_LINE_LENGTH:
            return first_line
    return UNTITLED


# =============================================================================
# Parser
# =============================================================================


class PdfParser(DocumentParser):
    """Parse text-based PDFs into a single-chapter Document."""

    def parse(self, content: bytes, base_path: Path) -> ParseOutput:
        try:
            reader = pypdf.PdfReader(io.BytesIO(content))
            num_pages = len(reader.pages)
        except (EmptyFileError, FileNotDecryptedError, PdfReadError) as e:
            raise ParseError(f"Cannot read PDF: {e}") from e

        if num_pages == 0:
            raise ParseError("PDF has no pages")

        pages = self._extract_lines(content)
        body_size = body_font_size([line for page in pages for line in page])
        blocks = lines_to_blocks(pages, body_size)
        if not blocks:
            raise ParseError("PDF contains no extractable text (might be image-based)")

        xhtml, headings = blocks_to_xhtml(blocks)
        meta = self._get_metadata(reader)
        title = extract_title(blocks, headings)
        if not meta.title:
            meta.title = title

        doc = Document(metadata=meta)
        doc.add_chapter(
            Chapter(
                id=FIRST_CHAPTER_ID,
                title=title,
                level=1,
                content=xhtml,
                file_name=FIRST_CHAPTER_FILE,
                order=0,
            )
        )
        doc.toc = headings_to_toc(headings, FIRST_CHAPTER_FILE)

        log.debug(
            "Parsed PDF: %d pages, body size %.1f, %d headings",
            num_pages,
            body_size,
            len(headings),
        )
        return ParseOutput(document=doc)

    def supported_extensions(self) -> list[str]:
        return [".pdf"]

    def _extract_lines(self, content: bytes) -> list[list[TextLine]]:
        """Extract text lines with font sizes, page by page.

        Raises:
            ParseError: If pdfplumber cannot lay out the pages
        """
        pages: list[list[TextLine]] = []
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                for page in pdf.pages:
                    words = page.extract_words(extra_attrs=["size"])
                    pages.append(group_words_into_lines(words))
        except Exception as e:
            raise ParseError(f"Cannot extract text from PDF: {e}") from e
        return pages

    def _get_metadata(self, reader: pypdf.PdfReader) -> Metadata:
        """Extract title and authors from the PDF info dictionary."""
        info = reader.metadata or {}
        meta = Metadata()

        if info.get("/Title"):
            meta.title = str(info.get("/Title")).strip()

        if info.get("/Author"):
            author_str = str(info.get("/Author"))
            # Split on common separators
            for separator in (";", ","):
                if separator in author_str:
                    meta.authors = [a.strip() for a in author_str.split(separator) if a.strip()]
                    break
            else:
                meta.authors = [author_str.strip()]

        if info.get("/Subject"):
            meta.description = str(info.get("/Subject")).strip()

        return meta

"""Navigation document (nav.xhtml) generation."""

from jinja2 import TemplateError
from markupsafe import Markup, escape

from toepub.epub.constants import NAV_DOCUMENT_NAME, STYLESHEET_NAME
from toepub.epub.errors import RenderError
from toepub.epub.render import render_template
from toepub.models.document import Document
from toepub.models.toc import TOCEntry


def generate_nav_document(doc: Document) -> str:
    """Generate nav.xhtml with the TOC and landmarks blocks."""
    chapters = doc.ordered_chapters()
    first_chapter_href = chapters[0].file_name if chapters else ""

    try:
        return render_template(
            "nav.xhtml",
            language=doc.metadata.language,
            title=doc.metadata.title,
            stylesheet_href=STYLESHEET_NAME,
            toc_list=Markup(render_toc_list(doc.toc.entries)),
            nav_href=NAV_DOCUMENT_NAME,
            first_chapter_href=first_chapter_href,
        )
    except TemplateError as e:
        raise RenderError(str(e), phase="navigation") from e


def render_toc_list(entries: list[TOCEntry]) -> str:
    """Render TOC entries as nested ordered lists."""
    if not entries:
        return "    <ol></ol>"

    lines = ["    <ol>"]
    for entry in entries:
        _render_toc_entry(lines, entry, 3)
    lines.append("    </ol>")
    return "\n".join(lines)


def _render_toc_entry(lines: list[str], entry: TOCEntry, indent: int) -> None:
    pad = "  " * indent
    lines.append(f"{pad}<li>")
    # href is a package-relative path produced upstream
    lines.append(f'{pad}  <a href="{entry.href}">{escape(entry.title)}</a>')
    if entry.children:
        lines.append(f"{pad}  <ol>")
        for child in entry.children:
            _render_toc_entry(lines, child, indent + 2)
        lines.append(f"{pad}  </ol>")
    lines.append(f"{pad}</li>")

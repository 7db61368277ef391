"""XHTML content document generation."""

import posixpath

from jinja2 import TemplateError
from markupsafe import Markup

from toepub.epub.constants import STYLESHEET_NAME
from toepub.epub.errors import RenderError
from toepub.epub.render import render_template
from toepub.models.document import Chapter


def stylesheet_href(file_name: str) -> str:
    """Path of the default stylesheet relative to a package file."""
    start = posixpath.dirname(file_name) or "."
    return posixpath.relpath(STYLESHEET_NAME, start=start)


def generate_content_document(chapter: Chapter, book_title: str) -> str:
    """Generate the XHTML document for one chapter.

    The title is escaped; the chapter content is already XHTML and is
    inserted as is.
    """
    try:
        return render_template(
            "content.xhtml",
            title=chapter.title or book_title,
            stylesheet_href=stylesheet_href(chapter.file_name),
            content=Markup(chapter.content),
        )
    except TemplateError as e:
        raise RenderError(str(e), phase="content", item_id=chapter.id) from e

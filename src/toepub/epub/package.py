"""Package document (content.opf) generation."""

from datetime import datetime, timezone

from jinja2 import TemplateError

from toepub.epub.constants import (
    CSS_ITEM_ID,
    CSS_MEDIA_TYPE,
    NAV_DOCUMENT_NAME,
    NAV_ITEM_ID,
    STYLESHEET_NAME,
    XHTML_MEDIA_TYPE,
)
from toepub.epub.errors import RenderError
from toepub.epub.render import render_template
from toepub.models.document import Document

DATE_FORMAT = "%Y-%m-%d"
MODIFIED_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def generate_package_document(doc: Document) -> str:
    """Generate content.opf: metadata, manifest and spine.

    Free-text metadata is escaped by the template. The spine follows
    ``Chapter.order``, not list position.
    """
    meta = doc.metadata
    date = (meta.date or datetime.now()).strftime(DATE_FORMAT)
    modified = datetime.now(timezone.utc).strftime(MODIFIED_FORMAT)

    try:
        return render_template(
            "package.opf",
            meta=meta,
            date=date,
            modified=modified,
            chapters=doc.ordered_chapters(),
            resources=doc.resources,
            nav_id=NAV_ITEM_ID,
            nav_href=NAV_DOCUMENT_NAME,
            css_id=CSS_ITEM_ID,
            css_href=STYLESHEET_NAME,
            css_media_type=CSS_MEDIA_TYPE,
            xhtml_media_type=XHTML_MEDIA_TYPE,
        )
    except TemplateError as e:
        raise RenderError(str(e), phase="package") from e

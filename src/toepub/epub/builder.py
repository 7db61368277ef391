"""EPUB 3 package assembly."""

import io
import logging
import posixpath
import zipfile
from typing import BinaryIO

from jinja2 import TemplateError

from toepub.epub.constants import (
    COLOPHON_FILE_NAME,
    COLOPHON_ID,
    COLOPHON_TITLE,
    CONTAINER_XML_PATH,
    EPUB_MIMETYPE,
    MIMETYPE_FILE_NAME,
    NAV_DOCUMENT_NAME,
    OEBPS_DIR,
    OEBPS_PACKAGE_MEDIA_TYPE,
    PACKAGE_DOCUMENT_NAME,
    ROOT_FILE_PATH,
    STYLESHEET_NAME,
)
from toepub.epub.content import generate_content_document
from toepub.epub.errors import (
    ArchiveWriteError,
    InvalidDocumentError,
    MissingTitleError,
    NoChaptersError,
    RenderError,
)
from toepub.epub.navigation import generate_nav_document
from toepub.epub.package import generate_package_document
from toepub.epub.render import read_static, render_template
from toepub.models.document import Chapter, Document

log = logging.getLogger(__name__)

COLOPHON_CONTENT = """<hr style="margin: 3em 0;"/>
<div style="text-align: center; font-family: monospace; white-space: pre-wrap; padding: 2em 1em; background-color: #f9f9f9; border: 1px solid #ddd; margin: 2em 0;">
------------------------------------------------------------------
Packaged by toepub, the Markdown / HTML / PDF to EPUB converter.

Happy Reading!
------------------------------------------------------------------
</div>"""


def build_epub(doc: Document) -> bytes:
    """Build a complete EPUB archive from a document.

    The caller's document is not modified: defaults and the trailing
    colophon chapter are applied to a copy.

    Args:
        doc: Document with a title and at least one chapter

    Returns:
        The EPUB archive bytes, mimetype entry first

    Raises:
        InvalidDocumentError: If the document fails validation
        RenderError: If a package, navigation or content document fails
        ArchiveWriteError: If an entry cannot be written to the archive
    """
    doc = doc.model_copy(deep=True)

    log.debug("Validating document %r", doc.metadata.title)
    doc.metadata.ensure_defaults()
    _validate_document(doc)

    _add_colophon(doc)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        _write_epub(zf, doc)

    data = buf.getvalue()
    log.debug(
        "Built EPUB: %d chapters, %d resources, %d bytes",
        len(doc.chapters),
        len(doc.resources),
        len(data),
    )
    return data


class EpubBuilder:
    """Creates EPUB 3 packages from Document models.

    Holds no per-build state; one instance may be shared between threads.
    """

    def build(self, doc: Document) -> bytes:
        """Generate an EPUB file and return its bytes."""
        return build_epub(doc)

    def write_to(self, doc: Document, stream: BinaryIO) -> int:
        """Build the EPUB and write it to a binary stream.

        Returns the number of bytes written.
        """
        data = self.build(doc)
        stream.write(data)
        return len(data)


def _validate_document(doc: Document) -> None:
    if not doc.metadata.valid():
        raise MissingTitleError(phase="validate")
    if not doc.chapters:
        raise NoChaptersError(phase="validate")

    _check_unique(
        [c.id for c in doc.chapters] + [r.id for r in doc.resources], "item id"
    )
    _check_unique(
        [c.file_name for c in doc.chapters] + [r.file_name for r in doc.resources],
        "file name",
    )

    covers = [r.id for r in doc.resources if r.is_cover]
    if len(covers) > 1:
        raise InvalidDocumentError(
            f"more than one cover resource: {', '.join(covers)}", phase="validate"
        )


def _check_unique(values: list[str], label: str) -> None:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            raise InvalidDocumentError(
                f"duplicate {label}", phase="validate", item_id=value
            )
        seen.add(value)


def _add_colophon(doc: Document) -> None:
    """Append the attribution page after the last chapter.

    The id and file name are suffixed (`colophon-1`, ...) when the document
    already uses them.
    """
    next_order = max(c.order for c in doc.chapters) + 1
    colophon_id, file_name = _free_colophon_name(doc)
    doc.add_chapter(
        Chapter(
            id=colophon_id,
            title=COLOPHON_TITLE,
            level=1,
            content=COLOPHON_CONTENT,
            file_name=file_name,
            order=next_order,
        )
    )


def _free_colophon_name(doc: Document) -> tuple[str, str]:
    used_ids = {c.id for c in doc.chapters} | {r.id for r in doc.resources}
    used_files = {c.file_name for c in doc.chapters} | {r.file_name for r in doc.resources}
    stem, ext = posixpath.splitext(COLOPHON_FILE_NAME)

    colophon_id, file_name = COLOPHON_ID, COLOPHON_FILE_NAME
    counter = 1
    while colophon_id in used_ids or file_name in used_files:
        colophon_id = f"{COLOPHON_ID}-{counter}"
        file_name = f"{stem}-{counter}{ext}"
        counter += 1
    return colophon_id, file_name


def _write_epub(zf: zipfile.ZipFile, doc: Document) -> None:
    """Write all entries; order matters for the mimetype entry."""
    # 1. mimetype: first entry, stored uncompressed
    _write_entry(
        zf,
        MIMETYPE_FILE_NAME,
        EPUB_MIMETYPE.encode("ascii"),
        phase="mimetype",
        compress_type=zipfile.ZIP_STORED,
    )

    # 2. META-INF/container.xml
    try:
        container = render_template(
            "container.xml",
            root_file_path=ROOT_FILE_PATH,
            media_type=OEBPS_PACKAGE_MEDIA_TYPE,
        )
    except TemplateError as e:
        raise RenderError(str(e), phase="container") from e
    _write_entry(zf, CONTAINER_XML_PATH, container, phase="container")

    # 3. Package document
    opf = generate_package_document(doc)
    _write_entry(zf, _oebps(PACKAGE_DOCUMENT_NAME), opf, phase="package")

    # 4. Navigation document
    nav = generate_nav_document(doc)
    _write_entry(zf, _oebps(NAV_DOCUMENT_NAME), nav, phase="navigation")

    # 5. Content documents
    for chapter in doc.ordered_chapters():
        content = generate_content_document(chapter, doc.metadata.title)
        _write_entry(
            zf, _oebps(chapter.file_name), content, phase="content", item_id=chapter.id
        )

    # 6. Resources
    for resource in doc.resources:
        _write_entry(
            zf,
            _oebps(resource.file_name),
            resource.data,
            phase="resources",
            item_id=resource.id,
        )

    # 7. Default stylesheet
    _write_entry(zf, _oebps(STYLESHEET_NAME), read_static("default.css"), phase="stylesheet")


def _write_entry(
    zf: zipfile.ZipFile,
    name: str,
    data: str | bytes,
    phase: str,
    item_id: str | None = None,
    compress_type: int | None = None,
) -> None:
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        zf.writestr(name, data, compress_type=compress_type)
    except (OSError, ValueError, zipfile.LargeZipFile) as e:
        raise ArchiveWriteError(str(e), phase=phase, item_id=item_id) from e


def _oebps(path: str) -> str:
    return f"{OEBPS_DIR}/{path}"

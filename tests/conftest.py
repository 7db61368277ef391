"""Shared fixtures for toepub tests."""

import io
import zipfile
from pathlib import Path

import pytest
from lxml import etree
from PIL import Image

from toepub.models.document import Chapter, Document, Resource
from toepub.models.metadata import Metadata
from toepub.models.toc import TableOfContents, TOCEntry

OPF_NS = {"opf": "http://www.idpf.org/2007/opf", "dc": "http://purl.org/dc/elements/1.1/"}
XHTML_NS = {"x": "http://www.w3.org/1999/xhtml", "epub": "http://www.idpf.org/2007/ops"}


def make_png(size: tuple[int, int] = (4, 4), color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_webp(size: tuple[int, int] = (4, 4), color: str = "blue") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="WEBP")
    return buf.getvalue()


def read_zip(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def parse_xml(data: bytes | str) -> etree._Element:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return etree.fromstring(data)


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def simple_document() -> Document:
    """Two chapters, one nested TOC and one image."""
    doc = Document(
        metadata=Metadata(title="Test Book", authors=["Ada Author"], language="en")
    )
    doc.add_chapter(
        Chapter(
            id="chapter-001",
            title="One",
            content='<h1 id="one">One</h1><p>First.</p><h2 id="sub">Sub</h2>',
            file_name="content/chapter-001.xhtml",
            order=0,
        )
    )
    doc.add_chapter(
        Chapter(
            id="chapter-002",
            title="Two",
            content='<h1 id="two">Two</h1><p>Second.</p>',
            file_name="content/chapter-002.xhtml",
            order=1,
        )
    )
    doc.add_resource(
        Resource(
            id="img-photo",
            file_name="images/photo.png",
            media_type="image/png",
            data=make_png(),
        )
    )
    doc.toc = TableOfContents(
        entries=[
            TOCEntry(
                title="One",
                href="content/chapter-001.xhtml#one",
                level=1,
                children=[
                    TOCEntry(title="Sub", href="content/chapter-001.xhtml#sub", level=2)
                ],
            ),
            TOCEntry(title="Two", href="content/chapter-002.xhtml#two", level=1),
        ]
    )
    return doc


@pytest.fixture
def markdown_file(tmp_path: Path) -> Path:
    path = tmp_path / "book.md"
    path.write_text(
        "---\ntitle: Front Matter Title\nauthor: Jane Doe\n---\n\n"
        "# Introduction\n\nHello *world*.\n\n## Details\n\nMore text.\n",
        encoding="utf-8",
    )
    return path

"""Helpers shared by the input parsers for producing XHTML chapters."""

import os
import posixpath
import re
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from toepub.models.extraction import Heading, ImageReference
from toepub.models.toc import TableOfContents, TOCEntry, build_from_headings

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

# Extensions accepted for local images; WebP is converted to PNG later
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"}

FIRST_CHAPTER_ID = "chapter-001"
FIRST_CHAPTER_FILE = "content/chapter-001.xhtml"


def generate_heading_id(text: str) -> str:
    """Create a URL-safe id from heading text."""
    slug = text.lower().replace(" ", "-")
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug or "heading"


def sanitize_id(value: str) -> str:
    """Replace anything but ASCII letters and digits with hyphens."""
    return re.sub(r"[^A-Za-z0-9]", "-", value).strip("-")


def unique_id(base: str, used: set[str]) -> str:
    """Return ``base`` or ``base-N`` so that it is not in ``used``; records it."""
    candidate = base
    counter = 1
    while candidate in used:
        candidate = f"{base}-{counter}"
        counter += 1
    used.add(candidate)
    return candidate


def unique_file_name(path: str, used: set[str]) -> str:
    """Like ``unique_id`` but keeps the extension: `a.png`, `a-1.png`, ..."""
    stem, ext = posixpath.splitext(path)
    candidate = path
    counter = 1
    while candidate in used:
        candidate = f"{stem}-{counter}{ext}"
        counter += 1
    used.add(candidate)
    return candidate


def is_remote(src: str) -> bool:
    return src.startswith(("http://", "https://", "data:"))


def strip_scripts(soup: BeautifulSoup) -> None:
    """Remove script elements and inline event handlers."""
    for tag in soup(["script", "noscript"]):
        tag.decompose()
    for tag in soup.find_all(True):
        for attr in [a for a in tag.attrs if a.lower().startswith("on")]:
            del tag[attr]


def assign_heading_ids(soup: BeautifulSoup, used: set[str] | None = None) -> list[Heading]:
    """Give every h1-h6 a unique id and return them in document order.

    Existing ids are kept unless they collide with an earlier one.
    """
    used = used if used is not None else set()
    headings: list[Heading] = []

    for tag in soup.find_all(HEADING_TAGS):
        title = tag.get_text(" ", strip=True)
        existing = tag.get("id")
        base = existing if isinstance(existing, str) and existing else generate_heading_id(title)
        tag["id"] = unique_id(base, used)
        # Empty headings keep their anchor but stay out of the TOC
        if title:
            headings.append(Heading(level=int(tag.name[1]), title=title, id=tag["id"]))

    return headings


def collect_images(soup: BeautifulSoup, base_path: Path) -> list[ImageReference]:
    """Find local images, rewrite their src to the EPUB images folder.

    Remote and data URIs are left untouched. Each source file is reported
    once; different files sharing a base name get suffixed targets
    (`pic.png`, `pic-1.png`).
    """
    images: list[ImageReference] = []
    seen: dict[str, str] = {}  # Resolved source path -> target file name
    used: set[str] = set()

    for img in soup.find_all("img"):
        src = img.get("src")
        if not isinstance(src, str) or not src or is_remote(src):
            continue

        base_name = posixpath.basename(src.replace("\\", "/"))
        stem, ext = posixpath.splitext(base_name)
        if ext.lower() not in IMAGE_EXTENSIONS:
            continue

        source = Path(src)
        if not source.is_absolute():
            source = base_path / source
        key = os.path.normpath(source)

        if key not in seen:
            if ext.lower() == ".webp":
                base_name = f"{stem}.png"
            file_name = unique_file_name(f"images/{base_name}", used)
            images.append(
                ImageReference(src=src, source_path=str(source), file_name=file_name)
            )
            seen[key] = file_name

        img["src"] = f"../{seen[key]}"
        if not img.get("alt"):
            img["alt"] = ""

    return images


def body_fragment(soup: BeautifulSoup) -> str:
    """Serialize the body children as an XHTML fragment.

    BeautifulSoup writes void elements self-closed (``<br/>``).
    """
    root: Tag = soup.body if soup.body is not None else soup
    return "".join(str(child) for child in root.contents).strip()


def headings_to_toc(headings: list[Heading], chapter_file: str) -> TableOfContents:
    """Build the TOC for a single chapter file from its headings."""
    entries = [
        TOCEntry(title=h.title, href=f"{chapter_file}#{h.id}", level=h.level)
        for h in headings
    ]
    return build_from_headings(entries)

"""Markdown parsing using Python-Markdown."""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import markdown
import yaml
from bs4 import BeautifulSoup, NavigableString

from toepub.core.errors import ParseError
from toepub.core.parser_factory import DocumentParser
from toepub.core.xhtml import (
    FIRST_CHAPTER_FILE,
    FIRST_CHAPTER_ID,
    assign_heading_ids,
    body_fragment,
    collect_images,
    headings_to_toc,
    strip_scripts,
)
from toepub.models.document import Chapter, Document
from toepub.models.extraction import ParseOutput
from toepub.models.metadata import Metadata

log = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "sane_lists"]

TASK_MARKER_RE = re.compile(r"^\s*\[([ xX])\]\s+")


class MarkdownParser(DocumentParser):
    """Parse Markdown (with YAML front matter and task lists) into a Document."""

    def parse(self, content: bytes, base_path: Path) -> ParseOutput:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Markdown input is not valid UTF-8: {e}") from e

        front_matter, body = split_front_matter(text)
        doc = Document(metadata=metadata_from_mapping(front_matter))

        html = markdown.markdown(
            body, extensions=MARKDOWN_EXTENSIONS, output_format="xhtml"
        )
        soup = BeautifulSoup(html, "lxml")

        strip_scripts(soup)
        _render_task_lists(soup)
        headings = assign_heading_ids(soup)
        images = collect_images(soup, base_path)

        if headings:
            title = headings[0].title
            level = headings[0].level
            if not doc.metadata.title:
                doc.metadata.title = title
        else:
            title = doc.metadata.title
            level = 1

        doc.add_chapter(
            Chapter(
                id=FIRST_CHAPTER_ID,
                title=title,
                level=level,
                content=body_fragment(soup),
                file_name=FIRST_CHAPTER_FILE,
                order=0,
            )
        )
        doc.toc = headings_to_toc(headings, FIRST_CHAPTER_FILE)

        log.debug("Parsed Markdown: %d headings, %d images", len(headings), len(images))
        return ParseOutput(document=doc, images=images)

    def supported_extensions(self) -> list[str]:
        return [".md", ".markdown"]


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a leading ``---`` fenced YAML block from the Markdown body.

    Returns an empty mapping and the original text when there is no valid
    front matter.
    """
    lines = text.split("\n")
    if len(lines) < 2 or lines[0].strip() != "---":
        return {}, text

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() in ("---", "..."):
            break
    else:
        return {}, text

    try:
        data = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as e:
        log.warning("Ignoring invalid front matter: %s", e)
        return {}, text

    if not isinstance(data, dict):
        return {}, text
    return data, "\n".join(lines[end + 1 :])


def metadata_from_mapping(data: dict[str, Any]) -> Metadata:
    """Map recognised front matter keys onto Metadata; others are ignored."""
    meta = Metadata()

    title = data.get("title")
    if isinstance(title, str):
        meta.title = title.strip()

    # author may be a string or a list
    authors = data.get("authors", data.get("author"))
    if isinstance(authors, str):
        meta.authors = [authors.strip()]
    elif isinstance(authors, list):
        meta.authors = [a.strip() for a in authors if isinstance(a, str)]

    for key in ("language", "lang"):
        if isinstance(data.get(key), str):
            meta.language = data[key].strip()

    for key in ("description", "publisher", "rights"):
        if isinstance(data.get(key), str):
            setattr(meta, key, data[key].strip())

    if isinstance(data.get("cover"), str):
        meta.cover_image = data["cover"].strip()

    meta.date = _coerce_date(data.get("date"))
    return meta


def _coerce_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            log.warning("Ignoring unparseable date in front matter: %r", value)
    return None


def _render_task_lists(soup: BeautifulSoup) -> None:
    """Turn ``[ ]`` / ``[x]`` list items into disabled checkboxes."""
    for li in soup.find_all("li"):
        first = next(
            (s for s in li.find_all(string=True) if s.strip() and s.find_parent("li") is li),
            None,
        )
        if first is None:
            continue
        match = TASK_MARKER_RE.match(first)
        if not match:
            continue

        checkbox = soup.new_tag("input", attrs={"type": "checkbox", "disabled": "disabled"})
        if match.group(1) in "xX":
            checkbox["checked"] = "checked"

        rest = NavigableString(first[match.end() :])
        first.replace_with(rest)
        rest.insert_before(checkbox)

        li["class"] = li.get("class", []) + ["task-list-item"]
        parent = li.parent
        if parent is not None and parent.name == "ul" and "task-list" not in parent.get("class", []):
            parent["class"] = parent.get("class", []) + ["task-list"]

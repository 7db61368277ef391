"""HTML parsing using BeautifulSoup."""

import logging
import warnings
from pathlib import Path

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

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
from toepub.models.document import Chapter, Document, Resource
from toepub.models.extraction import ParseOutput
from toepub.models.metadata import Metadata

# XHTML input is parsed as HTML on purpose
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

INLINE_CSS_ID = "inline-css"
INLINE_CSS_FILE = "styles/inline.css"


class HtmlParser(DocumentParser):
    """Parse an HTML page into a single-chapter Document."""

    def parse(self, content: bytes, base_path: Path) -> ParseOutput:
        soup = BeautifulSoup(content, "lxml")
        doc = Document(metadata=self._get_metadata(soup))

        css = self._extract_css(soup)
        strip_scripts(soup)
        headings = assign_heading_ids(soup)
        images = collect_images(soup, base_path)

        if css:
            doc.add_resource(
                Resource(
                    id=INLINE_CSS_ID,
                    file_name=INLINE_CSS_FILE,
                    media_type="text/css",
                    data=css.encode("utf-8"),
                )
            )

        if not doc.metadata.title and headings:
            doc.metadata.title = headings[0].title

        doc.add_chapter(
            Chapter(
                id=FIRST_CHAPTER_ID,
                title=doc.metadata.title,
                level=1,
                content=body_fragment(soup),
                file_name=FIRST_CHAPTER_FILE,
                order=0,
            )
        )
        doc.toc = headings_to_toc(headings, FIRST_CHAPTER_FILE)

        log.debug("Parsed HTML: %d headings, %d images", len(headings), len(images))
        return ParseOutput(document=doc, images=images)

    def supported_extensions(self) -> list[str]:
        return [".html", ".htm"]

    def _get_metadata(self, soup: BeautifulSoup) -> Metadata:
        """Extract metadata from <title>, <meta> and the html lang attribute."""
        meta = Metadata()

        if soup.title and soup.title.string:
            meta.title = soup.title.string.strip()

        html = soup.find("html")
        if html is not None and isinstance(html.get("lang"), str):
            meta.language = html["lang"].strip()

        for tag in soup.find_all("meta"):
            name = tag.get("name")
            value = tag.get("content")
            if not isinstance(name, str) or not isinstance(value, str) or not value.strip():
                continue
            name = name.lower()
            value = value.strip()
            if name == "author":
                meta.authors.append(value)
            elif name == "description":
                meta.description = value
            elif name == "language":
                meta.language = value
            elif name == "publisher":
                meta.publisher = value

        return meta

    def _extract_css(self, soup: BeautifulSoup) -> str:
        """Collect <style> blocks and remove them from the markup."""
        blocks = []
        for style in soup.find_all("style"):
            text = style.get_text()
            if text.strip():
                blocks.append(text.strip())
            style.decompose()
        return "\n".join(blocks) + "\n" if blocks else ""

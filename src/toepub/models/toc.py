"""Table of contents hierarchy."""

from pydantic import BaseModel, Field


class TOCEntry(BaseModel):
    """Single navigation item in the table of contents."""

    title: str
    href: str  # e.g. "content/chapter-001.xhtml#section-id"
    level: int = 1  # Heading depth 1-6
    children: list["TOCEntry"] = Field(default_factory=list)


class TableOfContents(BaseModel):
    """Navigation hierarchy for the EPUB."""

    entries: list[TOCEntry] = Field(default_factory=list)

    def add_entry(self, entry: TOCEntry) -> None:
        """Append a top-level entry."""
        self.entries.append(entry)

    def empty(self) -> bool:
        return not self.entries

    def flat_entries(self) -> list[TOCEntry]:
        """Return all entries depth-first, parents before children."""
        result: list[TOCEntry] = []
        for entry in self.entries:
            result.extend(_flatten_entry(entry))
        return result


def _flatten_entry(entry: TOCEntry) -> list[TOCEntry]:
    result = [entry]
    for child in entry.children:
        result.extend(_flatten_entry(child))
    return result


def build_from_headings(headings: list[TOCEntry]) -> TableOfContents:
    """Build a hierarchical TOC from a flat, ordered list of headings.

    Each heading is nested under the nearest preceding heading with a
    shallower level. Skipped levels (h1 followed by h3) nest directly,
    without a placeholder entry.
    """
    toc = TableOfContents()
    stack: list[TOCEntry] = []

    for heading in headings:
        entry = heading.model_copy(update={"children": []})

        # Close every open entry that cannot be this heading's parent
        while stack and stack[-1].level >= entry.level:
            stack.pop()

        if stack:
            stack[-1].children.append(entry)
        else:
            toc.entries.append(entry)
        stack.append(entry)

    return toc

"""Tests for HTML parsing."""

from pathlib import Path

from toepub.core.html_parser import HtmlParser

PAGE = """<!DOCTYPE html>
<html lang="de">
<head>
  <title>Page Title</title>
  <meta name="author" content="Max Muster">
  <meta name="description" content="A page">
  <style>p { color: red; }</style>
  <script>var x = 1;</script>
</head>
<body>
  <h1 id="top">Top</h1>
  <p onclick="go()">Hello<br>world</p>
  <h2>Second</h2>
  <img src="pics/a.png">
</body>
</html>
"""


def parse(html: str = PAGE, base: Path = Path(".")):
    return HtmlParser().parse(html.encode("utf-8"), base)


class TestHtmlParser:
    """Tests for HtmlParser.parse."""

    def test_metadata(self):
        meta = parse().document.metadata
        assert meta.title == "Page Title"
        assert meta.language == "de"
        assert meta.authors == ["Max Muster"]
        assert meta.description == "A page"

    def test_existing_ids_kept_and_missing_generated(self):
        doc = parse().document
        content = doc.chapters[0].content
        assert '<h1 id="top">Top</h1>' in content
        assert '<h2 id="second">Second</h2>' in content
        assert doc.toc.entries[0].href == "content/chapter-001.xhtml#top"
        assert doc.toc.entries[0].children[0].href == "content/chapter-001.xhtml#second"

    def test_scripts_and_handlers_stripped(self):
        content = parse().document.chapters[0].content
        assert "<script" not in content
        assert "onclick" not in content

    def test_body_serialized_as_xhtml(self):
        content = parse().document.chapters[0].content
        assert "<br/>" in content
        assert "<title>" not in content

    def test_inline_css_resource(self):
        doc = parse().document
        assert len(doc.resources) == 1
        css = doc.resources[0]
        assert css.id == "inline-css"
        assert css.file_name == "styles/inline.css"
        assert css.media_type == "text/css"
        assert b"color: red" in css.data
        assert "<style" not in doc.chapters[0].content

    def test_images(self, tmp_path):
        output = parse(base=tmp_path)
        assert [i.file_name for i in output.images] == ["images/a.png"]
        img = 'src="../images/a.png"'
        assert img in output.document.chapters[0].content
        assert 'alt=""' in output.document.chapters[0].content

    def test_title_falls_back_to_heading(self):
        doc = parse("<html><body><h1>Only Heading</h1></body></html>").document
        assert doc.metadata.title == "Only Heading"
        assert doc.chapters[0].title == "Only Heading"

    def test_no_css_no_resource(self):
        assert parse("<p>x</p>").document.resources == []

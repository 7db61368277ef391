"""Convert Markdown, HTML and PDF documents to EPUB 3 packages."""

__version__ = "0.1.0"

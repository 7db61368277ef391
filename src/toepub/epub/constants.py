"""EPUB container layout and media types."""

MIMETYPE_FILE_NAME = "mimetype"
EPUB_MIMETYPE = "application/epub+zip"

META_INF_DIR = "META-INF"
OEBPS_DIR = "OEBPS"

CONTAINER_XML_PATH = f"{META_INF_DIR}/container.xml"
PACKAGE_DOCUMENT_NAME = "content.opf"
NAV_DOCUMENT_NAME = "nav.xhtml"
STYLESHEET_NAME = "styles/default.css"

ROOT_FILE_PATH = f"{OEBPS_DIR}/{PACKAGE_DOCUMENT_NAME}"

OEBPS_PACKAGE_MEDIA_TYPE = "application/oebps-package+xml"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
CSS_MEDIA_TYPE = "text/css"

NAV_ITEM_ID = "nav"
CSS_ITEM_ID = "css"

COLOPHON_ID = "colophon"
COLOPHON_TITLE = "About This EPUB"
COLOPHON_FILE_NAME = "content/colophon.xhtml"

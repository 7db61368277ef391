"""Image loading, format detection and conversion for EPUB resources."""

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from toepub.core.errors import ImageNotFoundError, UnsupportedImageError
from toepub.core.xhtml import sanitize_id
from toepub.models.document import Resource

log = logging.getLogger(__name__)

# Magic byte prefixes, checked in order
MAGIC_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)

EXTENSION_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}

MEDIA_TYPE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/svg+xml": ".svg",
}


def detect_image_format(data: bytes, filename: str = "") -> tuple[str, bool]:
    """Detect the media type of image data.

    Returns the media type to store in the EPUB and whether the data must be
    converted first (WebP is not a core EPUB media type).

    Raises:
        UnsupportedImageError: If neither content nor extension is recognised
    """
    for signature, media_type in MAGIC_SIGNATURES:
        if data.startswith(signature):
            return media_type, False

    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/png", True

    head = data[:512].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return "image/svg+xml", False

    ext = Path(filename).suffix.lower()
    media_type = EXTENSION_MEDIA_TYPES.get(ext)
    if media_type is None:
        raise UnsupportedImageError(f"Unsupported image format: {filename or 'unknown'}")
    if media_type == "image/webp":
        return "image/png", True
    return media_type, False


def extension_for_media_type(media_type: str) -> str:
    """File extension (with dot) for a stored image media type."""
    return MEDIA_TYPE_EXTENSIONS.get(media_type, "")


def convert_to_png(data: bytes) -> bytes:
    """Re-encode an image (WebP in practice) as PNG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                img = img.convert("RGBA")
            out = io.BytesIO()
            img.save(out, format="PNG")
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError(f"Cannot convert image: {e}") from e
    return out.getvalue()


class ImageHandler:
    """Turn local image files into EPUB resources."""

    def process_image(self, path: str | Path, base_path: Path) -> Resource:
        """Load an image relative to ``base_path`` and return a Resource.

        Args:
            path: Image path, absolute or relative to ``base_path``
            base_path: Directory of the document referencing the image

        Returns:
            Resource with id `img-<stem>` under `images/`; WebP is
            re-encoded as PNG

        Raises:
            ImageNotFoundError: If the file cannot be read
            UnsupportedImageError: If the format is not supported
        """
        source = Path(path)
        if not source.is_absolute():
            source = base_path / source

        try:
            data = source.read_bytes()
        except OSError as e:
            raise ImageNotFoundError(f"Image not found: {path}") from e
        if not data:
            raise UnsupportedImageError(f"Image is empty: {path}")

        media_type, needs_conversion = detect_image_format(data, source.name)
        file_name = source.name
        if needs_conversion:
            log.debug("Converting %s to PNG", source.name)
            data = convert_to_png(data)
            file_name = f"{source.stem}.png"

        return Resource(
            id=f"img-{sanitize_id(source.stem) or 'image'}",
            file_name=f"images/{file_name}",
            media_type=media_type,
            data=data,
        )

"""Write finished EPUB archives to disk."""

import contextlib
import logging
import os
from pathlib import Path

from toepub.core.errors import OutputNotWritableError

log = logging.getLogger(__name__)


def write_atomically(path: Path, data: bytes) -> None:
    """Write data to ``path`` through a temporary sibling file.

    The target is either fully replaced or left untouched.

    Raises:
        OutputNotWritableError: If the directory or file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputNotWritableError(f"Cannot create directory {path.parent}: {e}") from e

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except OSError as e:
        with contextlib.suppress(FileNotFoundError):
            tmp_path.unlink()
        raise OutputNotWritableError(f"Cannot write output file {path}: {e}") from e

    log.debug("Wrote %d bytes to %s", len(data), path)

"""Crash-safe writes for companion files.

A saved response is written to a temporary sibling first and renamed over
the target, so readers see either the old content or the new content.
"""

import os
import tempfile
from pathlib import Path

from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)


def atomic_write(path: Path, content: str) -> None:
    """
    Replace ``path`` with ``content`` in one rename.

    Parent directories are created as needed. The temporary file lives next
    to the target so the rename never crosses filesystems.

    Args:
        path: Target file path
        content: Text to write (UTF-8)

    Raises:
        OSError: If the directory, temp file or rename fails; the target is
            left as it was and the temp file is removed
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except OSError as e:
        logger.error("companion_atomic_write_failed", path=str(path), error=str(e))
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise

    logger.debug("companion_atomic_write_done", path=str(path), size=len(content))

"""File helpers for the persisted cache and stats documents.

Contains:
- read_document: Read a JSON document, treating a missing file as absent
- write_document: Atomically write a JSON document with owner-only permissions
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

from commitmsg.exceptions import ConfigurationError, PersistenceError


def read_document(path: Path) -> Optional[str]:
    """Read a persisted document.

    Args:
        path: Path to the document.

    Returns:
        The file contents, or None if the file is missing or empty.

    Raises:
        ConfigurationError: If the file exists but cannot be read.
    """
    if not path.exists():
        return None

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to read {path}: {e}")

    if not text.strip():
        return None
    return text


def write_document(path: Path, text: str) -> None:
    """Write a document atomically.

    The content goes to a temporary file in the same directory which then
    replaces the target, so readers never see a half-written file.

    Args:
        path: Destination path.
        text: Serialized document.

    Raises:
        PersistenceError: If the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.chmod(tmp_name, stat.S_IRUSR | stat.S_IWUSR)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise PersistenceError(f"Failed to write {path}: {e}")

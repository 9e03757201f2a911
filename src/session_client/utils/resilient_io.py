# src/session_client/utils/resilient_io.py
"""
Best-effort file I/O for the credential store.

Persistence of the credential pair must never break a request: every helper
here logs the storage failure and reports it through its return value instead
of raising. The in-memory state stays authoritative.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union


def safe_read_json(
    path: Union[str, Path], logger: logging.Logger
) -> Optional[Dict[str, Any]]:
    """
    Read a JSON object from disk.

    Returns:
        The parsed object, or None if the file is missing, unreadable or
        does not hold a JSON object (never raises)
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read JSON from {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Ignoring {path.name}: expected a JSON object")
        return None
    return data


def safe_write_json(
    path: Union[str, Path],
    data: Dict[str, Any],
    logger: logging.Logger,
    secure_permissions: bool = True,
) -> bool:
    """
    Atomically write JSON data to a file.

    The content goes to a temp file in the target directory first and is then
    moved over the target, so readers see either the old or the new file.

    Args:
        path: File path to write to
        data: JSON-serializable data
        logger: Logger for warnings
        secure_permissions: Set file permissions to 0o600 (default: True)

    Returns:
        True on success, False on failure (never raises)
    """
    path = Path(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, indent=2)

        tmp_fd = None
        tmp_path = None
        try:
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=path.parent, prefix=".tmp_", suffix=".json", text=True
            )
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                tmp_fd = None

            # Before the move, so the secret is never world-readable
            if secure_permissions:
                try:
                    os.chmod(tmp_path, 0o600)
                except (OSError, AttributeError):
                    # Windows may not support chmod
                    pass

            shutil.move(tmp_path, path)
            tmp_path = None
        finally:
            if tmp_fd is not None:
                try:
                    os.close(tmp_fd)
                except OSError:
                    pass
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

        return True

    except (OSError, TypeError, ValueError) as e:
        logger.warning(f"Failed to write JSON to {path}: {e}")
        return False


def safe_remove(path: Union[str, Path], logger: logging.Logger) -> bool:
    """
    Delete a file if it exists.

    Returns:
        True if the file is gone afterwards, False on failure (never raises)
    """
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Failed to remove {path}: {e}")
        return False
    return True

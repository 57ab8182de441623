import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger


def load_json(path: Path, default: Any) -> Any:
    """
    Safe JSON loader: returns `default` if file doesn't exist or is invalid.
    """
    try:
        if not path.exists():
            return default
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable JSON file {path}: {e}")
        return default


def save_json(path: Path, data: Any) -> bool:
    """
    Atomic JSON saver: the document is written to a sibling temp file and
    swapped in with os.replace, so readers never see a half-written file.

    Returns False (and logs) when the write failed; errors are not fatal.
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to write {path}: {e}")
        if tmp_name:
            try:
                os.remove(tmp_name)
            except OSError:
                pass
        return False

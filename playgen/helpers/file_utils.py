from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from loguru import logger

from playgen.helpers.constants import AUDIO_EXT, DOWNLOADS_DIR, EXPORT_NAME_MAX, SAFE_CHAR_RE

# Very unsafe filesystem characters
_invalid_fs_chars = r'[<>:"/\\|?*\x00-\x1F]'
_invalid_fs_re = re.compile(_invalid_fs_chars)


def delete_part_files(root: Optional[Path] = None) -> int:
    """
    Recursively delete leftover yt-dlp *.part files under the downloads folder.

    Returns:
        Number of files deleted.
    """
    root = root or DOWNLOADS_DIR
    deleted_count = 0

    if not root.exists():
        return 0

    for dir_path, _, files in os.walk(str(root)):
        for file_name in files:
            if file_name.endswith(".part"):
                full_path = os.path.join(dir_path, file_name)
                try:
                    os.remove(full_path)
                    deleted_count += 1
                    logger.debug(f"Deleted: {full_path}")
                except OSError as e:
                    logger.warning(f"Failed to delete {full_path}: {e}")

    if deleted_count:
        logger.info(f"Total .part files deleted: {deleted_count}")
    return deleted_count


def safe_filename(name: str, max_len: int = EXPORT_NAME_MAX) -> str:
    """
    Make a reasonably safe filename fragment from an arbitrary string.

    - Strip leading/trailing whitespace.
    - Replace '/', '\\', ':' with '-'.
    - Apply SAFE_CHAR_RE from constants.
    - Guard against control chars and very unsafe FS chars.
    - Collapse repeated spaces/underscores.
    - Cap the length and drop trailing dots/spaces (Windows rejects them).
    """
    name = (name or "").strip().replace("/", "-").replace("\\", "-").replace(":", "-")
    name = SAFE_CHAR_RE.sub("_", name)
    name = _invalid_fs_re.sub("_", name)
    name = re.sub(r"[_\s]{2,}", " ", name)
    name = name.strip()[:max_len]
    return name.rstrip(". ").strip()


def audio_path_for(video_id: str, downloads_dir: Optional[Path] = None) -> Path:
    """Where yt-dlp leaves the extracted audio for a video id."""
    return (downloads_dir or DOWNLOADS_DIR) / f"{video_id}.{AUDIO_EXT}"


def export_basename(position: int, title: str) -> str:
    """
    Filename used when copying a playlist out of the library.

    Pattern: "NN - <Title>.mp3"
    """
    base = safe_filename(title) or "track"
    return f"{position:02d} - {base}.{AUDIO_EXT}"

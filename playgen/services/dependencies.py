import importlib.util
import shutil
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from playgen.helpers.constants import FFMPEG_LOCATION


def _ffmpeg_available(location: Optional[str]) -> bool:
    if location:
        p = Path(location)
        if p.is_file():
            return True
        if p.is_dir() and (shutil.which("ffmpeg", path=str(p)) is not None):
            return True
    return shutil.which("ffmpeg") is not None


def check_dependencies(ffmpeg_location: Optional[str] = FFMPEG_LOCATION) -> Dict[str, bool]:
    """{"ytdlp": bool, "ffmpeg": bool}"""
    status = {
        "ytdlp": importlib.util.find_spec("yt_dlp") is not None,
        "ffmpeg": _ffmpeg_available(ffmpeg_location),
    }
    missing = [k for k, ok in status.items() if not ok]
    if missing:
        logger.warning(f"Missing dependencies: {', '.join(missing)}")
    return status

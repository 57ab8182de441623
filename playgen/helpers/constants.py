import os
import re
import sys
from pathlib import Path


APP_NAME = "PlayGen"

# App window size
APP_WINDOW_WIDTH = 1280
APP_WINDOW_HEIGHT = 800
APP_MIN_WIDTH = 900
APP_MIN_HEIGHT = 600

MINI_PLAYER_WIDTH = 380
MINI_PLAYER_HEIGHT = 130

# Data directories
APP_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR      = Path(os.environ.get("PLAYGEN_DATA_DIR") or APP_ROOT / "data")
DOWNLOADS_DIR = DATA_DIR / "downloads"
LIBRARY_DB    = DATA_DIR / "playgen-db.json"
LOG_FILE      = DATA_DIR / "playgen.log"
LOG_LEVEL     = os.environ.get("PLAYGEN_LOG_LEVEL", "INFO")

# Optional ffmpeg binary or folder handed to yt-dlp
FFMPEG_LOCATION = os.environ.get("PLAYGEN_FFMPEG") or None


def ensure_data_dirs() -> None:
    for _d in (DATA_DIR, DOWNLOADS_DIR):
        _d.mkdir(parents=True, exist_ok=True)


# Allowed characters for filenames
SAFE_CHAR_RE = re.compile(r"[^\w.\-() ]+")
EXPORT_NAME_MAX = 120

# The unfiltered "all songs" view
VIEW_ALL = "all"

# Session defaults
DEFAULT_VOLUME = 0.8
VOLUME_STEP = 0.05
SEEK_STEP_SEC = 5
# prev() restarts the track instead of navigating past this point
PREV_RESTART_SEC = 3

# yt-dlp configs
YTDLP_CMD = [sys.executable, "-m", "yt_dlp"]
YTDLP_INFO_ARGS = ["--dump-json", "--no-download", "--no-playlist"]
YTDLP_AUDIO_ARGS = [
    "-x",
    "--audio-format", "mp3",
    "--audio-quality", "0",
    "--no-playlist",
    "--newline",
]
YTDLP_FLAT_PLAYLIST_ARGS = ["--flat-playlist", "--dump-json"]
AUDIO_EXT = "mp3"
OUTPUT_TEMPLATE = "%(id)s.%(ext)s"
THUMBNAIL_FALLBACK = "https://i.ytimg.com/vi/{id}/hqdefault.jpg"
WATCH_URL = "https://www.youtube.com/watch?v={id}"
PLAYLIST_URL = "https://www.youtube.com/playlist?list={id}"
IMPORTED_PLAYLIST_NAME = "Imported Playlist"

PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)%")
VIDEO_ID_RE = re.compile(r"^[\w-]+$")
# Max chars of tool diagnostics surfaced to the user
ERROR_TEXT_LIMIT = 500

# Download workers / progress pump
DOWNLOAD_WORKERS = 2
PROGRESS_PUMP_MS = 100

# UI timings
TABLE_BATCH_SIZE = 200
SEARCH_DEBOUNCE_MS = 220
STATUS_MSG_MS = 3000

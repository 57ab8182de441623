"""YouTube URL validation and canonicalisation.

Only watch, shorts and youtu.be short links are accepted for single downloads.
Everything except the video id (tracking params, playlist context, timestamps)
is dropped before the URL reaches yt-dlp.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from playgen.helpers.constants import PLAYLIST_URL, VIDEO_ID_RE, WATCH_URL
from playgen.services.errors import InvalidURLError

_VIDEO_URL_RE = re.compile(
    r"^(https?://)?(www\.|m\.|music\.)?(youtube\.com/(watch\?|shorts/)|youtu\.be/)[^\s]+",
    re.IGNORECASE,
)
_YT_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com")


def _parse(url: str):
    url = (url or "").strip()
    if not re.match(r"^https?://", url, re.IGNORECASE):
        url = "https://" + url
    return urlparse(url)


def extract_video_id(url: str) -> Optional[str]:
    """
    Pull the video id out of a watch / shorts / youtu.be URL.
    Returns None for anything else.
    """
    if not _VIDEO_URL_RE.match((url or "").strip()):
        return None

    u = _parse(url)
    host = (u.hostname or "").lower()
    vid = None

    if host == "youtu.be":
        vid = u.path.strip("/").split("/")[0]
    elif host in _YT_HOSTS:
        if u.path.rstrip("/") == "/watch":
            vid = (parse_qs(u.query).get("v") or [""])[0]
        elif u.path.startswith("/shorts/"):
            vid = u.path[len("/shorts/"):].strip("/").split("/")[0]

    if vid and VIDEO_ID_RE.match(vid):
        return vid
    return None


def canonical_video_url(url: str) -> str:
    """
    Reduce a video URL to https://www.youtube.com/watch?v=<id>.

    Raises:
        InvalidURLError: the URL is not a recognised single-video link
    """
    vid = extract_video_id(url)
    if not vid:
        raise InvalidURLError("Invalid YouTube URL")
    return WATCH_URL.format(id=vid)


def extract_playlist_id(url: str) -> Optional[str]:
    """Return the `list=` id of a YouTube playlist or watch-in-playlist URL."""
    u = _parse(url)
    host = (u.hostname or "").lower()
    if host not in _YT_HOSTS and host != "youtu.be":
        return None
    pid = (parse_qs(u.query).get("list") or [""])[0]
    if pid and VIDEO_ID_RE.match(pid):
        return pid
    return None


def canonical_playlist_url(url: str) -> str:
    pid = extract_playlist_id(url)
    if not pid:
        raise InvalidURLError("Invalid YouTube playlist URL")
    return PLAYLIST_URL.format(id=pid)

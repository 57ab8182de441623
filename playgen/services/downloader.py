"""YouTube audio download through the yt-dlp command line."""

import json
import subprocess
import sys
from collections import deque
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from playgen.helpers.constants import (
    DOWNLOADS_DIR,
    ERROR_TEXT_LIMIT,
    FFMPEG_LOCATION,
    IMPORTED_PLAYLIST_NAME,
    OUTPUT_TEMPLATE,
    PERCENT_RE,
    THUMBNAIL_FALLBACK,
    VIDEO_ID_RE,
    WATCH_URL,
    YTDLP_AUDIO_ARGS,
    YTDLP_CMD,
    YTDLP_FLAT_PLAYLIST_ARGS,
    YTDLP_INFO_ARGS,
)
from playgen.helpers.file_utils import audio_path_for
from playgen.helpers.url_utils import canonical_playlist_url, canonical_video_url, extract_video_id
from playgen.helpers.utils import now_iso
from playgen.io.library_store import LibraryStore
from playgen.models.download import DownloadOutcome, DownloadProgress, PlaylistListing, VideoInfo
from playgen.models.song import Song
from playgen.services.errors import (
    AlreadyDownloadedError,
    ExternalToolError,
    MetadataParseError,
    PlayGenError,
)

ProgressSink = Callable[[DownloadProgress], None]


def _popen_kwargs() -> dict:
    kw = {"text": True, "encoding": "utf-8", "errors": "replace"}
    if sys.platform == "win32":
        kw["creationflags"] = subprocess.CREATE_NO_WINDOW
    return kw


def _diagnostic(text: str, fallback: str) -> str:
    """Trim tool output to something fit for a notification, ERROR lines first."""
    text = (text or "").strip()
    if not text:
        return fallback
    errors = [ln for ln in text.splitlines() if ln.startswith("ERROR")]
    if errors:
        text = "\n".join(errors)
    return text[-ERROR_TEXT_LIMIT:]


def parse_percent(line: str) -> Optional[float]:
    m = PERCENT_RE.search(line or "")
    if not m:
        return None
    try:
        return float(m.group(1))
    except ValueError:
        return None


class DownloadOrchestrator:
    """
    Two-step yt-dlp flow: metadata dump, then audio extraction.

    Each call is independent. Failures raise PlayGenError subclasses and
    leave the library untouched, so the same URL can simply be retried.
    """

    def __init__(
        self,
        store: LibraryStore,
        downloads_dir: Optional[Path] = None,
        command: Optional[List[str]] = None,
        ffmpeg_location: Optional[str] = FFMPEG_LOCATION,
    ):
        self.store = store
        self.downloads_dir = Path(downloads_dir or DOWNLOADS_DIR)
        self.command = list(command or YTDLP_CMD)
        self.ffmpeg_location = ffmpeg_location

    # ---------- metadata ----------
    def fetch_metadata(self, url: str) -> VideoInfo:
        cmd = self.command + YTDLP_INFO_ARGS + [url]
        logger.info(f"Getting info: {' '.join(cmd)}")
        try:
            proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, **_popen_kwargs())
        except OSError as e:
            raise ExternalToolError(f"Failed to run yt-dlp: {e}")

        if proc.returncode != 0:
            logger.error(f"yt-dlp info exited with {proc.returncode}: {proc.stderr}")
            raise ExternalToolError(
                _diagnostic(proc.stderr, "Failed to get video info"),
                details=proc.stderr,
            )

        try:
            info = json.loads(proc.stdout)
        except (TypeError, ValueError):
            raise MetadataParseError("Failed to parse video info", details=proc.stdout)
        if not isinstance(info, dict) or not info.get("id"):
            raise MetadataParseError("Failed to parse video info", details=proc.stdout)

        vid = str(info["id"])
        try:
            duration = max(0, int(float(info.get("duration") or 0)))
        except (TypeError, ValueError):
            duration = 0

        return VideoInfo(
            id=vid,
            title=info.get("title") or "Unknown",
            thumbnail=info.get("thumbnail") or THUMBNAIL_FALLBACK.format(id=vid),
            duration=duration,
            channel=info.get("channel") or info.get("uploader") or "Unknown",
        )

    def check_duplicate(self, info: VideoInfo) -> None:
        existing = self.store.get_song(info.id)
        if existing is not None and Path(existing.file_path).exists():
            raise AlreadyDownloadedError(existing)

    # ---------- audio ----------
    def download_audio(self, url: str, info: VideoInfo, progress_sink: Optional[ProgressSink] = None) -> Path:
        """
        Run the extraction and stream its progress lines to `progress_sink`.

        Success needs a zero exit code AND the expected <id>.mp3 on disk.
        """
        self.downloads_dir.mkdir(parents=True, exist_ok=True)
        out_tmpl = str(self.downloads_dir / OUTPUT_TEMPLATE)
        expected = audio_path_for(info.id, self.downloads_dir)

        cmd = self.command + YTDLP_AUDIO_ARGS + ["-o", out_tmpl]
        if self.ffmpeg_location:
            cmd += ["--ffmpeg-location", self.ffmpeg_location]
        cmd.append(url)
        logger.info(f"Downloading: {' '.join(cmd)}")

        try:
            # yt-dlp reports progress on both streams; read them as one
            proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, bufsize=1, **_popen_kwargs())
        except OSError as e:
            raise ExternalToolError(f"Failed to run yt-dlp: {e}")

        tail: "deque[str]" = deque(maxlen=40)
        try:
            for line in proc.stdout:
                line = line.rstrip()
                pct = parse_percent(line)
                if pct is not None:
                    if progress_sink is not None:
                        try:
                            progress_sink(DownloadProgress(video_id=info.id, percent=pct, title=info.title))
                        except Exception:
                            logger.exception("Progress sink failed")
                elif line:
                    tail.append(line)
        finally:
            code = proc.wait()

        exists = expected.exists()
        logger.info(f"Download exited with {code}; expected file {expected} exists: {exists}")
        if code != 0 or not exists:
            output = "\n".join(tail)
            logger.error(f"Download failed for {info.id}: {output}")
            raise ExternalToolError(_diagnostic(output, "Download failed"), details=output)
        return expected

    # ---------- full flow ----------
    def fetch(self, url: str, progress_sink: Optional[ProgressSink] = None) -> Song:
        """
        Validate, look up metadata, refuse duplicates and download.
        Returns the new Song without touching the library.
        """
        url = canonical_video_url(url)
        logger.info(f"Download requested: {url}")

        info = self.fetch_metadata(url)
        self.check_duplicate(info)
        path = self.download_audio(url, info, progress_sink)

        return Song(
            id=info.id,
            title=info.title,
            file_path=str(path.resolve()),
            thumbnail=info.thumbnail,
            duration=info.duration,
            channel=info.channel,
            date_added=now_iso(),
        )

    def commit(self, song: Song) -> Song:
        """Upsert into the library; the new record moves to the front."""
        return self.store.add_or_replace_song(song)

    def download(self, url: str, progress_sink: Optional[ProgressSink] = None) -> Song:
        return self.commit(self.fetch(url, progress_sink))

    def attempt(self, url: str, progress_sink: Optional[ProgressSink] = None) -> DownloadOutcome:
        """fetch() with every failure folded into the outcome instead of raised."""
        try:
            return DownloadOutcome(url=url, song=self.fetch(url, progress_sink))
        except AlreadyDownloadedError as e:
            return DownloadOutcome(url=url, song=e.song, error=str(e), duplicate=True)
        except ExternalToolError as e:
            return DownloadOutcome(url=url, error=str(e), details=e.details)
        except PlayGenError as e:
            return DownloadOutcome(url=url, error=str(e))

    # ---------- playlists ----------
    def resolve_playlist(self, url: str) -> PlaylistListing:
        """
        Flat-list a playlist into canonical watch URLs. Nothing is downloaded.
        """
        purl = canonical_playlist_url(url)
        cmd = self.command + YTDLP_FLAT_PLAYLIST_ARGS + [purl]
        logger.info(f"Listing playlist: {' '.join(cmd)}")
        try:
            proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, **_popen_kwargs())
        except OSError as e:
            raise ExternalToolError(f"Failed to run yt-dlp: {e}")

        if proc.returncode != 0:
            raise ExternalToolError(
                _diagnostic(proc.stderr, "Failed to read playlist"),
                details=proc.stderr,
            )

        title = None
        urls: List[str] = []
        bad_lines = 0
        for line in (proc.stdout or "").splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except ValueError:
                bad_lines += 1
                continue
            if not isinstance(entry, dict):
                bad_lines += 1
                continue

            if title is None and entry.get("playlist_title"):
                title = str(entry["playlist_title"])

            vid = entry.get("id")
            if isinstance(vid, str) and VIDEO_ID_RE.match(vid):
                urls.append(WATCH_URL.format(id=vid))
            elif entry.get("url") and extract_video_id(str(entry["url"])):
                urls.append(canonical_video_url(str(entry["url"])))

        if bad_lines:
            logger.warning(f"Skipped {bad_lines} unparsable playlist line(s)")
        if not urls:
            if bad_lines:
                raise MetadataParseError("Failed to parse playlist entries", details=proc.stdout)
            raise ExternalToolError("Playlist is empty or unavailable")

        # a video listed twice is downloaded once, at its first position
        return PlaylistListing(title=title or IMPORTED_PLAYLIST_NAME, urls=list(dict.fromkeys(urls)))

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from playgen.helpers.constants import LIBRARY_DB
from playgen.helpers.json_utils import load_json, save_json
from playgen.helpers.utils import now_iso, time_token
from playgen.models.library import Library
from playgen.models.playlist import Playlist, unique_ids
from playgen.models.session import Session, Settings
from playgen.models.song import Song


class LibraryStore:
    """
    Owner of the single in-memory Library and its JSON document.

    Every mutation is read-modify-write on `self.library` followed by a full
    rewrite of the document. A failed write is logged and the in-memory state
    stays authoritative for the running session.
    """

    def __init__(self, path: Path = LIBRARY_DB):
        self.path = Path(path)
        self.library: Library = self.load()

    # ---------- persistence ----------
    def load(self) -> Library:
        raw = load_json(self.path, None)
        if raw is None:
            return Library()
        if not isinstance(raw, dict):
            logger.warning(f"Library document {self.path} is not an object; starting empty")
            return Library()
        return Library.from_dict(raw)

    def save(self, library: Optional[Library] = None) -> bool:
        if library is not None:
            self.library = library
        ok = save_json(self.path, self.library.to_dict())
        if not ok:
            logger.error("Library not persisted; keeping in-memory state")
        return ok

    # ---------- songs ----------
    def list_songs(self) -> List[Song]:
        """
        Songs whose audio file is still on disk, most recent first.
        Records whose file vanished are dropped from the library.
        """
        present = [s for s in self.library.songs if Path(s.file_path).exists()]
        if len(present) != len(self.library.songs):
            gone = len(self.library.songs) - len(present)
            logger.info(f"Pruning {gone} song(s) with missing audio files")
            self.library.songs = present
            self.save()
        return list(present)

    def get_song(self, song_id: str) -> Optional[Song]:
        return self.library.find_song(song_id)

    def song_path(self, song_id: str) -> Optional[Path]:
        s = self.get_song(song_id)
        if s is None:
            return None
        p = Path(s.file_path)
        return p if p.exists() else None

    def add_or_replace_song(self, song: Song) -> Song:
        self.library.songs = [s for s in self.library.songs if s.id != song.id]
        self.library.songs.insert(0, song)
        self.save()
        return song

    def remove_song(self, song_id: str) -> Optional[Song]:
        song = self.get_song(song_id)
        if song is None:
            return None

        try:
            Path(song.file_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete {song.file_path}: {e}")

        self.library.songs = [s for s in self.library.songs if s.id != song_id]
        for pl in self.library.playlists:
            pl.songs = [i for i in pl.songs if i != song_id]
        self.save()
        return song

    # ---------- playlists ----------
    def playlists(self) -> List[Playlist]:
        return list(self.library.playlists)

    def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        return self.library.find_playlist(playlist_id)

    def playlist_songs(self, playlist_id: str) -> List[Song]:
        """Resolved songs of a playlist; ids without a song are skipped."""
        pl = self.get_playlist(playlist_id)
        if pl is None:
            return []
        by_id = {s.id: s for s in self.library.songs}
        return [by_id[i] for i in pl.songs if i in by_id]

    def _new_playlist_id(self) -> str:
        taken = {p.id for p in self.library.playlists}
        pid = time_token()
        while pid in taken:
            pid = time_token()
        return pid

    def create_playlist(self, name: str) -> Playlist:
        name = (name or "").strip()
        if not name:
            raise ValueError("Playlist name cannot be empty")
        pl = Playlist(id=self._new_playlist_id(), name=name, songs=[], date_created=now_iso())
        self.library.playlists.append(pl)
        self.save()
        return pl

    def rename_playlist(self, playlist_id: str, name: str) -> Optional[Playlist]:
        name = (name or "").strip()
        if not name:
            raise ValueError("Playlist name cannot be empty")
        pl = self.get_playlist(playlist_id)
        if pl is None:
            return None
        pl.name = name
        self.save()
        return pl

    def delete_playlist(self, playlist_id: str) -> bool:
        before = len(self.library.playlists)
        self.library.playlists = [p for p in self.library.playlists if p.id != playlist_id]
        if len(self.library.playlists) == before:
            return False
        if self.library.session.last_playlist_id == playlist_id:
            self.library.session.last_playlist_id = None
        self.save()
        return True

    def add_to_playlist(self, playlist_id: str, song_id: str) -> Optional[Playlist]:
        pl = self.get_playlist(playlist_id)
        if pl is None:
            return None
        if song_id not in pl.songs:
            pl.songs.append(song_id)
            self.save()
        return pl

    def remove_from_playlist(self, playlist_id: str, song_id: str) -> Optional[Playlist]:
        pl = self.get_playlist(playlist_id)
        if pl is None:
            return None
        pl.songs = [i for i in pl.songs if i != song_id]
        self.save()
        return pl

    def reorder_playlist(self, playlist_id: str, song_ids: List[str]) -> Optional[Playlist]:
        pl = self.get_playlist(playlist_id)
        if pl is None:
            return None
        pl.songs = unique_ids(song_ids)
        self.save()
        return pl

    # ---------- session / settings ----------
    def get_session(self) -> Session:
        return self.library.session

    def save_session(self, patch: Union[Session, Dict[str, Any]]) -> Session:
        if isinstance(patch, Session):
            patch = patch.to_dict()
        self.library.session = self.library.session.merged(patch)
        self.save()
        return self.library.session

    def resolved_last_playlist_id(self) -> Optional[str]:
        pid = self.library.session.last_playlist_id
        if pid and self.get_playlist(pid) is not None:
            return pid
        return None

    def get_settings(self) -> Settings:
        return self.library.settings

    def save_settings(self, patch: Union[Settings, Dict[str, Any]]) -> Settings:
        if isinstance(patch, Settings):
            patch = patch.to_dict()
        self.library.settings = self.library.settings.merged(patch)
        self.save()
        return self.library.settings

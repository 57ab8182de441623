from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from playgen.models.playlist import Playlist
from playgen.models.session import Session, Settings
from playgen.models.song import Song


@dataclass
class Library:
    """The whole persisted document: songs, playlists, session and settings."""
    songs: List[Song] = field(default_factory=list)
    playlists: List[Playlist] = field(default_factory=list)
    session: Session = field(default_factory=Session)
    settings: Settings = field(default_factory=Settings)

    def find_song(self, song_id: str) -> Optional[Song]:
        return next((s for s in self.songs if s.id == song_id), None)

    def find_playlist(self, playlist_id: str) -> Optional[Playlist]:
        return next((p for p in self.playlists if p.id == playlist_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "songs": [s.to_dict() for s in self.songs],
            "playlists": [p.to_dict() for p in self.playlists],
            "session": self.session.to_dict(),
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Any) -> "Library":
        if not isinstance(d, dict):
            return cls()

        songs: List[Song] = []
        seen = set()
        for raw in d.get("songs") or []:
            s = Song.from_dict(raw)
            # newest record comes first in the document
            if s is not None and s.id not in seen:
                seen.add(s.id)
                songs.append(s)

        playlists: List[Playlist] = []
        pl_seen = set()
        for raw in d.get("playlists") or []:
            p = Playlist.from_dict(raw)
            if p is not None and p.id not in pl_seen:
                pl_seen.add(p.id)
                playlists.append(p)

        return cls(
            songs=songs,
            playlists=playlists,
            session=Session.from_dict(d.get("session")),
            settings=Settings.from_dict(d.get("settings")),
        )

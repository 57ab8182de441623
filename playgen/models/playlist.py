from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from playgen.helpers.utils import now_iso


def unique_ids(ids: Iterable[str]) -> List[str]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    out: List[str] = []
    for i in ids:
        if isinstance(i, str) and i and i not in seen:
            seen.add(i)
            out.append(i)
    return out


@dataclass
class Playlist:
    id: str
    name: str
    songs: List[str] = field(default_factory=list)
    date_created: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "songs": list(self.songs),
            "dateCreated": self.date_created,
        }

    @classmethod
    def from_dict(cls, d: Any) -> Optional["Playlist"]:
        if not isinstance(d, dict):
            return None
        pid = d.get("id")
        if not isinstance(pid, str) or not pid:
            return None
        songs = d.get("songs")
        return cls(
            id=pid,
            name=str(d.get("name") or "Untitled"),
            songs=unique_ids(songs if isinstance(songs, list) else []),
            date_created=str(d.get("dateCreated") or now_iso()),
        )

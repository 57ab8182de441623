from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from playgen.helpers.utils import now_iso


def _as_int(v, default: int = 0) -> int:
    try:
        return max(0, int(float(v)))
    except (TypeError, ValueError):
        return default


@dataclass
class Song:
    id: str
    title: str
    file_path: str
    thumbnail: str = ""
    duration: int = 0
    channel: str = ""
    date_added: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "duration": self.duration,
            "channel": self.channel,
            "filePath": self.file_path,
            "dateAdded": self.date_added,
        }

    @classmethod
    def from_dict(cls, d: Any) -> Optional["Song"]:
        """
        Build a Song from a persisted record.
        Returns None for records missing an id or a file path.
        """
        if not isinstance(d, dict):
            return None
        sid = d.get("id")
        path = d.get("filePath")
        if not isinstance(sid, str) or not sid or not isinstance(path, str) or not path:
            return None
        return cls(
            id=sid,
            title=str(d.get("title") or "Unknown"),
            file_path=path,
            thumbnail=str(d.get("thumbnail") or ""),
            duration=_as_int(d.get("duration")),
            channel=str(d.get("channel") or ""),
            date_added=str(d.get("dateAdded") or now_iso()),
        )

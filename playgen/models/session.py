from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from playgen.helpers.constants import DEFAULT_VOLUME


class RepeatMode(str, Enum):
    NONE = "none"
    ALL = "all"
    ONE = "one"

    def next(self) -> "RepeatMode":
        order = [RepeatMode.NONE, RepeatMode.ALL, RepeatMode.ONE]
        return order[(order.index(self) + 1) % len(order)]

    @classmethod
    def coerce(cls, v: Any) -> "RepeatMode":
        try:
            return cls(v)
        except ValueError:
            return cls.NONE


def clamp_volume(v: Any, default: float = DEFAULT_VOLUME) -> float:
    try:
        v = float(v)
    except (TypeError, ValueError):
        return default
    return max(0.0, min(1.0, v))


def _opt_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) and v else None


@dataclass
class Session:
    last_song_id: Optional[str] = None
    last_playlist_id: Optional[str] = None
    volume: float = DEFAULT_VOLUME
    shuffle: bool = False
    repeat: RepeatMode = RepeatMode.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastSongId": self.last_song_id,
            "lastPlaylistId": self.last_playlist_id,
            "volume": self.volume,
            "shuffle": self.shuffle,
            "repeat": self.repeat.value,
        }

    @classmethod
    def from_dict(cls, d: Any) -> "Session":
        if not isinstance(d, dict):
            return cls()
        return cls(
            last_song_id=_opt_str(d.get("lastSongId")),
            last_playlist_id=_opt_str(d.get("lastPlaylistId")),
            volume=clamp_volume(d.get("volume", DEFAULT_VOLUME)),
            shuffle=bool(d.get("shuffle", False)),
            repeat=RepeatMode.coerce(d.get("repeat", "none")),
        )

    def merged(self, patch: Dict[str, Any]) -> "Session":
        """Shallow merge of a partial session document over this one."""
        data = self.to_dict()
        data.update({k: v for k, v in (patch or {}).items() if k in data})
        return Session.from_dict(data)


@dataclass
class Settings:
    mini_player_on_minimize: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"miniPlayerOnMinimize": self.mini_player_on_minimize}

    @classmethod
    def from_dict(cls, d: Any) -> "Settings":
        if not isinstance(d, dict):
            return cls()
        return cls(mini_player_on_minimize=bool(d.get("miniPlayerOnMinimize", True)))

    def merged(self, patch: Dict[str, Any]) -> "Settings":
        data = self.to_dict()
        data.update({k: v for k, v in (patch or {}).items() if k in data})
        return Settings.from_dict(data)

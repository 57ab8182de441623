from dataclasses import dataclass, field
from typing import List, Optional

from playgen.models.song import Song


@dataclass
class VideoInfo:
    id: str
    title: str
    thumbnail: str
    duration: int
    channel: str


@dataclass
class DownloadProgress:
    video_id: str
    percent: float
    title: str


@dataclass
class PlaylistListing:
    title: str
    urls: List[str] = field(default_factory=list)


@dataclass
class DownloadOutcome:
    url: str
    song: Optional[Song] = None
    error: Optional[str] = None
    duplicate: bool = False  # already downloaded; not a failure, not a success
    details: Optional[str] = None  # raw tool output behind `error`

    @property
    def ok(self) -> bool:
        return self.song is not None and self.error is None and not self.duplicate

from pathlib import Path
from typing import List

import pytest

from playgen.io.library_store import LibraryStore
from playgen.models.library import Library
from playgen.models.song import Song
from playgen.services.playback import AudioBackend


class FakeAudioBackend(AudioBackend):
    """Records calls instead of producing sound."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.loaded = None
        self.pos = 0.0
        self.volume = None

    def load(self, path: Path) -> None:
        self.loaded = Path(path)
        self.pos = 0.0
        self.calls.append(("load", Path(path)))

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def seek(self, seconds: float) -> None:
        self.pos = seconds
        self.calls.append(("seek", seconds))

    def position(self) -> float:
        return self.pos

    def duration(self) -> float:
        return 0.0

    def set_volume(self, volume: float) -> None:
        self.volume = volume
        self.calls.append(("volume", volume))


def make_song(downloads: Path, vid: str, title: str = None, create_file: bool = True) -> Song:
    path = downloads / f"{vid}.mp3"
    if create_file:
        path.write_bytes(b"ID3")
    return Song(
        id=vid,
        title=title or f"Song {vid}",
        file_path=str(path),
        thumbnail=f"https://i.ytimg.com/vi/{vid}/hqdefault.jpg",
        duration=180,
        channel="Some Channel",
        date_added="2024-01-01T00:00:00.000Z",
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data"
    (d / "downloads").mkdir(parents=True)
    return d


@pytest.fixture
def downloads_dir(data_dir: Path) -> Path:
    return data_dir / "downloads"


@pytest.fixture
def db_path(data_dir: Path) -> Path:
    return data_dir / "playgen-db.json"


@pytest.fixture
def empty_store(db_path: Path) -> LibraryStore:
    return LibraryStore(db_path)


@pytest.fixture
def store(db_path: Path, downloads_dir: Path) -> LibraryStore:
    """Store holding songs s1..s5 (in that order), each with an audio file."""
    songs = [make_song(downloads_dir, f"s{i}") for i in range(1, 6)]
    st = LibraryStore(db_path)
    st.save(Library(songs=songs))
    return st


@pytest.fixture
def backend() -> FakeAudioBackend:
    return FakeAudioBackend()

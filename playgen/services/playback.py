"""
Playback state machine: idle / playing / paused over a play queue.

The controller owns queue position, repeat and shuffle, and persists the
session through the LibraryStore after every change worth remembering.
Actual audio output goes through an AudioBackend so the state machine can
run without Qt.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from playgen.helpers.constants import DEFAULT_VOLUME, PREV_RESTART_SEC, VIEW_ALL
from playgen.io.library_store import LibraryStore
from playgen.models.session import RepeatMode, clamp_volume
from playgen.models.song import Song
from playgen.services.queue_engine import build_queue, index_of, songs_for_view
from playgen.signals.mini_player import MiniPlayerState


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class AudioBackend:
    """What the controller needs from an audio output."""

    def load(self, path: Path) -> None:
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def seek(self, seconds: float) -> None:
        raise NotImplementedError

    def position(self) -> float:
        """Seconds into the current track."""
        raise NotImplementedError

    def duration(self) -> float:
        return 0.0

    def set_volume(self, volume: float) -> None:
        raise NotImplementedError


class PlaybackController:
    def __init__(self, store: LibraryStore, backend: AudioBackend, rng=None):
        self.store = store
        self.backend = backend
        self._rng = rng
        self._listeners: List[Callable[["PlaybackController"], None]] = []

        self.state = PlaybackState.IDLE
        self.queue: List[Song] = []
        self.queue_index = -1
        self.current_song: Optional[Song] = None

        session = store.get_session()
        self.volume = session.volume
        self.shuffle = session.shuffle
        self.repeat = session.repeat
        self.view = store.resolved_last_playlist_id() or VIEW_ALL
        if session.last_song_id:
            # shown in the player bar, not auto-played
            self.current_song = store.get_song(session.last_song_id)
        self._muted_volume = self.volume or DEFAULT_VOLUME

        self.backend.set_volume(self.volume)

    # ---------- listeners ----------
    def subscribe(self, fn: Callable[["PlaybackController"], None]) -> None:
        self._listeners.append(fn)

    def _notify(self) -> None:
        for fn in list(self._listeners):
            try:
                fn(self)
            except Exception:
                logger.exception("Playback listener failed")

    # ---------- helpers ----------
    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    def _rebuild_queue(self) -> None:
        pinned = self.current_song.id if self.current_song else None
        # list_songs() drops records whose file is gone
        self.queue = build_queue(
            self.view,
            self.store.list_songs(),
            self.store.playlists(),
            self.shuffle,
            pinned,
            self._rng,
        )

    def persist_session(self) -> None:
        """Fire-and-forget: failures are logged by the store, never raised here."""
        try:
            self.store.save_session({
                "lastSongId": self.current_song.id if self.current_song else None,
                "lastPlaylistId": self.view if self.view != VIEW_ALL else None,
                "volume": self.volume,
                "shuffle": self.shuffle,
                "repeat": self.repeat.value,
            })
        except Exception:
            logger.exception("Session persist failed")

    def _restart(self) -> None:
        self.backend.seek(0)

    # ---------- transitions ----------
    def play(self, song: Song) -> bool:
        """
        Start `song` with a queue rebuilt from the current view.
        Returns False when the song's audio file is gone.
        """
        if self.store.song_path(song.id) is None:
            logger.warning(f"Audio file not found for {song.id}")
            return False

        self.current_song = song
        self._rebuild_queue()
        return self._start(song, index_of(self.queue, song.id))

    def play_view(self, view: Optional[str]) -> bool:
        """Switch to `view` and start from its first song."""
        self.set_view(view)
        songs = songs_for_view(self.view, self.store.list_songs(), self.store.playlists())
        if not songs:
            logger.info(f"Nothing to play in view {self.view}")
            return False
        return self.play(songs[0])

    def _start(self, song: Song, idx: int) -> bool:
        """Load and play `song` at queue position `idx`; the queue itself is left alone."""
        path = self.store.song_path(song.id)
        if path is None:
            logger.warning(f"Audio file not found for {song.id}, skipping")
            return False

        self.current_song = song
        self.queue_index = idx
        self.backend.load(path)
        self.backend.play()
        self.state = PlaybackState.PLAYING

        self.persist_session()
        self._notify()
        return True

    def toggle(self) -> None:
        if self.state == PlaybackState.IDLE:
            return
        if self.state == PlaybackState.PLAYING:
            self.backend.pause()
            self.state = PlaybackState.PAUSED
        else:
            self.backend.play()
            self.state = PlaybackState.PLAYING
        self._notify()

    def stop(self) -> None:
        self.backend.stop()
        self.state = PlaybackState.IDLE
        self.queue_index = -1
        self._notify()

    def next(self) -> None:
        if not self.queue:
            return

        if self.repeat == RepeatMode.ONE:
            self._restart()
            self.backend.play()
            self.state = PlaybackState.PLAYING
            self._notify()
            return

        # songs whose file vanished are stepped over
        idx = self.queue_index
        for _ in range(len(self.queue)):
            idx += 1
            if idx >= len(self.queue):
                if self.repeat != RepeatMode.ALL:
                    self.stop()
                    return
                idx = 0
            if self._start(self.queue[idx], idx):
                return

        logger.warning("No playable song left in the queue")
        self.stop()

    def prev(self) -> None:
        if not self.queue:
            return

        if self.backend.position() > PREV_RESTART_SEC:
            self._restart()
            return

        idx = self.queue_index
        for _ in range(len(self.queue)):
            idx -= 1
            if idx < 0:
                if self.repeat != RepeatMode.ALL:
                    self._restart()
                    return
                idx = len(self.queue) - 1
            if self._start(self.queue[idx], idx):
                return

        self._restart()

    def on_track_finished(self) -> None:
        self.next()

    def set_shuffle(self, on: bool) -> None:
        self.shuffle = bool(on)
        if self.queue:
            self._rebuild_queue()
            if self.current_song:
                self.queue_index = index_of(self.queue, self.current_song.id)
        self.persist_session()
        self._notify()

    def toggle_shuffle(self) -> None:
        self.set_shuffle(not self.shuffle)

    def set_repeat_mode(self, mode: Optional[RepeatMode] = None) -> RepeatMode:
        """Set an explicit mode, or cycle none -> all -> one when `mode` is None."""
        self.repeat = self.repeat.next() if mode is None else RepeatMode.coerce(mode)
        self.persist_session()
        self._notify()
        return self.repeat

    def cycle_repeat_mode(self) -> RepeatMode:
        return self.set_repeat_mode()

    def set_volume(self, volume: float) -> None:
        self.volume = clamp_volume(volume, self.volume)
        if self.volume > 0:
            self._muted_volume = self.volume
        self.backend.set_volume(self.volume)
        self.persist_session()
        self._notify()

    def toggle_mute(self) -> None:
        if self.volume > 0:
            self._muted_volume = self.volume
            self.set_volume(0.0)
        else:
            self.set_volume(self._muted_volume or DEFAULT_VOLUME)

    # ---------- view / library changes ----------
    def set_view(self, view: Optional[str]) -> None:
        if view != VIEW_ALL and self.store.get_playlist(view or "") is None:
            view = VIEW_ALL
        self.view = view
        self.persist_session()
        self._notify()

    def delete_playlist(self, playlist_id: str) -> bool:
        removed = self.store.delete_playlist(playlist_id)
        if self.view == playlist_id:
            self.view = VIEW_ALL
            self.persist_session()
        self._notify()
        return removed

    def forget_song(self, song_id: str) -> None:
        """Drop a song that is being deleted; stops it first if it is playing."""
        if self.current_song and self.current_song.id == song_id:
            self.backend.stop()
            self.current_song = None
            self.state = PlaybackState.IDLE
            self.queue_index = -1
        self.queue = [s for s in self.queue if s.id != song_id]
        if self.current_song:
            self.queue_index = index_of(self.queue, self.current_song.id)
        self.persist_session()
        self._notify()

    def snapshot(self) -> MiniPlayerState:
        s = self.current_song
        return MiniPlayerState(
            title=s.title if s else "",
            channel=s.channel if s else "",
            thumbnail=s.thumbnail if s else "",
            is_playing=self.is_playing,
            position=self.backend.position() if s else 0.0,
            duration=float(self.backend.duration() or (s.duration if s else 0)),
        )

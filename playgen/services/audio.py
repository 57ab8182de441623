from pathlib import Path

from PyQt6.QtCore import QObject, QUrl, pyqtSignal
from PyQt6.QtMultimedia import QAudioOutput, QMediaPlayer

from playgen.services.playback import AudioBackend


class QtAudioBackend(QObject, AudioBackend):
    """QMediaPlayer + QAudioOutput behind the AudioBackend interface."""
    finished = pyqtSignal()
    position_changed = pyqtSignal(int)   # ms
    duration_changed = pyqtSignal(int)   # ms

    def __init__(self, parent=None):
        super().__init__(parent)
        self.audio_output = QAudioOutput()
        self.player = QMediaPlayer()
        self.player.setAudioOutput(self.audio_output)
        self.player.mediaStatusChanged.connect(self._on_media_status)
        self.player.positionChanged.connect(self.position_changed)
        self.player.durationChanged.connect(self.duration_changed)

    def _on_media_status(self, status) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.finished.emit()

    def load(self, path: Path) -> None:
        try:
            p = Path(path).resolve(strict=False)
        except OSError:
            p = Path(path)
        # Always use absolute file:// URL
        self.player.setSource(QUrl.fromLocalFile(str(p)))

    def play(self) -> None:
        self.player.play()

    def pause(self) -> None:
        self.player.pause()

    def stop(self) -> None:
        self.player.stop()
        # release the file handle so a deleted song's file can be removed
        self.player.setSource(QUrl())

    def seek(self, seconds: float) -> None:
        self.player.setPosition(max(0, int(seconds * 1000)))

    def position(self) -> float:
        return self.player.position() / 1000.0

    def duration(self) -> float:
        return self.player.duration() / 1000.0

    def set_volume(self, volume: float) -> None:
        self.audio_output.setVolume(max(0.0, min(1.0, float(volume))))

import queue
import threading
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger
from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

from playgen.helpers.constants import DOWNLOAD_WORKERS, PROGRESS_PUMP_MS
from playgen.models.download import DownloadOutcome
from playgen.services.downloader import DownloadOrchestrator
from playgen.services.errors import PlayGenError
from playgen.signals.channels import ProgressChannel


@dataclass
class _Job:
    kind: str  # "video" or "playlist"
    url: str


class DownloadManager(QObject):
    """
    Runs DownloadOrchestrator jobs on worker threads.

    Workers never touch the library: a finished download is handed back to
    the GUI thread through `_job_done`, committed there, and only then
    announced through `file_ready`.
    """
    file_ready = pyqtSignal(object)               # DownloadOutcome
    progress = pyqtSignal(object)                 # DownloadProgress
    playlist_resolved = pyqtSignal(str, object, str)  # url, PlaylistListing|None, error
    _job_done = pyqtSignal(object)

    def __init__(self, orchestrator: DownloadOrchestrator, parent=None, workers: int = DOWNLOAD_WORKERS):
        super().__init__(parent)
        self.orchestrator = orchestrator
        self.channel = ProgressChannel()

        self._stop = False
        self._jobs: "queue.Queue[_Job]" = queue.Queue()
        self._pending = 0
        self._pending_lock = threading.Lock()

        self._workers: List[threading.Thread] = []
        for _ in range(max(1, workers)):
            t = threading.Thread(target=self._worker_loop, daemon=True)
            t.start()
            self._workers.append(t)

        self._job_done.connect(self._on_job_done)

        # Progress pump on the Qt thread: drains what the workers published
        self._pulse = QTimer(self)
        self._pulse.setInterval(PROGRESS_PUMP_MS)
        self._pulse.timeout.connect(self._pump_progress)
        self._pulse.start()

    # ---------- public ----------
    def enqueue(self, url: str) -> None:
        self._put(_Job(kind="video", url=url))

    def resolve_playlist(self, url: str) -> None:
        self._put(_Job(kind="playlist", url=url))

    def is_busy(self) -> bool:
        with self._pending_lock:
            return self._pending > 0

    def shutdown(self) -> None:
        self._stop = True
        self._pulse.stop()

    # ---------- workers ----------
    def _put(self, job: _Job) -> None:
        with self._pending_lock:
            self._pending += 1
        self._jobs.put(job)

    def _worker_loop(self) -> None:
        while not self._stop:
            try:
                job = self._jobs.get(timeout=0.25)
            except queue.Empty:
                continue
            try:
                if job.kind == "playlist":
                    self._run_playlist(job)
                else:
                    self._run_video(job)
            finally:
                self._jobs.task_done()

    def _run_video(self, job: _Job) -> None:
        try:
            outcome = self.orchestrator.attempt(job.url, self.channel.publish)
        except Exception as e:
            logger.exception(f"Unexpected error downloading {job.url}")
            outcome = DownloadOutcome(url=job.url, error=f"Download error: {e}")
        self._job_done.emit(outcome)

    def _run_playlist(self, job: _Job) -> None:
        try:
            listing = self.orchestrator.resolve_playlist(job.url)
            self.playlist_resolved.emit(job.url, listing, "")
        except PlayGenError as e:
            self.playlist_resolved.emit(job.url, None, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error reading playlist {job.url}")
            self.playlist_resolved.emit(job.url, None, f"Playlist error: {e}")
        finally:
            with self._pending_lock:
                self._pending -= 1

    # ---------- GUI thread ----------
    @pyqtSlot(object)
    def _on_job_done(self, outcome: DownloadOutcome) -> None:
        with self._pending_lock:
            self._pending -= 1
        self._pump_progress()
        if outcome.ok:
            self.orchestrator.commit(outcome.song)
            logger.info(f"Downloaded: {outcome.song.title} ({outcome.song.id})")
        self.file_ready.emit(outcome)

    def _pump_progress(self) -> None:
        if self.channel.empty():
            return
        for ev in self.channel.drain_latest().values():
            self.progress.emit(ev)

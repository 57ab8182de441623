import queue
from typing import Dict, List

from playgen.models.download import DownloadProgress


class ProgressChannel:
    """
    FIFO of DownloadProgress events.

    Producers are the download worker threads; the single consumer is the
    GUI thread, which drains it on a timer. Percentages are display hints:
    they may repeat or go backwards and a full channel drops new events.
    """

    def __init__(self, maxsize: int = 0):
        self._q: "queue.Queue[DownloadProgress]" = queue.Queue(maxsize)

    def publish(self, event: DownloadProgress) -> bool:
        try:
            self._q.put_nowait(event)
            return True
        except queue.Full:
            return False

    def drain(self) -> List[DownloadProgress]:
        out: List[DownloadProgress] = []
        while True:
            try:
                out.append(self._q.get_nowait())
            except queue.Empty:
                return out

    def drain_latest(self) -> Dict[str, DownloadProgress]:
        """Last event per video id (last write wins)."""
        latest: Dict[str, DownloadProgress] = {}
        for ev in self.drain():
            latest[ev.video_id] = ev
        return latest

    def empty(self) -> bool:
        return self._q.empty()

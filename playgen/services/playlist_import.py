from dataclasses import dataclass, field
from typing import Dict, List, Optional

from playgen.models.download import DownloadOutcome, PlaylistListing


@dataclass
class ImportSummary:
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0
    song_ids: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (f"Downloaded {self.downloaded}, skipped {self.skipped} (already in library), "
                f"failed {self.failed}.")


class ImportBatch:
    """
    One playlist import, driven one video at a time.

    The caller asks for `next_url()`, downloads it, hands the outcome back to
    `record()` and repeats until `done`. Outcomes for URLs this batch did not
    start (a single download running alongside) are not claimed.
    """

    def __init__(self, listing: PlaylistListing):
        self.name = listing.title
        self.urls: List[str] = list(dict.fromkeys(listing.urls))
        self.outcomes: Dict[str, DownloadOutcome] = {}
        self.in_flight: Optional[str] = None
        self._cursor = 0

    @property
    def total(self) -> int:
        return len(self.urls)

    @property
    def done(self) -> bool:
        return len(self.outcomes) >= len(self.urls)

    def next_url(self) -> Optional[str]:
        if self.in_flight is not None or self._cursor >= len(self.urls):
            return None
        self.in_flight = self.urls[self._cursor]
        self._cursor += 1
        return self.in_flight

    def record(self, outcome: DownloadOutcome) -> bool:
        if self.in_flight is None or outcome.url != self.in_flight:
            return False
        self.outcomes[outcome.url] = outcome
        self.in_flight = None
        return True

    def summary(self) -> ImportSummary:
        """Counts plus the song ids to put in the playlist, in listing order."""
        res = ImportSummary()
        for u in self.urls:
            o = self.outcomes.get(u)
            if o is None or o.song is None or (o.error and not o.duplicate):
                res.failed += 1
                continue
            if o.duplicate:
                res.skipped += 1
            else:
                res.downloaded += 1
            res.song_ids.append(o.song.id)
        return res

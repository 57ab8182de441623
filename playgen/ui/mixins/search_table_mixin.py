from typing import List

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import QTableWidgetItem

from playgen.helpers.constants import STATUS_MSG_MS, TABLE_BATCH_SIZE
from playgen.helpers.duration_utils import mmss_from_seconds
from playgen.models.song import Song
from playgen.services.queue_engine import compute_reorder_insertion
from playgen.services.search import filter_songs
from playgen.ui.widgets.song_table import SONG_ID_ROLE


class SearchTableMixin:
    """
    Handles:
      - debounced search over the current view
      - async table population in small batches (keeps audio and UI responsive)
      - drag-to-reorder inside a playlist view

    Expects the main window to provide:
      - widgets:
          self.table (SongTable), self.search_edit, self.view_label
          self.empty_hint, self.status
      - state:
          self.current_list: List[Song]
          self._populate_timer, self._populate_source, self._populate_index, self._populate_gen
      - helpers:
          self._view_songs(), self._view_title(), self._current_playlist_id()
          self._highlight_playing_row(animated=False)
    """

    COL_NUM = 0
    COL_TITLE = 1
    COL_CHANNEL = 2
    COL_DURATION = 3
    COL_ADDED = 4

    # ------------------------------------------------------------------
    # Search trigger
    # ------------------------------------------------------------------

    def _query(self) -> str:
        return (self.search_edit.text() if self.search_edit else "").strip()

    def _focus_search(self) -> None:
        self.search_edit.setFocus()
        self.search_edit.selectAll()

    def _apply_search_now(self) -> None:
        """Re-render the current view, filtered by the search box. Safe to call repeatedly."""
        query = self._query()
        base = self._view_songs()
        songs = filter_songs(base, query)

        self.view_label.setText(self._view_title())
        # reordering a filtered subset would be ambiguous
        self.table.set_reorderable(self._current_playlist_id() is not None and not query)

        if not base:
            if self._current_playlist_id() is None:
                self.empty_hint.set_text("No songs yet", "Paste a YouTube link above to download one.")
            else:
                self.empty_hint.set_text("This playlist is empty", "Right-click a song to add it here.")
        elif not songs:
            self.empty_hint.set_text("No results found")

        if query:
            self.status.showMessage(f"Found {len(songs)} song(s).", 1500)
        self._populate_table_async(songs)

    # ------------------------------------------------------------------
    # Async table population (batch insert)
    # ------------------------------------------------------------------

    def _cancel_async_population(self) -> None:
        if self._populate_timer is not None:
            self._populate_timer.stop()
            self._populate_timer.deleteLater()

        self._populate_timer = None
        self._populate_source = []
        self._populate_index = 0

    def _populate_table_async(self, songs: List[Song]) -> None:
        self._cancel_async_population()

        self.current_list = list(songs)
        self.table.clearContents()
        self.table.setRowCount(0)
        self.table.setUpdatesEnabled(False)
        self.empty_hint.resize(self.table.viewport().size())
        self.empty_hint.setVisible(not songs)

        self._populate_source = list(songs)
        self._populate_index = 0
        self._populate_gen += 1

        timer = QTimer(self)
        timer.setInterval(0)
        gen = self._populate_gen
        timer.timeout.connect(lambda: self._populate_step(gen))
        self._populate_timer = timer
        timer.start()

    def _populate_step(self, gen: int) -> None:
        # A newer populate cycle started; drop this one
        if gen != self._populate_gen or self._populate_timer is None:
            return

        src = self._populate_source
        n = len(src)
        if self._populate_index >= n:
            self.table.setUpdatesEnabled(True)
            self._cancel_async_population()
            self._highlight_playing_row()
            return

        end = min(self._populate_index + TABLE_BATCH_SIZE, n)
        for i in range(self._populate_index, end):
            self._insert_song_row(i, src[i])
        self._populate_index = end

    def _insert_song_row(self, row: int, s: Song) -> None:
        self.table.insertRow(row)

        num = QTableWidgetItem(str(row + 1))
        num.setData(SONG_ID_ROLE, s.id)
        num.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
        self.table.setItem(row, self.COL_NUM, num)

        self.table.setItem(row, self.COL_TITLE, QTableWidgetItem(s.title))
        self.table.setItem(row, self.COL_CHANNEL, QTableWidgetItem(s.channel))

        dur = QTableWidgetItem(mmss_from_seconds(s.duration) if s.duration else "—")
        dur.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
        self.table.setItem(row, self.COL_DURATION, dur)

        self.table.setItem(row, self.COL_ADDED, QTableWidgetItem((s.date_added or "")[:10]))

    def _selected_songs(self) -> List[Song]:
        rows = sorted({ix.row() for ix in self.table.selectedIndexes()})
        return [self.current_list[r] for r in rows if 0 <= r < len(self.current_list)]

    # ------------------------------------------------------------------
    # Drag reorder
    # ------------------------------------------------------------------

    def _on_reorder_requested(self, dragged_id: str, target_id: str, insert_before: bool) -> None:
        pid = self._current_playlist_id()
        pl = self.store.get_playlist(pid) if pid else None
        if pl is None or dragged_id == target_id:
            return

        new_ids = compute_reorder_insertion(pl.songs, dragged_id, target_id, insert_before)
        self.store.reorder_playlist(pl.id, new_ids)
        self.status.showMessage("Playlist reordered.", STATUS_MSG_MS)
        self._apply_search_now()

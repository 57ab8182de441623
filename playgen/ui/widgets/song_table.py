from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QAbstractItemView, QTableWidget


SONG_ID_ROLE = Qt.ItemDataRole.UserRole


class SongTable(QTableWidget):
    """
    Song list that supports drag-to-reorder inside a playlist view.

    Qt's own row move is suppressed; the drop is reported as
    `reorder_requested(dragged_id, target_id, insert_before)` and the owner
    re-renders from the store. An empty target id means "drop at the end".
    """
    reorder_requested = pyqtSignal(str, str, bool)

    def __init__(self, rows: int, cols: int, parent=None):
        super().__init__(rows, cols, parent)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.setDropIndicatorShown(True)
        self.set_reorderable(False)

    def set_reorderable(self, on: bool):
        self.setDragEnabled(on)
        self.setAcceptDrops(on)
        self.viewport().setAcceptDrops(on)
        self.setDragDropMode(
            QAbstractItemView.DragDropMode.InternalMove if on
            else QAbstractItemView.DragDropMode.NoDragDrop
        )

    def song_id_at(self, row: int) -> Optional[str]:
        it = self.item(row, 0)
        return it.data(SONG_ID_ROLE) if it else None

    def dropEvent(self, event):
        if event.source() is not self:
            event.ignore()
            return

        src_row = self.currentRow()
        dragged = self.song_id_at(src_row)
        pos = event.position().toPoint()
        tgt_row = self.rowAt(pos.y())

        # Never let Qt move the items itself
        event.setDropAction(Qt.DropAction.IgnoreAction)
        event.accept()

        if not dragged:
            return
        if tgt_row < 0:
            self.reorder_requested.emit(dragged, "", False)
            return

        target = self.song_id_at(tgt_row)
        if not target or target == dragged:
            return
        rect = self.visualRect(self.model().index(tgt_row, 0))
        before = pos.y() < rect.center().y()
        self.reorder_requested.emit(dragged, target, before)

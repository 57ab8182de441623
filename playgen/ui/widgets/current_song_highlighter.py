from PyQt6.QtCore import Qt, QRect
from PyQt6.QtGui import QPainter, QColor, QFont, QPen
from PyQt6.QtWidgets import QStyledItemDelegate, QStyleOptionViewItem, QStyle

from playgen.ui.theme import PlayGenTheme


class NowPlayingRowDelegate(QStyledItemDelegate):
    """Paints the row of the current song with an accent bar and bold title."""
    def __init__(self, main):
        super().__init__(main.table)
        self.main = main
        self.font_title_bold = QFont()
        self.font_title_bold.setBold(True)

    def _is_now(self, row: int) -> bool:
        cur = self.main.playback.current_song
        if cur is None or not (0 <= row < len(self.main.current_list)):
            return False
        return self.main.current_list[row].id == cur.id

    def paint(self, painter: QPainter, option: QStyleOptionViewItem, index):
        is_now = self._is_now(index.row())

        painter.save()
        # bleed 1px so gridlines don't show as a stripe
        rect = option.rect.adjusted(-1, 0, +1, 0)

        if is_now:
            painter.fillRect(rect, QColor(PlayGenTheme.HILITE_ROW))
            if index.column() == 0:
                painter.fillRect(QRect(rect.left(), rect.top(), 4, rect.height()),
                                 QColor(PlayGenTheme.HILITE_BAR))
        elif option.state & (QStyle.StateFlag.State_Selected | QStyle.StateFlag.State_MouseOver):
            painter.fillRect(rect, QColor(PlayGenTheme.HOVER))

        if is_now and index.column() == self.main.COL_TITLE:
            painter.setPen(QPen(QColor(PlayGenTheme.HILITE_TEXT)))
            painter.setFont(self.font_title_bold)
            r = option.rect.adjusted(6, 0, -6, 0)
            text = index.data() or ""
            elided = painter.fontMetrics().elidedText(text, Qt.TextElideMode.ElideRight, r.width())
            painter.drawText(r, Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft, elided)
        else:
            opt = QStyleOptionViewItem(option)
            # background already painted above
            opt.state &= ~(QStyle.StateFlag.State_Selected | QStyle.StateFlag.State_MouseOver)
            super().paint(painter, opt, index)

        painter.restore()

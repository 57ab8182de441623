from PyQt6.QtCore import Qt, QPoint
from PyQt6.QtWidgets import (
    QWidget, QLabel, QPushButton, QHBoxLayout, QVBoxLayout, QProgressBar
)

from playgen.helpers.constants import APP_NAME, MINI_PLAYER_HEIGHT, MINI_PLAYER_WIDTH
from playgen.helpers.duration_utils import mmss_from_seconds
from playgen.signals.mini_player import CommandChannel, MiniPlayerCommand, MiniPlayerState
from playgen.ui.theme import PlayGenTheme


class MiniPlayer(QWidget):
    """
    Small frameless always-on-top window.

    It never talks to the player directly: buttons go out as
    MiniPlayerCommand over the CommandChannel and the window only renders the
    MiniPlayerState it is handed.
    """

    def __init__(self, commands: CommandChannel):
        super().__init__(None, Qt.WindowType.Tool
                         | Qt.WindowType.FramelessWindowHint
                         | Qt.WindowType.WindowStaysOnTopHint)
        self.commands = commands
        self._drag_from: QPoint = None

        self.setObjectName("miniPlayer")
        self.setWindowTitle(f"{APP_NAME} mini")
        self.setFixedSize(MINI_PLAYER_WIDTH, MINI_PLAYER_HEIGHT)
        self.setStyleSheet(PlayGenTheme.stylesheet())

        self.title = QLabel("Nothing playing")
        self.title.setStyleSheet("font-weight:700; font-size:14px;")
        self.channel = QLabel("")
        self.channel.setProperty("muted", True)
        self.time = QLabel("0:00 / 0:00")
        self.time.setProperty("muted", True)

        self.progress = QProgressBar()
        self.progress.setTextVisible(False)
        self.progress.setFixedHeight(4)
        self.progress.setRange(0, 1000)

        self.prev_btn = QPushButton("⏮")
        self.play_btn = QPushButton("▶")
        self.play_btn.setObjectName("playButton")
        self.next_btn = QPushButton("⏭")
        self.restore_btn = QPushButton("⤢")
        self.restore_btn.setToolTip("Restore main window")
        self.close_btn = QPushButton("✕")
        self.close_btn.setToolTip("Close mini-player")

        self.prev_btn.clicked.connect(lambda: self.commands.send(MiniPlayerCommand.PREV))
        self.play_btn.clicked.connect(lambda: self.commands.send(MiniPlayerCommand.TOGGLE_PLAY))
        self.next_btn.clicked.connect(lambda: self.commands.send(MiniPlayerCommand.NEXT))
        self.restore_btn.clicked.connect(lambda: self.commands.send(MiniPlayerCommand.RESTORE))
        self.close_btn.clicked.connect(lambda: self.commands.send(MiniPlayerCommand.CLOSE))

        top = QHBoxLayout()
        info = QVBoxLayout()
        info.addWidget(self.title)
        info.addWidget(self.channel)
        top.addLayout(info, 1)
        top.addWidget(self.restore_btn, 0, Qt.AlignmentFlag.AlignTop)
        top.addWidget(self.close_btn, 0, Qt.AlignmentFlag.AlignTop)

        ctrl = QHBoxLayout()
        ctrl.addWidget(self.time)
        ctrl.addStretch(1)
        for b in (self.prev_btn, self.play_btn, self.next_btn):
            ctrl.addWidget(b)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(12, 10, 12, 10)
        lay.addLayout(top)
        lay.addWidget(self.progress)
        lay.addLayout(ctrl)

    def set_state(self, st: MiniPlayerState) -> None:
        self.title.setText(self.title.fontMetrics().elidedText(
            st.title or "Nothing playing", Qt.TextElideMode.ElideRight, MINI_PLAYER_WIDTH - 110))
        self.channel.setText(st.channel)
        self.play_btn.setText("⏸" if st.is_playing else "▶")
        self.time.setText(f"{mmss_from_seconds(st.position)} / {mmss_from_seconds(st.duration)}")
        frac = (st.position / st.duration) if st.duration > 0 else 0.0
        self.progress.setValue(int(max(0.0, min(1.0, frac)) * 1000))

    # frameless: drag anywhere to move
    def mousePressEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self._drag_from = e.globalPosition().toPoint() - self.frameGeometry().topLeft()
            e.accept()
        super().mousePressEvent(e)

    def mouseMoveEvent(self, e):
        if self._drag_from is not None and e.buttons() & Qt.MouseButton.LeftButton:
            self.move(e.globalPosition().toPoint() - self._drag_from)
            e.accept()
        super().mouseMoveEvent(e)

    def mouseReleaseEvent(self, e):
        self._drag_from = None
        super().mouseReleaseEvent(e)

    def mouseDoubleClickEvent(self, e):
        self.commands.send(MiniPlayerCommand.RESTORE)

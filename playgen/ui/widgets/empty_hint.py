from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QWidget, QLabel, QVBoxLayout


class EmptyHint(QWidget):
    """Centered headline + hint over the song table viewport."""
    def __init__(self, parent, text="No songs yet", hint=""):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self._label = QLabel(text)
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._label.setStyleSheet("font-size:15px; font-weight:600; background:transparent;")
        self._hint = QLabel(hint)
        self._hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._hint.setStyleSheet("font-size:13px; color:#9BA1A6; background:transparent;")

        lay = QVBoxLayout(self)
        lay.addStretch(1)
        lay.addWidget(self._label)
        lay.addWidget(self._hint)
        lay.addStretch(1)
        self.hide()

    def set_text(self, t, hint=""):
        self._label.setText(t)
        self._hint.setText(hint)
        self._hint.setVisible(bool(hint))

from PyQt6.QtCore import Qt, QPropertyAnimation, QEasingCurve, pyqtProperty
from PyQt6.QtWidgets import QWidget, QLabel, QProgressBar, QVBoxLayout
from PyQt6.QtGui import QPainter, QColor


class BusyOverlay(QWidget):
    """
    Dark veil over the window while a playlist import or export runs.

    The optional progress bar shows "done/total"; the veil stays mouse
    transparent so playback controls keep working underneath.
    """
    def __init__(self, parent, text="Working…"):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self.setAutoFillBackground(False)
        self._opacity = 0.0

        self._label = QLabel(text)
        self._label.setStyleSheet("font-size:16px; font-weight:600; background:transparent;")
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._bar = QProgressBar()
        self._bar.setFixedWidth(260)
        self._bar.hide()

        lay = QVBoxLayout(self)
        lay.addStretch(1)
        lay.addWidget(self._label)
        lay.addWidget(self._bar, 0, Qt.AlignmentFlag.AlignHCenter)
        lay.addStretch(1)
        self.hide()

    def set_text(self, t):
        self._label.setText(t)

    def set_progress(self, done: int, total: int):
        if total <= 0:
            self._bar.hide()
            return
        self._bar.setRange(0, total)
        self._bar.setValue(done)
        self._bar.setFormat(f"{done}/{total}")
        self._bar.show()

    def paintEvent(self, _):
        if self._opacity <= 0: return
        p = QPainter(self)
        p.fillRect(self.rect(), QColor(0, 0, 0, int(170 * self._opacity)))

    def _set_opacity(self, v):
        self._opacity = max(0.0, min(1.0, float(v)))
        self.update()

    def _get_opacity(self): return self._opacity
    opacity = pyqtProperty(float, fget=_get_opacity, fset=_set_opacity)

    def _animate(self, end: float, on_done=None):
        anim = QPropertyAnimation(self, b"opacity", self)
        anim.setDuration(180)
        anim.setStartValue(self._opacity)
        anim.setEndValue(end)
        anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        if on_done:
            anim.finished.connect(on_done)
        anim.start(QPropertyAnimation.DeletionPolicy.DeleteWhenStopped)

    def fade_in(self):
        self.raise_()
        self.show()
        self._animate(1.0)

    def fade_out(self):
        self._bar.hide()
        self._animate(0.0, self.hide)

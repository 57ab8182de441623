from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QSlider


class SeekSlider(QSlider):
    """
    Millisecond slider that jumps to the click point.

    `seek_requested(ms)` fires once per committed seek (click or drag release);
    `dragging` is True while the handle is held so position updates from the
    player don't fight the user.
    """
    seek_requested = pyqtSignal(int)

    def __init__(self, parent=None):
        super().__init__(Qt.Orientation.Horizontal, parent)
        self.setRange(0, 0)
        self.dragging = False
        self.sliderPressed.connect(self._on_pressed)
        self.sliderReleased.connect(self._on_released)

    def _on_pressed(self):
        self.dragging = True

    def _on_released(self):
        self.dragging = False
        self.seek_requested.emit(self.value())

    def set_position_ms(self, ms: int):
        if not self.dragging:
            self.setValue(ms)

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self.maximum() > 0:
            ratio = event.position().x() / max(1, self.width())
            val = int(self.minimum() + ratio * (self.maximum() - self.minimum()))
            self.setValue(val)
            self.seek_requested.emit(val)
            event.accept()
        super().mousePressEvent(event)

from PyQt6.QtWidgets import QLabel

from playgen.helpers.duration_utils import ms_to_mmss


class SongTimeLabel(QLabel):
    def __init__(self, parent=None):
        super().__init__("0:00 / 0:00", parent)
        self.setMinimumWidth(90)
        self._total_ms = 0

    def set_total_ms(self, ms: int):
        self._total_ms = max(0, int(ms))

    def set_position_ms(self, ms: int):
        self.setText(f"{ms_to_mmss(ms)} / {ms_to_mmss(self._total_ms)}")

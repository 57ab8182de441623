from PyQt6.QtCore import (
    QEasingCurve,
    QAbstractAnimation,
    QPropertyAnimation,
    pyqtSlot,
)

from playgen.helpers.constants import SEEK_STEP_SEC, STATUS_MSG_MS, VOLUME_STEP
from playgen.models.session import RepeatMode
from playgen.models.song import Song
from playgen.services.playback import PlaybackController, PlaybackState


class PlayerQueueMixin:
    """
    Handles:
      - Playing a song from the table
      - Play/pause, next, previous (delegated to PlaybackController)
      - Seek bar, time label, volume, mute
      - Shuffle / repeat buttons
      - Reacting to controller changes (labels, row highlight, mini-player)

    Expects the main window to provide:
      - widgets:
          self.table, self.seek, self.time_label
          self.playpause_btn, self.shuffle_btn, self.repeat_btn
          self.mute_btn, self.vol_slider
          self.now_title, self.now_channel, self.status
      - objects:
          self.playback: PlaybackController
          self.audio: QtAudioBackend
          self.mini: MiniPlayer
      - state:
          self.current_list: List[Song]
      - helpers:
          self._apply_search_now()
    """

    # ------------------------------------------------------------------
    # Starting playback
    # ------------------------------------------------------------------

    def _play_selected(self) -> None:
        row = self.table.currentRow()
        if row < 0 and self.table.rowCount() > 0:
            row = 0
        if 0 <= row < len(self.current_list):
            self._play_song(self.current_list[row])

    def _play_song(self, s: Song) -> None:
        if not self.playback.play(s):
            self.status.showMessage(f"Audio file not found: {s.title}", STATUS_MSG_MS)
            # list_songs() prunes the missing record on re-render
            self._apply_search_now()

    def _play_view(self, view: str) -> None:
        """▶ Play All: open the view and start from its first song."""
        if self.search_edit.text():
            self.search_edit.clear()
        if not self.playback.play_view(view):
            self.status.showMessage("Playlist is empty", STATUS_MSG_MS)
        self._select_view_in_sidebar(self.playback.view)
        self._apply_search_now()

    def _toggle_playpause(self) -> None:
        if self.playback.state != PlaybackState.IDLE:
            self.playback.toggle()
            return

        # Nothing loaded: resume the remembered song, else start the view
        s = self.playback.current_song
        if s is not None and self.store.song_path(s.id) is not None:
            self._play_song(s)
        elif self.current_list:
            self._play_song(self.current_list[0])

    def _next_song(self) -> None:
        self.playback.next()

    def _prev_song(self) -> None:
        self.playback.prev()

    # ------------------------------------------------------------------
    # Modes / volume
    # ------------------------------------------------------------------

    def _toggle_shuffle(self) -> None:
        self.playback.toggle_shuffle()
        self.status.showMessage("Shuffle on" if self.playback.shuffle else "Shuffle off", 1500)

    def _cycle_repeat(self) -> None:
        mode = self.playback.cycle_repeat_mode()
        self.status.showMessage(f"Repeat: {mode.value}", 1500)

    def _sync_mode_buttons(self) -> None:
        self.shuffle_btn.setChecked(self.playback.shuffle)
        mode = self.playback.repeat
        self.repeat_btn.setChecked(mode != RepeatMode.NONE)
        self.repeat_btn.setText({
            RepeatMode.NONE: "🔁",
            RepeatMode.ALL: "🔁 All",
            RepeatMode.ONE: "🔂 One",
        }[mode])

    def _on_volume_changed(self, value: int) -> None:
        """Slider → controller (which persists it)."""
        self.playback.set_volume(value / 100.0)

    def _nudge_volume(self, delta: float) -> None:
        self.playback.set_volume(self.playback.volume + delta)

    def _volume_up(self) -> None:
        self._nudge_volume(VOLUME_STEP)

    def _volume_down(self) -> None:
        self._nudge_volume(-VOLUME_STEP)

    def _toggle_mute(self) -> None:
        self.playback.toggle_mute()

    # ------------------------------------------------------------------
    # Seeking
    # ------------------------------------------------------------------

    def _on_seek_requested(self, ms: int) -> None:
        if self.playback.state != PlaybackState.IDLE:
            self.audio.seek(ms / 1000.0)

    def _seek_relative(self, seconds: float) -> None:
        if self.playback.state == PlaybackState.IDLE:
            return
        self.audio.seek(max(0.0, self.audio.position() + seconds))

    def _seek_forward(self) -> None:
        self._seek_relative(SEEK_STEP_SEC)

    def _seek_back(self) -> None:
        self._seek_relative(-SEEK_STEP_SEC)

    @pyqtSlot(int)
    def _on_pos_changed(self, pos_ms: int) -> None:
        self.seek.set_position_ms(pos_ms)
        self.time_label.set_position_ms(pos_ms)
        if self.mini.isVisible():
            self.mini.set_state(self.playback.snapshot())

    @pyqtSlot(int)
    def _on_duration_changed(self, dur_ms: int) -> None:
        dur_ms = max(0, dur_ms)
        self.seek.setRange(0, dur_ms)
        self.time_label.set_total_ms(dur_ms)
        self.time_label.set_position_ms(int(self.audio.position() * 1000))

    # ------------------------------------------------------------------
    # Controller listener
    # ------------------------------------------------------------------

    def _on_playback_changed(self, ctrl: PlaybackController) -> None:
        playing = ctrl.state == PlaybackState.PLAYING
        self.playpause_btn.setText("⏸" if playing else "▶")

        self.vol_slider.blockSignals(True)
        self.vol_slider.setValue(int(round(ctrl.volume * 100)))
        self.vol_slider.blockSignals(False)
        self.mute_btn.setText("🔇" if ctrl.volume <= 0 else "🔊")

        if ctrl.state == PlaybackState.IDLE:
            self.seek.set_position_ms(0)
            self.time_label.set_position_ms(0)

        self._sync_mode_buttons()
        self._refresh_now_playing()
        self.mini.set_state(ctrl.snapshot())
        self._highlight_playing_row(animated=playing)

    def _refresh_now_playing(self) -> None:
        s = self.playback.current_song
        self.now_title.setText(s.title if s else "Nothing playing")
        self.now_channel.setText(s.channel if s else "")

    # ------------------------------------------------------------------
    # Scrolling + row highlight
    # ------------------------------------------------------------------

    def _animate_scroll_to_row(self, row: int) -> None:
        if row < 0:
            return

        bar = self.table.verticalScrollBar()
        row_y = self.table.rowViewportPosition(row)
        row_h = self.table.rowHeight(row)
        view_h = self.table.viewport().height()
        if 0 <= row_y and row_y + row_h <= view_h:
            return  # already visible
        target_value = bar.value() + row_y - max(0, (view_h // 2 - row_h // 2))
        target_value = max(0, min(target_value, bar.maximum()))

        anim = QPropertyAnimation(bar, b"value", self)
        anim.setDuration(220)
        anim.setStartValue(bar.value())
        anim.setEndValue(target_value)
        anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        anim.start(QAbstractAnimation.DeletionPolicy.DeleteWhenStopped)

    def _highlight_playing_row(self, animated: bool = False) -> None:
        s = self.playback.current_song
        if animated and s is not None:
            row = next((i for i, x in enumerate(self.current_list) if x.id == s.id), -1)
            self._animate_scroll_to_row(row)
        self.table.viewport().update()

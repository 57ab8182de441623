from typing import List, Optional

from PyQt6.QtCore import Qt

from playgen.helpers.constants import VIEW_ALL
from playgen.models.song import Song
from playgen.services.queue_engine import songs_for_view


class StateMixin:
    """
    View identity and persisted settings.

    Session state (volume, shuffle, repeat, last view, last song) lives in the
    PlaybackController, which persists it itself. This mixin only mirrors it
    into widgets on startup and owns the user settings toggles.

    Expects:
        self.store, self.playback
        self.sidebar, self.vol_slider, self.shuffle_btn, self.act_mini_on_min
        self._refresh_now_playing(), self._sync_mode_buttons()
    """

    def _restore_state(self) -> None:
        self.vol_slider.blockSignals(True)
        self.vol_slider.setValue(int(round(self.playback.volume * 100)))
        self.vol_slider.blockSignals(False)

        settings = self.store.get_settings()
        self.act_mini_on_min.blockSignals(True)
        self.act_mini_on_min.setChecked(settings.mini_player_on_minimize)
        self.act_mini_on_min.blockSignals(False)

        self._select_view_in_sidebar(self.playback.view)
        self._sync_mode_buttons()
        self._refresh_now_playing()

    # ---------- view ----------
    def _current_view(self) -> str:
        return self.playback.view or VIEW_ALL

    def _current_playlist_id(self) -> Optional[str]:
        v = self._current_view()
        return None if v == VIEW_ALL else v

    def _view_songs(self) -> List[Song]:
        """Unfiltered songs of the current view (missing files pruned)."""
        return songs_for_view(self._current_view(), self.store.list_songs(), self.store.playlists())

    def _view_title(self) -> str:
        pid = self._current_playlist_id()
        if pid is None:
            return "All Songs"
        pl = self.store.get_playlist(pid)
        return pl.name if pl else "All Songs"

    def _select_view_in_sidebar(self, view: str) -> None:
        self.sidebar.blockSignals(True)
        try:
            for i in range(self.sidebar.count()):
                it = self.sidebar.item(i)
                if it.data(Qt.ItemDataRole.UserRole) == view:
                    self.sidebar.setCurrentRow(i)
                    break
        finally:
            self.sidebar.blockSignals(False)

    # ---------- settings ----------
    def _on_mini_on_minimize_toggled(self, on: bool) -> None:
        self.store.save_settings({"miniPlayerOnMinimize": bool(on)})
        self.status.showMessage(
            "Mini-player will open on minimize." if on else "Mini-player disabled on minimize.",
            2000,
        )

from typing import List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QInputDialog, QListWidgetItem, QMessageBox

from playgen.helpers.constants import STATUS_MSG_MS, VIEW_ALL
from playgen.helpers.ui_utils import confirm, themed_msg
from playgen.models.playlist import Playlist
from playgen.models.song import Song


class PlaylistsMixin:
    """
    Mixin for PlayGenMain:

    - Sidebar ("All Songs" + playlists) and the Playlists menu
    - Playlist create / rename / delete
    - Adding and removing songs

    Expects the main window to provide:
      - attributes:
          self.store, self.playback
          self.sidebar, self.m_playlists, self.status
      - methods:
          self._apply_search_now()
          self._select_view_in_sidebar(view)
          self._current_playlist_id()
          self._selected_songs()
          self._export_playlist(playlist_id)
    """

    # ------------------------------------------------------------------
    # Sidebar + menu
    # ------------------------------------------------------------------

    def _refresh_sidebar(self) -> None:
        self.sidebar.blockSignals(True)
        try:
            self.sidebar.clear()
            all_item = QListWidgetItem("♫  All Songs")
            all_item.setData(Qt.ItemDataRole.UserRole, VIEW_ALL)
            self.sidebar.addItem(all_item)
            for pl in self.store.playlists():
                it = QListWidgetItem(f"≡  {pl.name}")
                it.setData(Qt.ItemDataRole.UserRole, pl.id)
                it.setToolTip(f"{len(pl.songs)} song(s)")
                self.sidebar.addItem(it)
        finally:
            self.sidebar.blockSignals(False)
        self._select_view_in_sidebar(self.playback.view)
        self._rebuild_playlists_menu()

    def _rebuild_playlists_menu(self) -> None:
        """Keep the fixed actions at the top of the menu (new, export, separator)."""
        actions = self.m_playlists.actions()
        for act in actions[3:]:
            self.m_playlists.removeAction(act)

        for pl in self.store.playlists():
            self.m_playlists.addAction(
                QAction(pl.name, self, triggered=lambda _, pid=pl.id: self._open_view(pid))
            )

    def _on_sidebar_selected(self) -> None:
        it = self.sidebar.currentItem()
        if it is None:
            return
        self._open_view(it.data(Qt.ItemDataRole.UserRole))

    def _open_view(self, view: str) -> None:
        self.playback.set_view(view)
        self._select_view_in_sidebar(self.playback.view)
        self._apply_search_now()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def _ask_playlist_name(self, title: str, default: str = "") -> Optional[str]:
        name, ok = QInputDialog.getText(self, title, "Playlist name:", text=default)
        if not ok:
            return None
        name = name.strip()
        if not name:
            themed_msg(self, QMessageBox.Icon.Warning, title, "Playlist name cannot be empty.").exec()
            return None
        return name

    def _create_playlist(self, songs: Optional[List[Song]] = None) -> Optional[Playlist]:
        name = self._ask_playlist_name("New Playlist")
        if name is None:
            return None
        pl = self.store.create_playlist(name)
        for s in songs or []:
            self.store.add_to_playlist(pl.id, s.id)
        self._refresh_sidebar()
        self.status.showMessage(f"Created playlist: {pl.name}", STATUS_MSG_MS)
        return pl

    def _rename_playlist(self, playlist_id: str) -> None:
        pl = self.store.get_playlist(playlist_id)
        if pl is None:
            return
        name = self._ask_playlist_name("Rename Playlist", pl.name)
        if name is None or name == pl.name:
            return
        self.store.rename_playlist(playlist_id, name)
        self._refresh_sidebar()
        if self._current_playlist_id() == playlist_id:
            self._apply_search_now()
        self.status.showMessage(f"Renamed playlist to “{name}”.", STATUS_MSG_MS)

    def _delete_playlist(self, playlist_id: str) -> None:
        pl = self.store.get_playlist(playlist_id)
        if pl is None:
            return
        if not confirm(self, "Delete playlist", f"Delete playlist “{pl.name}”?\nSongs stay in the library."):
            return
        was_current = self._current_playlist_id() == playlist_id
        self.playback.delete_playlist(playlist_id)
        self._refresh_sidebar()
        if was_current:
            self._apply_search_now()
        self.status.showMessage(f"Deleted playlist: {pl.name}", STATUS_MSG_MS)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def _add_songs_to_playlist(self, songs: List[Song], playlist_id: str) -> None:
        pl = self.store.get_playlist(playlist_id)
        if pl is None:
            return
        added = 0
        for s in songs:
            if s.id not in pl.songs:
                self.store.add_to_playlist(playlist_id, s.id)
                added += 1
        skipped = len(songs) - added
        msg = f"Added {added} song(s) to {pl.name}"
        if skipped:
            msg += f" ({skipped} already there)"
        self.status.showMessage(msg, STATUS_MSG_MS)
        self._refresh_sidebar()
        if self._current_playlist_id() == playlist_id:
            self._apply_search_now()

    def _remove_selected_from_current_playlist(self) -> None:
        pid = self._current_playlist_id()
        if pid is None:
            return
        songs = self._selected_songs()
        if not songs:
            themed_msg(self, QMessageBox.Icon.Information, "Nothing selected",
                       "Select one or more rows to remove.").exec()
            return
        for s in songs:
            self.store.remove_from_playlist(pid, s.id)
        self.status.showMessage(f"Removed {len(songs)} song(s) from playlist.", STATUS_MSG_MS)
        self._refresh_sidebar()
        self._apply_search_now()

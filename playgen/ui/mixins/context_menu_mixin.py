from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QMenu

from playgen.helpers.constants import VIEW_ALL
from playgen.ui.theme import PlayGenTheme


class ContextMenuMixin:
    def _add_to_playlist_submenu(self, menu: QMenu, songs) -> None:
        submenu = menu.addMenu("Add to Playlist…")
        playlists = self.store.playlists()
        if playlists:
            for pl in playlists:
                submenu.addAction(QAction(pl.name, self,
                                          triggered=lambda _, pid=pl.id: self._add_songs_to_playlist(songs, pid)))
        else:
            dummy = QAction("(No playlists yet)", self)
            dummy.setEnabled(False)
            submenu.addAction(dummy)
        submenu.addSeparator()
        submenu.addAction(QAction("New Playlist…", self, triggered=lambda: self._create_playlist(songs)))

    def _table_context_menu(self, pos):
        row = self.table.rowAt(pos.y())
        if row < 0 or row >= len(self.current_list):
            return
        songs = self._selected_songs()
        clicked = self.current_list[row]
        if clicked not in songs:
            songs = [clicked]

        menu = QMenu(self)
        menu.setStyleSheet(PlayGenTheme.stylesheet())
        menu.addAction(QAction("▶ Play", self, triggered=lambda: self._play_song(clicked)))
        self._add_to_playlist_submenu(menu, songs)

        pid = self._current_playlist_id()
        if pid is not None:
            menu.addAction(QAction("Remove from this Playlist", self,
                                   triggered=self._remove_selected_from_current_playlist))

        menu.addSeparator()
        menu.addAction(QAction("🗑 Delete from Library", self, triggered=lambda: self._delete_songs(songs)))
        menu.exec(self.table.viewport().mapToGlobal(pos))

    def _sidebar_context_menu(self, pos):
        item = self.sidebar.itemAt(pos)
        if not item:
            return
        view = item.data(Qt.ItemDataRole.UserRole)

        menu = QMenu(self)
        menu.setStyleSheet(PlayGenTheme.stylesheet())
        menu.addAction(QAction("▶ Play All", self, triggered=lambda: self._play_view(view)))
        menu.addAction(QAction("Open", self, triggered=lambda: self._open_view(view)))
        if view != VIEW_ALL:
            menu.addAction(QAction("Rename…", self, triggered=lambda: self._rename_playlist(view)))
            menu.addAction(QAction("Export to Folder…", self, triggered=lambda: self._export_playlist(view)))
            menu.addSeparator()
            menu.addAction(QAction("Delete Playlist", self, triggered=lambda: self._delete_playlist(view)))
        else:
            menu.addAction(QAction("New Playlist…", self, triggered=lambda: self._create_playlist()))
        menu.exec(self.sidebar.mapToGlobal(pos))

    def _player_context_menu(self, pos):
        s = self.playback.current_song
        if s is None:
            return
        menu = QMenu(self)
        menu.setStyleSheet(PlayGenTheme.stylesheet())
        self._add_to_playlist_submenu(menu, [s])
        menu.exec(self.sender().mapToGlobal(pos))

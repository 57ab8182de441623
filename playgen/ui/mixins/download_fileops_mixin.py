from pathlib import Path
from typing import List, Optional

from loguru import logger
from PyQt6.QtCore import QUrl, pyqtSlot
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtWidgets import QFileDialog, QMessageBox

from playgen.helpers.constants import DOWNLOADS_DIR, STATUS_MSG_MS
from playgen.helpers.ui_utils import confirm, themed_msg
from playgen.helpers.url_utils import canonical_video_url, extract_playlist_id, extract_video_id
from playgen.models.download import DownloadOutcome, DownloadProgress, PlaylistListing
from playgen.models.song import Song
from playgen.services.errors import InvalidURLError
from playgen.services.export import export_playlist
from playgen.services.playlist_import import ImportBatch


class DownloadFileOpsMixin:
    """
    Mixin for PlayGenMain:

    - Single downloads from the URL box
    - Playlist import (resolve, download each, then build the playlist)
    - Download progress + finished-download handling
    - Deleting songs, opening the downloads folder, exporting playlists

    Expects the main window to provide:

      Attributes:
        self.dlm            # DownloadManager
        self.store          # LibraryStore
        self.playback       # PlaybackController
        self.url_edit, self.dl_progress, self.dl_status, self.status
        self._import        # Optional[ImportBatch]

      Methods:
        self._set_busy(on, text, done, total)
        self._apply_search_now()
        self._refresh_sidebar()
        self._current_playlist_id()
    """

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def _submit_url(self) -> None:
        """Download button / Enter in the URL box."""
        url = self.url_edit.text().strip()
        if not url:
            return

        if extract_video_id(url):
            self._download_one(url)
        elif extract_playlist_id(url):
            self._import_playlist(url)
        else:
            themed_msg(self, QMessageBox.Icon.Warning, "Invalid link", "Invalid YouTube URL").exec()
            return
        self.url_edit.clear()

    def _download_one(self, url: str) -> None:
        try:
            url = canonical_video_url(url)
        except InvalidURLError as e:
            themed_msg(self, QMessageBox.Icon.Warning, "Invalid link", str(e)).exec()
            return

        self.dlm.enqueue(url)
        self.dl_status.setText("Starting download…")
        self.dl_progress.setValue(0)
        self.dl_progress.show()
        self.status.showMessage(f"Queued: {url}", STATUS_MSG_MS)

    def _import_playlist(self, url: str) -> None:
        if self._import is not None:
            themed_msg(self, QMessageBox.Icon.Information, "Import running",
                       "A playlist import is already in progress.").exec()
            return
        self.dlm.resolve_playlist(url)
        self._set_busy(True, "Reading playlist…")

    # ------------------------------------------------------------------
    # DownloadManager signals
    # ------------------------------------------------------------------

    @pyqtSlot(object)
    def _dl_progress(self, ev: DownloadProgress) -> None:
        self.dl_progress.show()
        self.dl_progress.setValue(int(ev.percent))
        self.dl_status.setText(f"Downloading: {ev.title}  {ev.percent:.0f}%")

    @pyqtSlot(str, object, str)
    def _on_playlist_resolved(self, url: str, listing: Optional[PlaylistListing], error: str) -> None:
        if listing is None:
            self._set_busy(False)
            themed_msg(self, QMessageBox.Icon.Critical, "Playlist import failed", error or "Unknown error").exec()
            return

        batch = ImportBatch(listing)
        self._import = batch
        logger.info(f"Importing playlist '{batch.name}' with {batch.total} video(s)")
        self._set_busy(True, f"Importing “{batch.name}”…", 0, batch.total)
        self._import_next(batch)

    def _import_next(self, batch: ImportBatch) -> None:
        url = batch.next_url()
        if url is not None:
            self.dlm.enqueue(url)

    @pyqtSlot(object)
    def _on_file_ready(self, outcome: DownloadOutcome) -> None:
        batch = self._import
        if batch is not None and batch.record(outcome):
            self._set_busy(True, f"Importing “{batch.name}”…", len(batch.outcomes), batch.total)
            if batch.done:
                self._finish_import(batch)
            else:
                self._import_next(batch)
        elif outcome.ok:
            self.status.showMessage(f"Downloaded: {outcome.song.title}", STATUS_MSG_MS)
        elif outcome.duplicate:
            self.status.showMessage(f"Song already downloaded: {outcome.song.title}", STATUS_MSG_MS)
        else:
            box = themed_msg(self, QMessageBox.Icon.Critical, "Download failed", outcome.error or "Unknown error")
            if outcome.details:
                box.setDetailedText(outcome.details)
            box.exec()

        if not self.dlm.is_busy():
            self.dl_progress.hide()
            self.dl_status.setText("")
        if outcome.ok:
            self._apply_search_now()

    def _finish_import(self, batch: ImportBatch) -> None:
        self._import = None
        res = batch.summary()

        pl = self.store.create_playlist(batch.name)
        for sid in res.song_ids:
            self.store.add_to_playlist(pl.id, sid)

        self._set_busy(False)
        self._refresh_sidebar()
        self._apply_search_now()
        logger.info(f"Import of '{batch.name}' finished: {res.message}")
        themed_msg(self, QMessageBox.Icon.Information, f"Imported “{pl.name}”", res.message).exec()

    # ------------------------------------------------------------------
    # Delete / folder / export
    # ------------------------------------------------------------------

    def _delete_songs(self, songs: List[Song]) -> None:
        if not songs:
            return
        text = (f"Delete “{songs[0].title}” from the library and disk?" if len(songs) == 1
                else f"Delete {len(songs)} songs from the library and disk?")
        if not confirm(self, "Delete song", text):
            return

        for s in songs:
            # stop first so the player releases the file
            self.playback.forget_song(s.id)
            self.store.remove_song(s.id)
        self.status.showMessage(f"Deleted {len(songs)} song(s).", STATUS_MSG_MS)
        self._apply_search_now()

    def _open_downloads_folder(self) -> None:
        DOWNLOADS_DIR.mkdir(parents=True, exist_ok=True)
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(str(DOWNLOADS_DIR))):
            self.status.showMessage(f"Could not open {DOWNLOADS_DIR}", STATUS_MSG_MS)

    def _export_playlist(self, playlist_id: Optional[str] = None) -> None:
        pid = playlist_id or self._current_playlist_id()
        pl = self.store.get_playlist(pid) if pid else None
        if pl is None:
            themed_msg(self, QMessageBox.Icon.Information, "Export",
                       "Open a playlist to export it.").exec()
            return

        dest = QFileDialog.getExistingDirectory(self, f"Export “{pl.name}” to…")
        if not dest:
            return

        self._set_busy(True, f"Exporting “{pl.name}”…")
        try:
            res = export_playlist(self.store, pl.id, Path(dest))
        except OSError as e:
            logger.error(f"Export of {pl.name} failed: {e}")
            themed_msg(self, QMessageBox.Icon.Critical, "Export failed", str(e)).exec()
            return
        finally:
            self._set_busy(False)

        icon = QMessageBox.Icon.Information if not res.failed else QMessageBox.Icon.Warning
        box = themed_msg(self, icon, "Export finished",
                         f"Copied {res.copied} song(s) to\n{res.folder}\n\nFailed: {res.failed}")
        if res.failures:
            box.setDetailedText("Not exported:\n" + "\n".join(res.failures))
        box.exec()

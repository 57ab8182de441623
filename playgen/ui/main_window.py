from typing import List, Optional

# QT
from PyQt6.QtCore import Qt, QTimer, QEvent
from PyQt6.QtGui import QAction, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QLabel, QListWidget, QLineEdit,
    QHeaderView, QSplitter, QSlider, QProgressBar
)

# helpers -- constants
from playgen.helpers.constants import (
    APP_MIN_HEIGHT,
    APP_MIN_WIDTH,
    APP_NAME,
    APP_WINDOW_HEIGHT,
    APP_WINDOW_WIDTH,
    SEARCH_DEBOUNCE_MS,
)

# io
from playgen.io.library_store import LibraryStore

# models
from playgen.models.song import Song

# services
from playgen.services.audio import QtAudioBackend
from playgen.services.dependencies import check_dependencies
from playgen.services.download import DownloadManager
from playgen.services.downloader import DownloadOrchestrator
from playgen.services.playback import PlaybackController

# signals
from playgen.signals.mini_player import CommandChannel, MiniPlayerCommand

# UI -- theme
from playgen.ui.theme import PlayGenTheme

# UI -- widgets
from playgen.ui.mini_player import MiniPlayer
from playgen.ui.widgets.busy_overlay import BusyOverlay
from playgen.ui.widgets.current_song_highlighter import NowPlayingRowDelegate
from playgen.ui.widgets.empty_hint import EmptyHint
from playgen.ui.widgets.seek_bar import SeekSlider
from playgen.ui.widgets.song_table import SongTable
from playgen.ui.widgets.song_time import SongTimeLabel

# UI -- mixins
from playgen.ui.mixins.state_mixin import StateMixin
from playgen.ui.mixins.search_table_mixin import SearchTableMixin
from playgen.ui.mixins.playlists_mixin import PlaylistsMixin
from playgen.ui.mixins.player_queue_mixin import PlayerQueueMixin
from playgen.ui.mixins.download_fileops_mixin import DownloadFileOpsMixin
from playgen.ui.mixins.busy_mixin import BusyMixin
from playgen.ui.mixins.context_menu_mixin import ContextMenuMixin


class PlayGenMain(
    QMainWindow,
    StateMixin,
    SearchTableMixin,
    PlaylistsMixin,
    PlayerQueueMixin,
    DownloadFileOpsMixin,
    BusyMixin,
    ContextMenuMixin,
):
    def __init__(self, store: Optional[LibraryStore] = None):
        super().__init__()

        self._setup_app_window()

        # --- Data/state in memory -------------------------------------------------
        self.store = store or LibraryStore()
        self.current_list: List[Song] = []
        self._import = None

        # Typing debounce for search
        self._type_debounce = QTimer(self)
        self._type_debounce.setInterval(SEARCH_DEBOUNCE_MS)
        self._type_debounce.setSingleShot(True)
        self._type_debounce.timeout.connect(self._apply_search_now)

        # Incremental table-population state
        self._populate_timer: Optional[QTimer] = None
        self._populate_source: List[Song] = []
        self._populate_index: int = 0
        self._populate_gen: int = 0

        # --- Downloads: fully off GUI thread ---------------------------------------
        self.orchestrator = DownloadOrchestrator(self.store)
        self.dlm = DownloadManager(self.orchestrator, self)
        self.dlm.file_ready.connect(self._on_file_ready)
        self.dlm.progress.connect(self._dl_progress)
        self.dlm.playlist_resolved.connect(self._on_playlist_resolved)

        # --- Player ----------------------------------------------------------------
        self.audio = QtAudioBackend(self)
        self.playback = PlaybackController(self.store, self.audio)
        self.audio.finished.connect(self.playback.on_track_finished)
        self.audio.position_changed.connect(self._on_pos_changed)
        self.audio.duration_changed.connect(self._on_duration_changed)

        # --- Mini-player + command relay -------------------------------------------
        self.commands = CommandChannel()
        self.commands.register(MiniPlayerCommand.RESTORE, self._restore_from_mini)
        self.commands.register(MiniPlayerCommand.CLOSE, self._close_mini)
        self.commands.register(MiniPlayerCommand.TOGGLE_PLAY, self._toggle_playpause)
        self.commands.register(MiniPlayerCommand.NEXT, self._next_song)
        self.commands.register(MiniPlayerCommand.PREV, self._prev_song)
        self.mini = MiniPlayer(self.commands)

        self.busy = BusyOverlay(self, "Working…")

        # --- Build UI and restore persisted state ----------------------------------
        self._build_ui()
        self._bind_shortcuts()
        self.playback.subscribe(self._on_playback_changed)
        self._refresh_sidebar()
        self._restore_state()
        self._check_dependencies()

        self._apply_search_now()

    def _setup_app_window(self) -> None:
        self.setWindowTitle(APP_NAME)
        self.resize(APP_WINDOW_WIDTH, APP_WINDOW_HEIGHT)
        self.setMinimumSize(APP_MIN_WIDTH, APP_MIN_HEIGHT)
        self.setStyleSheet(PlayGenTheme.stylesheet())

    # ---------- UI ----------
    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        # ---------- Left column: library + playlists ----------
        self.sidebar = QListWidget()
        self.sidebar.setObjectName("sidebar")
        self.sidebar.itemSelectionChanged.connect(self._on_sidebar_selected)
        self.sidebar.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.sidebar.customContextMenuRequested.connect(self._sidebar_context_menu)

        new_pl_btn = QPushButton("＋ New Playlist")
        new_pl_btn.clicked.connect(lambda: self._create_playlist())

        left = QVBoxLayout()
        lab = QLabel("Library"); lab.setStyleSheet("font-weight:600;")
        left.addWidget(lab)
        left.addWidget(self.sidebar, 1)
        left.addWidget(new_pl_btn)
        left_box = QWidget(); left_box.setLayout(left)

        # ---------- Right column ----------
        self.dep_banner = QLabel("")
        self.dep_banner.setObjectName("depBanner")
        self.dep_banner.setWordWrap(True)
        self.dep_banner.hide()

        # Download row
        self.url_edit = QLineEdit()
        self.url_edit.setPlaceholderText("Paste a YouTube video or playlist link…")
        self.url_edit.setClearButtonEnabled(True)
        self.url_edit.returnPressed.connect(self._submit_url)
        self.download_btn = QPushButton("⬇ Download")
        self.download_btn.clicked.connect(self._submit_url)
        self.dl_progress = QProgressBar()
        self.dl_progress.setRange(0, 100)
        self.dl_progress.setFixedWidth(160)
        self.dl_progress.hide()

        dl_line = QHBoxLayout()
        dl_line.addWidget(self.url_edit, 1)
        dl_line.addWidget(self.download_btn)
        dl_line.addWidget(self.dl_progress)
        dl_box = QWidget(); dl_box.setLayout(dl_line)

        # View title + search
        self.view_label = QLabel("All Songs")
        self.view_label.setStyleSheet("font-weight:700; font-size:18px;")
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search title / channel…")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.setFixedWidth(280)
        self.search_edit.textChanged.connect(lambda _: self._type_debounce.start())

        head_line = QHBoxLayout()
        self.play_all_btn = QPushButton("▶ Play All")
        self.play_all_btn.clicked.connect(lambda: self._play_view(self.playback.view))

        head_line.addWidget(self.view_label, 1)
        head_line.addWidget(self.play_all_btn)
        head_line.addWidget(self.search_edit)
        head_box = QWidget(); head_box.setLayout(head_line)

        # Song table
        self.table = SongTable(0, 5)
        self.table.setHorizontalHeaderLabels(["#", "Title", "Channel", "Duration", "Added"])
        self.table.setShowGrid(False)
        self.table.verticalHeader().setVisible(False)
        hh = self.table.horizontalHeader()
        hh.setSectionResizeMode(self.COL_NUM,      QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(self.COL_TITLE,    QHeaderView.ResizeMode.Stretch)
        hh.setSectionResizeMode(self.COL_CHANNEL,  QHeaderView.ResizeMode.Interactive)
        hh.setSectionResizeMode(self.COL_DURATION, QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(self.COL_ADDED,    QHeaderView.ResizeMode.ResizeToContents)
        self.table.setColumnWidth(self.COL_CHANNEL, 220)
        self.table.doubleClicked.connect(self._play_selected)
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._table_context_menu)
        self.table.reorder_requested.connect(self._on_reorder_requested)
        self.table.setMouseTracking(True)

        self.row_delegate = NowPlayingRowDelegate(self)
        self.table.setItemDelegate(self.row_delegate)
        self.table.setStyleSheet(self.table.styleSheet() + " QTableWidget::item { padding: 6px; } ")

        self.empty_hint = EmptyHint(self.table.viewport())
        self.table.viewport().installEventFilter(self)

        # ---------- Player bar ----------
        self.now_title = QLabel("Nothing playing")
        self.now_title.setStyleSheet("font-weight:600;")
        self.now_channel = QLabel("")
        self.now_channel.setProperty("muted", True)
        now_box = QWidget()
        now_lay = QVBoxLayout(now_box)
        now_lay.setContentsMargins(0, 0, 0, 0)
        now_lay.addWidget(self.now_title)
        now_lay.addWidget(self.now_channel)
        now_box.setFixedWidth(260)
        now_box.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        now_box.customContextMenuRequested.connect(self._player_context_menu)

        self.shuffle_btn = QPushButton("🔀")
        self.shuffle_btn.setCheckable(True)
        self.shuffle_btn.setToolTip("Shuffle")
        self.prev_btn = QPushButton("⏮")
        self.playpause_btn = QPushButton("▶")
        self.playpause_btn.setObjectName("playButton")
        self.next_btn = QPushButton("⏭")
        self.repeat_btn = QPushButton("🔁")
        self.repeat_btn.setCheckable(True)
        self.repeat_btn.setToolTip("Repeat: none → all → one")

        self.shuffle_btn.clicked.connect(lambda _: self._toggle_shuffle())
        self.prev_btn.clicked.connect(self._prev_song)
        self.playpause_btn.clicked.connect(self._toggle_playpause)
        self.next_btn.clicked.connect(self._next_song)
        self.repeat_btn.clicked.connect(lambda _: self._cycle_repeat())

        self.seek = SeekSlider()
        self.seek.seek_requested.connect(self._on_seek_requested)
        self.time_label = SongTimeLabel()

        self.mute_btn = QPushButton("🔊")
        self.mute_btn.clicked.connect(self._toggle_mute)
        self.vol_slider = QSlider(Qt.Orientation.Horizontal)
        self.vol_slider.setRange(0, 100)
        self.vol_slider.setFixedWidth(120)
        self.vol_slider.valueChanged.connect(self._on_volume_changed)

        ctrl_line = QHBoxLayout()
        ctrl_line.addWidget(now_box)
        for w in (self.shuffle_btn, self.prev_btn, self.playpause_btn, self.next_btn, self.repeat_btn):
            ctrl_line.addWidget(w)
        ctrl_line.addWidget(self.seek, 1)
        ctrl_line.addWidget(self.time_label)
        ctrl_line.addWidget(self.mute_btn)
        ctrl_line.addWidget(self.vol_slider)
        ctrl_box = QWidget(); ctrl_box.setLayout(ctrl_line)

        # Assemble right column
        right = QVBoxLayout()
        right.addWidget(self.dep_banner)
        right.addWidget(dl_box)
        right.addWidget(head_box)
        right.addWidget(self.table, 1)
        right_box = QWidget(); right_box.setLayout(right)

        split = QSplitter()
        split.addWidget(left_box)
        split.addWidget(right_box)
        split.setSizes([240, 1040])

        lay = QVBoxLayout(central)
        lay.addWidget(split, 1)
        lay.addWidget(ctrl_box)

        # Status bar
        self.status = self.statusBar()
        self.dl_status = QLabel("")
        self.status.addPermanentWidget(self.dl_status)

        # Menus
        menubar = self.menuBar()
        m_file = menubar.addMenu("&File")
        m_file.setStyleSheet(PlayGenTheme.stylesheet())
        m_file.addAction(QAction("Download from URL", self, triggered=lambda: self.url_edit.setFocus()))
        m_file.addAction(QAction("Open Downloads Folder", self, triggered=self._open_downloads_folder))
        m_file.addSeparator()
        m_file.addAction(QAction("Exit", self, triggered=self.close))

        self.m_playlists = menubar.addMenu("&Playlists")
        self.m_playlists.setStyleSheet(PlayGenTheme.stylesheet())
        self.m_playlists.addAction(QAction("New Playlist…", self, triggered=lambda: self._create_playlist()))
        self.m_playlists.addAction(QAction("Export Current Playlist…", self, triggered=lambda: self._export_playlist()))
        self.m_playlists.addSeparator()

        m_settings = menubar.addMenu("&Settings")
        m_settings.setStyleSheet(PlayGenTheme.stylesheet())
        self.act_mini_on_min = QAction("Show Mini-Player on Minimize", self, checkable=True)
        self.act_mini_on_min.toggled.connect(self._on_mini_on_minimize_toggled)
        m_settings.addAction(self.act_mini_on_min)

    def _bind_shortcuts(self) -> None:
        bindings = (
            ("Space", self._toggle_playpause),
            ("Ctrl+Right", self._next_song),
            ("Ctrl+Left", self._prev_song),
            ("Right", self._seek_forward),
            ("Left", self._seek_back),
            ("Up", self._volume_up),
            ("Down", self._volume_down),
            ("S", self._toggle_shuffle),
            ("R", self._cycle_repeat),
            ("Ctrl+F", self._focus_search),
        )
        self._shortcuts = []
        for keys, fn in bindings:
            sc = QShortcut(QKeySequence(keys), self)
            sc.setContext(Qt.ShortcutContext.WindowShortcut)
            sc.activated.connect(fn)
            self._shortcuts.append(sc)

    def _check_dependencies(self) -> None:
        deps = check_dependencies()
        missing = []
        if not deps["ytdlp"]:
            missing.append("yt-dlp (pip install yt-dlp)")
        if not deps["ffmpeg"]:
            missing.append("ffmpeg (install it or set PLAYGEN_FFMPEG)")
        if missing:
            self.dep_banner.setText("⚠ Downloads need: " + ", ".join(missing))
            self.dep_banner.show()

    # ---------- mini-player ----------
    def _restore_from_mini(self) -> None:
        self.mini.hide()
        self.showNormal()
        self.raise_()
        self.activateWindow()

    def _close_mini(self) -> None:
        self.mini.hide()

    def changeEvent(self, e):
        if e.type() == QEvent.Type.WindowStateChange:
            if self.isMinimized() and self.store.get_settings().mini_player_on_minimize:
                self.mini.set_state(self.playback.snapshot())
                self.mini.show()
            elif not self.isMinimized():
                self.mini.hide()
        super().changeEvent(e)

    # ---------- Event filter for overlays ----------
    def eventFilter(self, obj, event):
        if obj is self.table.viewport():
            if event.type() in (QEvent.Type.Resize, QEvent.Type.Show):
                self.empty_hint.resize(self.table.viewport().size())
        return super().eventFilter(obj, event)

    def resizeEvent(self, e):
        super().resizeEvent(e)
        busy = getattr(self, "busy", None)
        if busy: busy.setGeometry(self.rect())

    def closeEvent(self, e):
        self.playback.persist_session()
        self.dlm.shutdown()
        self.audio.stop()
        self.mini.close()
        super().closeEvent(e)

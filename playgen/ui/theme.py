from __future__ import annotations

from textwrap import dedent

class PlayGenTheme:
    # Core palette
    HOVER      = "#2B2F3A"   # hover/selected bg (used by delegate)
    ACCENT     = "#E5484D"   # play button, progress chunk, active view
    BORDER     = "#2A2D36"
    TEXT       = "#ECEDEE"   # primary text
    TEXT_MUTED = "#9BA1A6"

    # Now-playing row
    HILITE_ROW  = "#3A1F24"
    HILITE_BAR  = "#E5484D"
    HILITE_TEXT = "#FFFFFF"

    BG_MAIN    = "#101114"
    BG_SIDEBAR = "#16181D"
    BG_INPUT   = "#1C1E24"
    BG_MENU    = "#16181D"
    BG_HEADER  = "#1C1E24"
    BG_BANNER  = "#4A3410"   # missing-dependency warning

    BTN_BG     = "#23262E"
    BTN_BORDER = "#30333D"
    BTN_HOVER  = "#2D313B"

    @staticmethod
    def stylesheet() -> str:
        c = PlayGenTheme
        return dedent(f"""
            * {{
                color: {c.TEXT};
            }}
            QWidget {{
                background: {c.BG_MAIN};
            }}
            QLabel:disabled {{
                color: {c.TEXT_MUTED};
            }}
            QLabel[muted="true"] {{
                color: {c.TEXT_MUTED};
            }}

            /* sidebar */
            QListWidget#sidebar {{
                background: {c.BG_SIDEBAR};
                border: 0px;
                padding: 4px;
            }}
            QListWidget#sidebar::item {{
                padding: 6px 8px;
                border-radius: 6px;
            }}
            QListWidget#sidebar::item:selected {{
                background: {c.HOVER};
                color: {c.ACCENT};
            }}

            /* inputs */
            QLineEdit {{
                background: {c.BG_INPUT};
                border: 1px solid {c.BORDER};
                border-radius: 8px;
                padding: 6px;
            }}
            QLineEdit:focus {{
                border-color: {c.ACCENT};
            }}

            /* buttons */
            QPushButton, QToolButton {{
                background: {c.BTN_BG};
                border: 1px solid {c.BTN_BORDER};
                border-radius: 10px;
                padding: 6px 12px;
            }}
            QPushButton:hover, QToolButton:hover {{
                background: {c.BTN_HOVER};
            }}
            QPushButton:checked, QToolButton:checked {{
                color: {c.ACCENT};
                border-color: {c.ACCENT};
            }}
            QPushButton#playButton {{
                background: {c.ACCENT};
                border: 0px;
                border-radius: 16px;
                min-width: 32px;
                min-height: 32px;
            }}
            QPushButton:disabled {{
                color: {c.TEXT_MUTED};
                border-color: {c.BORDER};
            }}

            /* menus / message boxes */
            QMenu {{
                background: {c.BG_MENU};
                border: 1px solid {c.BORDER};
            }}
            QMenu::item:selected {{
                background: {c.HOVER};
            }}

            /* song table */
            QTableWidget {{
                gridline-color: {c.BORDER};
                selection-background-color: {c.HOVER};
                selection-color: {c.TEXT};
                border: 0px;
            }}
            QHeaderView::section {{
                background: {c.BG_HEADER};
                border: 0px;
                padding: 6px;
                border-right: 1px solid {c.BORDER};
            }}

            /* sliders */
            QSlider::groove:horizontal {{
                height: 4px;
                background: {c.BORDER};
                border-radius: 2px;
            }}
            QSlider::sub-page:horizontal {{
                background: {c.ACCENT};
                border-radius: 2px;
            }}
            QSlider::handle:horizontal {{
                background: {c.TEXT};
                width: 10px;
                margin: -4px 0;
                border-radius: 5px;
            }}

            /* download progress */
            QProgressBar {{
                background: {c.BG_INPUT};
                border: 1px solid {c.BORDER};
                border-radius: 6px;
                text-align: center;
            }}
            QProgressBar::chunk {{
                background-color: {c.ACCENT};
            }}

            /* dependency banner */
            QLabel#depBanner {{
                background: {c.BG_BANNER};
                padding: 6px 10px;
                border-radius: 6px;
            }}

            /* mini player */
            QWidget#miniPlayer {{
                background: {c.BG_SIDEBAR};
                border: 1px solid {c.BORDER};
                border-radius: 12px;
            }}
        """)

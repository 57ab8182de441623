import sys

from loguru import logger
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QGuiApplication
from PyQt6.QtWidgets import QApplication

from playgen.helpers.constants import APP_NAME, LOG_FILE, LOG_LEVEL, ensure_data_dirs
from playgen.helpers.file_utils import delete_part_files
from playgen.helpers.logging_utils import setup_logging
from playgen.ui.main_window import PlayGenMain


def main():
    ensure_data_dirs()
    setup_logging(LOG_FILE, LOG_LEVEL)
    logger.info(f"Starting {APP_NAME}")

    # yt-dlp leftovers from an interrupted session
    delete_part_files()

    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    win = PlayGenMain()
    win.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()

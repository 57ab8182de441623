import sys
from pathlib import Path

from loguru import logger


def setup_logging(log_file: Path, level: str = "INFO") -> None:
    """
    Configure loguru: rotating file sink in the data folder, and warnings
    and above on stderr for whoever launched the app from a terminal.
    """
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=True,  # download workers log from their own threads
    )
    logger.add(sys.stderr, level="WARNING", format="{level}: {message}")

    logger.info(f"Logging initialized: {log_file} (level={level})")

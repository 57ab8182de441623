import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

from playgen.helpers.file_utils import export_basename, safe_filename
from playgen.io.library_store import LibraryStore


@dataclass
class ExportResult:
    folder: Optional[Path]
    copied: int = 0
    failed: int = 0
    failures: List[str] = field(default_factory=list)


def _unique_target(folder: Path, name: str, taken: set) -> Path:
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    candidate = name
    n = 2
    while candidate.lower() in taken or (folder / candidate).exists():
        candidate = f"{stem} ({n}).{ext}" if ext else f"{stem} ({n})"
        n += 1
    taken.add(candidate.lower())
    return folder / candidate


def export_playlist(store: LibraryStore, playlist_id: str, dest_dir: Path) -> ExportResult:
    """
    Copy a playlist's audio files into `<dest_dir>/<playlist name>/`.

    Files are named "NN - Title.mp3" by playlist position. A song whose
    record or file is missing counts as failed; the batch always runs to
    the end.
    """
    pl = store.get_playlist(playlist_id)
    if pl is None:
        raise ValueError(f"Unknown playlist: {playlist_id}")

    folder = Path(dest_dir) / (safe_filename(pl.name) or "Playlist")
    folder.mkdir(parents=True, exist_ok=True)
    logger.info(f"Exporting playlist '{pl.name}' ({len(pl.songs)} songs) to {folder}")

    result = ExportResult(folder=folder)
    taken: set = set()
    for pos, song_id in enumerate(pl.songs, start=1):
        song = store.get_song(song_id)
        src = store.song_path(song_id)
        if song is None or src is None:
            logger.warning(f"Export skipped {song_id}: audio file not found")
            result.failed += 1
            result.failures.append(song.title if song else song_id)
            continue

        target = _unique_target(folder, export_basename(pos, song.title), taken)
        try:
            shutil.copy2(src, target)
            result.copied += 1
        except OSError as e:
            logger.warning(f"Export failed for {song.title}: {e}")
            result.failed += 1
            result.failures.append(song.title)

    logger.info(f"Export done: copied={result.copied} failed={result.failed}")
    return result

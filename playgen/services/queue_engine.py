"""
Play-queue construction and playlist drag-reorder arithmetic.

Nothing here touches the store or Qt; callers hand in the song and playlist
lists they already hold.
"""

import random
from typing import List, Optional, Sequence

from playgen.helpers.constants import VIEW_ALL
from playgen.models.playlist import Playlist
from playgen.models.song import Song


def songs_for_view(view: str, songs: Sequence[Song], playlists: Sequence[Playlist]) -> List[Song]:
    """
    Songs visible in a view, unshuffled.

    "all" is the whole library in store order. A playlist id maps the
    playlist's ids to songs, silently dropping ids that no longer resolve.
    An unknown playlist falls back to the whole library.
    """
    if view == VIEW_ALL:
        return list(songs)

    pl = next((p for p in playlists if p.id == view), None)
    if pl is None:
        return list(songs)

    by_id = {s.id: s for s in songs}
    return [by_id[i] for i in pl.songs if i in by_id]


def shuffle_songs(songs: Sequence[Song], rng: Optional[random.Random] = None) -> List[Song]:
    """Fisher-Yates on a copy."""
    rnd = rng or random
    out = list(songs)
    for i in range(len(out) - 1, 0, -1):
        j = rnd.randrange(i + 1)
        out[i], out[j] = out[j], out[i]
    return out


def build_queue(
    view: str,
    songs: Sequence[Song],
    playlists: Sequence[Playlist],
    shuffle: bool,
    pinned_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[Song]:
    """
    Queue for a view. With shuffle on, the whole list is shuffled first and
    the pinned (currently playing) song is then moved to the front.
    """
    queue = songs_for_view(view, songs, playlists)
    if not shuffle:
        return queue

    queue = shuffle_songs(queue, rng)
    if pinned_id:
        idx = next((i for i, s in enumerate(queue) if s.id == pinned_id), -1)
        if idx > 0:
            queue.insert(0, queue.pop(idx))
    return queue


def index_of(queue: Sequence[Song], song_id: Optional[str]) -> int:
    if not song_id:
        return -1
    return next((i for i, s in enumerate(queue) if s.id == song_id), -1)


def compute_reorder_insertion(
    existing_ids: Sequence[str],
    dragged_id: str,
    target_id: str,
    insert_before: bool,
) -> List[str]:
    """
    New id order after dropping `dragged_id` onto `target_id`.

    The dragged id is taken out first, then re-inserted before or after the
    target's position in the shortened list; with no target it goes last.
    Dropping an item onto itself must be filtered out by the caller.
    """
    ids = list(existing_ids)
    if dragged_id in ids:
        ids.remove(dragged_id)

    if target_id in ids:
        t = ids.index(target_id)
        ids.insert(t if insert_before else t + 1, dragged_id)
    else:
        ids.append(dragged_id)
    return ids

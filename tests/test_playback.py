"""Tests for the playback state machine."""

import random
from pathlib import Path

import pytest

from playgen.io.library_store import LibraryStore
from playgen.models.session import RepeatMode
from playgen.services.playback import PlaybackController, PlaybackState


@pytest.fixture
def ctrl(store, backend) -> PlaybackController:
    return PlaybackController(store, backend)


def _play(ctrl, store, sid):
    assert ctrl.play(store.get_song(sid)) is True


class TestPlay:
    """Starting playback."""

    def test_play_builds_queue_and_index(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s3")
        assert ctrl.state == PlaybackState.PLAYING
        assert [s.id for s in ctrl.queue] == ["s1", "s2", "s3", "s4", "s5"]
        assert ctrl.queue_index == 2
        assert backend.loaded == Path(store.get_song("s3").file_path)

    def test_play_missing_file_is_refused(self, ctrl, store, backend) -> None:
        s = store.get_song("s2")
        Path(s.file_path).unlink()
        assert ctrl.play(s) is False
        assert ctrl.state == PlaybackState.IDLE
        assert backend.loaded is None

    def test_play_persists_last_song(self, ctrl, store, db_path) -> None:
        _play(ctrl, store, "s4")
        assert LibraryStore(db_path).get_session().last_song_id == "s4"

    def test_play_in_playlist_view(self, ctrl, store) -> None:
        pl = store.create_playlist("Mix")
        for sid in ("s5", "s1"):
            store.add_to_playlist(pl.id, sid)
        ctrl.set_view(pl.id)
        _play(ctrl, store, "s1")
        assert [s.id for s in ctrl.queue] == ["s5", "s1"]
        assert ctrl.queue_index == 1

    def test_song_outside_view_gets_index_minus_one(self, ctrl, store) -> None:
        pl = store.create_playlist("Only one")
        store.add_to_playlist(pl.id, "s1")
        ctrl.set_view(pl.id)
        _play(ctrl, store, "s3")
        assert ctrl.queue_index == -1
        assert ctrl.state == PlaybackState.PLAYING


class TestToggle:
    """Play/pause toggling."""

    def test_toggle_idle_is_noop(self, ctrl, backend) -> None:
        backend.calls.clear()
        ctrl.toggle()
        assert ctrl.state == PlaybackState.IDLE
        assert backend.calls == []

    def test_toggle_pauses_and_resumes(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s1")
        ctrl.toggle()
        assert ctrl.state == PlaybackState.PAUSED
        assert backend.calls[-1] == ("pause",)
        ctrl.toggle()
        assert ctrl.state == PlaybackState.PLAYING
        assert backend.calls[-1] == ("play",)


class TestNext:
    """Advancing through the queue."""

    def test_next_advances(self, ctrl, store) -> None:
        _play(ctrl, store, "s2")
        ctrl.next()
        assert ctrl.current_song.id == "s3"
        assert ctrl.queue_index == 2

    def test_next_at_end_with_repeat_all_wraps(self, ctrl, store) -> None:
        _play(ctrl, store, "s5")
        ctrl.set_repeat_mode(RepeatMode.ALL)
        ctrl.next()
        assert ctrl.queue_index == 0
        assert ctrl.current_song.id == "s1"
        assert ctrl.state == PlaybackState.PLAYING

    def test_next_at_end_without_repeat_goes_idle(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s5")
        ctrl.next()
        assert ctrl.state == PlaybackState.IDLE
        assert ctrl.queue_index == -1
        assert backend.calls[-1] == ("stop",)

    def test_repeat_one_restarts_in_place(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s2")
        backend.pos = 42.0
        ctrl.set_repeat_mode(RepeatMode.ONE)
        ctrl.next()
        assert ctrl.current_song.id == "s2"
        assert ctrl.queue_index == 1
        assert ("seek", 0) in backend.calls

    def test_track_end_routes_through_next(self, ctrl, store) -> None:
        _play(ctrl, store, "s1")
        ctrl.on_track_finished()
        assert ctrl.current_song.id == "s2"

    def test_next_with_empty_queue_is_noop(self, ctrl) -> None:
        ctrl.next()
        assert ctrl.state == PlaybackState.IDLE

    def test_shuffled_queue_is_walked_then_goes_idle(self, store, backend) -> None:
        """With shuffle on, next() walks the shuffled order once; it does not reshuffle."""
        ctrl = PlaybackController(store, backend, rng=random.Random(11))
        ctrl.set_shuffle(True)
        _play(ctrl, store, "s3")
        order = [s.id for s in ctrl.queue]
        played = [ctrl.current_song.id]
        for expected_idx in range(1, 5):
            ctrl.next()
            assert ctrl.queue_index == expected_idx
            played.append(ctrl.current_song.id)
        assert [s.id for s in ctrl.queue] == order
        assert played == order
        ctrl.next()
        assert ctrl.state == PlaybackState.IDLE
        assert ctrl.queue_index == -1

    def test_next_skips_song_whose_file_vanished(self, ctrl, store) -> None:
        _play(ctrl, store, "s1")
        Path(store.get_song("s2").file_path).unlink()
        ctrl.next()
        assert ctrl.current_song.id == "s3"
        assert ctrl.queue_index == 2
        assert ctrl.state == PlaybackState.PLAYING

    def test_next_goes_idle_when_rest_of_queue_is_gone(self, ctrl, store) -> None:
        _play(ctrl, store, "s3")
        for sid in ("s4", "s5"):
            Path(store.get_song(sid).file_path).unlink()
        ctrl.on_track_finished()
        assert ctrl.state == PlaybackState.IDLE

    def test_queue_leaves_out_missing_files(self, ctrl, store) -> None:
        Path(store.get_song("s2").file_path).unlink()
        _play(ctrl, store, "s1")
        assert [s.id for s in ctrl.queue] == ["s1", "s3", "s4", "s5"]


class TestPrev:
    """Going back."""

    def test_prev_after_three_seconds_restarts(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s3")
        backend.pos = 5.0
        ctrl.prev()
        assert ctrl.queue_index == 2
        assert ctrl.current_song.id == "s3"
        assert backend.calls[-1] == ("seek", 0)

    def test_prev_early_goes_back(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s3")
        backend.pos = 1.0
        ctrl.prev()
        assert ctrl.current_song.id == "s2"
        assert ctrl.queue_index == 1

    def test_prev_at_start_restarts_without_repeat(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s1")
        ctrl.prev()
        assert ctrl.current_song.id == "s1"
        assert ctrl.queue_index == 0
        assert backend.calls[-1] == ("seek", 0)

    def test_prev_at_start_with_repeat_all_wraps(self, ctrl, store) -> None:
        _play(ctrl, store, "s1")
        ctrl.set_repeat_mode(RepeatMode.ALL)
        ctrl.prev()
        assert ctrl.current_song.id == "s5"
        assert ctrl.queue_index == 4

    def test_prev_skips_song_whose_file_vanished(self, ctrl, store) -> None:
        _play(ctrl, store, "s3")
        Path(store.get_song("s2").file_path).unlink()
        ctrl.prev()
        assert ctrl.current_song.id == "s1"
        assert ctrl.queue_index == 0


class TestPlayView:
    """Play All for the library or a playlist."""

    def test_play_all_starts_at_first_song(self, ctrl, store) -> None:
        assert ctrl.play_view("all") is True
        assert ctrl.current_song.id == "s1"
        assert ctrl.view == "all"

    def test_play_playlist_switches_view(self, ctrl, store) -> None:
        pl = store.create_playlist("Evening")
        for sid in ("s4", "s2"):
            store.add_to_playlist(pl.id, sid)
        assert ctrl.play_view(pl.id) is True
        assert ctrl.view == pl.id
        assert ctrl.current_song.id == "s4"
        assert [s.id for s in ctrl.queue] == ["s4", "s2"]

    def test_empty_playlist_plays_nothing(self, ctrl, store) -> None:
        pl = store.create_playlist("Empty")
        assert ctrl.play_view(pl.id) is False
        assert ctrl.state == PlaybackState.IDLE


class TestModes:
    """Shuffle, repeat and volume."""

    def test_shuffle_pins_current_song(self, store, backend) -> None:
        ctrl = PlaybackController(store, backend, rng=random.Random(0))
        _play(ctrl, store, "s3")
        ctrl.set_shuffle(True)
        assert ctrl.queue[0].id == "s3"
        assert ctrl.queue_index == 0
        assert sorted(s.id for s in ctrl.queue) == ["s1", "s2", "s3", "s4", "s5"]

    def test_shuffle_off_restores_store_order(self, store, backend) -> None:
        ctrl = PlaybackController(store, backend, rng=random.Random(0))
        _play(ctrl, store, "s3")
        ctrl.set_shuffle(True)
        ctrl.set_shuffle(False)
        assert [s.id for s in ctrl.queue] == ["s1", "s2", "s3", "s4", "s5"]
        assert ctrl.queue_index == 2

    def test_repeat_cycles(self, ctrl) -> None:
        assert ctrl.cycle_repeat_mode() == RepeatMode.ALL
        assert ctrl.cycle_repeat_mode() == RepeatMode.ONE
        assert ctrl.cycle_repeat_mode() == RepeatMode.NONE

    def test_volume_is_clamped_and_persisted(self, ctrl, backend, db_path) -> None:
        ctrl.set_volume(1.7)
        assert ctrl.volume == 1.0
        ctrl.set_volume(0.3)
        assert backend.volume == 0.3
        assert LibraryStore(db_path).get_session().volume == 0.3

    def test_mute_restores_previous_volume(self, ctrl) -> None:
        ctrl.set_volume(0.6)
        ctrl.toggle_mute()
        assert ctrl.volume == 0.0
        ctrl.toggle_mute()
        assert ctrl.volume == 0.6

    def test_unmute_from_zero_uses_default(self, store, backend) -> None:
        store.save_session({"volume": 0.0})
        ctrl = PlaybackController(store, backend)
        ctrl.toggle_mute()
        assert ctrl.volume == 0.8


class TestViewsAndRestore:
    """View switching, deletions and startup restore."""

    def test_deleting_active_playlist_falls_back_to_all(self, ctrl, store) -> None:
        pl = store.create_playlist("Temp")
        ctrl.set_view(pl.id)
        assert ctrl.delete_playlist(pl.id) is True
        assert ctrl.view == "all"
        assert store.get_session().last_playlist_id is None

    def test_unknown_view_falls_back_to_all(self, ctrl) -> None:
        ctrl.set_view("ghost")
        assert ctrl.view == "all"

    def test_restore_from_session(self, store, backend) -> None:
        pl = store.create_playlist("Saved")
        store.save_session({
            "lastSongId": "s2",
            "lastPlaylistId": pl.id,
            "volume": 0.4,
            "shuffle": True,
            "repeat": "one",
        })
        ctrl = PlaybackController(store, backend)
        assert ctrl.current_song.id == "s2"
        assert ctrl.state == PlaybackState.IDLE
        assert ctrl.view == pl.id
        assert ctrl.volume == 0.4
        assert backend.volume == 0.4
        assert ctrl.shuffle is True
        assert ctrl.repeat == RepeatMode.ONE

    def test_restore_ignores_stale_playlist(self, store, backend) -> None:
        store.save_session({"lastPlaylistId": "ghost"})
        assert PlaybackController(store, backend).view == "all"

    def test_forget_current_song_stops(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s2")
        ctrl.forget_song("s2")
        assert ctrl.state == PlaybackState.IDLE
        assert ctrl.current_song is None
        assert all(s.id != "s2" for s in ctrl.queue)
        assert ("stop",) in backend.calls

    def test_forget_other_song_keeps_playing(self, ctrl, store) -> None:
        _play(ctrl, store, "s3")
        ctrl.forget_song("s1")
        assert ctrl.state == PlaybackState.PLAYING
        assert ctrl.queue_index == 1


class TestListenersAndSnapshot:
    """Change notifications and the mini-player snapshot."""

    def test_listeners_are_notified(self, ctrl, store) -> None:
        seen = []
        ctrl.subscribe(lambda c: seen.append(c.state))
        _play(ctrl, store, "s1")
        ctrl.toggle()
        assert seen == [PlaybackState.PLAYING, PlaybackState.PAUSED]

    def test_failing_listener_does_not_break_playback(self, ctrl, store) -> None:
        def boom(_):
            raise RuntimeError("listener bug")

        ctrl.subscribe(boom)
        _play(ctrl, store, "s1")
        assert ctrl.state == PlaybackState.PLAYING

    def test_snapshot(self, ctrl, store, backend) -> None:
        _play(ctrl, store, "s1")
        backend.pos = 12.5
        st = ctrl.snapshot()
        assert st.title == "Song s1"
        assert st.channel == "Some Channel"
        assert st.is_playing is True
        assert st.position == 12.5
        assert st.duration == 180.0

    def test_snapshot_when_nothing_loaded(self, ctrl) -> None:
        st = ctrl.snapshot()
        assert st.title == ""
        assert st.is_playing is False

"""Tests for URL handling and the yt-dlp download flow."""

import json
import subprocess

import pytest

from playgen.helpers.url_utils import (
    canonical_playlist_url,
    canonical_video_url,
    extract_playlist_id,
    extract_video_id,
)
from playgen.services import downloader as dl_mod
from playgen.services.downloader import DownloadOrchestrator, _diagnostic, parse_percent
from playgen.services.errors import (
    AlreadyDownloadedError,
    ExternalToolError,
    InvalidURLError,
    MetadataParseError,
    PlayGenError,
)

from conftest import make_song

INFO = {
    "id": "abc123",
    "title": "Some Track",
    "thumbnail": "https://img/abc123.jpg",
    "duration": 215.4,
    "channel": "The Band",
}


class FakePopen:
    """Stands in for subprocess.Popen: replays lines, optionally creates the output file."""

    def __init__(self, lines, code=0, creates=None):
        self._lines = lines
        self._code = code
        self._creates = creates
        self.cmd = None

    def __call__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs
        if self._creates is not None:
            self._creates.write_bytes(b"ID3")
        self.stdout = iter(self._lines)
        return self

    def wait(self):
        return self._code


def _completed(stdout="", stderr="", code=0):
    return subprocess.CompletedProcess(args=[], returncode=code, stdout=stdout, stderr=stderr)


@pytest.fixture
def orch(store, downloads_dir) -> DownloadOrchestrator:
    return DownloadOrchestrator(store, downloads_dir=downloads_dir, command=["yt-dlp"], ffmpeg_location=None)


class TestUrls:
    """Validation and canonicalisation."""

    def test_canonical_drops_extra_params(self) -> None:
        url = "https://www.youtube.com/watch?v=abc123&list=xyz&feature=share"
        assert canonical_video_url(url) == "https://www.youtube.com/watch?v=abc123"

    @pytest.mark.parametrize("url", [
        "youtube.com/watch?v=abc123",
        "http://m.youtube.com/watch?v=abc123&t=30",
        "https://music.youtube.com/watch?v=abc123",
        "https://youtu.be/abc123?si=tracking",
        "https://www.youtube.com/shorts/abc123",
    ])
    def test_accepted_forms(self, url) -> None:
        assert extract_video_id(url) == "abc123"

    @pytest.mark.parametrize("url", [
        "",
        "https://vimeo.com/12345",
        "https://www.youtube.com/channel/UC123",
        "https://www.youtube.com/watch?v=",
    ])
    def test_rejected_forms(self, url) -> None:
        with pytest.raises(InvalidURLError):
            canonical_video_url(url)

    def test_playlist_url(self) -> None:
        url = "https://www.youtube.com/watch?v=abc123&list=PL_x-1"
        assert extract_playlist_id(url) == "PL_x-1"
        assert canonical_playlist_url(url) == "https://www.youtube.com/playlist?list=PL_x-1"
        assert extract_playlist_id("https://example.com/?list=PL1") is None


class TestHelpers:
    """Progress parsing and diagnostics trimming."""

    def test_parse_percent(self) -> None:
        assert parse_percent("[download]  42.7% of 3.2MiB at 1MiB/s") == 42.7
        assert parse_percent("[download] 100% of 3.2MiB") == 100.0
        assert parse_percent("[ExtractAudio] Destination: x.mp3") is None

    def test_diagnostic_prefers_error_lines(self) -> None:
        text = "WARNING: meh\nERROR: Video unavailable\nmore noise"
        assert _diagnostic(text, "fallback") == "ERROR: Video unavailable"

    def test_diagnostic_truncates(self) -> None:
        assert len(_diagnostic("x" * 2000, "fallback")) == 500
        assert _diagnostic("   ", "fallback") == "fallback"


class TestFetchMetadata:
    """The --dump-json step."""

    def test_parses_info(self, orch, monkeypatch) -> None:
        seen = {}

        def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            return _completed(stdout=json.dumps(INFO))

        monkeypatch.setattr(dl_mod.subprocess, "run", fake_run)
        info = orch.fetch_metadata("https://www.youtube.com/watch?v=abc123")

        assert info.id == "abc123"
        assert info.duration == 215
        assert info.channel == "The Band"
        assert "--dump-json" in seen["cmd"] and "--no-playlist" in seen["cmd"]

    def test_fallbacks(self, orch, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run",
                            lambda cmd, **kw: _completed(stdout=json.dumps({"id": "abc123", "uploader": "Up"})))
        info = orch.fetch_metadata("https://www.youtube.com/watch?v=abc123")
        assert info.thumbnail == "https://i.ytimg.com/vi/abc123/hqdefault.jpg"
        assert info.channel == "Up"
        assert info.title == "Unknown"

    def test_nonzero_exit(self, orch, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run",
                            lambda cmd, **kw: _completed(stderr="ERROR: Private video", code=1))
        with pytest.raises(ExternalToolError) as ei:
            orch.fetch_metadata("https://www.youtube.com/watch?v=abc123")
        assert "Private video" in str(ei.value)

    def test_unparsable_output(self, orch, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout="not json"))
        with pytest.raises(MetadataParseError):
            orch.fetch_metadata("https://www.youtube.com/watch?v=abc123")

    def test_spawn_failure(self, orch, monkeypatch) -> None:
        def boom(cmd, **kw):
            raise FileNotFoundError("no such file")

        monkeypatch.setattr(dl_mod.subprocess, "run", boom)
        with pytest.raises(ExternalToolError):
            orch.fetch_metadata("https://www.youtube.com/watch?v=abc123")


class TestDownload:
    """The full fetch → download → commit flow."""

    def test_success_upserts_song(self, orch, store, downloads_dir, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        popen = FakePopen(
            ["[download]   0.0% of 3MiB\n", "[download]  50.5% of 3MiB\n", "[download] 100% of 3MiB\n"],
            creates=downloads_dir / "abc123.mp3",
        )
        monkeypatch.setattr(dl_mod.subprocess, "Popen", popen)
        progress = []

        song = orch.download("https://youtu.be/abc123?si=x", progress.append)

        assert song.id == "abc123"
        assert store.library.songs[0].id == "abc123"
        assert [p.percent for p in progress] == [0.0, 50.5, 100.0]
        assert all(p.video_id == "abc123" and p.title == "Some Track" for p in progress)
        assert popen.cmd[-1] == "https://www.youtube.com/watch?v=abc123"
        assert "--audio-format" in popen.cmd

    def test_fetch_does_not_touch_store(self, orch, store, downloads_dir, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        monkeypatch.setattr(dl_mod.subprocess, "Popen", FakePopen([], creates=downloads_dir / "abc123.mp3"))
        orch.fetch("https://www.youtube.com/watch?v=abc123")
        assert store.get_song("abc123") is None

    def test_zero_exit_without_file_fails(self, orch, store, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        monkeypatch.setattr(dl_mod.subprocess, "Popen", FakePopen(["ERROR: postprocessing failed\n"], code=0))
        with pytest.raises(ExternalToolError) as ei:
            orch.download("https://www.youtube.com/watch?v=abc123")
        assert "postprocessing" in str(ei.value)
        assert store.get_song("abc123") is None

    def test_nonzero_exit_fails(self, orch, downloads_dir, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        monkeypatch.setattr(dl_mod.subprocess, "Popen",
                            FakePopen([], code=1, creates=downloads_dir / "abc123.mp3"))
        with pytest.raises(ExternalToolError):
            orch.download("https://www.youtube.com/watch?v=abc123")

    def test_duplicate_skips_download(self, orch, store, downloads_dir, monkeypatch) -> None:
        store.add_or_replace_song(make_song(downloads_dir, "abc123"))
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))

        def no_popen(*a, **kw):
            raise AssertionError("must not download a duplicate")

        monkeypatch.setattr(dl_mod.subprocess, "Popen", no_popen)
        with pytest.raises(AlreadyDownloadedError) as ei:
            orch.download("https://www.youtube.com/watch?v=abc123")
        assert str(ei.value) == "Song already downloaded"
        assert ei.value.song.id == "abc123"

    def test_record_without_file_is_redownloaded(self, orch, store, downloads_dir, monkeypatch) -> None:
        store.add_or_replace_song(make_song(downloads_dir, "abc123", create_file=False))
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        monkeypatch.setattr(dl_mod.subprocess, "Popen", FakePopen([], creates=downloads_dir / "abc123.mp3"))
        song = orch.download("https://www.youtube.com/watch?v=abc123")
        assert song.title == "Some Track"
        assert [s.id for s in store.library.songs].count("abc123") == 1

    def test_invalid_url_never_spawns(self, orch, monkeypatch) -> None:
        def no_run(*a, **kw):
            raise AssertionError("no external call for invalid input")

        monkeypatch.setattr(dl_mod.subprocess, "run", no_run)
        with pytest.raises(InvalidURLError):
            orch.download("https://example.com/watch?v=abc123")

    def test_attempt_carries_tool_output(self, orch, monkeypatch) -> None:
        """A failed download reports a short message plus the raw yt-dlp output."""
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        monkeypatch.setattr(dl_mod.subprocess, "Popen",
                            FakePopen(["[youtube] abc123: fetching\n", "ERROR: Video unavailable\n"], code=1))
        outcome = orch.attempt("https://www.youtube.com/watch?v=abc123")
        assert not outcome.ok
        assert "Video unavailable" in outcome.error
        assert "[youtube] abc123: fetching" in outcome.details

    def test_attempt_duplicate_is_not_a_failure(self, orch, store, downloads_dir, monkeypatch) -> None:
        store.add_or_replace_song(make_song(downloads_dir, "abc123"))
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        outcome = orch.attempt("https://www.youtube.com/watch?v=abc123")
        assert outcome.duplicate and not outcome.ok
        assert outcome.song.id == "abc123"

    def test_attempt_invalid_url(self, orch) -> None:
        outcome = orch.attempt("not a link")
        assert outcome.error and outcome.details is None

    def test_attempt_success_leaves_store_alone(self, orch, store, downloads_dir, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        monkeypatch.setattr(dl_mod.subprocess, "Popen", FakePopen([], creates=downloads_dir / "abc123.mp3"))
        outcome = orch.attempt("https://www.youtube.com/watch?v=abc123")
        assert outcome.ok
        assert store.get_song("abc123") is None

    def test_ffmpeg_location_is_passed(self, store, downloads_dir, monkeypatch) -> None:
        orch = DownloadOrchestrator(store, downloads_dir=downloads_dir, command=["yt-dlp"],
                                    ffmpeg_location="/opt/ffmpeg/bin")
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=json.dumps(INFO)))
        popen = FakePopen([], creates=downloads_dir / "abc123.mp3")
        monkeypatch.setattr(dl_mod.subprocess, "Popen", popen)
        orch.download("https://www.youtube.com/watch?v=abc123")
        i = popen.cmd.index("--ffmpeg-location")
        assert popen.cmd[i + 1] == "/opt/ffmpeg/bin"


class TestResolvePlaylist:
    """Flat playlist listing."""

    def test_lists_entries_in_order(self, orch, monkeypatch) -> None:
        lines = "\n".join([
            json.dumps({"id": "aaa111", "playlist_title": "Road Trip"}),
            json.dumps({"url": "https://www.youtube.com/watch?v=bbb222"}),
            json.dumps({"id": "ccc333"}),
        ])
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=lines))
        listing = orch.resolve_playlist("https://www.youtube.com/playlist?list=PL123")
        assert listing.title == "Road Trip"
        assert listing.urls == [
            "https://www.youtube.com/watch?v=aaa111",
            "https://www.youtube.com/watch?v=bbb222",
            "https://www.youtube.com/watch?v=ccc333",
        ]

    def test_repeated_video_listed_once(self, orch, monkeypatch) -> None:
        """A video that appears twice in the playlist keeps its first position only."""
        lines = "\n".join([
            json.dumps({"id": "aaa111", "playlist_title": "P"}),
            json.dumps({"id": "bbb222"}),
            json.dumps({"url": "https://youtu.be/aaa111"}),
        ])
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=lines))
        listing = orch.resolve_playlist("https://www.youtube.com/playlist?list=PL123")
        assert listing.urls == [
            "https://www.youtube.com/watch?v=aaa111",
            "https://www.youtube.com/watch?v=bbb222",
        ]

    def test_missing_title_uses_default(self, orch, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run",
                            lambda cmd, **kw: _completed(stdout=json.dumps({"id": "aaa111"})))
        assert orch.resolve_playlist("https://www.youtube.com/playlist?list=PL1").title == "Imported Playlist"

    def test_empty_playlist(self, orch, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout=""))
        with pytest.raises(ExternalToolError):
            orch.resolve_playlist("https://www.youtube.com/playlist?list=PL1")

    def test_garbage_output(self, orch, monkeypatch) -> None:
        monkeypatch.setattr(dl_mod.subprocess, "run", lambda cmd, **kw: _completed(stdout="oops\n{bad"))
        with pytest.raises(MetadataParseError):
            orch.resolve_playlist("https://www.youtube.com/playlist?list=PL1")

    def test_not_a_playlist_url(self, orch) -> None:
        with pytest.raises(InvalidURLError):
            orch.resolve_playlist("https://www.youtube.com/watch?v=abc123")

    def test_errors_share_base(self) -> None:
        assert issubclass(MetadataParseError, ExternalToolError)
        assert issubclass(ExternalToolError, PlayGenError)
        assert issubclass(AlreadyDownloadedError, PlayGenError)

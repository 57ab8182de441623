"""Exceptions raised by the download and library services."""

from typing import Optional


class PlayGenError(Exception):
    """Base exception for PlayGen operations."""

    pass


class InvalidURLError(PlayGenError):
    """Raised when a URL is not a supported YouTube link."""

    pass


class ExternalToolError(PlayGenError):
    """Raised when yt-dlp cannot be spawned, exits non-zero or leaves no output file."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.details = details
        super().__init__(message)


class MetadataParseError(ExternalToolError):
    """Raised when yt-dlp output is not the JSON we asked for."""

    pass


class AlreadyDownloadedError(PlayGenError):
    """Raised when the video is already in the library with its file on disk."""

    def __init__(self, song, message: str = None):
        self.song = song
        super().__init__(message or "Song already downloaded")

"""Exceptions raised while building a video.

Every fatal build condition is a BuildError subclass, so callers can catch
all of them with a single except clause and still show the aggregated log.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class BuildError(Exception):
    """Base exception for build failures.

    Attributes:
        message: Human-readable description of the failure.
        log: Snapshot of the build's aggregated log when the error occurred.
    """

    def __init__(self, message: str, log: Sequence[str] = ()) -> None:
        self.message = message
        self.log: tuple[str, ...] = tuple(log)
        super().__init__(message)


class CapabilityUnavailableError(BuildError):
    """Raised when the encoder cannot be invoked at all.

    No attempt is made; the build fails before touching the session.
    """

    def __init__(self, detail: str | None = None, log: Sequence[str] = ()) -> None:
        self.detail = detail
        message = "Encoder unavailable: ffmpeg is required to build videos"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, log)


class SessionScanError(BuildError):
    """Raised when the session directory cannot be listed.

    Scan failures indicate a missing or corrupted session and are never
    retried.
    """

    def __init__(
        self, directory: Path, cause: OSError | None = None, log: Sequence[str] = ()
    ) -> None:
        self.directory = directory
        self.cause = cause
        reason = cause.strerror if cause is not None and cause.strerror else cause
        message = f"Cannot read session directory {directory}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, log)


class EmptyInputError(BuildError):
    """Raised when the session holds no frames matching the naming convention."""

    def __init__(self, directory: Path, log: Sequence[str] = ()) -> None:
        self.directory = directory
        super().__init__(f"No frames: session {directory} has 0 frames", log)


class AttemptsExhaustedError(BuildError):
    """Raised when every codec attempt failed."""

    def __init__(self, codecs: Sequence[str], log: Sequence[str] = ()) -> None:
        self.codecs: tuple[str, ...] = tuple(codecs)
        super().__init__(
            f"Encoder failed with {', '.join(self.codecs)} (see logs).", log
        )


class BuildCancelledError(BuildError):
    """Raised when a build is cancelled while an attempt is running."""

    def __init__(self, codec: str | None = None, log: Sequence[str] = ()) -> None:
        self.codec = codec
        message = "Build cancelled"
        if codec:
            message = f"{message} during {codec} attempt"
        super().__init__(message, log)

"""Exceptions for artifact export.

Export failures never touch the artifact on local storage.
"""

from pathlib import Path


class ExportError(Exception):
    """Base exception for export failures."""


class ExportPermissionDeniedError(ExportError):
    """Raised when the media library denies write access."""

    def __init__(self, message: str = "Media library permission is required") -> None:
        super().__init__(message)


class ArtifactNotFoundError(ExportError):
    """Raised when there is no artifact file to export."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No video to export at {path}; build the video first")

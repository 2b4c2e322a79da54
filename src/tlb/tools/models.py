"""Data models for external encoder capabilities.

This module defines dataclasses for representing detected encoder
information and the typed availability result checked before a build.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class ToolStatus(Enum):
    """Status of an external tool."""

    AVAILABLE = "available"  # Tool found and version detected
    MISSING = "missing"  # Tool not found in PATH or configured location
    ERROR = "error"  # Tool found but detection failed


@dataclass
class ToolInfo:
    """Base information for any external tool."""

    name: str
    path: Path | None = None
    version: str | None = None
    version_tuple: tuple[int, ...] | None = None  # Parsed version for comparison
    status: ToolStatus = ToolStatus.MISSING
    status_message: str | None = None
    detected_at: datetime | None = None

    def is_available(self) -> bool:
        """Return True if the tool is available and usable."""
        return self.status == ToolStatus.AVAILABLE

    def meets_version(self, min_version: tuple[int, ...]) -> bool:
        """Check if tool version meets minimum requirement.

        Args:
            min_version: Minimum version as tuple (e.g., (6, 0) for 6.0).

        Returns:
            True if tool version >= min_version, False otherwise.
        """
        if self.version_tuple is None:
            return False
        max_len = max(len(self.version_tuple), len(min_version))
        v1 = self.version_tuple + (0,) * (max_len - len(self.version_tuple))
        v2 = min_version + (0,) * (max_len - len(min_version))
        return v1 >= v2


@dataclass
class FFmpegInfo(ToolInfo):
    """FFmpeg tool information with its encoder list."""

    name: str = field(init=False, default="ffmpeg")
    configuration: str = ""  # Full --configure line
    is_gpl: bool = False  # Built with GPL license (required for libx264)
    encoders: set[str] = field(default_factory=set)

    def has_encoder(self, name: str) -> bool:
        """Check if encoder is listed by this build."""
        return name.casefold() in self.encoders


@dataclass(frozen=True)
class EncoderAvailability:
    """Result of the pre-build encoder availability check.

    A build only proceeds when ``available`` is True. Codec support is
    informational: a listed encoder can still fail at runtime, and an
    unlisted one is still attempted because the fallback policy decides.
    """

    available: bool
    path: Path | None = None
    version: str | None = None
    message: str | None = None
    encoders: frozenset[str] = frozenset()

    @classmethod
    def from_info(cls, info: FFmpegInfo) -> "EncoderAvailability":
        """Build the availability result from detected ffmpeg info."""
        return cls(
            available=info.is_available(),
            path=info.path,
            version=info.version,
            message=info.status_message,
            encoders=frozenset(info.encoders),
        )

    @classmethod
    def unavailable(cls, message: str) -> "EncoderAvailability":
        """Build a negative result with a reason."""
        return cls(available=False, message=message)

    def supports(self, codec: str) -> bool | None:
        """Check whether the encoder lists a codec.

        Returns:
            True/False when the encoder list is known, None otherwise.
        """
        if not self.encoders:
            return None
        return codec.casefold() in self.encoders

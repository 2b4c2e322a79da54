"""Configuration data models.

This module defines dataclasses for TLB configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

# Frame rate bounds accepted by the encoder command
MIN_FPS = 1
MAX_FPS = 120
DEFAULT_FPS = 30


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, the encoder is looked up in PATH.
    """

    ffmpeg: Path | None = None


@dataclass
class BuildConfig:
    """Configuration for video builds."""

    # Frame rate used when the requested rate is missing or not a number
    default_fps: int = DEFAULT_FPS

    # Artifact filename, written inside the session directory
    output_name: str = "timelapse.mp4"

    # Frame naming convention: <prefix><5-digit index><extension>
    frame_prefix: str = "img_"
    frame_extension: str = ".jpg"

    # Codecs in priority order (primary first, fallback last)
    codecs: tuple[str, ...] = ("libx264", "mpeg4")

    # Per-attempt encoder timeout in seconds (None = no limit)
    attempt_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not MIN_FPS <= self.default_fps <= MAX_FPS:
            raise ValueError(
                f"default_fps must be between {MIN_FPS} and {MAX_FPS}, "
                f"got {self.default_fps}"
            )
        if not self.output_name or "/" in self.output_name:
            raise ValueError(
                f"output_name must be a plain filename, got {self.output_name!r}"
            )
        if not self.codecs:
            raise ValueError("codecs must name at least one codec")
        if (
            self.attempt_timeout_seconds is not None
            and self.attempt_timeout_seconds <= 0
        ):
            raise ValueError(
                "attempt_timeout_seconds must be positive, "
                f"got {self.attempt_timeout_seconds}"
            )


@dataclass
class ExportConfig:
    """Configuration for exporting finished artifacts to the media library."""

    # Root of the local media library (None = ~/.tlb/library)
    library_dir: Path | None = None

    # Collection (album) the artifact is added to
    collection_name: str = "Turtle Timelapse"

    # Whether the library grants write access
    permission_granted: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.collection_name.strip():
            raise ValueError("collection_name must not be empty")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class TLBConfig:
    """Main configuration container for TLB.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

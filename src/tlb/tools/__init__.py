"""External encoder detection and output parsing.

This module provides infrastructure for detecting the ffmpeg encoder,
checking its availability before a build, and parsing its progress output.
"""

from tlb.tools.detection import (
    check_encoder_availability,
    detect_ffmpeg,
    parse_version_string,
)
from tlb.tools.ffmpeg_progress import (
    PROGRESS_PATTERNS,
    FFmpegProgress,
    parse_stderr_progress,
)
from tlb.tools.models import (
    EncoderAvailability,
    FFmpegInfo,
    ToolInfo,
    ToolStatus,
)

__all__ = [
    # Progress parsing
    "FFmpegProgress",
    "PROGRESS_PATTERNS",
    "parse_stderr_progress",
    # Models
    "EncoderAvailability",
    "FFmpegInfo",
    "ToolInfo",
    "ToolStatus",
    # Detection
    "check_encoder_availability",
    "detect_ffmpeg",
    "parse_version_string",
]

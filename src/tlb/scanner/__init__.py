"""Frame source scanning for session directories.

Public API:
    - scan_session / scan_session_async: Discover a session's frame sequence
    - count_frames: Frame count convenience wrapper
    - FrameSequence: Discovered frames with gap information
    - FrameNaming: Frame filename convention
"""

from tlb.scanner.frames import (
    DEFAULT_FRAME_EXTENSION,
    DEFAULT_FRAME_PREFIX,
    DEFAULT_NAMING,
    FRAME_INDEX_WIDTH,
    FrameNaming,
    FrameSequence,
    count_frames,
    scan_session,
    scan_session_async,
    to_filesystem_path,
)

__all__ = [
    "DEFAULT_FRAME_EXTENSION",
    "DEFAULT_FRAME_PREFIX",
    "DEFAULT_NAMING",
    "FRAME_INDEX_WIDTH",
    "FrameNaming",
    "FrameSequence",
    "count_frames",
    "scan_session",
    "scan_session_async",
    "to_filesystem_path",
]

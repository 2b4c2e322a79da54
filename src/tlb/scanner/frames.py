"""Frame sequence discovery for a session directory.

A session directory holds one frame sequence named with a fixed prefix, a
zero-padded decimal index and a fixed extension (``img_00001.jpg``,
``img_00002.jpg``, ...). Scanning only reads the directory listing.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from urllib.parse import unquote, urlparse

from tlb.exceptions import SessionScanError

logger = logging.getLogger(__name__)

DEFAULT_FRAME_PREFIX = "img_"
DEFAULT_FRAME_EXTENSION = ".jpg"
FRAME_INDEX_WIDTH = 5


def to_filesystem_path(location: str | Path) -> Path:
    """Convert a session location to a plain filesystem path.

    Accepts plain paths as well as ``file://`` URIs.

    Args:
        location: Path or file URI.

    Returns:
        Filesystem path.
    """
    text = str(location)
    parsed = urlparse(text)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(text).expanduser()


@dataclass(frozen=True)
class FrameNaming:
    """Naming convention for frames in a session directory."""

    prefix: str = DEFAULT_FRAME_PREFIX
    extension: str = DEFAULT_FRAME_EXTENSION
    width: int = FRAME_INDEX_WIDTH

    @cached_property
    def regex(self) -> re.Pattern[str]:
        """Regex matching a frame filename, capturing the index."""
        return re.compile(
            rf"^{re.escape(self.prefix)}(\d{{{self.width}}})"
            rf"{re.escape(self.extension)}$"
        )

    @property
    def input_pattern(self) -> str:
        """printf-style filename pattern consumed by the encoder."""
        return f"{self.prefix}%0{self.width}d{self.extension}"

    def filename(self, index: int) -> str:
        """Filename of the frame with the given index."""
        return f"{self.prefix}{index:0{self.width}d}{self.extension}"

    def parse_index(self, name: str) -> int | None:
        """Return the frame index encoded in a filename, or None."""
        match = self.regex.match(name)
        return int(match.group(1)) if match else None


DEFAULT_NAMING = FrameNaming()


@dataclass(frozen=True)
class FrameSequence:
    """Frames discovered in a session directory, in increasing index order."""

    directory: Path
    indices: tuple[int, ...] = ()
    naming: FrameNaming = field(default=DEFAULT_NAMING, compare=False)

    @property
    def count(self) -> int:
        return len(self.indices)

    @property
    def first_index(self) -> int | None:
        return self.indices[0] if self.indices else None

    @property
    def last_index(self) -> int | None:
        return self.indices[-1] if self.indices else None

    @property
    def missing(self) -> tuple[int, ...]:
        """Indices absent between the first and last frame."""
        if not self.indices:
            return ()
        present = set(self.indices)
        return tuple(
            i for i in range(self.indices[0], self.indices[-1] + 1) if i not in present
        )

    @property
    def is_contiguous(self) -> bool:
        return not self.missing

    def frame_paths(self) -> list[Path]:
        """Full paths of every frame, in order."""
        return [self.directory / self.naming.filename(i) for i in self.indices]


def scan_session(
    directory: str | Path, naming: FrameNaming = DEFAULT_NAMING
) -> FrameSequence:
    """List a session directory and collect its frame sequence.

    Entries not matching the naming convention are ignored.

    Args:
        directory: Session directory (path or file URI).
        naming: Frame naming convention.

    Returns:
        FrameSequence with sorted indices.

    Raises:
        SessionScanError: If the directory is missing or cannot be listed.
    """
    session_dir = to_filesystem_path(directory)
    try:
        entries = [entry for entry in session_dir.iterdir() if entry.is_file()]
    except OSError as e:
        logger.error("Failed to scan session %s: %s", session_dir, e)
        raise SessionScanError(session_dir, e) from e

    indices = sorted(
        index
        for entry in entries
        if (index := naming.parse_index(entry.name)) is not None
    )
    sequence = FrameSequence(
        directory=session_dir, indices=tuple(indices), naming=naming
    )

    if sequence.missing:
        # The encoder stops reading a numbered pattern at the first gap
        logger.warning(
            "Session %s has %d missing frame(s), first missing index %d",
            session_dir,
            len(sequence.missing),
            sequence.missing[0],
        )
    logger.debug("Scanned %s: %d frame(s)", session_dir, sequence.count)
    return sequence


async def scan_session_async(
    directory: str | Path, naming: FrameNaming = DEFAULT_NAMING
) -> FrameSequence:
    """Scan a session without blocking the event loop."""
    return await asyncio.to_thread(scan_session, directory, naming)


def count_frames(directory: str | Path, naming: FrameNaming = DEFAULT_NAMING) -> int:
    """Return the number of frames in a session directory.

    Raises:
        SessionScanError: If the directory is missing or cannot be listed.
    """
    return scan_session(directory, naming).count

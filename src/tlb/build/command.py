"""Encoder command construction.

Builds the ffmpeg invocation for one codec attempt. The command is a pure
function of its inputs so that identical requests produce byte-identical
argument lists and identical log lines.

Fixed policy encoded here:
- ``-y``: overwrite any existing output unconditionally
- ``-framerate`` before ``-i``: input frames are read at the target rate
- numbered input pattern: frames are consumed in increasing index order
- ``-pix_fmt yuv420p``: 4:2:0 chroma so the file plays on most devices
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from tlb.scanner.frames import DEFAULT_NAMING, FrameNaming, to_filesystem_path

# Pixel format with 4:2:0 chroma subsampling
OUTPUT_PIXEL_FORMAT = "yuv420p"


@dataclass(frozen=True)
class EncoderCommand:
    """A fully specified encoder invocation."""

    argv: tuple[str, ...]
    codec: str
    output_path: Path

    @property
    def display(self) -> str:
        """Shell-quoted command as echoed into the build log."""
        program = Path(self.argv[0]).name
        return " ".join([program, shlex.join(self.argv[1:])])


def build_input_pattern(
    session_dir: str | Path, naming: FrameNaming = DEFAULT_NAMING
) -> str:
    """Return the numbered filename pattern for a session's frames."""
    return str(to_filesystem_path(session_dir) / naming.input_pattern)


def build_encoder_command(
    session_dir: str | Path,
    fps: int,
    codec: str,
    output_path: str | Path,
    ffmpeg: str | Path = "ffmpeg",
    naming: FrameNaming = DEFAULT_NAMING,
) -> EncoderCommand:
    """Build the encoder invocation for one codec attempt.

    The caller validates ``fps`` against the supported range first.

    Args:
        session_dir: Directory holding the numbered frames.
        fps: Target frame rate.
        codec: Video codec passed to ``-c:v``.
        output_path: Artifact path.
        ffmpeg: Encoder executable.
        naming: Frame naming convention.

    Returns:
        EncoderCommand for the attempt.

    Example:
        >>> cmd = build_encoder_command("/s", 24, "mpeg4", "/s/timelapse.mp4")
        >>> cmd.display
        'ffmpeg -y -framerate 24 -i /s/img_%05d.jpg -c:v mpeg4 -pix_fmt yuv420p /s/timelapse.mp4'
    """
    output = to_filesystem_path(output_path)
    argv = (
        str(ffmpeg),
        "-y",
        "-framerate",
        str(fps),
        "-i",
        build_input_pattern(session_dir, naming),
        "-c:v",
        str(codec),
        "-pix_fmt",
        OUTPUT_PIXEL_FORMAT,
        str(output),
    )
    return EncoderCommand(argv=argv, codec=str(codec), output_path=output)

"""Encoder detection and version parsing.

This module provides functions to detect the ffmpeg encoder, parse its
version, and enumerate the encoders its build provides.
"""

import logging
import re
import shutil
import subprocess  # nosec B404 - subprocess is required for tool detection
from datetime import datetime, timezone
from pathlib import Path

from tlb.tools.models import EncoderAvailability, FFmpegInfo, ToolStatus

logger = logging.getLogger(__name__)

# Timeout for version/capability detection commands (seconds)
DETECTION_TIMEOUT = 10

_VERSION_PATTERN = re.compile(r"ffmpeg version (\S+)")
_CONFIG_PATTERN = re.compile(r"configuration:\s*(.+?)(?:\n|$)")

# Format: " V....D libx264    libx264 H.264 / AVC ..."
_CODEC_LINE_PATTERN = re.compile(r"\s+[VASFXBDI.]{6}\s+(\S+)")


def parse_version_string(version_str: str) -> tuple[int, ...] | None:
    """Parse a version string into a comparable tuple.

    Handles various version formats:
    - "6.1.1" -> (6, 1, 1)
    - "n6.1.1" -> (6, 1, 1)  (ffmpeg nightlies)
    - "6.1.1-0ubuntu1" -> (6, 1, 1)

    Args:
        version_str: Version string to parse.

    Returns:
        Tuple of version components, or None if parsing fails.
    """
    if not version_str:
        return None

    version_str = version_str.lstrip("nv")

    match = re.match(r"(\d+(?:\.\d+)*)", version_str)
    if not match:
        return None

    return tuple(int(p) for p in match.group(1).split("."))


def _find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def _run_command(
    args: list[str], timeout: int = DETECTION_TIMEOUT
) -> tuple[str, str, int]:
    """Run a command and capture output.

    Args:
        args: Command and arguments.
        timeout: Timeout in seconds.

    Returns:
        Tuple of (stdout, stderr, returncode).
    """
    try:
        result = subprocess.run(  # nosec B603 - args are tool paths and fixed flags
            args,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
        return result.stdout, result.stderr, result.returncode
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out: %s", " ".join(args))
        return "", "timeout", -1
    except OSError as e:
        logger.warning("Command failed: %s - %s", " ".join(args), e)
        return "", str(e), -1


def _parse_codec_list(output: str) -> set[str]:
    """Parse ffmpeg -encoders output into a set of lowercase names."""
    return {
        match.group(1).casefold()
        for line in output.split("\n")
        if (match := _CODEC_LINE_PATTERN.match(line))
    }


def detect_ffmpeg(configured_path: Path | None = None) -> FFmpegInfo:
    """Detect ffmpeg and enumerate its encoders.

    Args:
        configured_path: Optional configured path to ffmpeg.

    Returns:
        FFmpegInfo with status, version and encoder list.
    """
    info = FFmpegInfo()
    info.detected_at = datetime.now(timezone.utc)

    path = _find_tool("ffmpeg", configured_path)
    if not path:
        info.status = ToolStatus.MISSING
        info.status_message = "ffmpeg not found in PATH"
        return info

    info.path = path

    stdout, stderr, rc = _run_command([str(path), "-version"])
    if rc != 0:
        info.status = ToolStatus.ERROR
        info.status_message = f"Failed to get ffmpeg version: {stderr.strip()}"
        return info

    version_match = _VERSION_PATTERN.search(stdout)
    if version_match:
        info.version = version_match.group(1)
        info.version_tuple = parse_version_string(info.version)
        if info.version_tuple is None:
            logger.warning(
                "Could not parse ffmpeg version '%s' into comparable tuple",
                info.version,
            )

    config_match = _CONFIG_PATTERN.search(stdout)
    if config_match:
        info.configuration = config_match.group(1).strip()
        info.is_gpl = "gpl" in re.findall(r"--enable-(\S+)", info.configuration)

    stdout, stderr, rc = _run_command([str(path), "-hide_banner", "-encoders"])
    if rc == 0:
        info.encoders = _parse_codec_list(stdout)
    else:
        logger.warning("Failed to enumerate ffmpeg encoders: %s", stderr.strip())

    info.status = ToolStatus.AVAILABLE
    info.status_message = None
    return info


def check_encoder_availability(
    configured_path: Path | None = None,
) -> EncoderAvailability:
    """Check whether the encoder can be invoked at all.

    Args:
        configured_path: Optional configured path to ffmpeg.

    Returns:
        EncoderAvailability describing the detected encoder.
    """
    info = detect_ffmpeg(configured_path)
    availability = EncoderAvailability.from_info(info)
    logger.debug(
        "Encoder availability: available=%s path=%s version=%s",
        availability.available,
        availability.path,
        availability.version,
    )
    return availability

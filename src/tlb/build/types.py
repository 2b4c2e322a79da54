"""Types for build requests, jobs and their aggregated logs.

This module contains the data shared by the command builder, the process
runner and the orchestrator:

- Codec: Codec identifiers in the default fallback order
- resolve_frame_rate: Coerce user input to a supported frame rate
- BuildRequest: Validated description of one build
- BuildState / BuildJob: The orchestrator's state machine record
- BuildLog: Append-only aggregated log
- AttemptResult: Verdict of one encoder invocation
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tlb.config.models import DEFAULT_FPS, MAX_FPS, MIN_FPS
from tlb.scanner.frames import to_filesystem_path

if TYPE_CHECKING:
    from tlb.exceptions import BuildError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "timelapse.mp4"

# Prefix marking the command echo line in the aggregated log
COMMAND_PREFIX = "$ "


class Codec(str, Enum):
    """Video codecs used by the default fallback order."""

    LIBX264 = "libx264"  # H.264, preferred quality
    MPEG4 = "mpeg4"  # MPEG-4 Part 2, built into every ffmpeg

    def __str__(self) -> str:
        return self.value


DEFAULT_CODEC_ORDER: tuple[str, ...] = (Codec.LIBX264.value, Codec.MPEG4.value)


_NON_DIGITS = re.compile(r"[^0-9]")


def sanitize_frame_rate_input(text: str) -> str:
    """Strip every non-digit character from typed frame rate input.

    Example:
        >>> sanitize_frame_rate_input("24 fps")
        '24'
    """
    return _NON_DIGITS.sub("", text)


def resolve_frame_rate(value: Any, default: int = DEFAULT_FPS) -> int:
    """Resolve a requested frame rate to an integer in [MIN_FPS, MAX_FPS].

    Missing, empty, non-numeric and zero values resolve to ``default``
    before clamping. Numeric values are floored, then clamped.

    Args:
        value: Requested rate (None, int, float or str).
        default: Rate used when value is missing or invalid.

    Returns:
        Frame rate in [MIN_FPS, MAX_FPS].

    Example:
        >>> resolve_frame_rate("500")
        120
        >>> resolve_frame_rate("abc")
        30
    """
    number: float
    if value is None or isinstance(value, bool):
        number = 0.0
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            number = 0.0

    if math.isnan(number) or math.isinf(number) or number == 0:
        number = float(default)

    return max(MIN_FPS, min(MAX_FPS, math.floor(number)))


class BuildRequest(BaseModel):
    """Validated description of one build.

    The session directory is immutable for the duration of the build; the
    artifact is written inside it under ``output_name``.
    """

    model_config = ConfigDict(frozen=True)

    session_dir: Path
    fps: int = Field(default=DEFAULT_FPS, ge=MIN_FPS, le=MAX_FPS)
    output_name: str = DEFAULT_OUTPUT_NAME
    codecs: tuple[str, ...] = DEFAULT_CODEC_ORDER

    @field_validator("session_dir", mode="before")
    @classmethod
    def _normalize_session_dir(cls, value: Any) -> Path:
        return to_filesystem_path(value)

    @field_validator("fps", mode="before")
    @classmethod
    def _coerce_fps(cls, value: Any) -> int:
        return resolve_frame_rate(value)

    @field_validator("output_name")
    @classmethod
    def _check_output_name(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError("output_name must be a plain filename")
        return value

    @field_validator("codecs")
    @classmethod
    def _check_codecs(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one codec is required")
        return tuple(str(codec) for codec in value)

    @property
    def output_path(self) -> Path:
        """Artifact path derived from the session directory."""
        return self.session_dir / self.output_name


class BuildState(Enum):
    """States of a build job."""

    IDLE = "idle"
    VALIDATING = "validating"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BuildState.SUCCEEDED, BuildState.FAILED)


LogListener = Callable[[str], None]


class BuildLog:
    """Append-only record of every command issued and every line emitted.

    Lines are never removed, reordered or deduplicated. Listeners are
    notified synchronously, in order, after each append.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._listeners: list[LogListener] = []

    def append(self, line: str) -> None:
        self._lines.append(line)
        for listener in self._listeners:
            try:
                listener(line)
            except Exception as e:
                logger.warning("Build log listener error: %s", e)

    def subscribe(self, listener: LogListener) -> None:
        """Register a callback invoked with every appended line."""
        self._listeners.append(listener)

    @property
    def lines(self) -> tuple[str, ...]:
        """Snapshot of the log."""
        return tuple(self._lines)

    def command_lines(self) -> list[str]:
        """Command echo lines, in the order the attempts began."""
        return [line for line in self._lines if line.startswith(COMMAND_PREFIX)]

    def text(self) -> str:
        return "\n".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._lines))


@dataclass(frozen=True)
class AttemptResult:
    """Verdict of one encoder invocation.

    ``success`` comes from the process exit status only. ``return_code`` is
    None when the process never started and -1 when it was killed after a
    timeout.
    """

    success: bool
    return_code: int | None
    error: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def started(self) -> bool:
        return self.return_code is not None


@dataclass
class BuildJob:
    """One end-to-end build request and everything it produced.

    Mutated only by the orchestrator driving it. Once the state is terminal
    the job is never reused.
    """

    request: BuildRequest
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: BuildState = BuildState.IDLE
    active_codec: str | None = None
    attempt_index: int | None = None
    frame_count: int | None = None
    log: BuildLog = field(default_factory=BuildLog)
    artifact_path: Path | None = None
    error: BuildError | None = None
    attempts: list[tuple[str, AttemptResult]] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def succeeded(self) -> bool:
        return self.state == BuildState.SUCCEEDED

    @property
    def output_path(self) -> Path:
        return self.request.output_path

"""Build context for structured logging.

Provides context propagation for concurrent builds using contextvars,
enabling automatic injection of job_id and session into log records.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_session: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session", default=None
)

# Number of job id characters shown in the text format tag
_TAG_LENGTH = 8


@contextmanager
def build_context(
    job_id: str,
    session: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for a build's logging context.

    Sets the context on entry and restores the previous values on exit.
    Each asyncio task runs with its own copy of the context, so concurrent
    builds never see each other's values.

    Args:
        job_id: Build job identifier.
        session: Session directory being built.

    Example:
        with build_context(job.job_id, request.session_dir):
            logger.info("Starting build")  # Automatically includes context
    """
    job_token = _job_id.set(job_id)
    session_token = _session.set(str(session) if session is not None else None)
    try:
        yield
    finally:
        _session.reset(session_token)
        _job_id.reset(job_token)


def get_build_context() -> tuple[str | None, str | None]:
    """Get current build context.

    Returns:
        Tuple of (job_id, session), either may be None.
    """
    return _job_id.get(), _session.get()


class BuildContextFilter(logging.Filter):
    """Logging filter that injects build context into log records.

    Adds job_id and session attributes to LogRecord from contextvars. For
    text format, also adds a compact build_tag like [J1a2b3c4d].
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject build context into log record.

        Args:
            record: The log record to process.

        Returns:
            Always True (does not filter, only enriches).
        """
        job_id, session = get_build_context()

        record.job_id = job_id
        record.session = session
        record.build_tag = f"[J{job_id[:_TAG_LENGTH]}] " if job_id else ""

        return True

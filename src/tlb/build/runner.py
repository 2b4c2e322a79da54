"""Encoder process runner.

Runs one encoder invocation as a subprocess and streams its diagnostic
output (stderr) to a caller-supplied sink line by line, as it is produced.
The verdict comes from the exit status only; diagnostic text is never
inspected for success or failure.

Retry policy does not live here: one call is one attempt.
"""

from __future__ import annotations

import asyncio
import logging
import re
import subprocess  # nosec B404 - subprocess constants for encoder invocation
import time
from collections.abc import AsyncIterator, Callable, Sequence

from tlb.build.command import EncoderCommand
from tlb.build.types import AttemptResult

logger = logging.getLogger(__name__)

LineSink = Callable[[str], None]

# ffmpeg ends progress updates with "\r" and everything else with "\n"
_LINE_BREAK = re.compile(rb"\r\n|\r|\n")


async def iter_stream_lines(
    stream: asyncio.StreamReader, chunk_size: int = 4096
) -> AsyncIterator[str]:
    """Yield decoded lines from a stream as soon as each one is complete.

    Both "\\n" and "\\r" terminate a line. A trailing partial line is
    yielded when the stream closes.
    """
    buffer = b""
    while True:
        chunk = await stream.read(chunk_size)
        if not chunk:
            break
        buffer += chunk
        *complete, buffer = _LINE_BREAK.split(buffer)
        for raw in complete:
            yield raw.decode("utf-8", errors="replace")
    if buffer:
        yield buffer.decode("utf-8", errors="replace")


class EncoderProcessRunner:
    """Runs encoder invocations and streams their diagnostic output.

    Start failures and unsuccessful exits both produce a failed
    AttemptResult; neither raises.
    """

    TERMINATE_GRACE_SECONDS: float = 5.0

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the runner.

        Args:
            timeout: Per-attempt limit in seconds. None means no limit.
        """
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        return self._timeout

    async def run(
        self, command: EncoderCommand | Sequence[str], sink: LineSink
    ) -> AttemptResult:
        """Run one encoder invocation.

        Each non-empty, trimmed stderr line is passed to ``sink`` in the
        order it was emitted.

        Args:
            command: Encoder command or raw argument vector.
            sink: Receives diagnostic lines.

        Returns:
            AttemptResult with the verdict.

        Raises:
            asyncio.CancelledError: If the caller cancels; the subprocess
                is terminated first.
        """
        argv = [str(arg) for arg in _argv_of(command)]
        program = argv[0].rsplit("/", 1)[-1] if argv else "unknown"
        logger.debug(
            "Executing command: %s",
            " ".join(argv),
            extra={"command": program, "arg_count": len(argv)},
        )

        start_time = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(  # nosec B603
                *argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            message = f"Failed to start {program}: {e}"
            logger.warning("%s", message)
            _emit(sink, message)
            return AttemptResult(
                success=False,
                return_code=None,
                error=message,
                elapsed_seconds=round(time.monotonic() - start_time, 3),
            )

        try:
            if self._timeout is None:
                return_code = await self._communicate(process, sink)
            else:
                return_code = await asyncio.wait_for(
                    self._communicate(process, sink), self._timeout
                )
        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start_time
            logger.warning(
                "%s timed out after %ss",
                program,
                self._timeout,
                extra={"command": program, "elapsed_seconds": round(elapsed, 3)},
            )
            await self._terminate(process, kill=True)
            message = f"{program} timed out after {self._timeout}s"
            _emit(sink, message)
            return AttemptResult(
                success=False,
                return_code=-1,
                error=message,
                elapsed_seconds=round(elapsed, 3),
            )
        except asyncio.CancelledError:
            logger.info("Attempt cancelled, terminating %s", program)
            await self._terminate(process)
            raise

        elapsed = time.monotonic() - start_time
        logger.debug(
            "Command completed",
            extra={
                "command": program,
                "elapsed_seconds": round(elapsed, 3),
                "returncode": return_code,
            },
        )
        return AttemptResult(
            success=return_code == 0,
            return_code=return_code,
            elapsed_seconds=round(elapsed, 3),
        )

    async def _communicate(
        self, process: asyncio.subprocess.Process, sink: LineSink
    ) -> int:
        """Forward stderr lines to the sink, then wait for the exit status."""
        assert process.stderr is not None
        async for line in iter_stream_lines(process.stderr):
            text = line.strip()
            if text:
                _emit(sink, text)
        return await process.wait()

    async def _terminate(
        self, process: asyncio.subprocess.Process, kill: bool = False
    ) -> None:
        """Stop a running subprocess and reap it."""
        if process.returncode is not None:
            return
        try:
            if kill:
                process.kill()
            else:
                process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), self.TERMINATE_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Encoder ignored terminate, killing pid %s", process.pid)
            process.kill()
            await process.wait()


def _argv_of(command: EncoderCommand | Sequence[str]) -> Sequence[str]:
    if isinstance(command, EncoderCommand):
        return command.argv
    return command


def _emit(sink: LineSink, line: str) -> None:
    try:
        sink(line)
    except Exception as e:
        logger.warning("Line sink error: %s", e)

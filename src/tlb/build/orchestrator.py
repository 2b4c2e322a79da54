"""Build orchestrator.

Drives one BuildJob through its states:

    IDLE -> VALIDATING -> ATTEMPTING(codec i) -> SUCCEEDED
                                              -> ATTEMPTING(codec i + 1)
                                              -> FAILED

Validation checks that the encoder exists and that the session holds at
least one frame; no attempt is made otherwise. Attempts run strictly one at
a time in the request's codec order until one succeeds or the list is
exhausted. Every command issued and every diagnostic line emitted is
appended to the job's log.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from tlb.build.command import EncoderCommand, build_encoder_command
from tlb.build.runner import EncoderProcessRunner, LineSink
from tlb.build.types import (
    COMMAND_PREFIX,
    AttemptResult,
    BuildJob,
    BuildRequest,
    BuildState,
    LogListener,
)
from tlb.exceptions import (
    AttemptsExhaustedError,
    BuildCancelledError,
    BuildError,
    CapabilityUnavailableError,
    EmptyInputError,
    SessionScanError,
)
from tlb.logging import build_context
from tlb.scanner.frames import DEFAULT_NAMING, FrameNaming, scan_session_async
from tlb.tools.detection import check_encoder_availability
from tlb.tools.models import EncoderAvailability

logger = logging.getLogger(__name__)

AvailabilityCheck = Callable[
    [], "EncoderAvailability | Awaitable[EncoderAvailability]"
]


class AttemptRunner(Protocol):
    """Runs one encoder attempt (see EncoderProcessRunner)."""

    async def run(
        self, command: EncoderCommand | Sequence[str], sink: LineSink
    ) -> AttemptResult: ...


class BuildOrchestrator:
    """Builds a video from a session's frames with codec fallback.

    Each call to build() creates a new BuildJob. Builds for different
    sessions share no state and may run concurrently.

    Example:
        orchestrator = BuildOrchestrator()
        job = await orchestrator.build(BuildRequest(session_dir=path, fps="24"))
        if job.succeeded:
            print(job.artifact_path)
    """

    def __init__(
        self,
        runner: AttemptRunner | None = None,
        availability_check: AvailabilityCheck | None = None,
        ffmpeg_path: Path | None = None,
        naming: FrameNaming = DEFAULT_NAMING,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            runner: Attempt runner. Defaults to EncoderProcessRunner().
            availability_check: Callable returning EncoderAvailability
                (sync or async). Defaults to detecting ffmpeg.
            ffmpeg_path: Configured ffmpeg path, used for detection and as
                the executable when detection reports no path.
            naming: Frame naming convention.
        """
        self._runner: AttemptRunner = runner or EncoderProcessRunner()
        self._availability_check = availability_check
        self._ffmpeg_path = ffmpeg_path
        self._naming = naming

    async def check_availability(self) -> EncoderAvailability:
        """Run the encoder availability precondition check."""
        if self._availability_check is None:
            return await asyncio.to_thread(
                check_encoder_availability, self._ffmpeg_path
            )
        result = self._availability_check()
        if inspect.isawaitable(result):
            result = await result
        return result

    async def build(
        self, request: BuildRequest, on_line: LogListener | None = None
    ) -> BuildJob:
        """Run a build to a terminal state.

        Failures are recorded on the returned job rather than raised.

        Args:
            request: Build request.
            on_line: Optional callback receiving every log line as appended.

        Returns:
            The terminal BuildJob.

        Raises:
            asyncio.CancelledError: If cancelled; the job is marked FAILED
                with BuildCancelledError before this propagates.
        """
        job = BuildJob(request=request)
        if on_line is not None:
            job.log.subscribe(on_line)

        with build_context(job.job_id, request.session_dir):
            logger.info(
                "Build requested: session=%s fps=%d codecs=%s",
                request.session_dir,
                request.fps,
                ",".join(request.codecs),
            )
            try:
                await self._drive(job)
            except asyncio.CancelledError:
                self._fail(job, BuildCancelledError(job.active_codec, job.log.lines))
                raise
        return job

    async def build_or_raise(
        self, request: BuildRequest, on_line: LogListener | None = None
    ) -> Path:
        """Run a build and return the artifact path.

        Raises:
            BuildError: The job's error if the build failed.
        """
        job = await self.build(request, on_line)
        if job.error is not None:
            raise job.error
        assert job.artifact_path is not None
        return job.artifact_path

    async def _drive(self, job: BuildJob) -> None:
        request = job.request
        job.state = BuildState.VALIDATING

        availability = await self.check_availability()
        if not availability.available:
            self._fail(job, CapabilityUnavailableError(availability.message))
            return

        try:
            sequence = await scan_session_async(request.session_dir, self._naming)
        except SessionScanError as e:
            self._fail(job, e)
            return

        job.frame_count = sequence.count
        if sequence.count == 0:
            self._fail(job, EmptyInputError(request.session_dir))
            return

        program = availability.path or self._ffmpeg_path or "ffmpeg"
        codecs = request.codecs

        for index, codec in enumerate(codecs):
            job.state = BuildState.ATTEMPTING
            job.active_codec = codec
            job.attempt_index = index

            if availability.supports(codec) is False:
                logger.info("Encoder does not list %s, attempting anyway", codec)

            self._remove_stale_artifact(job)
            command = build_encoder_command(
                request.session_dir,
                request.fps,
                codec,
                request.output_path,
                ffmpeg=program,
                naming=self._naming,
            )
            job.log.append(COMMAND_PREFIX + command.display)
            logger.info(
                "Attempt %d/%d: %d frame(s) at %d fps with %s",
                index + 1,
                len(codecs),
                sequence.count,
                request.fps,
                codec,
            )

            result = await self._runner.run(command, job.log.append)
            if result.success and not request.output_path.is_file():
                result = replace(
                    result, success=False, error="encoder produced no output file"
                )
                job.log.append(f"{codec} exited cleanly but produced no output file")
            job.attempts.append((codec, result))

            if result.success:
                job.artifact_path = request.output_path
                job.log.append(f"Done: {request.output_path}")
                job.state = BuildState.SUCCEEDED
                job.finished_at = datetime.now(timezone.utc)
                logger.info(
                    "Build succeeded with %s in %.1fs: %s",
                    codec,
                    result.elapsed_seconds,
                    request.output_path,
                )
                return

            logger.warning(
                "Attempt with %s failed (return code %s)", codec, result.return_code
            )
            if index + 1 < len(codecs):
                job.log.append(
                    f"{codec} failed or unavailable, retrying with {codecs[index + 1]}"
                )
            else:
                job.log.append(f"{codec} failed")

        self._fail(job, AttemptsExhaustedError(codecs))

    def _remove_stale_artifact(self, job: BuildJob) -> None:
        """Delete any previous artifact so the attempt writes a fresh file."""
        output = job.request.output_path
        try:
            output.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove stale artifact %s: %s", output, e)
            job.log.append(f"Could not remove stale {output}: {e}")

    def _fail(self, job: BuildJob, error: BuildError) -> None:
        if not error.log:
            error.log = job.log.lines
        job.error = error
        job.artifact_path = None
        job.state = BuildState.FAILED
        job.finished_at = datetime.now(timezone.utc)
        logger.error("Build failed: %s", error.message)

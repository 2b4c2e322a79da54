"""Unit tests for the build orchestrator state machine."""

import asyncio
from collections.abc import Sequence
from pathlib import Path

import pytest

from tlb.build import (
    AttemptResult,
    BuildOrchestrator,
    BuildRequest,
    BuildState,
    EncoderCommand,
)
from tlb.exceptions import (
    AttemptsExhaustedError,
    CapabilityUnavailableError,
    EmptyInputError,
    SessionScanError,
)
from tlb.tools import EncoderAvailability

FFMPEG = Path("/usr/bin/ffmpeg")


def available() -> EncoderAvailability:
    return EncoderAvailability(
        available=True,
        path=FFMPEG,
        version="6.1.1",
        encoders=frozenset({"libx264", "mpeg4"}),
    )


class FakeRunner:
    """Attempt runner that succeeds or fails per codec without a subprocess.

    Successful attempts write the output file, like the real encoder.
    """

    def __init__(
        self,
        failing: Sequence[str] = (),
        write_output: bool = True,
        lines: Sequence[str] = ("encoding",),
    ) -> None:
        self.failing = set(failing)
        self.write_output = write_output
        self.lines = list(lines)
        self.commands: list[EncoderCommand] = []

    async def run(self, command, sink) -> AttemptResult:
        self.commands.append(command)
        for line in self.lines:
            sink(f"{command.codec}: {line}")
        if command.codec in self.failing:
            sink(f"Unknown encoder '{command.codec}'")
            return AttemptResult(success=False, return_code=1)
        if self.write_output:
            command.output_path.write_bytes(b"video")
        return AttemptResult(success=True, return_code=0, elapsed_seconds=0.1)


class BlockingRunner:
    """Attempt runner that never finishes until cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    async def run(self, command, sink) -> AttemptResult:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        raise AssertionError("unreachable")


class TestPreconditions:
    """Validation failures never start an attempt."""

    @pytest.mark.asyncio
    async def test_encoder_unavailable(self, make_session) -> None:
        runner = FakeRunner()
        orchestrator = BuildOrchestrator(
            runner=runner,
            availability_check=lambda: EncoderAvailability.unavailable(
                "ffmpeg not found in PATH"
            ),
        )

        job = await orchestrator.build(BuildRequest(session_dir=make_session(3)))

        assert job.state == BuildState.FAILED
        assert isinstance(job.error, CapabilityUnavailableError)
        assert "ffmpeg not found in PATH" in job.error.message
        assert runner.commands == []
        assert job.artifact_path is None

    @pytest.mark.asyncio
    async def test_missing_session(self, tmp_path: Path) -> None:
        runner = FakeRunner()
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=tmp_path / "gone"))

        assert job.state == BuildState.FAILED
        assert isinstance(job.error, SessionScanError)
        assert runner.commands == []

    @pytest.mark.asyncio
    async def test_empty_session(self, make_session) -> None:
        session = make_session(0)
        (session / "notes.txt").write_text("not a frame")
        runner = FakeRunner()
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=session))

        assert job.state == BuildState.FAILED
        assert isinstance(job.error, EmptyInputError)
        assert "0 frames" in job.error.message
        assert job.frame_count == 0
        assert runner.commands == []
        assert len(job.log) == 0

    @pytest.mark.asyncio
    async def test_async_availability_check(self, make_session) -> None:
        async def check() -> EncoderAvailability:
            return available()

        orchestrator = BuildOrchestrator(runner=FakeRunner(), availability_check=check)

        job = await orchestrator.build(BuildRequest(session_dir=make_session(2)))

        assert job.succeeded


class TestAttempts:
    """Codec attempts and fallback."""

    @pytest.mark.asyncio
    async def test_primary_codec_succeeds(self, make_session) -> None:
        session = make_session(3)
        runner = FakeRunner()
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=session, fps="24"))

        output = session / "timelapse.mp4"
        assert job.state == BuildState.SUCCEEDED
        assert job.succeeded
        assert job.artifact_path == output
        assert job.active_codec == "libx264"
        assert job.frame_count == 3
        assert job.error is None
        assert [c.codec for c in runner.commands] == ["libx264"]
        assert job.log.lines == (
            f"$ ffmpeg -y -framerate 24 -i {session}/img_%05d.jpg "
            f"-c:v libx264 -pix_fmt yuv420p {output}",
            "libx264: encoding",
            f"Done: {output}",
        )

    @pytest.mark.asyncio
    async def test_detected_path_is_executed(self, make_session) -> None:
        runner = FakeRunner()
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        await orchestrator.build(BuildRequest(session_dir=make_session(1)))

        assert runner.commands[0].argv[0] == str(FFMPEG)

    @pytest.mark.asyncio
    async def test_fallback_to_second_codec(self, make_session) -> None:
        session = make_session(3)
        runner = FakeRunner(failing=["libx264"])
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=session))

        assert job.state == BuildState.SUCCEEDED
        assert job.active_codec == "mpeg4"
        assert job.attempt_index == 1
        assert [codec for codec, _ in job.attempts] == ["libx264", "mpeg4"]
        assert len(job.log.command_lines()) == 2

        lines = list(job.log.lines)
        retry = lines.index("libx264 failed or unavailable, retrying with mpeg4")
        assert lines.index("Unknown encoder 'libx264'") < retry
        assert retry < lines.index(job.log.command_lines()[1])
        assert lines[-1] == f"Done: {session / 'timelapse.mp4'}"

    @pytest.mark.asyncio
    async def test_all_codecs_fail(self, make_session) -> None:
        session = make_session(3)
        runner = FakeRunner(failing=["libx264", "mpeg4"])
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=session))

        assert job.state == BuildState.FAILED
        assert isinstance(job.error, AttemptsExhaustedError)
        assert job.error.message == "Encoder failed with libx264, mpeg4 (see logs)."
        assert job.error.log == job.log.lines
        assert job.artifact_path is None
        assert len(job.log.command_lines()) == 2
        assert job.log.lines[-1] == "mpeg4 failed"
        assert not (session / "timelapse.mp4").exists()

    @pytest.mark.asyncio
    async def test_clean_exit_without_output_is_failure(self, make_session) -> None:
        runner = FakeRunner(write_output=False)
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=make_session(2)))

        assert job.state == BuildState.FAILED
        assert isinstance(job.error, AttemptsExhaustedError)
        assert "libx264 exited cleanly but produced no output file" in job.log.lines
        assert all(not result.success for _, result in job.attempts)

    @pytest.mark.asyncio
    async def test_stale_artifact_removed_before_attempt(self, make_session) -> None:
        session = make_session(2)
        stale = session / "timelapse.mp4"
        stale.write_bytes(b"old video")
        runner = FakeRunner(failing=["libx264", "mpeg4"])
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(BuildRequest(session_dir=session))

        assert job.state == BuildState.FAILED
        assert not stale.exists()

    @pytest.mark.asyncio
    async def test_single_codec_order(self, make_session) -> None:
        runner = FakeRunner(failing=["mpeg4"])
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        job = await orchestrator.build(
            BuildRequest(session_dir=make_session(1), codecs=("mpeg4",))
        )

        assert job.state == BuildState.FAILED
        assert job.error.message == "Encoder failed with mpeg4 (see logs)."
        assert len(runner.commands) == 1

    @pytest.mark.asyncio
    async def test_on_line_receives_every_line(self, make_session) -> None:
        seen: list[str] = []
        orchestrator = BuildOrchestrator(
            runner=FakeRunner(failing=["libx264"]), availability_check=available
        )

        job = await orchestrator.build(
            BuildRequest(session_dir=make_session(2)), on_line=seen.append
        )

        assert tuple(seen) == job.log.lines


class TestBuildOrRaise:
    """Tests for build_or_raise()."""

    @pytest.mark.asyncio
    async def test_returns_artifact(self, make_session) -> None:
        session = make_session(2)
        orchestrator = BuildOrchestrator(
            runner=FakeRunner(), availability_check=available
        )

        path = await orchestrator.build_or_raise(BuildRequest(session_dir=session))

        assert path == session / "timelapse.mp4"

    @pytest.mark.asyncio
    async def test_raises_build_error(self, make_session) -> None:
        orchestrator = BuildOrchestrator(
            runner=FakeRunner(failing=["libx264", "mpeg4"]),
            availability_check=available,
        )

        with pytest.raises(AttemptsExhaustedError) as exc_info:
            await orchestrator.build_or_raise(BuildRequest(session_dir=make_session(2)))

        assert exc_info.value.log


class TestConcurrency:
    """Builds for different sessions are independent."""

    @pytest.mark.asyncio
    async def test_concurrent_builds(self, make_session) -> None:
        first = make_session(2, name="first")
        second = make_session(3, name="second")
        orchestrator = BuildOrchestrator(
            runner=FakeRunner(failing=["libx264"]), availability_check=available
        )

        job_a, job_b = await asyncio.gather(
            orchestrator.build(BuildRequest(session_dir=first)),
            orchestrator.build(BuildRequest(session_dir=second)),
        )

        assert job_a.succeeded and job_b.succeeded
        assert job_a.frame_count == 2
        assert job_b.frame_count == 3
        assert all(str(first) in line for line in job_a.log.command_lines())
        assert all(str(second) in line for line in job_b.log.command_lines())

    @pytest.mark.asyncio
    async def test_cancel_during_attempt(self, make_session) -> None:
        runner = BlockingRunner()
        orchestrator = BuildOrchestrator(runner=runner, availability_check=available)

        task = asyncio.create_task(
            orchestrator.build(BuildRequest(session_dir=make_session(2)))
        )
        await asyncio.wait_for(runner.started.wait(), timeout=5)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert runner.cancelled

"""TLB build command.

Builds a video from a session's numbered frames, trying each configured
codec in order, and optionally exports the result to the media library.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from pydantic import ValidationError

from tlb.build import (
    BuildJob,
    BuildOrchestrator,
    BuildRequest,
    EncoderProcessRunner,
    resolve_frame_rate,
    sanitize_frame_rate_input,
)
from tlb.cli import load_cli_config
from tlb.cli.exit_codes import ExitCode
from tlb.cli.export import (
    create_exporter,
    export_exit_code,
    export_result_data,
    format_export_message,
)
from tlb.cli.output import CLIResult, error_exit, success_output
from tlb.exceptions import (
    AttemptsExhaustedError,
    BuildCancelledError,
    BuildError,
    CapabilityUnavailableError,
    EmptyInputError,
    SessionScanError,
)
from tlb.export import ExportError
from tlb.scanner import FrameNaming, count_frames
from tlb.tools import parse_stderr_progress


BUILD_ERROR_EXIT_CODES: dict[type[BuildError], ExitCode] = {
    CapabilityUnavailableError: ExitCode.TOOL_NOT_AVAILABLE,
    SessionScanError: ExitCode.TARGET_NOT_FOUND,
    EmptyInputError: ExitCode.NO_FRAMES_FOUND,
    AttemptsExhaustedError: ExitCode.OPERATION_FAILED,
    BuildCancelledError: ExitCode.INTERRUPTED,
}


def build_exit_code(error: BuildError) -> ExitCode:
    """Map a build failure to its exit code."""
    for error_type, code in BUILD_ERROR_EXIT_CODES.items():
        if isinstance(error, error_type):
            return code
    return ExitCode.GENERAL_ERROR


class LiveLogPrinter:
    """Echoes build log lines as they arrive.

    Encoder progress lines are prefixed with the percentage of frames
    encoded when the frame count is known.
    """

    def __init__(self, total_frames: int | None = None) -> None:
        self.total_frames = total_frames

    def __call__(self, line: str) -> None:
        progress = parse_stderr_progress(line)
        if progress is not None and progress.frame is not None and self.total_frames:
            percent = progress.get_frame_percent(self.total_frames)
            click.echo(f"[{percent:5.1f}%] {line}")
        else:
            click.echo(line)


def _preview_frame_count(session_dir: Path, naming: FrameNaming) -> int | None:
    # Errors are reported by the build itself, after the encoder check
    try:
        return count_frames(session_dir, naming)
    except SessionScanError:
        return None


def _job_data(job: BuildJob) -> dict:
    return {
        "job_id": job.job_id,
        "session": str(job.request.session_dir),
        "fps": job.request.fps,
        "frame_count": job.frame_count,
        "codec": job.active_codec,
        "artifact": str(job.artifact_path) if job.artifact_path else None,
        "attempts": [
            {
                "codec": codec,
                "success": result.success,
                "return_code": result.return_code,
                "elapsed_seconds": result.elapsed_seconds,
            }
            for codec, result in job.attempts
        ],
        "log": list(job.log.lines),
    }


@click.command("build")
@click.argument("session_dir", type=click.Path(path_type=Path))
@click.option(
    "--fps",
    default=None,
    help="Frame rate, 1-120. Non-digits are ignored; empty or 0 uses the default.",
)
@click.option(
    "--output-name",
    default=None,
    help="Video filename inside the session directory (default: timelapse.mp4).",
)
@click.option(
    "--codec",
    "codecs",
    multiple=True,
    help="Codec to try, in order. Repeat for fallbacks (default: libx264, mpeg4).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-attempt encoder timeout in seconds.",
)
@click.option(
    "--export",
    "export_after",
    is_flag=True,
    help="Save the video to the media library after a successful build.",
)
@click.option(
    "--collection",
    default=None,
    help="Collection used with --export (default: Turtle Timelapse).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Do not echo encoder output while building.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def build_command(
    ctx: click.Context,
    session_dir: Path,
    fps: str | None,
    output_name: str | None,
    codecs: tuple[str, ...],
    timeout: float | None,
    export_after: bool,
    collection: str | None,
    quiet: bool,
    json_output: bool,
) -> None:
    """Build a timelapse video from the frames in SESSION_DIR.

    Frames must be named img_00001.jpg, img_00002.jpg, ... The video is
    written into SESSION_DIR, replacing any previous one. If the first codec
    fails, the next one is tried.
    """
    config = load_cli_config(
        ctx, output_name=output_name, collection_name=collection
    )
    naming = FrameNaming(
        prefix=config.build.frame_prefix,
        extension=config.build.frame_extension,
    )

    requested = sanitize_frame_rate_input(fps) if fps is not None else None
    frame_rate = resolve_frame_rate(requested, config.build.default_fps)

    try:
        request = BuildRequest(
            session_dir=session_dir,
            fps=frame_rate,
            output_name=config.build.output_name,
            codecs=codecs or config.build.codecs,
        )
    except ValidationError as e:
        error_exit(f"Invalid build request: {e}", ExitCode.INVALID_INPUT, json_output)

    live = not (quiet or json_output)
    printer = None
    if live:
        total = _preview_frame_count(request.session_dir, naming)
        click.echo(f"Frames: {total if total is not None else '?'}")
        click.echo(f"FPS: {request.fps}")
        printer = LiveLogPrinter(total)

    orchestrator = BuildOrchestrator(
        runner=EncoderProcessRunner(
            timeout=timeout or config.build.attempt_timeout_seconds
        ),
        ffmpeg_path=config.tools.ffmpeg,
        naming=naming,
    )

    try:
        job = asyncio.run(orchestrator.build(request, on_line=printer))
    except KeyboardInterrupt:
        error_exit("Build cancelled", ExitCode.INTERRUPTED, json_output)

    if job.error is not None:
        error_exit(
            job.error.message,
            build_exit_code(job.error),
            json_output,
            log=() if live else job.error.log,
        )

    data = _job_data(job)
    result = CLIResult(
        success=True, message=f"Video: {job.artifact_path}", data=data
    )

    if export_after and job.artifact_path is not None:
        exporter = create_exporter(config.export)
        try:
            export_result = exporter.export(job.artifact_path)
        except ExportError as e:
            # The artifact stays in the session directory either way
            success_output(result, json_output)
            error_exit(str(e), export_exit_code(e), json_output)
        data["export"] = export_result_data(export_result)
        result.message = f"{result.message}\n{format_export_message(export_result)}"

    success_output(result, json_output)

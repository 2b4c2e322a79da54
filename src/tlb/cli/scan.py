"""TLB scan command for inspecting a session's frames."""

from pathlib import Path

import click

from tlb.cli import load_cli_config
from tlb.cli.exit_codes import ExitCode
from tlb.cli.output import CLIResult, error_exit, success_output, warning_output
from tlb.exceptions import SessionScanError
from tlb.scanner import FrameNaming, scan_session

# Gaps listed in text output before truncating
_MAX_GAPS_SHOWN = 10


@click.command("scan")
@click.argument("session_dir", type=click.Path(path_type=Path))
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def scan_command(ctx: click.Context, session_dir: Path, json_output: bool) -> None:
    """Count the frames in SESSION_DIR.

    Reports the number of frames matching the naming convention, the index
    range, and any missing indices.
    """
    config = load_cli_config(ctx)
    naming = FrameNaming(
        prefix=config.build.frame_prefix,
        extension=config.build.frame_extension,
    )

    try:
        sequence = scan_session(session_dir, naming)
    except SessionScanError as e:
        error_exit(e.message, ExitCode.TARGET_NOT_FOUND, json_output)

    if sequence.count == 0:
        message = f"Frames: 0 (no {naming.input_pattern} files in {sequence.directory})"
    else:
        message = (
            f"Frames: {sequence.count} "
            f"({naming.filename(sequence.first_index)} .. "
            f"{naming.filename(sequence.last_index)})"
        )

    success_output(
        CLIResult(
            success=True,
            message=message,
            data={
                "directory": str(sequence.directory),
                "frame_count": sequence.count,
                "first_index": sequence.first_index,
                "last_index": sequence.last_index,
                "missing": list(sequence.missing),
            },
        ),
        json_output,
    )

    if sequence.missing:
        shown = ", ".join(str(i) for i in sequence.missing[:_MAX_GAPS_SHOWN])
        if len(sequence.missing) > _MAX_GAPS_SHOWN:
            shown += ", ..."
        warning_output(
            f"{len(sequence.missing)} missing frame(s): {shown}. "
            "Encoding stops at the first gap.",
            json_output,
        )

"""TLB doctor command for checking the encoder.

This module provides the 'tlb doctor' command to check that ffmpeg is
installed and which of the configured codecs it lists.
"""

import json
import sys

import click

from tlb.cli import load_cli_config
from tlb.cli.exit_codes import ExitCode
from tlb.tools import FFmpegInfo, detect_ffmpeg

INSTALL_HINT = "Install ffmpeg: https://ffmpeg.org/download.html"


def _format_status(available: bool) -> str:
    """Format status for display."""
    return "✓" if available else "✗"


def _format_version(version: str | None) -> str:
    return version if version else "not found"


def _codec_support(info: FFmpegInfo, codecs: tuple[str, ...]) -> dict[str, bool]:
    return {codec: info.has_encoder(codec) for codec in codecs}


def _exit_code_for(info: FFmpegInfo, support: dict[str, bool]) -> ExitCode:
    if not info.is_available():
        return ExitCode.CRITICAL
    if not all(support.values()):
        return ExitCode.WARNINGS
    return ExitCode.SUCCESS


@click.command("doctor")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show detailed encoder information",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def doctor_command(ctx: click.Context, verbose: bool, json_output: bool) -> None:
    """Check encoder availability and codec support.

    Exit codes:
      0  - ffmpeg available and every configured codec listed
      60 - ffmpeg available but some codecs are not listed
      61 - ffmpeg missing or not runnable
    """
    config = load_cli_config(ctx)
    codecs = config.build.codecs

    info = detect_ffmpeg(config.tools.ffmpeg)
    support = _codec_support(info, codecs) if info.is_available() else {}
    exit_code = _exit_code_for(info, support)

    if json_output:
        data = {
            "ffmpeg": {
                "available": info.is_available(),
                "status": info.status.value,
                "message": info.status_message,
                "path": str(info.path) if info.path else None,
                "version": info.version,
                "gpl": info.is_gpl,
                "encoder_count": len(info.encoders),
            },
            "codecs": support,
            "exit_code": int(exit_code),
        }
        click.echo(json.dumps(data, indent=2))
        sys.exit(exit_code)

    click.echo("TLB Encoder Health Check")
    click.echo("=" * 40)
    click.echo()

    status = _format_status(info.is_available())
    version = _format_version(info.version)
    path_info = f" ({info.path})" if info.path and verbose else ""
    click.echo(f"  {status} ffmpeg: {version}{path_info}")
    if not info.is_available():
        if info.status_message:
            click.echo(f"    ├─ {info.status_message}")
        click.echo(f"    └─ {INSTALL_HINT}")
        click.echo()
        click.echo("Builds cannot run until ffmpeg is installed.")
        sys.exit(exit_code)

    if verbose:
        click.echo(f"    ├─ GPL build: {'yes' if info.is_gpl else 'no'}")
        click.echo(f"    └─ Encoders: {len(info.encoders)}")

    click.echo()
    click.echo("Codecs (in fallback order):")
    click.echo("-" * 20)
    for codec, listed in support.items():
        note = "" if listed else " (not listed, will still be attempted)"
        click.echo(f"  {_format_status(listed)} {codec}{note}")

    if verbose:
        click.echo()
        click.echo("Configuration:")
        click.echo("-" * 20)
        if config.tools.ffmpeg:
            click.echo(f"  ffmpeg path: {config.tools.ffmpeg}")
        click.echo(f"  default fps: {config.build.default_fps}")
        click.echo(f"  output name: {config.build.output_name}")
        timeout = config.build.attempt_timeout_seconds
        click.echo(f"  attempt timeout: {f'{timeout}s' if timeout else 'none'}")

    click.echo()
    if exit_code == ExitCode.SUCCESS:
        click.echo("All checks passed.")
    else:
        click.echo("Some codecs are not listed; builds fall back to the next one.")
    sys.exit(exit_code)

"""CLI module for Timelapse Builder."""

import logging
from dataclasses import replace
from pathlib import Path

import click

from tlb.cli.exit_codes import ExitCode
from tlb.cli.output import error_exit
from tlb.config import TLBConfig, get_config

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from tlb.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_configured = True


def load_cli_config(
    ctx: click.Context,
    *,
    output_name: str | None = None,
    library_dir: Path | None = None,
    collection_name: str | None = None,
) -> TLBConfig:
    """Get the configuration for a command with CLI overrides applied.

    Uses a config placed in ``ctx.obj["config"]`` when present, otherwise
    resolves it from the environment. Exits with CONFIG_ERROR on invalid
    values.
    """
    obj = ctx.find_object(dict)
    base = obj.get("config") if obj is not None else None
    try:
        if base is None:
            return get_config(
                output_name=output_name,
                library_dir=library_dir,
                collection_name=collection_name,
            )
        return replace(
            base,
            build=replace(
                base.build, output_name=output_name or base.build.output_name
            ),
            export=replace(
                base.export,
                library_dir=library_dir or base.export.library_dir,
                collection_name=collection_name or base.export.collection_name,
            ),
        )
    except ValueError as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR)


@click.group()
@click.version_option(package_name="timelapse-builder")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Timelapse Builder - turn numbered frames into a single video."""
    ctx.ensure_object(dict)
    try:
        _configure_logging(log_level, log_file, log_json)
    except ValueError as e:
        error_exit(f"Invalid logging configuration: {e}", ExitCode.CONFIG_ERROR)


# Defer import to avoid circular dependency
def _register_commands():
    from tlb.cli.build import build_command
    from tlb.cli.doctor import doctor_command
    from tlb.cli.export import export_command
    from tlb.cli.scan import scan_command

    main.add_command(build_command)
    main.add_command(doctor_command)
    main.add_command(export_command)
    main.add_command(scan_command)


_register_commands()

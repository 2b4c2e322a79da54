"""TLB export command for saving a finished video to the media library."""

from pathlib import Path

import click

from tlb.cli import load_cli_config
from tlb.cli.exit_codes import ExitCode
from tlb.cli.output import CLIResult, error_exit, success_output
from tlb.config import ExportConfig
from tlb.config.loader import get_default_library_dir
from tlb.export import (
    ArtifactExporter,
    ArtifactNotFoundError,
    ExportError,
    ExportPermissionDeniedError,
    ExportResult,
    LocalMediaLibrary,
)
from tlb.scanner import to_filesystem_path


def export_exit_code(error: ExportError) -> ExitCode:
    """Map an export failure to its exit code."""
    if isinstance(error, ArtifactNotFoundError):
        return ExitCode.ARTIFACT_NOT_FOUND
    if isinstance(error, ExportPermissionDeniedError):
        return ExitCode.PERMISSION_DENIED
    return ExitCode.EXPORT_FAILED


def create_exporter(config: ExportConfig) -> ArtifactExporter:
    """Build an exporter backed by the configured local media library."""
    library = LocalMediaLibrary(
        config.library_dir or get_default_library_dir(),
        granted=config.permission_granted,
    )
    return ArtifactExporter(library, collection_name=config.collection_name)


def export_result_data(result: ExportResult) -> dict:
    return {
        "artifact": str(result.artifact_path),
        "asset_id": result.asset.asset_id,
        "asset_path": str(result.asset.path),
        "collection": result.collection.name,
        "collection_created": result.collection_created,
    }


def format_export_message(result: ExportResult) -> str:
    verb = "Created" if result.collection_created else "Added to"
    return f"Saved to library. {verb} collection '{result.collection.name}'."


@click.command("export")
@click.argument("artifact", type=click.Path(path_type=Path))
@click.option(
    "--collection",
    default=None,
    help="Collection to add the video to (default: Turtle Timelapse).",
)
@click.option(
    "--library-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Media library root (default: ~/.tlb/library).",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def export_command(
    ctx: click.Context,
    artifact: Path,
    collection: str | None,
    library_dir: Path | None,
    json_output: bool,
) -> None:
    """Save ARTIFACT to the media library and add it to a collection.

    The artifact itself is left in place.
    """
    config = load_cli_config(
        ctx, library_dir=library_dir, collection_name=collection
    )
    exporter = create_exporter(config.export)

    try:
        result = exporter.export(to_filesystem_path(artifact))
    except ExportError as e:
        error_exit(str(e), export_exit_code(e), json_output)

    success_output(
        CLIResult(
            success=True,
            message=format_export_message(result),
            data=export_result_data(result),
        ),
        json_output,
    )

"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (TLB_*)
3. Default values

There is no configuration file; everything persistent lives next to the
frames in the session directory.

Environment variables:
- TLB_FFMPEG_PATH: Path to ffmpeg executable
- TLB_DEFAULT_FPS: Frame rate used for missing or invalid input (default 30)
- TLB_OUTPUT_NAME: Artifact filename inside the session (default timelapse.mp4)
- TLB_CODECS: Comma-separated codec order (default libx264,mpeg4)
- TLB_ATTEMPT_TIMEOUT: Per-attempt encoder timeout in seconds
- TLB_LIBRARY_DIR: Root of the local media library (default ~/.tlb/library)
- TLB_COLLECTION_NAME: Collection finished videos are added to
- TLB_EXPORT_GRANTED: Whether exporting to the library is permitted
- TLB_LOG_LEVEL / TLB_LOG_FILE / TLB_LOG_FORMAT: Logging defaults
- TLB_DATA_DIR: Base data directory (default ~/.tlb)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from tlb.config.env import EnvReader
from tlb.config.models import (
    BuildConfig,
    ExportConfig,
    LoggingConfig,
    TLBConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".tlb"


def get_data_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the TLB data directory.

    Can be overridden by TLB_DATA_DIR environment variable.

    Args:
        env: Optional environment mapping (defaults to os.environ).

    Returns:
        Path to the data directory (~/.tlb/ by default).
    """
    reader = EnvReader(env)
    return reader.get_path("TLB_DATA_DIR", must_exist=False) or DEFAULT_DATA_DIR


def get_default_library_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the default media library location (<data dir>/library)."""
    return get_data_dir(env) / "library"


def get_config(
    env: Mapping[str, str] | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    output_name: str | None = None,
    library_dir: Path | None = None,
    collection_name: str | None = None,
) -> TLBConfig:
    """Get TLB configuration with full precedence handling.

    Args:
        env: Optional environment mapping (defaults to os.environ).
        ffmpeg_path: CLI override for ffmpeg path.
        output_name: CLI override for the artifact filename.
        library_dir: CLI override for the media library root.
        collection_name: CLI override for the export collection.

    Returns:
        TLBConfig with merged configuration.

    Raises:
        ValueError: If a resulting value fails validation.
    """
    reader = EnvReader(env)

    tools = ToolPathsConfig(
        ffmpeg=ffmpeg_path or reader.get_path("TLB_FFMPEG_PATH"),
    )

    defaults = BuildConfig()
    codecs = reader.get_list("TLB_CODECS", default=list(defaults.codecs))
    build = BuildConfig(
        default_fps=reader.get_int("TLB_DEFAULT_FPS", defaults.default_fps),
        output_name=(
            output_name or reader.get_str("TLB_OUTPUT_NAME", defaults.output_name)
        ),
        codecs=tuple(codecs),
        attempt_timeout_seconds=reader.get_float("TLB_ATTEMPT_TIMEOUT"),
    )

    export_defaults = ExportConfig()
    export = ExportConfig(
        library_dir=(
            library_dir
            or reader.get_path("TLB_LIBRARY_DIR", must_exist=False)
            or get_default_library_dir(env)
        ),
        collection_name=(
            collection_name
            or reader.get_str("TLB_COLLECTION_NAME", export_defaults.collection_name)
        ),
        permission_granted=reader.get_bool(
            "TLB_EXPORT_GRANTED", export_defaults.permission_granted
        ),
    )

    log_defaults = LoggingConfig()
    logging_config = LoggingConfig(
        level=reader.get_str("TLB_LOG_LEVEL", log_defaults.level),
        file=reader.get_path("TLB_LOG_FILE", must_exist=False),
        format=reader.get_str("TLB_LOG_FORMAT", log_defaults.format),
    )

    return TLBConfig(
        tools=tools,
        build=build,
        export=export,
        logging=logging_config,
    )

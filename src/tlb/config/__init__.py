"""Configuration management for Timelapse Builder.

Configuration is resolved with the following precedence:
1. CLI flags (highest priority)
2. Environment variables (TLB_*)
3. Default values (lowest priority)
"""

from tlb.config.env import EnvReader
from tlb.config.loader import (
    get_config,
    get_data_dir,
    get_default_library_dir,
)
from tlb.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from tlb.config.models import (
    DEFAULT_FPS,
    MAX_FPS,
    MIN_FPS,
    BuildConfig,
    ExportConfig,
    LoggingConfig,
    TLBConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "BuildConfig",
    "DEFAULT_FPS",
    "ExportConfig",
    "LoggingConfig",
    "MAX_FPS",
    "MIN_FPS",
    "TLBConfig",
    "ToolPathsConfig",
    # Loader
    "EnvReader",
    "get_config",
    "get_data_dir",
    "get_default_library_dir",
    "build_logging_config",
    "configure_logging_from_cli",
]

"""Video build pipeline.

Public API:
    - BuildOrchestrator: Runs a build with codec fallback
    - BuildRequest / BuildJob / BuildState / BuildLog: Build records
    - build_encoder_command / EncoderCommand: Encoder invocation
    - EncoderProcessRunner / AttemptResult: One encoder attempt
    - resolve_frame_rate / sanitize_frame_rate_input: Frame rate input
"""

from tlb.build.command import (
    OUTPUT_PIXEL_FORMAT,
    EncoderCommand,
    build_encoder_command,
    build_input_pattern,
)
from tlb.build.orchestrator import AttemptRunner, BuildOrchestrator
from tlb.build.runner import EncoderProcessRunner, iter_stream_lines
from tlb.build.types import (
    COMMAND_PREFIX,
    DEFAULT_CODEC_ORDER,
    DEFAULT_OUTPUT_NAME,
    AttemptResult,
    BuildJob,
    BuildLog,
    BuildRequest,
    BuildState,
    Codec,
    resolve_frame_rate,
    sanitize_frame_rate_input,
)

__all__ = [
    "AttemptResult",
    "AttemptRunner",
    "BuildJob",
    "BuildLog",
    "BuildOrchestrator",
    "BuildRequest",
    "BuildState",
    "COMMAND_PREFIX",
    "Codec",
    "DEFAULT_CODEC_ORDER",
    "DEFAULT_OUTPUT_NAME",
    "EncoderCommand",
    "EncoderProcessRunner",
    "OUTPUT_PIXEL_FORMAT",
    "build_encoder_command",
    "build_input_pattern",
    "iter_stream_lines",
    "resolve_frame_rate",
    "sanitize_frame_rate_input",
]

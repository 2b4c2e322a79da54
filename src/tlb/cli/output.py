"""Unified CLI output formatting for JSON and human-readable output.

This module provides consistent error handling and output formatting
across all CLI commands.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from tlb.cli.exit_codes import ExitCode


@dataclass
class CLIResult:
    """Result object for CLI operations.

    Provides consistent JSON serialization for command results.
    """

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: ExitCode | int = ExitCode.SUCCESS

    def to_json(self) -> str:
        """Serialize to JSON string.

        Returns:
            JSON string with status, message, and optional data fields.
        """
        output: dict[str, Any] = {
            "status": "completed" if self.success else "failed",
        }
        if self.success:
            output["message"] = self.message
        else:
            if isinstance(self.exit_code, ExitCode):
                code_name = self.exit_code.name
            else:
                code_name = "UNKNOWN_ERROR"
            output["error"] = {
                "code": code_name,
                "message": self.message,
            }
        output.update(self.data)
        return json.dumps(output, indent=2, default=str)


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
    log: Sequence[str] = (),
) -> NoReturn:
    """Exit with formatted error message.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).
        json_output: Whether to format output as JSON.
        log: Aggregated build log shown along with the message.

    Note:
        This function never returns; it always calls sys.exit().
    """
    if isinstance(code, ExitCode):
        code_name = code.name
        exit_value = int(code)
    else:
        code_name = "UNKNOWN_ERROR"
        exit_value = code

    if json_output:
        payload: dict[str, Any] = {
            "status": "failed",
            "error": {
                "code": code_name,
                "message": message,
            },
        }
        if log:
            payload["log"] = list(log)
        click.echo(json.dumps(payload), err=True)
    else:
        if log:
            click.echo("Logs:", err=True)
            for line in log:
                click.echo(f"  {line}", err=True)
        click.echo(f"Error: {message}", err=True)

    sys.exit(exit_value)


def success_output(
    result: CLIResult,
    json_output: bool = False,
) -> None:
    """Output successful result in appropriate format."""
    if json_output:
        click.echo(result.to_json())
    else:
        click.echo(result.message)


def warning_output(
    message: str,
    json_output: bool = False,
) -> None:
    """Output a warning message (suppressed in JSON mode)."""
    if not json_output:
        click.echo(f"Warning: {message}", err=True)

"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from shipit.core.errors import ErrorCode
from shipit.output.console import Style
from shipit.services.errors import DeployError

if TYPE_CHECKING:
    from shipit.cli.context import CLIContext


def deploy_error_code(error: DeployError) -> ErrorCode:
    """Map a deploy failure to the process exit code."""
    match error.kind:
        case "invalid_input" | "invalid_version" | "version_not_increasing" | "tag_exists":
            return ErrorCode.USER_ERROR
        case "not_a_repository" | "git_failed":
            return ErrorCode.ENV_ERROR
        case "build_failed" | "artifact_missing":
            return ErrorCode.BUILD_ERROR
        case "push_failed":
            return ErrorCode.NETWORK_ERROR
        case "version_file" | "move_failed":
            return ErrorCode.IO_ERROR


def exit_with_error(
    ctx: CLIContext, message: str, *, hint: str | None = None, code: ErrorCode
) -> NoReturn:
    """Print ``error: message`` (and a dimmed hint) and exit with ``code``."""
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def exit_on_deploy_error(ctx: CLIContext, error: DeployError) -> NoReturn:
    exit_with_error(ctx, error.message, hint=error.hint, code=deploy_error_code(error))

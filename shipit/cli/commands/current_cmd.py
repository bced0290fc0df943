"""Current command - show the recorded release version."""

from __future__ import annotations

import typer

from shipit.cli.commands._helpers import exit_with_error
from shipit.cli.commands.deploy_cmd import BumpChoice
from shipit.cli.context import build_context
from shipit.core.errors import ErrorCode
from shipit.core.result import Err
from shipit.core.version import read_current_version
from shipit.output.console import Style


def current(
    next_: BumpChoice | None = typer.Option(
        None,
        "--next",
        help="Print the version a bump of this kind would produce.",
        case_sensitive=False,
    ),
) -> None:
    """Show the currently released version."""
    ctx = build_context()
    project = ctx.project

    result = read_current_version(project.version_path)
    if isinstance(result, Err):
        code = (
            ErrorCode.USER_ERROR
            if result.error.kind == "invalid_current_version"
            else ErrorCode.IO_ERROR
        )
        exit_with_error(ctx, result.error.message, hint=result.error.hint, code=code)

    version = result.value
    if next_ is not None:
        ctx.console.print(str(version.bump(next_.value)))
        return

    ctx.console.print(str(version))
    ctx.console.print(
        f"{project.name} ({project.relative(project.version_path)})", Style.DIM
    )

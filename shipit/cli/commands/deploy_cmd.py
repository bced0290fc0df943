"""Deploy command - build, push and tag a new release."""

from __future__ import annotations

from enum import Enum

import typer

from shipit.cli.commands._helpers import exit_on_deploy_error
from shipit.cli.context import build_context
from shipit.core.result import Err
from shipit.services.deploy import DeployService, is_affirmative


class BumpChoice(str, Enum):
    major = "major"
    minor = "minor"
    patch = "patch"


def prompt_confirm(question: str) -> bool:
    """Ask ``question``; a closed stdin counts as an empty answer."""
    try:
        answer = typer.prompt(question, default="", show_default=False, prompt_suffix=" ")
    except typer.Abort:
        return False
    return is_affirmative(answer)


def deploy(
    version: str | None = typer.Argument(
        None,
        metavar="VERSION",
        help="New version number (major.minor.patch).",
        show_default=False,
    ),
    bump: BumpChoice | None = typer.Option(
        None,
        "--bump",
        help="Derive the new version by bumping the current one.",
        case_sensitive=False,
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Build, but do not commit, push, tag or write files."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo every external command."),
) -> None:
    """Create and deploy a new release."""
    ctx = build_context()
    service = DeployService(
        project=ctx.project,
        console=ctx.console,
        confirm=prompt_confirm,
        dry_run=dry_run,
        verbose=verbose,
    )

    plan = service.plan(requested=version, bump=bump.value if bump is not None else None)
    if isinstance(plan, Err):
        exit_on_deploy_error(ctx, plan.error)

    result = service.deploy(plan.value, assume_yes=yes)
    if isinstance(result, Err):
        exit_on_deploy_error(ctx, result.error)

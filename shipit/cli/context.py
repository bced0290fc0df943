from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from shipit.core.errors import ErrorCode
from shipit.core.project import Project, detect_project
from shipit.core.result import Err
from shipit.output.console import ConsoleProtocol, RichConsole, Style

PROJECT_ROOT_ENV = "SHIPIT_PROJECT_ROOT"


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    console: ConsoleProtocol


def build_context() -> CLIContext:
    console = RichConsole()

    override = os.environ.get(PROJECT_ROOT_ENV)
    root = Path(override) if override else None

    project = detect_project(root=root)
    if isinstance(project, Err):
        console.error(project.error.message)
        if project.error.hint:
            console.print(f"hint: {project.error.hint}", Style.DIM)
        code = (
            ErrorCode.USER_ERROR
            if project.error.kind == "invalid_config"
            else ErrorCode.ENV_ERROR
        )
        raise typer.Exit(code=int(code))

    return CLIContext(project=project.value, console=console)

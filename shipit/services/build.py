"""Build the release artifact and move it into the tracked location."""

from __future__ import annotations

from shipit.core.project import Project
from shipit.core.result import Err, Ok, Result
from shipit.git.repository import CommandHook
from shipit.platform.files import move_file
from shipit.platform.process import run_streaming
from shipit.services.errors import DeployError

__all__ = ["build_artifact", "move_artifact"]


def build_artifact(
    project: Project, *, on_command: CommandHook | None = None
) -> Result[None, DeployError]:
    """Run the configured build command in the project root.

    The build always runs, dry-run included: it only produces files in the
    work tree. Output streams to the terminal.
    """
    cmd = list(project.config.build.command)
    if on_command is not None:
        on_command(cmd, False)

    result = run_streaming(cmd, cwd=project.root)
    if isinstance(result, Err):
        e = result.error
        detail = e.stderr.strip() if e.returncode == -1 else f"exit {e.returncode}"
        return Err(
            DeployError(
                kind="build_failed",
                message=f"build command failed ({detail}): {' '.join(cmd)}",
                hint=f"configure [build].command in {project.config_path.name}",
            )
        )

    artifact = project.artifact_path
    if not artifact.is_file():
        return Err(
            DeployError(
                kind="artifact_missing",
                message=f"build output not found: {project.relative(artifact)}",
                hint=f"configure [build].artifact in {project.config_path.name}",
            )
        )
    return Ok(None)


def move_artifact(
    project: Project,
    *,
    dry_run: bool = False,
    on_command: CommandHook | None = None,
) -> Result[None, DeployError]:
    """Move the built artifact to its destination, replacing the old one."""
    src = project.artifact_path
    dst = project.destination_path
    argv = ["mv", project.relative(src), project.relative(dst)]
    if on_command is not None:
        on_command(argv, dry_run)
    if dry_run:
        return Ok(None)

    try:
        move_file(src, dst)
    except FileNotFoundError:
        return Err(
            DeployError(
                kind="artifact_missing",
                message=f"build output not found: {project.relative(src)}",
            )
        )
    except OSError as e:
        return Err(
            DeployError(
                kind="move_failed",
                message=f"failed to move {project.relative(src)} to {project.relative(dst)}: {e}",
            )
        )
    return Ok(None)

"""Project root detection and resolved paths.

The project root is the first directory, walking up from the start
directory, that contains ``shipit.toml``. Without one, the enclosing git
work tree root (the directory holding ``.git``) is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CONFIG_FILENAME, Config, ConfigError, load_config_or_default
from .result import Err, Ok, Result

__all__ = ["Project", "ProjectError", "detect_project", "find_project_root"]


@dataclass(frozen=True, slots=True)
class ProjectError:
    """Error when the project cannot be located or configured."""

    kind: Literal["project_not_found", "invalid_config"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A located project with its configuration."""

    root: Path
    config: Config

    @property
    def name(self) -> str:
        return self.config.project.name or self.root.name

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def version_path(self) -> Path:
        return self.root / self.config.project.version_file

    @property
    def artifact_path(self) -> Path:
        return self.root / self.config.build.artifact

    @property
    def destination_path(self) -> Path:
        return self.root / self.config.build.destination

    def relative(self, path: Path) -> str:
        """Path relative to the root, as git expects it, using forward slashes."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return str(path)


def find_project_root(start: Path) -> Path | None:
    """Return the project root above ``start``, or None."""
    start = start.resolve()
    candidates = (start, *start.parents)
    for parent in candidates:
        if (parent / CONFIG_FILENAME).is_file():
            return parent
    for parent in candidates:
        if (parent / ".git").exists():
            return parent
    return None


def detect_project(
    start: Path | None = None, *, root: Path | None = None
) -> Result[Project, ProjectError]:
    """Locate the project and load its configuration.

    Args:
        start: Directory to search upward from (defaults to cwd).
        root: Explicit project root; skips detection.
    """
    if root is not None:
        found = root.expanduser().resolve()
        if not found.is_dir():
            return Err(
                ProjectError(
                    kind="project_not_found",
                    message=f"project root is not a directory: {found}",
                )
            )
    else:
        detected = find_project_root(start or Path.cwd())
        if detected is None:
            return Err(
                ProjectError(
                    kind="project_not_found",
                    message="no project root found",
                    hint=f"run inside a git repository or next to a {CONFIG_FILENAME}",
                )
            )
        found = detected

    config = load_config_or_default(found / CONFIG_FILENAME)
    if isinstance(config, Err):
        err: ConfigError = config.error
        return Err(
            ProjectError(
                kind="invalid_config",
                message=err.message,
                hint=str(err.path) if err.path else None,
            )
        )

    return Ok(Project(root=found, config=config.value))

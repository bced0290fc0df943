from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from shipit.git.repository import GitError

__all__ = ["DeployError", "DeployErrorKind", "from_git_error"]

DeployErrorKind = Literal[
    "invalid_input",
    "invalid_version",
    "version_not_increasing",
    "version_file",
    "not_a_repository",
    "tag_exists",
    "git_failed",
    "push_failed",
    "build_failed",
    "artifact_missing",
    "move_failed",
]


@dataclass(frozen=True, slots=True)
class DeployError:
    kind: DeployErrorKind
    message: str
    hint: str | None = None


def from_git_error(error: GitError, *, hint: str | None = None) -> DeployError:
    return DeployError(
        kind="push_failed" if error.kind == "network" else "git_failed",
        message=f"git {error.command} failed: {error.message}",
        hint=hint,
    )

"""Git repository wrapper for release operations.

The release flow needs only a handful of git commands: switch to the
release branch, commit and push single files, and create and push a tag.
Each method returns a Result; nothing raises on git failure.

Usage:
    repo = Repository(Path("/path/to/project"), dry_run=True)
    match repo.checkout("master"):
        case Ok(_):
            ...
        case Err(e):
            print(f"{e.command} failed: {e.message}")

In dry-run mode, commands that change the repository or the remote are
reported through ``on_command`` but not executed. Read-only queries always
run and are reported as executed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from shipit.core.result import Err, Ok, Result
from shipit.platform.process import ProcessError
from shipit.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

__all__ = ["CommandHook", "GitError", "Repository"]

CommandHook = Callable[[list[str], bool], None]
"""Called with the full argv and whether it was skipped (dry-run)."""


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push origin master")
        message: Error message from git, or a fallback description
        returncode: Process return code (-1 if git could not be started)
        kind: "network" for commands that talk to the remote, else "local"
    """

    command: str
    message: str
    returncode: int = 1
    kind: Literal["local", "network"] = "local"


class Repository:
    """Release-oriented operations on a single git work tree.

    Attributes:
        path: Path to the work tree root
        dry_run: Skip commands that modify the repository or remote
    """

    def __init__(
        self,
        path: Path,
        *,
        dry_run: bool = False,
        on_command: CommandHook | None = None,
    ) -> None:
        self.path = path
        self.dry_run = dry_run
        self._on_command = on_command

    def exists(self) -> bool:
        """True if ``path`` lies inside a git work tree (not only at its root)."""
        match self._query(["rev-parse", "--is-inside-work-tree"]):
            case Ok(stdout):
                return stdout.strip() == "true"
            case Err(_):
                return False

    def tag_exists(self, name: str) -> bool:
        """True if a local tag called ``name`` exists."""
        result = self._query(["rev-parse", "-q", "--verify", f"refs/tags/{name}"])
        return isinstance(result, Ok)

    def checkout(self, branch: str) -> Result[str, GitError]:
        return self._change(["checkout", branch], fallback="checkout failed")

    def add(self, *paths: str) -> Result[str, GitError]:
        return self._change(["add", "--", *paths], fallback="add failed")

    def commit(self, message: str) -> Result[str, GitError]:
        return self._change(["commit", "-m", message], fallback="commit failed")

    def push(self, remote: str, ref: str) -> Result[str, GitError]:
        return self._change(["push", remote, ref], fallback="push failed")

    def create_tag(self, name: str) -> Result[str, GitError]:
        return self._change(["tag", name], fallback="tag failed")

    def push_file(
        self,
        path: str,
        *,
        message: str,
        remote: str,
        branch: str,
    ) -> Result[None, GitError]:
        """Stage ``path``, commit it with ``message`` and push the branch."""
        added = self.add(path)
        if isinstance(added, Err):
            return added
        committed = self.commit(message)
        if isinstance(committed, Err):
            return committed
        pushed = self.push(remote, branch)
        if isinstance(pushed, Err):
            return pushed
        return Ok(None)

    def push_tag(self, name: str, *, remote: str) -> Result[None, GitError]:
        """Create tag ``name`` at HEAD and push it to ``remote``."""
        created = self.create_tag(name)
        if isinstance(created, Err):
            return created
        pushed = self.push(remote, name)
        if isinstance(pushed, Err):
            return pushed
        return Ok(None)

    def _change(self, args: list[str], *, fallback: str) -> Result[str, GitError]:
        argv = ["git", *args]
        if self.dry_run:
            self._notify(argv, skipped=True)
            return Ok("")

        self._notify(argv, skipped=False)
        match self._run(args):
            case Err(e):
                return Err(
                    GitError(
                        command=" ".join(args),
                        message=e.stderr.strip() or e.stdout.strip() or fallback,
                        returncode=e.returncode,
                        kind="network" if args[0] in _NETWORK_COMMANDS else "local",
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def _query(self, args: list[str]) -> Result[str, ProcessError]:
        self._notify(["git", *args], skipped=False)
        return self._run(args)

    def _notify(self, argv: list[str], *, skipped: bool) -> None:
        if self._on_command is not None:
            self._on_command(argv, skipped)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

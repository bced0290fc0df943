"""Deploy a new release.

A deploy is one straight run of steps, each of which must succeed before
the next starts:

    validate -> confirm -> checkout -> build -> move -> push -> tag -> record

There is no retry and no rollback. A failure stops the run and is returned
to the caller; whatever already happened on the remote stays there.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from shipit.core.project import Project
from shipit.core.result import Err, Ok, Result
from shipit.core.version import (
    BumpKind,
    Version,
    read_current_version,
    write_current_version,
)
from shipit.git.repository import Repository
from shipit.output.console import ConsoleProtocol, Style
from shipit.platform.process import format_command
from shipit.services.build import build_artifact, move_artifact
from shipit.services.errors import DeployError, from_git_error

__all__ = [
    "DeployOutcome",
    "DeployPlan",
    "DeployService",
    "confirmation_question",
    "is_affirmative",
]

DeployOutcome = Literal["deployed", "cancelled"]


@dataclass(frozen=True, slots=True)
class DeployPlan:
    """A validated deploy: ``new`` is strictly greater than ``current``."""

    current: Version
    new: Version

    @property
    def tag(self) -> str:
        return str(self.new)


def is_affirmative(answer: str | None) -> bool:
    """True when the first character of the answer is ``y`` (any case)."""
    return (answer or "").lower().startswith("y")


def confirmation_question(project_name: str, version: Version) -> str:
    return (
        f"Are you sure you want to deploy a new version of {project_name} "
        f"with the version {version}? [y/n]"
    )


class DeployService:
    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        confirm: Callable[[str], bool],
        dry_run: bool = False,
        verbose: bool = False,
        repository: Repository | None = None,
    ) -> None:
        self._project = project
        self._console = console
        self._confirm = confirm
        self._dry_run = dry_run
        self._verbose = verbose
        self._repo = repository or Repository(
            project.root, dry_run=dry_run, on_command=self._echo_command
        )

    def plan(
        self, *, requested: str | None = None, bump: BumpKind | None = None
    ) -> Result[DeployPlan, DeployError]:
        """Resolve and validate the version to deploy.

        Exactly one of ``requested`` (an explicit ``major.minor.patch``) or
        ``bump`` must be given.
        """
        if (requested is None) == (bump is None):
            return Err(
                DeployError(
                    kind="invalid_input",
                    message="specify either a version number or --bump",
                    hint="e.g. `shipit deploy 1.2.3` or `shipit deploy --bump patch`",
                )
            )

        # An explicit version is validated before the version file is read.
        explicit: Version | None = None
        if requested is not None:
            parsed = Version.parse(requested)
            if isinstance(parsed, Err):
                return Err(
                    DeployError(
                        kind="invalid_version",
                        message=f"Invalid version string format: {requested!r}",
                        hint=parsed.error.hint,
                    )
                )
            explicit = parsed.value

        current = read_current_version(self._project.version_path)
        if isinstance(current, Err):
            return Err(
                DeployError(
                    kind="version_file",
                    message=current.error.message,
                    hint=current.error.hint,
                )
            )

        if explicit is not None:
            new = explicit
        elif bump is not None:
            new = current.value.bump(bump)
        else:
            return Err(DeployError(kind="invalid_input", message="no version to deploy"))

        if new <= current.value:
            return Err(
                DeployError(
                    kind="version_not_increasing",
                    message=(
                        f"New version must be greater than current version {current.value}"
                    ),
                )
            )

        if not self._repo.exists():
            return Err(
                DeployError(
                    kind="not_a_repository",
                    message=f"not a git repository: {self._project.root}",
                )
            )

        if self._repo.tag_exists(str(new)):
            return Err(
                DeployError(
                    kind="tag_exists",
                    message=f"tag {new} already exists",
                    hint="choose a new version number",
                )
            )

        return Ok(DeployPlan(current=current.value, new=new))

    def deploy(
        self, plan: DeployPlan, *, assume_yes: bool = False
    ) -> Result[DeployOutcome, DeployError]:
        """Confirm, then run every deploy step in order."""
        if not assume_yes:
            question = confirmation_question(self._project.name, plan.new)
            if not self._confirm(question):
                self._console.info("Deploy cancelled")
                return Ok("cancelled")

        self._console.header(f"Deploying {self._project.name} {plan.new}")
        if self._dry_run:
            self._console.warning("dry-run: nothing will be committed, pushed or written")

        for step in (
            self._checkout,
            self._build,
            self._push_artifact,
            self._create_tag,
            self._record_version,
        ):
            result = step(plan)
            if isinstance(result, Err):
                return result

        self._console.print(f"Finished deploying {plan.new}", Style.SUCCESS)
        return Ok("deployed")

    def _checkout(self, plan: DeployPlan) -> Result[None, DeployError]:
        branch = self._project.config.git.branch
        self._console.print(f"Switching to `{branch}` branch...")
        result = self._repo.checkout(branch)
        if isinstance(result, Err):
            return Err(from_git_error(result.error, hint="commit or stash local changes"))
        return Ok(None)

    def _build(self, plan: DeployPlan) -> Result[None, DeployError]:
        self._console.print("Building release artifact...")
        built = build_artifact(self._project, on_command=self._echo_command)
        if isinstance(built, Err):
            return built
        return move_artifact(
            self._project, dry_run=self._dry_run, on_command=self._echo_command
        )

    def _push_artifact(self, plan: DeployPlan) -> Result[None, DeployError]:
        git = self._project.config.git
        dest = self._project.relative(self._project.destination_path)
        self._console.print(
            f"Pushing new binary ({dest}) to Git remote {git.branch} branch..."
        )
        name = self._project.destination_path.name
        result = self._repo.push_file(
            dest,
            message=f"{plan.new} {name} binary",
            remote=git.remote,
            branch=git.branch,
        )
        if isinstance(result, Err):
            return Err(from_git_error(result.error))
        return Ok(None)

    def _create_tag(self, plan: DeployPlan) -> Result[None, DeployError]:
        self._console.print(f"Creating and pushing a new tag {plan.tag}...")
        result = self._repo.push_tag(plan.tag, remote=self._project.config.git.remote)
        if isinstance(result, Err):
            return Err(from_git_error(result.error))
        return Ok(None)

    def _record_version(self, plan: DeployPlan) -> Result[None, DeployError]:
        self._console.print(f"Recording new version number {plan.new}...")
        path = self._project.version_path
        rel = self._project.relative(path)
        if self._dry_run:
            self._echo_command(["write", rel, str(plan.new)], True)

        written = write_current_version(path, plan.new, dry_run=self._dry_run)
        if isinstance(written, Err):
            return Err(
                DeployError(
                    kind="version_file",
                    message=written.error.message,
                    hint=written.error.hint,
                )
            )

        git = self._project.config.git
        pushed = self._repo.push_file(
            rel, message="Update version", remote=git.remote, branch=git.branch
        )
        if isinstance(pushed, Err):
            return Err(
                from_git_error(
                    pushed.error,
                    hint=f"{rel} now holds {plan.new}; commit and push it manually",
                )
            )
        return Ok(None)

    def _echo_command(self, argv: list[str], skipped: bool) -> None:
        if skipped:
            self._console.print(f"  dry-run: {format_command(argv)}", Style.DIM)
        elif self._verbose:
            self._console.print(f"  $ {format_command(argv)}", Style.DIM)

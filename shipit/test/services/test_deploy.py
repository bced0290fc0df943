"""Tests for shipit.services.deploy."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from shipit.core.project import Project
from shipit.core.result import Err, Ok
from shipit.core.version import Version
from shipit.git.repository import GitError, Repository
from shipit.output.console import MockConsole, OutputRecord, Style
from shipit.platform.process import ProcessError
from shipit.services.deploy import (
    DeployPlan,
    DeployService,
    confirmation_question,
    is_affirmative,
)

_BUILD = "shipit.services.build.run_streaming"
_GIT = "shipit.git.repository.run_process"

_NO_TAG = Err(ProcessError(("git", "rev-parse"), 1, "", ""))


def _produce_artifact(cmd: list[str], cwd: Path) -> Ok[None]:
    out = cwd / "out" / "tool"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text("binary", encoding="utf-8")
    return Ok(None)


def _fake_repo() -> MagicMock:
    repo = MagicMock(spec=Repository)
    repo.exists.return_value = True
    repo.tag_exists.return_value = False
    repo.checkout.return_value = Ok("")
    repo.push_file.return_value = Ok(None)
    repo.push_tag.return_value = Ok(None)
    return repo


def _service(
    project: Project,
    *,
    repo: MagicMock | None = None,
    console: MockConsole | None = None,
    answer: bool = True,
) -> DeployService:
    return DeployService(
        project=project,
        console=console or MockConsole(),
        confirm=lambda _question: answer,
        repository=repo if repo is not None else _fake_repo(),
    )


def _fresh_repo(argv: list[str], **_kwargs: object) -> object:
    if "--is-inside-work-tree" in argv:
        return Ok("true\n")
    if "rev-parse" in argv:
        return _NO_TAG
    return Ok("")


def _never_confirm(question: str) -> bool:
    raise AssertionError(f"unexpected prompt: {question}")


class TestConfirmation:
    @pytest.mark.parametrize("answer", ["y", "Y", "yes", "Yep", "y "])
    def test_affirmative(self, answer: str) -> None:
        assert is_affirmative(answer) is True

    @pytest.mark.parametrize("answer", ["", "n", "no", "sure", "  y", "\ty", None])
    def test_not_affirmative(self, answer: str | None) -> None:
        assert is_affirmative(answer) is False

    def test_question_names_project_and_version(self) -> None:
        question = confirmation_question("needle", Version(1, 2, 0))
        assert question == (
            "Are you sure you want to deploy a new version of needle with the version 1.2.0? [y/n]"
        )


# =============================================================================
# plan()
# =============================================================================


class TestPlan:
    def test_explicit_version(self, project: Project) -> None:
        result = _service(project).plan(requested="1.1.0")

        assert result == Ok(DeployPlan(current=Version(1, 0, 0), new=Version(1, 1, 0)))

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [("patch", Version(1, 0, 1)), ("minor", Version(1, 1, 0)), ("major", Version(2, 0, 0))],
    )
    def test_bump(self, project: Project, kind: str, expected: Version) -> None:
        result = _service(project).plan(bump=kind)  # type: ignore[arg-type]

        assert isinstance(result, Ok)
        assert result.value.new == expected

    def test_neither_version_nor_bump(self, project: Project) -> None:
        result = _service(project).plan()

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_both_version_and_bump(self, project: Project) -> None:
        result = _service(project).plan(requested="1.1.0", bump="patch")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_input"

    def test_malformed_version(self, project: Project) -> None:
        project.version_path.unlink()

        result = _service(project).plan(requested="1.1")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
        assert result.error.hint is not None
        assert "major.minor.patch" in result.error.hint

    @pytest.mark.parametrize("requested", ["1.0.0", "0.9.9", "0.10.0"])
    def test_must_be_greater_than_current(self, project: Project, requested: str) -> None:
        result = _service(project).plan(requested=requested)

        assert isinstance(result, Err)
        assert result.error.kind == "version_not_increasing"
        assert "current version 1.0.0" in result.error.message

    def test_missing_version_file(self, project: Project) -> None:
        project.version_path.unlink()

        result = _service(project).plan(requested="1.1.0")

        assert isinstance(result, Err)
        assert result.error.kind == "version_file"

    def test_not_a_repository(self, project: Project) -> None:
        repo = _fake_repo()
        repo.exists.return_value = False

        result = _service(project, repo=repo).plan(requested="1.1.0")

        assert isinstance(result, Err)
        assert result.error.kind == "not_a_repository"

    def test_existing_tag(self, project: Project) -> None:
        repo = _fake_repo()
        repo.tag_exists.return_value = True

        result = _service(project, repo=repo).plan(requested="1.1.0")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_exists"
        repo.tag_exists.assert_called_once_with("1.1.0")


# =============================================================================
# deploy()
# =============================================================================


_PLAN = DeployPlan(current=Version(1, 0, 0), new=Version(1, 1, 0))


class TestDeploy:
    def test_full_run_in_order(self, project: Project) -> None:
        repo = _fake_repo()
        console = MockConsole()
        order = MagicMock()
        order.attach_mock(repo, "repo")

        def build(cmd: list[str], cwd: Path) -> Ok[None]:
            order.build(cmd)
            return _produce_artifact(cmd, cwd)

        with patch(_BUILD, side_effect=build):
            result = _service(project, repo=repo, console=console).deploy(_PLAN)

        assert result == Ok("deployed")
        assert order.mock_calls == [
            call.repo.checkout("master"),
            call.build(["make", "release"]),
            call.repo.push_file(
                "bin/tool", message="1.1.0 tool binary", remote="origin", branch="master"
            ),
            call.repo.push_tag("1.1.0", remote="origin"),
            call.repo.push_file(
                "VERSION", message="Update version", remote="origin", branch="master"
            ),
        ]
        assert project.version_path.read_text(encoding="utf-8") == "1.1.0\n"
        assert project.destination_path.read_text(encoding="utf-8") == "binary"
        assert not project.artifact_path.exists()
        assert console.outputs[-1] == OutputRecord("Finished deploying 1.1.0", Style.SUCCESS)
        assert console.find("Switching to `master` branch...")
        assert console.find("Creating and pushing a new tag 1.1.0...")
        assert console.find("Recording new version number 1.1.0...")

    def test_declined(self, project: Project) -> None:
        repo = _fake_repo()
        console = MockConsole()
        service = _service(project, repo=repo, console=console, answer=False)

        with patch(_BUILD) as mock_build:
            result = service.deploy(_PLAN)

        assert result == Ok("cancelled")
        repo.checkout.assert_not_called()
        mock_build.assert_not_called()
        assert project.version_path.read_text(encoding="utf-8") == "1.0.0\n"
        assert console.find("Deploy cancelled")[0].style == Style.INFO

    def test_confirm_receives_question(self, project: Project) -> None:
        asked: list[str] = []

        def confirm(question: str) -> bool:
            asked.append(question)
            return False

        service = DeployService(
            project=project, console=MockConsole(), confirm=confirm, repository=_fake_repo()
        )
        service.deploy(_PLAN)

        assert asked == [confirmation_question("needle", Version(1, 1, 0))]

    def test_assume_yes_skips_prompt(self, project: Project) -> None:
        service = DeployService(
            project=project, console=MockConsole(), confirm=_never_confirm, repository=_fake_repo()
        )

        with patch(_BUILD, side_effect=_produce_artifact):
            assert service.deploy(_PLAN, assume_yes=True) == Ok("deployed")

    def test_checkout_failure_stops_before_build(self, project: Project) -> None:
        repo = _fake_repo()
        repo.checkout.return_value = Err(
            GitError(command="checkout master", message="local changes would be overwritten")
        )

        with patch(_BUILD) as mock_build:
            result = _service(project, repo=repo).deploy(_PLAN)

        assert isinstance(result, Err)
        assert result.error.kind == "git_failed"
        assert "local changes" in result.error.message
        mock_build.assert_not_called()

    def test_build_failure_stops_before_push(self, project: Project) -> None:
        repo = _fake_repo()
        failed = Err(ProcessError(("make", "release"), 2, "", ""))

        with patch(_BUILD, return_value=failed):
            result = _service(project, repo=repo).deploy(_PLAN)

        assert isinstance(result, Err)
        assert result.error.kind == "build_failed"
        repo.push_file.assert_not_called()
        repo.push_tag.assert_not_called()
        assert project.version_path.read_text(encoding="utf-8") == "1.0.0\n"

    def test_push_failure_stops_before_tag(self, project: Project) -> None:
        repo = _fake_repo()
        repo.push_file.return_value = Err(
            GitError(command="push origin master", message="rejected", kind="network")
        )

        with patch(_BUILD, side_effect=_produce_artifact):
            result = _service(project, repo=repo).deploy(_PLAN)

        assert isinstance(result, Err)
        assert result.error.kind == "push_failed"
        repo.push_tag.assert_not_called()
        assert project.version_path.read_text(encoding="utf-8") == "1.0.0\n"

    def test_tag_failure_leaves_version_unrecorded(self, project: Project) -> None:
        repo = _fake_repo()
        repo.push_tag.return_value = Err(GitError(command="tag 1.1.0", message="already exists"))

        with patch(_BUILD, side_effect=_produce_artifact):
            result = _service(project, repo=repo).deploy(_PLAN)

        assert isinstance(result, Err)
        assert result.error.kind == "git_failed"
        assert repo.push_file.call_count == 1
        assert project.version_path.read_text(encoding="utf-8") == "1.0.0\n"

    def test_version_push_failure_hints_manual_push(self, project: Project) -> None:
        repo = _fake_repo()
        repo.push_file.side_effect = [
            Ok(None),
            Err(GitError(command="push origin master", message="timeout", kind="network")),
        ]

        with patch(_BUILD, side_effect=_produce_artifact):
            result = _service(project, repo=repo).deploy(_PLAN)

        assert isinstance(result, Err)
        assert result.error.kind == "push_failed"
        assert result.error.hint is not None
        assert "VERSION now holds 1.1.0" in result.error.hint


class TestDryRun:
    def test_only_build_runs(self, project: Project) -> None:
        console = MockConsole()
        service = DeployService(
            project=project, console=console, confirm=lambda _q: True, dry_run=True
        )

        with (
            patch(_GIT, side_effect=_fresh_repo) as mock_git,
            patch(_BUILD, side_effect=_produce_artifact) as mock_build,
        ):
            plan = service.plan(requested="1.1.0")
            assert isinstance(plan, Ok)
            result = service.deploy(plan.value)

        assert result == Ok("deployed")
        mock_build.assert_called_once()
        # Only the read-only work tree and tag lookups reach git.
        assert mock_git.call_count == 2
        assert all("rev-parse" in c.args[0] for c in mock_git.call_args_list)

        assert project.version_path.read_text(encoding="utf-8") == "1.0.0\n"
        assert project.artifact_path.exists()
        assert not project.destination_path.exists()

        assert console.find("dry-run: git checkout master")
        assert console.find("dry-run: mv out/tool bin/tool")
        assert console.find('dry-run: git commit -m "1.1.0 tool binary"')
        assert console.find("dry-run: git tag 1.1.0")
        assert console.find("dry-run: git push origin 1.1.0")
        assert console.find("dry-run: write VERSION 1.1.0")
        assert console.find('dry-run: git commit -m "Update version"')
        assert not console.find("dry-run: git rev-parse")
        assert console.outputs[-1] == OutputRecord("Finished deploying 1.1.0", Style.SUCCESS)


class TestVerbose:
    def test_echoes_commands(self, project: Project) -> None:
        console = MockConsole()
        service = DeployService(
            project=project, console=console, confirm=lambda _q: True, verbose=True
        )

        with (
            patch(_GIT, side_effect=_fresh_repo),
            patch(_BUILD, side_effect=_produce_artifact),
        ):
            plan = service.plan(requested="1.1.0")
            assert isinstance(plan, Ok)
            result = service.deploy(plan.value)

        assert result == Ok("deployed")
        assert console.find("$ git rev-parse --is-inside-work-tree")
        assert console.find("$ git rev-parse -q --verify refs/tags/1.1.0")
        assert console.find("$ git checkout master")
        assert console.find("$ make release")
        assert console.find("$ git push origin 1.1.0")
        assert console.find("$ mv out/tool bin/tool")

    def test_quiet_without_verbose(self, project: Project) -> None:
        console = MockConsole()
        service = DeployService(project=project, console=console, confirm=lambda _q: True)

        with patch(_GIT, side_effect=_fresh_repo):
            assert isinstance(service.plan(requested="1.1.0"), Ok)

        assert not console.find("rev-parse")

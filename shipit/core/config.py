"""Typed configuration loading for ``shipit.toml``.

Every key is optional; a project without a config file deploys with the
defaults below.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "CONFIG_FILENAME",
    "Config",
    "ConfigError",
    "DEFAULT_BRANCH",
    "DEFAULT_BUILD_COMMAND",
    "DEFAULT_REMOTE",
    "DEFAULT_VERSION_FILE",
    "GitConfig",
    "ProjectConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "shipit.toml"

DEFAULT_VERSION_FILE = "VERSION"
DEFAULT_BRANCH = "master"
DEFAULT_REMOTE = "origin"
DEFAULT_BUILD_COMMAND = ("make", "archive_generator")
DEFAULT_ARTIFACT = "Generator/.build/release/needle"
DEFAULT_DESTINATION = "Generator/bin/needle"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Project identity and the version file location (relative to root)."""

    name: str | None = None
    version_file: str = DEFAULT_VERSION_FILE


@dataclass(frozen=True, slots=True)
class GitConfig:
    """Release branch and remote."""

    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Build command and where its artifact goes.

    ``artifact`` is the build output, ``destination`` is the tracked path the
    artifact is moved to before being committed. Both are relative to the
    project root.
    """

    command: tuple[str, ...] = DEFAULT_BUILD_COMMAND
    artifact: str = DEFAULT_ARTIFACT
    destination: str = DEFAULT_DESTINATION


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    git: GitConfig = field(default_factory=GitConfig)
    build: BuildConfig = field(default_factory=BuildConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: If a present key has the wrong type.
        """
        project: StrDict = _table(data, "project")
        git: StrDict = _table(data, "git")
        build: StrDict = _table(data, "build")

        return cls(
            project=ProjectConfig(
                name=_opt_str(project, "name"),
                version_file=_opt_str(project, "version_file") or DEFAULT_VERSION_FILE,
            ),
            git=GitConfig(
                branch=_opt_str(git, "branch") or DEFAULT_BRANCH,
                remote=_opt_str(git, "remote") or DEFAULT_REMOTE,
            ),
            build=BuildConfig(
                command=_build_command(build),
                artifact=_opt_str(build, "artifact") or DEFAULT_ARTIFACT,
                destination=_opt_str(build, "destination") or DEFAULT_DESTINATION,
            ),
        )


def _table(data: Mapping[str, object], key: str) -> StrDict:
    if key not in data:
        return {}
    table = get_table(data, key)
    if table is None:
        raise ValueError(f"[{key}] must be a table")
    return table


def _opt_str(table: Mapping[str, object], key: str) -> str | None:
    if key in table and not isinstance(table[key], str):
        raise ValueError(f"'{key}' must be a string")
    return get_str(table, key)


def _build_command(build: Mapping[str, object]) -> tuple[str, ...]:
    if "command" not in build:
        return DEFAULT_BUILD_COMMAND

    as_list = get_str_list(build, "command")
    if as_list is not None:
        parts = [p for p in as_list if p.strip()]
    else:
        text = get_str(build, "command")
        if text is None and not isinstance(build["command"], str):
            raise ValueError("'command' must be a string or a list of strings")
        parts = shlex.split(text or "")

    if not parts:
        raise ValueError("'command' must not be empty")
    return tuple(parts)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate ``shipit.toml``.

    Args:
        path: Path to the config file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the defaults."""
    if not path.exists():
        return Ok(Config())
    return load_config(path)

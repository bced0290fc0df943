"""The release version value and its single-line version file.

A version is exactly ``major.minor.patch`` with decimal components. The
currently released version lives in a one-line file at the project root;
a deploy may only move it forward.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from shipit.platform.files import atomic_write_text

from .result import Err, Ok, Result

__all__ = [
    "BumpKind",
    "Version",
    "VersionError",
    "read_current_version",
    "write_current_version",
]

BumpKind = Literal["major", "minor", "patch"]

_VERSION_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")

_FORMAT_HINT = (
    "The version must be in the format of `major.minor.patch`, "
    "where all components are numbers only."
)


@dataclass(frozen=True, slots=True)
class VersionError:
    """Error from parsing or persisting a version."""

    kind: Literal[
        "invalid_format",
        "version_file_missing",
        "version_file_unreadable",
        "version_file_unwritable",
        "invalid_current_version",
    ]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True, order=True)
class Version:
    """Ordered ``(major, minor, patch)`` triple.

    Ordering compares the fields numerically in declaration order, so
    ``Version(1, 10, 0) > Version(1, 9, 9)``.
    """

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> Result[Version, VersionError]:
        m = _VERSION_RE.match(text.strip())
        if m is None:
            return Err(
                VersionError(
                    kind="invalid_format",
                    message=f"invalid version string: {text!r}",
                    hint=_FORMAT_HINT,
                )
            )
        return Ok(cls(int(m.group(1)), int(m.group(2)), int(m.group(3))))

    def bump(self, kind: BumpKind) -> Version:
        match kind:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def read_current_version(path: Path) -> Result[Version, VersionError]:
    """Read the recorded version from ``path``.

    The file holds a single line; surrounding whitespace is ignored.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(
            VersionError(
                kind="version_file_missing",
                message=f"version file not found: {path}",
                hint="Create it with the last released version, e.g. 0.0.0",
            )
        )
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            VersionError(
                kind="version_file_unreadable",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )

    lines = text.strip().splitlines()
    first = lines[0] if lines else ""
    parsed = Version.parse(first)
    if isinstance(parsed, Err):
        return Err(
            VersionError(
                kind="invalid_current_version",
                message=f"failed to parse current version in {path.name}: {first!r}",
                hint=_FORMAT_HINT,
            )
        )
    return parsed


def write_current_version(
    path: Path, version: Version, *, dry_run: bool = False
) -> Result[bool, VersionError]:
    """Record ``version`` as the current one.

    Returns Ok(True) when the file was written, Ok(False) in dry-run.
    """
    if dry_run:
        return Ok(False)
    try:
        atomic_write_text(path, f"{version}\n")
    except OSError as e:
        return Err(
            VersionError(
                kind="version_file_unwritable",
                message=f"failed to update version file to {version}: {e}",
                hint=str(path),
            )
        )
    return Ok(True)

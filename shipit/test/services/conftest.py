from __future__ import annotations

from pathlib import Path

import pytest

from shipit.core.config import BuildConfig, Config, ProjectConfig
from shipit.core.project import Project


@pytest.fixture
def project(tmp_path: Path) -> Project:
    (tmp_path / "VERSION").write_text("1.0.0\n", encoding="utf-8")
    return Project(
        root=tmp_path,
        config=Config(
            project=ProjectConfig(name="needle"),
            build=BuildConfig(
                command=("make", "release"),
                artifact="out/tool",
                destination="bin/tool",
            ),
        ),
    )

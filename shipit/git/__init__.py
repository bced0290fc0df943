"""Git operations used by the release flow.

Usage:
    from shipit.git import Repository

    repo = Repository(project.root)
    repo.push_file("VERSION", message="Update version", remote="origin", branch="master")
"""

from shipit.git.repository import CommandHook, GitError, Repository

__all__ = ["CommandHook", "GitError", "Repository"]

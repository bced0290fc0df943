"""Process exit codes.

Every command maps its failure to one of these codes so scripts driving
``shipit`` can tell a rejected version apart from a failed push.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (including a declined confirmation)
    - 1: User error (bad version string, version not increasing, bad config)
    - 2: Environment error (no project root, git missing)
    - 3: Build error (build command failed, artifact missing)
    - 4: Network error (push to the remote failed)
    - 5: I/O error (version file or artifact could not be read/written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

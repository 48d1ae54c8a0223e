"""Exit codes for relpack commands.

Every command that fails maps its error to one of these codes. The values are
used as process exit status and must stay stable for CI scripts.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (unknown release, declined confirmation)
    - 2: Environment error (missing or invalid rel/config.toml)
    - 3: Build error (assembly or packaging step failed)
    - 4: Plugin error (a lifecycle plugin crashed or broke its contract)
    - 5: I/O error (file not found, permission denied)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    PLUGIN_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

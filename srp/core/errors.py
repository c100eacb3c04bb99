"""Process exit codes for `srp` commands."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Stable exit status, one per failure kind.

    Scripts wrapping `srp build` in CI rely on these values.
    """

    OK = 0
    # bad arguments, unknown release, invalid include/exclude pattern
    USER_ERROR = 1
    # srp.toml unreadable, organization/project/token missing
    CONFIG_ERROR = 2
    # bundler exited non-zero or wrote no output
    BUILD_ERROR = 3
    # Sentry unreachable or rejected a request
    NETWORK_ERROR = 4
    # an asset could not be read or deleted
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

"""Error taxonomy for loading, storing and persisting env entries."""

from __future__ import annotations

from pathlib import Path


class DotEnvError(Exception):
    """Base class for all envstore errors."""


class FileAccessError(DotEnvError):
    """Reading or writing the backing file failed.

    A missing file during load is not reported through this error; it is
    treated as an empty configuration.
    """

    def __init__(self, path: str | Path, message: str) -> None:
        """Initialize the error.

        Args:
            path: Backing file path that failed.
            message: Human readable description of the failure.
        """
        super().__init__(f"{path}: {message}")
        self.path = Path(path)


class EnvironmentWriteError(DotEnvError):
    """The host process environment rejected a variable assignment."""

    def __init__(self, key: str, message: str) -> None:
        """Initialize the error.

        Args:
            key: Variable name that was rejected.
            message: Reason reported by the host.
        """
        super().__init__(f"cannot set environment variable {key!r}: {message}")
        self.key = key


class ParseError(DotEnvError):
    """Strict parsing found lines that are neither blank, comments nor pairs."""

    def __init__(self, line_numbers: list[int]) -> None:
        """Initialize the error.

        Args:
            line_numbers: 1-based numbers of the offending lines.
        """
        numbers = ", ".join(str(n) for n in line_numbers)
        super().__init__(f"malformed lines: {numbers}")
        self.line_numbers = list(line_numbers)

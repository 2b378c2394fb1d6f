"""Backing file I/O.

Handles the configured ``.env`` path, line-wise reading and truncating
writes of ``key=value`` entries.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Protocol

from envstore.backend.services.errors import FileAccessError

DEFAULT_ENV_PATH = ".env"
ENTRY_TERMINATOR = "\n"
LEGACY_ENTRY_TERMINATOR = ""
ENCODING = "utf-8"
# Undecodable bytes round-trip the same way os.environ encodes them on POSIX
ENCODING_ERRORS = "surrogateescape"


class EnvFileProtocol(Protocol):
    """Protocol for backing file implementations."""

    @property
    def path(self) -> Path:
        """Return the configured backing file path."""
        ...

    def set_path(self, path: str | Path) -> None:
        """Point at a different backing file."""
        ...

    def iter_lines(self) -> Iterator[str]:
        """Yield raw lines, including their ``\\n`` terminator."""
        ...

    def write_entries(self, entries: Mapping[str, str]) -> int:
        """Replace the file content with the given entries."""
        ...


class EnvFile:
    """Read and write a ``KEY=VALUE`` backing file.

    Writes are serialized with an internal lock, so concurrent saves never
    interleave; whichever finishes last determines the file content.
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_ENV_PATH,
        *,
        legacy_format: bool = False,
    ) -> None:
        """Initialize the backing file.

        Args:
            path: Location of the file. Relative paths resolve against the
                working directory at access time.
            legacy_format: Write entries back to back with no separator. Such
                files do not reload into the same entries.
        """
        self._path = Path(path)
        self._legacy_format = legacy_format
        self._path_lock = threading.Lock()
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Get the backing file path.

        Returns:
            The configured path.
        """
        with self._path_lock:
            return self._path

    @property
    def legacy_format(self) -> bool:
        """Whether entries are written without a separator."""
        return self._legacy_format

    @property
    def entry_terminator(self) -> str:
        """String written after each ``key=value`` entry."""
        return LEGACY_ENTRY_TERMINATOR if self._legacy_format else ENTRY_TERMINATOR

    def set_path(self, path: str | Path) -> None:
        """Point at a different backing file.

        Args:
            path: New file location.
        """
        with self._path_lock:
            self._path = Path(path)
        logging.info("Env file path set to %s", path)

    def iter_lines(self) -> Iterator[str]:
        """Yield raw lines in file order.

        Lines are split on ``\\n`` only; a last line without a terminator is
        still yielded. A missing file yields nothing.

        Yields:
            Each line including its terminator.

        Raises:
            FileAccessError: On any read error other than a missing file.
        """
        path = self.path
        try:
            with path.open(
                "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="\n"
            ) as handle:
                yield from handle
        except FileNotFoundError:
            logging.debug("Env file %s does not exist, treating as empty", path)
        except OSError as exc:
            raise FileAccessError(path, f"read failed: {exc}") from exc

    def write_entries(self, entries: Mapping[str, str]) -> int:
        """Truncate or create the file and write every entry.

        Args:
            entries: Entries to write.

        Returns:
            Number of entries written.

        Raises:
            FileAccessError: If the file cannot be opened or a write fails.
                Remaining entries are not written.
        """
        path = self.path
        terminator = self.entry_terminator
        with self._write_lock:
            try:
                with path.open(
                    "w", encoding=ENCODING, errors=ENCODING_ERRORS, newline=""
                ) as handle:
                    for key, value in entries.items():
                        handle.write(f"{key}={value}{terminator}")
            except (OSError, UnicodeError) as exc:
                raise FileAccessError(path, f"write failed: {exc}") from exc
        return len(entries)

"""In-memory env entry storage.

Provides thread-safe storage of ``KEY=VALUE`` entries and mirrors every write
into the process environment.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping

from envstore.backend.services.errors import EnvironmentWriteError


def mirror_to_environ(key: str, value: str) -> None:
    """Set a process environment variable.

    Args:
        key: Variable name.
        value: Variable value.

    Raises:
        EnvironmentWriteError: If the host rejects the name or value (empty
            name, ``=`` in the name, embedded NUL, ...).
    """
    try:
        os.environ[key] = value
    except (ValueError, OSError) as exc:
        raise EnvironmentWriteError(key, str(exc)) from exc


class EnvStore:
    """Thread-safe in-memory env entry storage.

    All reads and writes go through ``lock``. The process environment is only
    ever written from here; external changes to ``os.environ`` are not read
    back.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        """Initialize the store.

        Args:
            entries: Optional initial entries. They are not mirrored.
        """
        self._entries: dict[str, str] = dict(entries or {})
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """Reentrant lock guarding the entries.

        Hold it to make a sequence of operations atomic with respect to other
        threads, e.g. a full reload.
        """
        return self._lock

    @property
    def entries(self) -> dict[str, str]:
        """Direct access to the entries dict. Callers must hold ``lock``."""
        return self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> str:
        """Return the value for key.

        Args:
            key: Entry name.

        Returns:
            The stored value, or ``""`` when the key is absent. An absent key
            and a key set to the empty string look the same.
        """
        with self._lock:
            return self._entries.get(key, "")

    def set(self, key: str, value: str) -> None:
        """Store an entry, then mirror it into the process environment.

        The store write and the environment write happen under the same lock,
        so other store users never see one without the other. If the
        environment write fails the store keeps the new value.

        Args:
            key: Entry name.
            value: Entry value.

        Raises:
            EnvironmentWriteError: If the host rejects the variable.
        """
        with self._lock:
            self._entries[key] = value
            mirror_to_environ(key, value)

    def clear(self) -> None:
        """Drop every entry. The process environment is left untouched."""
        with self._lock:
            self._entries.clear()

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all entries in insertion order."""
        with self._lock:
            return dict(self._entries)


# Default global instance for the process-wide usage pattern
_default_store: EnvStore | None = None
_default_store_lock = threading.Lock()


def get_default_store() -> EnvStore:
    """Get or create the default global env store instance.

    Returns:
        The singleton EnvStore instance, created on first call.
    """
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = EnvStore()
        return _default_store

"""Env loading and persistence service.

Coordinates the line parser, the in-memory store, the backing file and the
background save worker. Module-level functions at the bottom operate on a
default process-wide instance.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from pathlib import Path

from envstore.backend.services.env_file import EnvFile, EnvFileProtocol
from envstore.backend.services.env_store import (
    EnvStore,
    get_default_store,
    mirror_to_environ,
)
from envstore.backend.services.errors import EnvironmentWriteError, FileAccessError
from envstore.backend.services.line_parser import parse_lines
from envstore.backend.services.save_worker import SaveErrorCallback, SaveWorker
from envstore.backend.utils.constant import (
    ENVSTORE_LEGACY_FORMAT,
    ENVSTORE_PATH,
    ENVSTORE_STRICT,
)


class DotEnvService:
    """Orchestrates loading, reading, writing and saving env entries.

    The store is the single source of truth. Loads and sets mirror into the
    process environment; saves write the store to the backing file.
    """

    def __init__(
        self,
        store: EnvStore | None = None,
        env_file: EnvFileProtocol | None = None,
        save_worker: SaveWorker | None = None,
        *,
        strict: bool = False,
        on_save_error: SaveErrorCallback | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Entry storage (a fresh EnvStore if not provided).
            env_file: Backing file (``.env`` in the working directory if not
                provided).
            save_worker: Worker for non-blocking saves.
            strict: Default parsing mode for ``load_env``.
            on_save_error: Hook for background save failures. Ignored when
                ``save_worker`` is given.
        """
        self._store = store if store is not None else EnvStore()
        self._env_file: EnvFileProtocol = env_file if env_file is not None else EnvFile()
        self._save_worker = (
            save_worker if save_worker is not None else SaveWorker(on_error=on_save_error)
        )
        self._strict = strict

    @property
    def store(self) -> EnvStore:
        """Get the entry store.

        Returns:
            The store instance.
        """
        return self._store

    @property
    def env_file(self) -> EnvFileProtocol:
        """Get the backing file.

        Returns:
            The backing file instance.
        """
        return self._env_file

    def set_env_path(self, path: str | Path) -> None:
        """Set the backing file path used by later loads and saves."""
        self._env_file.set_path(path)

    def get_env_path(self) -> Path:
        """Return the backing file path."""
        return self._env_file.path

    def load_env(self, *, strict: bool | None = None) -> int:
        """Replace the store with the backing file content and mirror it.

        The store is emptied first. Lines are applied in file order, so later
        duplicates win. A missing file leaves the store empty and the process
        environment untouched. The whole load holds the store lock.

        Args:
            strict: Raise on malformed lines instead of skipping them.
                Defaults to the service's mode.

        Returns:
            Number of entries loaded.

        Raises:
            FileAccessError: If reading fails. The store keeps the entries
                read before the failure.
            ParseError: In strict mode, if any line is malformed. Nothing is
                mirrored in that case.
        """
        strict = self._strict if strict is None else strict
        path = self._env_file.path
        with self._store.lock:
            self._store.clear()
            parse_lines(
                self._env_file.iter_lines(),
                strict=strict,
                into=self._store.entries,
            )
            entries = self._store.snapshot()
            for key, value in entries.items():
                try:
                    mirror_to_environ(key, value)
                except EnvironmentWriteError as exc:
                    logging.warning("Env file %s: %s", path, exc)

        logging.info("Loaded %d entries from %s", len(entries), path)
        return len(entries)

    def get(self, key: str) -> str:
        """Return the value for key, or ``""`` if absent."""
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        """Store an entry and mirror it into the process environment.

        Raises:
            EnvironmentWriteError: If the host rejects the variable. The store
                keeps the new value.
        """
        self._store.set(key, value)

    def set_save(self, key: str, value: str, blocking: bool = False) -> None:
        """Set an entry, then persist the store.

        The save always runs, even when the environment write failed. Save
        failures never reach the caller: with ``blocking`` they are dropped
        after the save returns, otherwise the save runs on the worker and its
        Future is discarded.

        Args:
            key: Entry name.
            value: Entry value.
            blocking: Write the file before returning.

        Raises:
            EnvironmentWriteError: If the host rejects the variable.
        """
        env_error: EnvironmentWriteError | None = None
        try:
            self._store.set(key, value)
        except EnvironmentWriteError as exc:
            env_error = exc

        if blocking:
            try:
                self.save_env()
            except FileAccessError as exc:
                logging.debug("Discarding save failure for %s: %s", key, exc)
        else:
            self._save_worker.dispatch(self.save_env)

        if env_error is not None:
            raise env_error

    def save_env(self) -> int:
        """Write every store entry to the backing file.

        Returns:
            Number of entries written.

        Raises:
            FileAccessError: On the first create or write failure.
        """
        entries = self._store.snapshot()
        path = self._env_file.path
        count = self._env_file.write_entries(entries)
        logging.info("Saved %d entries to %s", count, path)
        return count

    def submit_save(self) -> Future:
        """Persist the store on the worker and return the result channel.

        Returns:
            Future resolving to the number of entries written, or to the
            FileAccessError raised by the save.
        """
        return self._save_worker.submit(self.save_env)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the store."""
        return self._store.snapshot()

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop the save worker, optionally waiting for queued saves."""
        self._save_worker.shutdown(wait=wait)


# Default global instance for the process-wide usage pattern
_default_service: DotEnvService | None = None
_default_service_lock = threading.Lock()


def get_default_service() -> DotEnvService:
    """Get or create the default global service instance.

    Returns:
        The singleton DotEnvService, configured from project settings.
    """
    global _default_service
    with _default_service_lock:
        if _default_service is None:
            _default_service = DotEnvService(
                store=get_default_store(),
                env_file=EnvFile(ENVSTORE_PATH, legacy_format=ENVSTORE_LEGACY_FORMAT),
                strict=ENVSTORE_STRICT,
            )
        return _default_service


def reset_default_service(service: DotEnvService | None = None) -> None:
    """Replace the default service, shutting the previous one down.

    Args:
        service: New default, or None to recreate lazily from settings.
    """
    global _default_service
    with _default_service_lock:
        previous, _default_service = _default_service, service
    if previous is not None and previous is not service:
        previous.shutdown(wait=True)


def set_env_path(path: str | Path) -> None:
    """Set the backing file path of the default service."""
    get_default_service().set_env_path(path)


def get_env_path() -> Path:
    """Return the backing file path of the default service."""
    return get_default_service().get_env_path()


def load_env() -> int:
    """Load the backing file into the default service."""
    return get_default_service().load_env()


def get_value(key: str) -> str:
    """Return a value from the default service, ``""`` if absent."""
    return get_default_service().get(key)


def set_value(key: str, value: str) -> None:
    """Set a value on the default service."""
    get_default_service().set(key, value)


def set_save(key: str, value: str, blocking: bool = False) -> None:
    """Set a value on the default service and persist it."""
    get_default_service().set_save(key, value, blocking=blocking)


def save_env() -> int:
    """Persist the default service's store."""
    return get_default_service().save_env()

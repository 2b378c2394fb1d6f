"""Project settings loading utilities."""

from __future__ import annotations

import os

TRUTHY = frozenset({"1", "true", "yes", "on"})


def load_project_env() -> dict[str, str]:
    """Snapshot the process environment once for settings lookup.

    Returns:
        A dictionary containing the current environment variables.
    """
    return dict(os.environ)


def parse_flag(raw: str | None, default: bool = False) -> bool:
    """Interpret an environment setting as a boolean flag.

    Args:
        raw: Raw setting value, or None when unset.
        default: Value used when the setting is unset or blank.

    Returns:
        True for ``1``, ``true``, ``yes`` or ``on`` (case-insensitive).
    """
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY

"""Shared fixtures for envstore tests."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def restore_environ() -> Iterator[None]:
    """Undo process environment changes made by the code under test."""
    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)

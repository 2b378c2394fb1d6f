"""Backend FastAPI application for inspecting and editing env entries.

This module provides a thin HTTP layer over the dotenv service.
Business logic is delegated to the services layer.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Form, HTTPException

from envstore.backend.services.dotenv_service import get_default_service
from envstore.backend.services.errors import (
    EnvironmentWriteError,
    FileAccessError,
    ParseError,
)
from envstore.backend.utils.constant import ENVSTORE_LOG_LEVEL

# Configure logging
logging.basicConfig(
    level=ENVSTORE_LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s"
)

PERSIST_MODES = frozenset({"none", "blocking", "background"})

# --- Service layer setup ---
_service = get_default_service()

app = FastAPI()


@app.get("/path")
def get_path() -> dict[str, str]:
    """Return the backing file path.

    Returns:
        A dictionary containing the configured path.
    """
    return {"path": str(_service.get_env_path())}


@app.put("/path")
def put_path(path: str = Form(...)) -> dict[str, str]:
    """Point the service at a different backing file.

    Args:
        path: New backing file path.

    Returns:
        A dictionary containing the new path.

    Raises:
        HTTPException: If the path is blank.
    """
    if not path.strip():
        raise HTTPException(status_code=400, detail="Path must not be empty.")
    _service.set_env_path(path)
    return {"path": str(_service.get_env_path())}


@app.post("/load")
def load() -> dict[str, int]:
    """Reload the store from the backing file.

    Returns:
        A dictionary containing the number of loaded entries.

    Raises:
        HTTPException: 500 if the file cannot be read, 400 if strict parsing
            rejected it.
    """
    try:
        count = _service.load_env()
    except FileAccessError as e:
        logging.error("Load failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to read env file.")
    except ParseError as e:
        logging.warning("Load rejected: %s", e)
        raise HTTPException(
            status_code=400,
            detail=f"Malformed lines: {', '.join(str(n) for n in e.line_numbers)}",
        )
    return {"loaded": count}


@app.post("/save")
def save() -> dict[str, int]:
    """Write the store to the backing file.

    Returns:
        A dictionary containing the number of saved entries.

    Raises:
        HTTPException: 500 if the file cannot be written.
    """
    try:
        count = _service.save_env()
    except FileAccessError as e:
        logging.error("Save failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to write env file.")
    return {"saved": count}


@app.get("/env")
def list_entries() -> dict[str, Any]:
    """Return every entry in the store.

    Returns:
        A dictionary containing the entries.
    """
    return {"entries": _service.snapshot()}


@app.get("/env/{key}")
def get_entry(key: str) -> dict[str, str]:
    """Return one entry.

    Args:
        key: Entry name.

    Returns:
        A dictionary with the key and its value (empty string if absent).
    """
    return {"key": key, "value": _service.get(key)}


@app.put("/env/{key}")
def put_entry(
    key: str,
    value: str = Form(""),
    persist: str = Form("none"),
) -> dict[str, str]:
    """Set one entry, optionally persisting the store.

    Args:
        key: Entry name.
        value: Entry value.
        persist: ``none``, ``blocking`` or ``background``.

    Returns:
        A dictionary with the key and its stored value.

    Raises:
        HTTPException: 400 if the persist mode is unknown or the process
            environment rejects the variable.
    """
    if persist not in PERSIST_MODES:
        raise HTTPException(status_code=400, detail=f"Invalid persist value: {persist}")

    try:
        if persist == "none":
            _service.set(key, value)
        else:
            _service.set_save(key, value, blocking=persist == "blocking")
    except EnvironmentWriteError as e:
        logging.warning("Rejected env write for %r: %s", key, e)
        raise HTTPException(status_code=400, detail=str(e))

    logging.info("Set %s (persist=%s)", key, persist)
    return {"key": key, "value": _service.get(key)}

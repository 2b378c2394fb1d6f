"""Tests for the envstore.backend.app endpoints."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import HTTPException

from envstore.backend import app
from envstore.backend.services.dotenv_service import DotEnvService
from envstore.backend.services.env_file import EnvFile


@pytest.fixture
def service(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[DotEnvService]:
    """Swap the app's service for one bound to tmp_path."""
    svc = DotEnvService(env_file=EnvFile(tmp_path / ".env"))
    monkeypatch.setattr(app, "_service", svc)
    yield svc
    svc.shutdown()


def test_get_path__returns_configured_path(service: DotEnvService, tmp_path: Path) -> None:
    """Report the backing file path."""
    assert app.get_path() == {"path": str(tmp_path / ".env")}


def test_put_path__rejects_blank_path(service: DotEnvService) -> None:
    """Raise HTTPException 400 for an empty path."""
    with pytest.raises(HTTPException) as exc_info:
        app.put_path(path="  ")

    assert exc_info.value.status_code == 400


def test_put_path__updates_service(service: DotEnvService, tmp_path: Path) -> None:
    """Point the service at the new file."""
    target = tmp_path / "other.env"

    result = app.put_path(path=str(target))

    assert result == {"path": str(target)}
    assert service.get_env_path() == target


def test_load__returns_entry_count(service: DotEnvService, tmp_path: Path) -> None:
    """Load the file and report how many entries were read."""
    (tmp_path / ".env").write_text("ENVSTORE_TEST_APP=1\n# note\n")

    assert app.load() == {"loaded": 1}
    assert os.environ["ENVSTORE_TEST_APP"] == "1"


def test_load__maps_read_failure_to_500(service: DotEnvService, tmp_path: Path) -> None:
    """Raise HTTPException 500 when the file cannot be read."""
    service.set_env_path(tmp_path)

    with pytest.raises(HTTPException) as exc_info:
        app.load()

    assert exc_info.value.status_code == 500


def test_load__maps_strict_parse_failure_to_400(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Raise HTTPException 400 listing malformed lines in strict mode."""
    (tmp_path / ".env").write_text("A=1\noops\n")
    svc = DotEnvService(env_file=EnvFile(tmp_path / ".env"), strict=True)
    monkeypatch.setattr(app, "_service", svc)

    with pytest.raises(HTTPException) as exc_info:
        app.load()

    assert exc_info.value.status_code == 400
    assert "2" in exc_info.value.detail


def test_save__writes_store(service: DotEnvService, tmp_path: Path) -> None:
    """Persist the store and report the entry count."""
    service.set("ENVSTORE_TEST_SAVE", "x")

    assert app.save() == {"saved": 1}
    assert (tmp_path / ".env").read_text() == "ENVSTORE_TEST_SAVE=x\n"


def test_save__maps_write_failure_to_500(service: DotEnvService, tmp_path: Path) -> None:
    """Raise HTTPException 500 when the file cannot be written."""
    service.set_env_path(tmp_path / "missing" / ".env")

    with pytest.raises(HTTPException) as exc_info:
        app.save()

    assert exc_info.value.status_code == 500


def test_get_entry__returns_empty_for_unknown_key(service: DotEnvService) -> None:
    """Return an empty value for keys never set."""
    assert app.get_entry(key="ENVSTORE_TEST_UNKNOWN") == {
        "key": "ENVSTORE_TEST_UNKNOWN",
        "value": "",
    }


def test_list_entries__returns_snapshot(service: DotEnvService) -> None:
    """Return every entry in the store."""
    service.set("ENVSTORE_TEST_L", "1")

    assert app.list_entries() == {"entries": {"ENVSTORE_TEST_L": "1"}}


def test_put_entry__sets_without_persisting(service: DotEnvService, tmp_path: Path) -> None:
    """Set the value in memory only by default."""
    result = app.put_entry(key="ENVSTORE_TEST_PUT", value="v", persist="none")

    assert result == {"key": "ENVSTORE_TEST_PUT", "value": "v"}
    assert os.environ["ENVSTORE_TEST_PUT"] == "v"
    assert not (tmp_path / ".env").exists()


def test_put_entry__blocking_persist_writes_file(service: DotEnvService, tmp_path: Path) -> None:
    """Write the file before responding."""
    app.put_entry(key="ENVSTORE_TEST_PB", value="v", persist="blocking")

    assert (tmp_path / ".env").read_text() == "ENVSTORE_TEST_PB=v\n"


def test_put_entry__background_persist_writes_file_eventually(
    service: DotEnvService,
    tmp_path: Path,
) -> None:
    """Write the file once the save worker drains."""
    app.put_entry(key="ENVSTORE_TEST_PG", value="v", persist="background")
    service.shutdown(wait=True)

    assert (tmp_path / ".env").read_text() == "ENVSTORE_TEST_PG=v\n"


def test_put_entry__rejects_unknown_persist_mode(service: DotEnvService) -> None:
    """Raise HTTPException 400 for an invalid persist value."""
    with pytest.raises(HTTPException) as exc_info:
        app.put_entry(key="ENVSTORE_TEST_X", value="v", persist="later")

    assert exc_info.value.status_code == 400
    assert "invalid persist" in exc_info.value.detail.lower()


def test_put_entry__maps_environ_rejection_to_400(service: DotEnvService) -> None:
    """Raise HTTPException 400 when the host rejects the variable name."""
    with pytest.raises(HTTPException) as exc_info:
        app.put_entry(key="BAD=KEY", value="v", persist="none")

    assert exc_info.value.status_code == 400
    assert service.get("BAD=KEY") == "v"

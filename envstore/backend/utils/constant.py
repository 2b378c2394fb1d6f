"""Project-wide constants and configuration."""

from __future__ import annotations

from .env_loader import load_project_env, parse_flag

# Load once (single source of truth)
_ENV = load_project_env()

# Exposed constants (typed, with sensible defaults)
ENVSTORE_PATH: str = _ENV.get("ENVSTORE_PATH", ".env")
ENVSTORE_STRICT: bool = parse_flag(_ENV.get("ENVSTORE_STRICT"))
ENVSTORE_LEGACY_FORMAT: bool = parse_flag(_ENV.get("ENVSTORE_LEGACY_FORMAT"))
ENVSTORE_LOG_LEVEL: str = _ENV.get("ENVSTORE_LOG_LEVEL", "INFO").upper()

"""
Harness configuration - all environment-driven settings in one place.

Readers are evaluated at call time so a test can `monkeypatch.setenv` without
reloading modules.
"""
from __future__ import annotations

import logging
import os
from typing import FrozenSet

# --- Provider API ---
DEFAULT_API_ENDPOINT = "https://api.github.com"
DEFAULT_PROBE_TIMEOUT_S = 10.0
SCOPES_HEADER = "X-OAuth-Scopes"

# Scopes that let a token mutate repository contents, workflows, hooks or packages.
DEFAULT_WRITE_SCOPES: FrozenSet[str] = frozenset({
    "repo",
    "public_repo",
    "workflow",
    "write:packages",
    "delete:packages",
    "write:org",
    "admin:org",
    "write:repo_hook",
    "admin:repo_hook",
    "delete_repo",
})

# --- Credentials ---
GIT_SOURCE = "git_source"
TOKEN_USERNAME = "x-access-token"

# --- Ignore conditions ---
CREATE_PULL_REQUEST = "create_pull_request"


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_api_endpoint() -> str:
    raw = os.environ.get("UPDATE_HARNESS_API_ENDPOINT", "").strip()
    return raw or DEFAULT_API_ENDPOINT


def get_probe_timeout() -> float:
    raw = os.environ.get("UPDATE_HARNESS_PROBE_TIMEOUT")
    return float(raw) if raw else DEFAULT_PROBE_TIMEOUT_S


def get_write_scopes() -> FrozenSet[str]:
    """Write-capable scopes; `UPDATE_HARNESS_EXTRA_WRITE_SCOPES` adds to the defaults."""
    raw = os.environ.get("UPDATE_HARNESS_EXTRA_WRITE_SCOPES", "")
    extra = {e.strip() for e in raw.split(",") if e.strip()}
    return DEFAULT_WRITE_SCOPES | extra


def strict_expansion() -> bool:
    return _bool_env("UPDATE_HARNESS_STRICT_EXPANSION", True)


# --- Logging ---
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    name = (level or os.environ.get("UPDATE_HARNESS_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(level=getattr(logging, name, logging.WARNING), format=LOG_FORMAT)

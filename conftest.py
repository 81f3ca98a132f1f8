"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Provide safe defaults for local runs (no secrets embedded)
  - Configure loguru once for the whole session
  - Keep behavior explicit and discoverable

Important:
  Values below are placeholders. Real projects should load JWT_SECRET from a
  secure secret manager in CI/CD.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from testsuites.api_testing.framework.log_config import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.

    This keeps local runs predictable.
    """
    defaults = {
        "API_URL": "http://localhost:3000",
        "API_VERSION": "v1",
        "JWT_EXPIRATION": "1h",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    init_logger(level=os.environ.get("LOG_LEVEL"), log_file=os.environ.get("LOG_FILE"))

    yield

# ruff: noqa: INP001
"""Shared pytest setup: import paths and deterministic settings."""

import os
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
BACKEND_ROOT = TESTS_DIR.parent
for path in (BACKEND_ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Settings are read once at import; pin the civil calendar and workday so
# scheduling assertions do not depend on the host environment.
os.environ.update(
    {
        "ENVIRONMENT": "test",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "OPERATIONAL_TIMEZONE": "Asia/Jerusalem",
        "DEFAULT_WORKDAY_START_TIME": "08:00",
        "DEFAULT_WORKDAY_END_TIME": "18:00",
        "NOTIFICATION_SINK": "log",
        "CONFIRMATION_BASE_URL": "",
    },
)

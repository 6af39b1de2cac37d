"""Shared test configuration — point the app at a throwaway SQLite file."""

import os
import tempfile
from pathlib import Path

os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{Path(tempfile.gettempdir()) / 'time_mgt_test.db'}",
)
os.environ.setdefault("APP_ENV", "test")

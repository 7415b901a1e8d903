"""Settings read from the process environment.

``DATABASE_URI`` selects the record database. Without it the records live in
``autoconf.db`` inside ``AUTOCONF_DATA_DIR``, or the platform data directory
when that is unset too. ``AUTOCONF_POLICY_FILE`` names the policy document
used when the command line does not give one.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from .errors import MissingConfigurationError

DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DATA_DIR_ENV: Final[str] = "AUTOCONF_DATA_DIR"
POLICY_FILE_ENV: Final[str] = "AUTOCONF_POLICY_FILE"
DATABASE_FILENAME: Final[str] = "autoconf.db"


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _platform_data_home() -> Path:
    if os.name == "nt":
        base = _env("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    base = _env("XDG_DATA_HOME")
    return Path(base) if base else Path.home() / ".local" / "share"


def data_dir() -> Path:
    """Directory holding the default record database; created on demand."""

    configured = _env(DATA_DIR_ENV)
    directory = Path(configured) if configured else _platform_data_home() / "autoconf"
    directory = directory.expanduser().resolve()
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_database_uri() -> str:
    return _env(DATABASE_URI_ENV) or f"sqlite+pysqlite:///{data_dir() / DATABASE_FILENAME}"


def get_policy_path() -> Path:
    configured = _env(POLICY_FILE_ENV)
    if configured is None:
        raise MissingConfigurationError(POLICY_FILE_ENV, hint="or pass --policy")
    return Path(configured).expanduser()

#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and configuration for the KEALOA reference project.

The project structure:
    ROOT/
    ├── kealoa/        # Package code (migrations live in kealoa/migrations)
    ├── data/          # SQLite database and import/export files
    └── logs/          # Application logs

The database and log locations can be redirected without touching code:
    KEALOA_DB_PATH   path of the SQLite database file
    KEALOA_LOG_DIR   directory for log files

Every CLI option defaults to the constants below.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/kealoa/core/paths.py and navigates up
    the directory tree to find ROOT.

    Returns:
        Path object for project root
    """
    # paths.py -> core/ -> kealoa/ -> ROOT/
    return Path(__file__).resolve().parent.parent.parent


def _env_path(name: str, default: Path) -> Path:
    """Return the path named by an environment variable, or the default."""
    value = os.environ.get(name)
    return Path(value).expanduser() if value else default


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "kealoa"
DATA_DIR = ROOT / "data"

# --- Database ---
ALEMBIC_DIR = PACKAGE_DIR / "migrations"
DB_PATH = _env_path("KEALOA_DB_PATH", DATA_DIR / "kealoa.db")

# --- Import / export ---
EXPORT_DIR = DATA_DIR / "exports"

# --- Logs ---
LOG_DIR = _env_path("KEALOA_LOG_DIR", ROOT / "logs")

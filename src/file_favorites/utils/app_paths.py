"""Utility functions to locate the application's data files."""

import os
from pathlib import Path
from typing import Optional

DATA_DIR_ENV = "FILE_FAVORITES_HOME"

FAVORITES_FILE_NAME = "favorites.json"
RESTORATION_FILE_NAME = "restoration.json"
BACKUP_DIR_NAME = "backups"
LOG_FILE_NAME = "log.txt"


def get_data_dir(create: bool = True) -> Path:
    """Get the directory holding favorites, backups and logs.

    Defaults to ~/.file_favorites; the FILE_FAVORITES_HOME environment
    variable overrides it.

    Args:
        create: Create the directory if it doesn't exist yet

    Returns:
        Path to the data directory
    """
    override = os.environ.get(DATA_DIR_ENV, "")
    if override:
        data_dir = Path(override).expanduser()
    else:
        data_dir = Path.home() / ".file_favorites"

    if create:
        data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_favorites_path(data_dir: Optional[Path] = None) -> Path:
    return (data_dir or get_data_dir()) / FAVORITES_FILE_NAME


def get_restoration_path(data_dir: Optional[Path] = None) -> Path:
    return (data_dir or get_data_dir()) / RESTORATION_FILE_NAME


def get_backup_dir(data_dir: Optional[Path] = None) -> Path:
    return (data_dir or get_data_dir()) / BACKUP_DIR_NAME


def get_log_path(data_dir: Optional[Path] = None) -> Path:
    return (data_dir or get_data_dir()) / LOG_FILE_NAME

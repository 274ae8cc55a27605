"""Utility functions to resolve folder filters and open files."""

import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, List

# Opens one absolute path in the user's editor or default application
Opener = Callable[[str], None]

# (directory, glob pattern) -> absolute paths of the matching files
GlobMatcher = Callable[[str, str], List[str]]


def match_files(directory: str, pattern: str) -> List[str]:
    """Find the files under a directory matching a glob pattern.

    Args:
        directory: Directory the pattern is relative to
        pattern: Glob pattern such as "*.py" or "**/*.md"

    Returns:
        Sorted absolute paths of every matching entry that is not a directory.
    """
    root = Path(directory).expanduser()
    if not root.is_dir():
        return []

    return sorted(str(path.absolute()) for path in root.glob(pattern) if not path.is_dir())


def open_with_system(path: str):
    """Open a file with the platform's default application."""
    if sys.platform == "win32":
        os.startfile(path)  # type: ignore[attr-defined]
    elif sys.platform == "darwin":
        subprocess.Popen(["open", path])
    else:
        subprocess.Popen(["xdg-open", path])

"""Service to read and write a document at a fixed location."""

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class FavoritesError(Exception):
    """Base class for errors reported to the user."""


class FavoritesStorageError(FavoritesError):
    """Reading or writing a favorites document failed."""


class DocumentStorage:
    """Byte-level storage for one document, with atomic replacement."""

    def __init__(self, path: Path, backup_dir: Optional[Path] = None):
        """Initialize the storage.

        Args:
            path: Location of the document
            backup_dir: Where backups are written. Defaults to a "backups"
                        directory next to the document.
        """
        self.path = Path(path)
        self.backup_dir = Path(backup_dir) if backup_dir else self.path.parent / "backups"

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Optional[bytes]:
        """Read the whole document.

        Returns:
            The document's bytes, or None if it doesn't exist
        """
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FavoritesStorageError(f"Cannot read {self.path}: {e}") from e

    def write(self, data: bytes):
        """Replace the document with ``data``.

        The bytes go to a temporary file in the same directory which then
        replaces the document, so readers never see a partial write.
        """
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise FavoritesStorageError(f"Cannot write {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def delete(self) -> bool:
        """Delete the document. Returns False if there was nothing to delete."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise FavoritesStorageError(f"Cannot delete {self.path}: {e}") from e
        return True

    def take(self) -> Optional[bytes]:
        """Read the document and remove it.

        The document is renamed before it is read, so a crash part-way
        through can leave a stray claimed copy behind but never lets the
        same content be taken twice.

        Returns:
            The document's bytes, or None if it doesn't exist
        """
        claimed = self.path.with_name(f"{self.path.name}.claimed")
        try:
            os.replace(self.path, claimed)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise FavoritesStorageError(f"Cannot claim {self.path}: {e}") from e

        try:
            return claimed.read_bytes()
        except OSError as e:
            raise FavoritesStorageError(f"Cannot read {claimed}: {e}") from e
        finally:
            claimed.unlink(missing_ok=True)

    def create_backup(self) -> Optional[Path]:
        """Copy the current document into the backup directory.

        Returns:
            Path to the backup file, or None if there is no document yet
        """
        if not self.path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = self.backup_dir / f"{self.path.stem}_{timestamp}{self.path.suffix}"

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.path, backup_path)
        except OSError as e:
            raise FavoritesStorageError(f"Cannot back up {self.path}: {e}") from e

        logger.info("Backed up %s to %s", self.path, backup_path)
        return backup_path

"""Service to remember files that should be reopened after a relaunch."""

import json
import logging
from typing import Iterable, List

from .document_storage import DocumentStorage

logger = logging.getLogger(__name__)


class RestorationPoint:
    """A one-shot list of paths kept next to the favorites file.

    The file is consumed by ``load``: a relaunch that crashes while reopening
    the files will not try to reopen them again.
    """

    def __init__(self, storage: DocumentStorage):
        self.storage = storage

    def create(self, paths: Iterable[str]):
        """Overwrite the restoration file with ``paths``."""
        document = {"paths": [str(path) for path in paths]}
        self.storage.write((json.dumps(document, indent=4) + "\n").encode("utf-8"))
        logger.info("Created restoration point with %d paths", len(document["paths"]))

    def load(self) -> List[str]:
        """Read and delete the restoration file.

        Returns:
            The saved paths, or an empty list if there is no restoration point
        """
        data = self.storage.take()
        if data is None:
            return []

        try:
            document = json.loads(data)
        except ValueError as e:
            logger.warning("Ignoring unreadable restoration point %s: %s", self.storage.path, e)
            return []

        # Accept both {"paths": [...]} and a bare list
        paths = document.get("paths") if isinstance(document, dict) else document
        if not isinstance(paths, list):
            logger.warning("Ignoring restoration point without a path list: %s", self.storage.path)
            return []

        return [path for path in paths if isinstance(path, str)]

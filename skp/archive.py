"""Archive of finalized SKP documents

The whole archive is one JSON array (newest first) stored at ARCHIVE_PATH.
Every save rewrites the full array through a temp file + os.replace, so a
reader never observes a half-written file.
"""
import json
import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .config import ARCHIVE_PATH
from .errors import ArchiveCorruptError
from .models import DocumentStatus, SKPData

logger = logging.getLogger(__name__)


class ArchiveStore:
    """Append-only list of archived SKP snapshots"""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or ARCHIVE_PATH)

    def _read(self) -> tuple[list[SKPData], bool]:
        """Parsed documents plus whether the file was read without loss"""
        if not self.path.exists():
            return [], True
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load archive %s: %s", self.path, e)
            return [], False

        if not isinstance(raw, list):
            logger.warning("Archive %s is not a JSON array, ignoring it", self.path)
            return [], False

        documents = []
        complete = True
        for index, item in enumerate(raw):
            try:
                documents.append(SKPData.from_dict(item))
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed entry %d in %s: %s", index, self.path, e)
                complete = False
        return documents, complete

    def load(self) -> list[SKPData]:
        """Read all archived documents; malformed entries are skipped, an unreadable file yields []"""
        documents, _ = self._read()
        return documents

    def save(self, documents: list[SKPData]) -> None:
        """Replace the persisted array with `documents`"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [doc.to_dict() for doc in documents]

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".skp_data.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def append(self, doc: SKPData) -> SKPData:
        """Archive a snapshot of `doc` (marked Final) in front of the list

        Raises:
            ArchiveCorruptError: the existing file could not be read in full
        """
        documents, complete = self._read()
        if not complete:
            raise ArchiveCorruptError(f"archive {self.path} is damaged; repair it before saving")
        snapshot = replace(doc, status=DocumentStatus.FINAL)
        documents = [snapshot] + documents
        self.save(documents)
        logger.info("Archived %s (%d documents)", snapshot.number or snapshot.id, len(documents))
        return snapshot

    def count(self) -> int:
        return len(self.load())

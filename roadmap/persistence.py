"""
Persistence - where the roadmap document lives between sessions.

The core only talks to the PersistenceService interface. load() and save()
fail soft: problems are logged and reported as "nothing loaded" / "not
saved", never raised into the caller. A document that cannot be used is
copied aside with backup() before anything can overwrite it. Documents handed out are raw and
untrusted; the workspace re-validates them through the import pipeline.
"""

import hashlib
import json
import logging
import os
import shutil
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from roadmap import paths
from roadmap.serialization import dumps_document

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict[str, Any]], None]


class PersistenceService(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, document: Mapping[str, Any]) -> None: ...

    def on_external_change(self, callback: ChangeCallback) -> None: ...

    def backup(self) -> Path | None: ...


class JsonFilePersistence:
    """
    Stores the document as JSON text in a single file.

    Writes go to a sibling temp file first and are moved into place, so a
    crash mid-write never leaves a truncated document behind. poll() notices
    when another process rewrote the file and hands the new document to every
    registered callback.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else paths.document_path()
        self._callbacks: list[ChangeCallback] = []
        self._fingerprint: str | None = None

    def _read_fingerprint(self) -> str | None:
        try:
            return hashlib.sha256(self.path.read_bytes()).hexdigest()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read %s for change detection: %s", self.path, exc)
            return None

    def load(self) -> dict[str, Any] | None:
        """Return the stored document, or None if absent or unreadable."""
        if not self.path.exists():
            logger.info("No saved document at %s", self.path)
            return None
        try:
            raw_bytes = self.path.read_bytes()
        except OSError as exc:
            logger.error("Failed to load document from %s: %s", self.path, exc)
            return None

        # Recorded even for broken content so poll() does not retry it
        self._fingerprint = hashlib.sha256(raw_bytes).hexdigest()
        try:
            data = json.loads(raw_bytes)
        except ValueError as exc:
            logger.error("Failed to load document from %s: %s", self.path, exc)
            self.backup()
            return None
        if not isinstance(data, dict):
            logger.warning("Saved document at %s is not a JSON object; ignoring", self.path)
            self.backup()
            return None
        return data

    def backup(self) -> Path | None:
        """
        Copy the current file to "<name>.invalid-<utc timestamp>" next to it.

        Returns:
            The backup path, or None if there was nothing to copy or the copy failed.
        """
        if not self.path.exists():
            return None
        stamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S-%f")
        target = self.path.with_name(f"{self.path.name}.invalid-{stamp}")
        try:
            shutil.copy2(self.path, target)
        except OSError as exc:
            logger.error("Failed to back up %s: %s", self.path, exc)
            return None
        logger.warning("Backed up unusable document %s to %s", self.path, target)
        return target

    def save(self, document: Mapping[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            text = dumps_document(document)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save document to %s: %s", self.path, exc)
            return
        self._fingerprint = hashlib.sha256(text.encode("utf-8")).hexdigest()
        logger.debug("Saved document to %s", self.path)

    def on_external_change(self, callback: ChangeCallback) -> None:
        self._callbacks.append(callback)

    def poll(self) -> bool:
        """
        Deliver the document to callbacks if the file changed behind our back.

        Returns:
            True if callbacks were notified.
        """
        fingerprint = self._read_fingerprint()
        if fingerprint is None or fingerprint == self._fingerprint:
            return False

        document = self.load()
        if document is None:
            return False

        logger.info("Document at %s changed externally", self.path)
        for callback in list(self._callbacks):
            callback(document)
        return True

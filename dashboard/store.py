"""JSON file store for the dashboard document.

The store owns a single ``data.json`` file and exposes only whole-document
reads and whole-document replacement. There is no partial update API; the
last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from .models import Document, DocumentFormatError, default_document, default_project
from .dashboard_logging import (
    log_document_replaced,
    log_error_with_context,
    log_legacy_migration,
    log_operation,
    log_performance,
)

logger = logging.getLogger("dashboard.store")


class JsonFileStore:
    """Persist the dashboard document as pretty-printed JSON."""

    DATA_DIR_ENV = "DASHBOARD_DATA_DIR"
    DATA_FILE = "data.json"
    LEGACY_FILE = "checklist.json"
    LEGACY_BACKUP_FILE = "checklist.old.json"

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).resolve()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create data directory: {e}")
            raise RuntimeError(f"Could not initialize store at {self.data_dir}: {e}")

    @classmethod
    def from_env(cls, default_dir: Path | str) -> "JsonFileStore":
        """Build a store in ``DASHBOARD_DATA_DIR``, or ``default_dir`` when unset."""
        return cls(Path(os.getenv(cls.DATA_DIR_ENV) or default_dir).expanduser())

    @property
    def data_path(self) -> Path:
        return self.data_dir / self.DATA_FILE

    @property
    def legacy_path(self) -> Path:
        return self.data_dir / self.LEGACY_FILE

    @property
    def legacy_backup_path(self) -> Path:
        return self.data_dir / self.LEGACY_BACKUP_FILE

    # ------------------------------------------------------------------
    # Whole-document access
    # ------------------------------------------------------------------

    def read(self) -> Document:
        """Return the persisted document, or the built-in default.

        Absence, unreadable files and malformed JSON all fall back to the
        default document; nothing is raised to the caller.
        """
        if not self.data_path.exists():
            return default_document()
        try:
            payload = json.loads(self.data_path.read_text(encoding="utf-8"))
            return Document.from_dict(payload)
        except (OSError, ValueError, DocumentFormatError) as e:
            log_error_with_context(e, {"operation": "read_document", "path": str(self.data_path)})
            return default_document()

    @log_performance("replace_document")
    def replace(self, document: Document) -> bool:
        """Overwrite the persisted document with exactly ``document``.

        Returns ``False`` when the write fails. The file is written to a
        temporary sibling first and moved into place, so readers never see
        a half-written document.
        """
        try:
            with log_operation("replace_document", path=str(self.data_path)):
                self._write_json(self.data_path, document.to_dict())
        except (OSError, TypeError, ValueError) as e:
            log_error_with_context(e, {"operation": "replace_document", "path": str(self.data_path)})
            return False

        log_document_replaced(self.data_path, len(document.projects))
        return True

    def _write_json(self, path: Path, payload: Dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # One-time legacy migration
    # ------------------------------------------------------------------

    def needs_migration(self) -> bool:
        return self.legacy_path.exists() and not self.data_path.exists()

    def migrate_legacy(self) -> bool:
        """Convert a legacy ``{written, practical}`` checklist into a document.

        Runs only when the legacy file exists and the current data file does
        not. Failures are logged and reported as ``False``; startup goes on.
        """
        if not self.needs_migration():
            return False

        logger.info(f"Migrating legacy {self.legacy_path.name} to {self.data_path.name}")
        try:
            legacy = json.loads(self.legacy_path.read_text(encoding="utf-8"))
            if not isinstance(legacy, dict):
                raise DocumentFormatError("Legacy checklist must be a JSON object")

            categories = []
            if legacy.get("written") is not None:
                categories.append({"id": "c1", "label": "Written", "items": legacy["written"]})
            if legacy.get("practical") is not None:
                categories.append({"id": "c2", "label": "Practical", "items": legacy["practical"]})

            # legacy items are carried over verbatim, extra fields included
            project = default_project(()).to_dict()
            project["categories"] = categories
            self._write_json(self.data_path, {"currentProjectId": project["id"], "projects": [project]})
            self.legacy_path.rename(self.legacy_backup_path)
        except (OSError, ValueError) as e:
            log_error_with_context(e, {"operation": "migrate_legacy", "path": str(self.legacy_path)})
            return False

        log_legacy_migration(self.legacy_path, self.data_path)
        return True

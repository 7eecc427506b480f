"""In-memory dashboard state and the edit/save cycle.

A ``DashboardSession`` owns the single document loaded from a store.
Edits produce a new document, which becomes the session's document and,
depending on the operation's autosave policy, is written back to the
store in full.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol

from .client import StoreUnavailableError
from .dashboard_logging import log_edit_applied, log_error_with_context
from .derived import daily_quote
from .editor import AUTOSAVE_NOW, AUTOSAVE_ON_BLUR, EditError, LastProjectError, get_operation
from .models import Category, Document, Project
from .render import render_connection_error, render_dashboard, render_safely

logger = logging.getLogger("dashboard.session")

SAVE_IDLE = "idle"
SAVE_SAVING = "saving"
SAVE_SUCCESS = "success"
SAVE_ERROR = "error"


class DocumentStore(Protocol):
    def read(self) -> Document: ...

    def replace(self, document: Document) -> bool: ...


def _always_confirm(prompt: str) -> bool:
    return True


class DashboardSession:
    """Hold the document, apply edits and push it to the store."""

    def __init__(
        self,
        store: DocumentStore,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.store = store
        self.confirm = confirm or _always_confirm
        self.document: Optional[Document] = None
        self.connection_error: Optional[str] = None
        self.save_status = SAVE_IDLE
        self.message: Optional[str] = None
        self.active_category_ids: Dict[str, str] = {}
        self._pending_blur = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """Load the document; an unreachable store sets ``connection_error``."""
        try:
            self.document = self.store.read()
        except StoreUnavailableError as e:
            self.connection_error = str(e) or "Unable to reach the dashboard server"
            logger.error(f"Failed to load app data: {self.connection_error}")
            return False
        self.connection_error = None
        return True

    def retry(self) -> bool:
        return self.load()

    # ------------------------------------------------------------------
    # Derived selection
    # ------------------------------------------------------------------

    def _require_document(self) -> Document:
        if self.document is None:
            raise RuntimeError("No dashboard document loaded")
        return self.document

    @property
    def active_project(self) -> Optional[Project]:
        if self.document is None:
            return None
        return self.document.active_project()

    @property
    def active_category(self) -> Optional[Category]:
        """The selected tab, falling back to the first category when it was deleted."""
        project = self.active_project
        if project is None or not project.categories:
            return None
        selected = self.active_category_ids.get(project.id)
        category = project.find_category(selected) if selected else None
        return category or project.categories[0]

    def select_category(self, category_id: str) -> None:
        project = self.active_project
        if project is None or project.find_category(category_id) is None:
            raise EditError(f"Category '{category_id}' not found")
        self.active_category_ids[project.id] = category_id

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def apply(self, operation: str, *args: Any, autosave: Optional[bool] = None, **kwargs: Any) -> bool:
        """Run a named edit and commit the result.

        Returns ``False`` when the edit was rejected or not confirmed; in
        that case the document is unchanged and nothing is written.
        """
        document = self._require_document()
        op = get_operation(operation)
        self.message = None

        try:
            updated = op.apply(document, *args, **kwargs)
        except LastProjectError as e:
            self.message = str(e)
            logger.info(f"Rejected {operation}: {e}")
            return False

        if op.requires_confirmation and not self.confirm(op.confirmation_prompt):
            return False

        self.document = updated
        if operation == "add_category":
            project = updated.find_project(kwargs.get("project_id", args[0] if args else ""))
            active = self.active_project
            if project is not None and active is not None and project.id == active.id and project.categories:
                self.active_category_ids[project.id] = project.categories[-1].id

        if autosave is None:
            autosave = op.autosave == AUTOSAVE_NOW
        if op.autosave == AUTOSAVE_ON_BLUR and not autosave:
            self._pending_blur = True
        log_edit_applied(operation, autosave)

        if autosave:
            self._commit()
        return True

    def blur(self) -> bool:
        """Focus left a text field: save the pending free-text edit, if any."""
        if not self._pending_blur:
            return False
        return self._commit()

    def save(self) -> bool:
        """Manual save of the whole document."""
        self._require_document()
        return self._commit()

    def _commit(self) -> bool:
        document = self._require_document()
        self._pending_blur = False
        self.save_status = SAVE_SAVING
        try:
            saved = self.store.replace(document)
        except StoreUnavailableError as e:
            log_error_with_context(e, {"operation": "save_document"})
            saved = False
        self.save_status = SAVE_SUCCESS if saved else SAVE_ERROR
        if not saved:
            logger.error("Auto-save failed")
        return saved

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, now: Optional[datetime] = None) -> str:
        if self.connection_error is not None:
            return render_connection_error(self.connection_error)
        if now is None:
            now = datetime.now()
        category = self.active_category
        return render_safely(
            render_dashboard,
            self.document,
            now,
            daily_quote(now),
            category.id if category else None,
            save_status=self.save_status,
            message=self.message,
        )

"""Data models for the D-Day dashboard document.

This module contains the core data structures persisted by the store:
the root document, projects, countdown targets, checklist categories,
goal items and their sub-items. All models are immutable; edits build
new values with ``dataclasses.replace``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


class DocumentFormatError(ValueError):
    """Raised when a payload cannot be interpreted as a dashboard document."""


def new_id(prefix: str, now_ms: Optional[int] = None) -> str:
    """Generate a timestamp-derived identifier such as ``p-1767225600000``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{prefix}-{now_ms}"


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _sequence(data: Mapping[str, Any], key: str) -> list:
    value = data.get(key)
    if not isinstance(value, (list, tuple)):
        return []
    return [entry for entry in value if isinstance(entry, Mapping)]


@dataclass(slots=True, frozen=True)
class SubItem:
    """A single checkable leaf task."""

    id: str
    label: str
    checked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "checked": self.checked}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SubItem":
        return cls(
            id=_text(data, "id"),
            label=_text(data, "label"),
            checked=data.get("checked") is True,
        )


@dataclass(slots=True, frozen=True)
class GoalItem:
    """Top-level checklist entry with an optional target date."""

    id: str
    label: str
    target_date: str = ""
    is_expanded: bool = False
    sub_items: Tuple[SubItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase representation."""
        return {
            "id": self.id,
            "label": self.label,
            "targetDate": self.target_date,
            "isExpanded": self.is_expanded,
            "subItems": [sub.to_dict() for sub in self.sub_items],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GoalItem":
        """Create from the persisted representation, defaulting absent fields."""
        return cls(
            id=_text(data, "id"),
            label=_text(data, "label"),
            target_date=_text(data, "targetDate"),
            is_expanded=data.get("isExpanded") is True,
            sub_items=tuple(SubItem.from_dict(sub) for sub in _sequence(data, "subItems")),
        )

    def find_sub_item(self, sub_id: str) -> Optional[SubItem]:
        return next((sub for sub in self.sub_items if sub.id == sub_id), None)


@dataclass(slots=True, frozen=True)
class Category:
    """A named tab grouping goal items."""

    id: str
    label: str
    items: Tuple[GoalItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Category":
        return cls(
            id=_text(data, "id"),
            label=_text(data, "label"),
            items=tuple(GoalItem.from_dict(item) for item in _sequence(data, "items")),
        )

    def find_item(self, item_id: str) -> Optional[GoalItem]:
        return next((item for item in self.items if item.id == item_id), None)


@dataclass(slots=True, frozen=True)
class DDay:
    """One countdown target; ``color`` is a symbolic token like ``--neon-cyan``."""

    id: str
    label: str
    date: str
    color: str = "--neon-cyan"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "date": self.date, "color": self.color}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DDay":
        return cls(
            id=_text(data, "id"),
            label=_text(data, "label"),
            date=_text(data, "date"),
            color=_text(data, "color") or "--neon-cyan",
        )


@dataclass(slots=True, frozen=True)
class Project:
    """A dashboard page: header, countdown targets and checklist categories."""

    id: str
    title: str
    subtitle: str = "D-DAY DASHBOARD"
    theme: str = "neon-blue"
    dday_config: Tuple[DDay, ...] = field(default_factory=tuple)
    categories: Tuple[Category, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase representation."""
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "theme": self.theme,
            "dDayConfig": [dday.to_dict() for dday in self.dday_config],
            "categories": [category.to_dict() for category in self.categories],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Project":
        """Create from the persisted representation.

        A missing ``dDayConfig`` or ``categories`` list is treated as empty
        rather than rejected.
        """
        return cls(
            id=_text(data, "id"),
            title=_text(data, "title"),
            subtitle=_text(data, "subtitle"),
            theme=_text(data, "theme"),
            dday_config=tuple(DDay.from_dict(d) for d in _sequence(data, "dDayConfig")),
            categories=tuple(Category.from_dict(c) for c in _sequence(data, "categories")),
        )

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def find_dday(self, dday_id: str) -> Optional[DDay]:
        return next((d for d in self.dday_config if d.id == dday_id), None)


@dataclass(slots=True, frozen=True)
class Document:
    """Root of the persisted state: every project plus the current selection."""

    current_project_id: str
    projects: Tuple[Project, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentProjectId": self.current_project_id,
            "projects": [project.to_dict() for project in self.projects],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        """Create from a decoded JSON payload."""
        if not isinstance(data, Mapping):
            raise DocumentFormatError(
                f"Document must be a JSON object, got {type(data).__name__}"
            )
        return cls(
            current_project_id=_text(data, "currentProjectId"),
            projects=tuple(Project.from_dict(p) for p in _sequence(data, "projects")),
        )

    def find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def active_project(self) -> Optional[Project]:
        """Return the current project, falling back to the first one."""
        project = self.find_project(self.current_project_id)
        if project is None and self.projects:
            return self.projects[0]
        return project


DEFAULT_DDAYS = (
    DDay(id="d1", label="Written exam", date="2026-04-04T09:00:00", color="--neon-cyan"),
    DDay(id="d2", label="Practical exam", date="2026-06-20T09:00:00", color="--neon-pink"),
)


def default_project(categories: Tuple[Category, ...]) -> Project:
    """Build the sample project used on first run and by legacy migration."""
    return Project(
        id="p1",
        title="2026 BIG DATA ANALYST",
        subtitle="D-DAY DASHBOARD",
        theme="neon-blue",
        dday_config=DEFAULT_DDAYS,
        categories=categories,
    )


def default_document() -> Document:
    """Return the built-in document served when nothing has been persisted."""
    written = Category(
        id="c1",
        label="Written",
        items=(
            GoalItem(
                id="w1",
                label="Part 1: Big data analysis planning",
                target_date="2026-01-31",
                is_expanded=True,
                sub_items=(
                    SubItem(id="w1-1", label="Understanding big data"),
                    SubItem(id="w1-2", label="Data governance"),
                ),
            ),
        ),
    )
    return Document(current_project_id="p1", projects=(default_project((written,)),))

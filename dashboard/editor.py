"""Edit operations on the dashboard document.

Every operation takes the current ``Document`` and returns a new one with
the targeted node replaced. Nothing is mutated in place. ``OPERATIONS``
records, for each operation, whether it is saved immediately, only when
the edited field loses focus, or kept in memory until the next save, and
whether it needs the user to confirm first.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from .derived import parse_instant
from .models import Category, DDay, Document, GoalItem, Project, SubItem, new_id

AUTOSAVE_NOW = "now"
AUTOSAVE_ON_BLUR = "on_blur"
AUTOSAVE_LOCAL = "local"

LAST_PROJECT_MESSAGE = "At least one project must exist."


class EditError(ValueError):
    """Raised when an edit refers to something that does not exist or is invalid."""


class LastProjectError(EditError):
    """Raised when deleting the only remaining project."""

    def __init__(self, message: str = LAST_PROJECT_MESSAGE):
        super().__init__(message)


def _now_ms() -> int:
    return int(time.time() * 1000)


# ----------------------------------------------------------------------
# Tree helpers
# ----------------------------------------------------------------------


def _project(document: Document, project_id: str) -> Project:
    project = document.find_project(project_id)
    if project is None:
        raise EditError(f"Project '{project_id}' not found")
    return project


def _category(project: Project, category_id: str) -> Category:
    category = project.find_category(category_id)
    if category is None:
        raise EditError(f"Category '{category_id}' not found in project '{project.id}'")
    return category


def _item(category: Category, item_id: str) -> GoalItem:
    item = category.find_item(item_id)
    if item is None:
        raise EditError(f"Goal item '{item_id}' not found in category '{category.id}'")
    return item


def _with_project(document: Document, project: Project) -> Document:
    return replace(
        document,
        projects=tuple(project if p.id == project.id else p for p in document.projects),
    )


def _with_category(document: Document, project_id: str, category: Category) -> Document:
    project = _project(document, project_id)
    categories = tuple(category if c.id == category.id else c for c in project.categories)
    return _with_project(document, replace(project, categories=categories))


def _with_item(document: Document, project_id: str, category_id: str, item: GoalItem) -> Document:
    category = _category(_project(document, project_id), category_id)
    items = tuple(item if i.id == item.id else i for i in category.items)
    return _with_category(document, project_id, replace(category, items=items))


def _update_item(
    document: Document,
    project_id: str,
    category_id: str,
    item_id: str,
    change: Callable[[GoalItem], GoalItem],
) -> Document:
    item = _item(_category(_project(document, project_id), category_id), item_id)
    return _with_item(document, project_id, category_id, change(item))


def _update_sub_item(
    document: Document,
    project_id: str,
    category_id: str,
    item_id: str,
    sub_id: str,
    change: Callable[[SubItem], SubItem],
) -> Document:
    def apply(item: GoalItem) -> GoalItem:
        if item.find_sub_item(sub_id) is None:
            raise EditError(f"Sub-item '{sub_id}' not found in goal item '{item_id}'")
        return replace(
            item,
            sub_items=tuple(change(s) if s.id == sub_id else s for s in item.sub_items),
        )

    return _update_item(document, project_id, category_id, item_id, apply)


# ----------------------------------------------------------------------
# Projects
# ----------------------------------------------------------------------


def select_project(document: Document, project_id: str) -> Document:
    _project(document, project_id)
    return replace(document, current_project_id=project_id)


def add_project(document: Document, title: str, now_ms: Optional[int] = None) -> Document:
    """Append a new project and make it current.

    The project starts with one countdown 30 days ahead and one empty
    category.
    """
    title = (title or "").strip()
    if not title:
        raise EditError("Project title is required")
    if now_ms is None:
        now_ms = _now_ms()

    target = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc) + timedelta(days=30)
    project = Project(
        id=new_id("p", now_ms),
        title=title,
        subtitle="D-DAY DASHBOARD",
        theme="neon-blue",
        dday_config=(
            DDay(
                id=f"{new_id('d', now_ms)}-1",
                label="Target date",
                date=target.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
                color="--neon-cyan",
            ),
        ),
        categories=(Category(id=f"{new_id('c', now_ms)}-1", label="Default category"),),
    )
    return replace(
        document,
        projects=document.projects + (project,),
        current_project_id=project.id,
    )


def delete_project(document: Document, project_id: str) -> Document:
    """Remove a project; the only remaining project cannot be deleted."""
    _project(document, project_id)
    remaining = tuple(p for p in document.projects if p.id != project_id)
    if not remaining:
        raise LastProjectError()

    current = document.current_project_id
    if current == project_id:
        current = remaining[0].id
    return replace(document, projects=remaining, current_project_id=current)


def update_project_field(document: Document, project_id: str, field_name: str, value: str) -> Document:
    if field_name not in ("title", "subtitle"):
        raise EditError(f"Field '{field_name}' cannot be edited")
    project = _project(document, project_id)
    return _with_project(document, replace(project, **{field_name: value}))


# ----------------------------------------------------------------------
# Countdown targets
# ----------------------------------------------------------------------


def add_dday(
    document: Document,
    project_id: str,
    label: str,
    date: str,
    color: str = "--neon-cyan",
    now_ms: Optional[int] = None,
) -> Document:
    if not label or not date:
        raise EditError("Both a label and a date are required")
    instant = parse_instant(date)
    if instant is None:
        raise EditError(f"Invalid date '{date}'")

    project = _project(document, project_id)
    dday = DDay(
        id=new_id("d", now_ms if now_ms is not None else _now_ms()),
        label=label,
        date=instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        color=color or "--neon-cyan",
    )
    return _with_project(document, replace(project, dday_config=project.dday_config + (dday,)))


def delete_dday(document: Document, project_id: str, dday_id: str) -> Document:
    project = _project(document, project_id)
    if project.find_dday(dday_id) is None:
        raise EditError(f"D-Day '{dday_id}' not found in project '{project_id}'")
    config = tuple(d for d in project.dday_config if d.id != dday_id)
    return _with_project(document, replace(project, dday_config=config))


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------


def add_category(document: Document, project_id: str, label: str, now_ms: Optional[int] = None) -> Document:
    if not label:
        raise EditError("Category name is required")
    project = _project(document, project_id)
    category = Category(id=new_id("c", now_ms if now_ms is not None else _now_ms()), label=label)
    return _with_project(document, replace(project, categories=project.categories + (category,)))


def rename_category(document: Document, project_id: str, category_id: str, label: str) -> Document:
    if not label:
        raise EditError("Category name is required")
    category = _category(_project(document, project_id), category_id)
    return _with_category(document, project_id, replace(category, label=label))


def delete_category(document: Document, project_id: str, category_id: str) -> Document:
    project = _project(document, project_id)
    _category(project, category_id)
    categories = tuple(c for c in project.categories if c.id != category_id)
    return _with_project(document, replace(project, categories=categories))


# ----------------------------------------------------------------------
# Goal items and sub-items
# ----------------------------------------------------------------------


def add_goal_item(document: Document, project_id: str, category_id: str, now_ms: Optional[int] = None) -> Document:
    category = _category(_project(document, project_id), category_id)
    item = GoalItem(
        id=new_id("new", now_ms if now_ms is not None else _now_ms()),
        label="New goal",
        target_date="",
        is_expanded=True,
    )
    return _with_category(document, project_id, replace(category, items=category.items + (item,)))


def update_goal_label(document: Document, project_id: str, category_id: str, item_id: str, label: str) -> Document:
    return _update_item(document, project_id, category_id, item_id, lambda i: replace(i, label=label))


def set_target_date(document: Document, project_id: str, category_id: str, item_id: str, target_date: str) -> Document:
    return _update_item(
        document, project_id, category_id, item_id, lambda i: replace(i, target_date=target_date or "")
    )


def toggle_expand(document: Document, project_id: str, category_id: str, item_id: str) -> Document:
    return _update_item(
        document, project_id, category_id, item_id, lambda i: replace(i, is_expanded=not i.is_expanded)
    )


def delete_goal_item(document: Document, project_id: str, category_id: str, item_id: str) -> Document:
    category = _category(_project(document, project_id), category_id)
    _item(category, item_id)
    items = tuple(i for i in category.items if i.id != item_id)
    return _with_category(document, project_id, replace(category, items=items))


def add_sub_item(
    document: Document, project_id: str, category_id: str, item_id: str, now_ms: Optional[int] = None
) -> Document:
    """Append an unchecked sub-item and expand its parent."""
    stamp = now_ms if now_ms is not None else _now_ms()

    def apply(item: GoalItem) -> GoalItem:
        sub = SubItem(id=f"{item.id}-{len(item.sub_items) + 1}-{stamp}", label="New task")
        return replace(item, is_expanded=True, sub_items=item.sub_items + (sub,))

    return _update_item(document, project_id, category_id, item_id, apply)


def update_sub_label(
    document: Document, project_id: str, category_id: str, item_id: str, sub_id: str, label: str
) -> Document:
    return _update_sub_item(
        document, project_id, category_id, item_id, sub_id, lambda s: replace(s, label=label)
    )


def toggle_sub_item(document: Document, project_id: str, category_id: str, item_id: str, sub_id: str) -> Document:
    return _update_sub_item(
        document, project_id, category_id, item_id, sub_id, lambda s: replace(s, checked=not s.checked)
    )


def delete_sub_item(document: Document, project_id: str, category_id: str, item_id: str, sub_id: str) -> Document:
    def apply(item: GoalItem) -> GoalItem:
        if item.find_sub_item(sub_id) is None:
            raise EditError(f"Sub-item '{sub_id}' not found in goal item '{item_id}'")
        return replace(item, sub_items=tuple(s for s in item.sub_items if s.id != sub_id))

    return _update_item(document, project_id, category_id, item_id, apply)


# ----------------------------------------------------------------------
# Operation registry
# ----------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class EditOperation:
    """An edit function together with its save and confirmation policy."""

    name: str
    apply: Callable[..., Document]
    autosave: str = AUTOSAVE_NOW
    requires_confirmation: bool = False
    confirmation_prompt: str = ""


def _op(apply: Callable[..., Document], autosave: str = AUTOSAVE_NOW, confirm: str = "") -> EditOperation:
    return EditOperation(
        name=apply.__name__,
        apply=apply,
        autosave=autosave,
        requires_confirmation=bool(confirm),
        confirmation_prompt=confirm,
    )


OPERATIONS: Dict[str, EditOperation] = {
    op.name: op
    for op in (
        _op(select_project, autosave=AUTOSAVE_LOCAL),
        _op(add_project),
        _op(delete_project, confirm="Delete this project? This cannot be undone."),
        _op(update_project_field, autosave=AUTOSAVE_ON_BLUR),
        _op(add_dday),
        _op(delete_dday, confirm="Delete this D-Day?"),
        _op(add_category),
        _op(rename_category),
        _op(delete_category, confirm="Delete this category and all of its items?"),
        _op(add_goal_item),
        _op(update_goal_label, autosave=AUTOSAVE_ON_BLUR),
        _op(set_target_date),
        _op(toggle_expand),
        _op(delete_goal_item, confirm="Delete this goal?"),
        _op(add_sub_item),
        _op(update_sub_label, autosave=AUTOSAVE_ON_BLUR),
        _op(toggle_sub_item),
        _op(delete_sub_item, confirm="Delete this task?"),
    )
}


def get_operation(name: str) -> EditOperation:
    try:
        return OPERATIONS[name]
    except KeyError:
        raise EditError(f"Unknown edit operation '{name}'") from None

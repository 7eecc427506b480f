"""Plain-text rendering of the dashboard, with a fault barrier."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Optional

from .dashboard_logging import log_error_with_context
from .derived import category_progress, countdowns, dday_status, goal_progress, parse_instant
from .models import Document, GoalItem

SAVE_STATUS_LABELS = {
    "saving": "Saving...",
    "success": "Saved",
    "error": "Save failed",
}


def _format_countdown_lines(project, now: datetime) -> List[str]:
    if not project.dday_config:
        return ["No D-Day set."]

    lines = []
    states = countdowns(project.dday_config, now)
    for dday in project.dday_config:
        state = states[dday.id]
        if state.reached:
            remaining = "Target reached"
        else:
            remaining = f"{state.days} Days {state.hours:02d}:{state.minutes:02d}:{state.seconds:02d}"
        target = parse_instant(dday.date)
        when = target.astimezone().strftime("%Y-%m-%d") if target else dday.date
        lines.append(f"{dday.label}: {remaining} ({when})")
    return lines


def _format_item(item: GoalItem, now: datetime) -> List[str]:
    marker = "v" if item.is_expanded else ">"
    line = f"{marker} {item.label} [{goal_progress(item)}%]"
    status = dday_status(item.target_date, now.date())
    if status is not None:
        line += f" {status.label} ({status.urgency})"

    lines = [line]
    if item.is_expanded:
        for sub in item.sub_items:
            lines.append(f"    [{'x' if sub.checked else ' '}] {sub.label}")
    return lines


def render_dashboard(
    document: Optional[Document],
    now: datetime,
    quote: str,
    active_category_id: Optional[str] = None,
    *,
    save_status: str = "idle",
    message: Optional[str] = None,
) -> str:
    """Render the active project of ``document`` as text."""
    if document is None:
        return "No data found."

    project = document.active_project()
    if project is None:
        return "No projects found. Please reset data."

    lines = [project.title, project.subtitle, ""]
    if len(document.projects) > 1:
        names = [f"[{p.title}]" if p.id == project.id else p.title for p in document.projects]
        lines.extend(["Projects: " + " | ".join(names), ""])

    lines.extend(_format_countdown_lines(project, now))
    lines.extend(["", f'"{quote}"', ""])

    category = project.find_category(active_category_id) if active_category_id else None
    if category is None and project.categories:
        category = project.categories[0]

    if category is None:
        lines.append("No categories yet.")
    else:
        tabs = [f"[{c.label}]" if c.id == category.id else c.label for c in project.categories]
        lines.append(" | ".join(tabs))
        lines.append(f"Progress: {category_progress(category)}%")
        for item in category.items:
            lines.extend(_format_item(item, now))

    status_label = SAVE_STATUS_LABELS.get(save_status)
    if status_label:
        lines.extend(["", status_label])
    if message:
        lines.extend(["", message])
    return "\n".join(lines)


def render_connection_error(detail: str) -> str:
    """Blocking screen shown when the store cannot be reached."""
    return "\n".join([
        "Connection Error",
        detail,
        "Please ensure the dashboard server is running.",
        "Retry to load again.",
    ])


def render_fault(error: BaseException) -> str:
    return "\n".join([
        "Something went wrong.",
        f"{type(error).__name__}: {error}",
        "Reload to try again.",
    ])


def render_safely(render: Callable[..., str], *args: Any, **kwargs: Any) -> str:
    """Call ``render``; any exception is logged and replaced by a fault screen."""
    try:
        return render(*args, **kwargs)
    except Exception as e:
        log_error_with_context(e, {"operation": "render", "renderer": getattr(render, "__name__", repr(render))})
        return render_fault(e)

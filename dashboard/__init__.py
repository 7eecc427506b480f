"""D-Day dashboard - document model, JSON store and edit engine."""

from .client import HttpStore, StoreUnavailableError
from .dashboard_logging import setup_logging
from .derived import (
    CountdownState,
    DDayStatus,
    category_progress,
    countdown,
    countdowns,
    daily_quote,
    dday_status,
    goal_progress,
    quote_index,
)
from .editor import EditError, LastProjectError, OPERATIONS, get_operation
from .models import (
    Category,
    DDay,
    Document,
    DocumentFormatError,
    GoalItem,
    Project,
    SubItem,
    default_document,
)
from .render import render_dashboard, render_safely
from .session import DashboardSession
from .store import JsonFileStore
from .ticker import CountdownTicker

__all__ = [
    "Category",
    "CountdownState",
    "CountdownTicker",
    "DDay",
    "DDayStatus",
    "DashboardSession",
    "Document",
    "DocumentFormatError",
    "EditError",
    "GoalItem",
    "HttpStore",
    "JsonFileStore",
    "LastProjectError",
    "OPERATIONS",
    "Project",
    "StoreUnavailableError",
    "SubItem",
    "category_progress",
    "countdown",
    "countdowns",
    "daily_quote",
    "dday_status",
    "default_document",
    "get_operation",
    "goal_progress",
    "quote_index",
    "render_dashboard",
    "render_safely",
    "setup_logging",
]

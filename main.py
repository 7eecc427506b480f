"""HTTP JSON API and MCP server for the D-Day dashboard."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import uvicorn
from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from dashboard import (
    DashboardSession,
    Document,
    DocumentFormatError,
    EditError,
    JsonFileStore,
    daily_quote,
    get_operation,
    setup_logging,
)

SERVER_ROOT = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = SERVER_ROOT / "server-data"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

mcp = FastMCP(
    "dday-dashboard",
    host=os.getenv("DASHBOARD_HOST", DEFAULT_HOST),
    port=int(os.getenv("DASHBOARD_PORT", DEFAULT_PORT)),
)


def _store() -> JsonFileStore:
    return JsonFileStore.from_env(DEFAULT_DATA_DIR)


def startup(store: Optional[JsonFileStore] = None) -> JsonFileStore:
    """Configure logging and run the one-time legacy migration check."""
    setup_logging()
    store = store or _store()
    store.migrate_legacy()
    return store


def create_app() -> Starlette:
    """Build the ASGI app serving the JSON API and the MCP endpoint."""
    app = mcp.streamable_http_app()
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    return app


# ----------------------------------------------------------------------
# HTTP JSON API
# ----------------------------------------------------------------------


@mcp.custom_route("/data", methods=["GET"])
async def get_data(request: Request) -> JSONResponse:
    """Return the whole document; the store falls back to the default one."""
    return JSONResponse(_store().read().to_dict())


@mcp.custom_route("/data", methods=["POST"])
async def save_data(request: Request) -> JSONResponse:
    """Replace the whole document with the request body."""
    try:
        document = Document.from_dict(await request.json())
    except (ValueError, DocumentFormatError) as e:
        return JSONResponse({"success": False, "message": f"Invalid document: {e}"}, status_code=400)

    if not _store().replace(document):
        return JSONResponse({"success": False, "message": "Failed to save data"}, status_code=500)
    return JSONResponse({"success": True, "message": "Data saved successfully"})


@mcp.custom_route("/quote", methods=["GET"])
async def get_quote(request: Request) -> JSONResponse:
    return JSONResponse({"quote": daily_quote()})


@mcp.custom_route("/checklist", methods=["GET"])
async def legacy_checklist(request: Request) -> JSONResponse:
    return JSONResponse({"message": "Endpoint deprecated. Use /data"}, status_code=410)


# ----------------------------------------------------------------------
# MCP tools and resources
# ----------------------------------------------------------------------


def _session(confirm: bool = False) -> DashboardSession:
    session = DashboardSession(_store(), confirm=lambda prompt: confirm)
    session.load()
    return session


def _active_project_id(session: DashboardSession, project_id: Optional[str]) -> str:
    if project_id:
        return project_id
    project = session.active_project
    if project is None:
        raise ValueError("No projects found. Please reset data.")
    return project.id


def _edit(operation: str, *args: Any, confirm: bool = False, **kwargs: Any) -> Dict[str, Any]:
    """Apply one edit to the stored document and write it back in full."""
    session = _session(confirm=confirm)
    op = get_operation(operation)
    try:
        applied = session.apply(operation, *args, autosave=True, **kwargs)
    except EditError as e:
        return {"success": False, "operation": operation, "message": str(e)}

    if not applied:
        if session.message:
            return {"success": False, "operation": operation, "message": session.message}
        return {
            "success": False,
            "operation": operation,
            "requires_confirmation": True,
            "message": f"{op.confirmation_prompt} Call again with confirm=true.",
        }

    return {
        "success": session.save_status == "success",
        "operation": operation,
        "save_status": session.save_status,
        "current_project_id": session.document.current_project_id,
    }


@mcp.tool()
def get_dashboard(project_id: Optional[str] = None, category_id: Optional[str] = None) -> str:
    """Render the dashboard as text: countdowns, quote of the day and checklist progress."""

    session = _session()
    if project_id:
        session.apply("select_project", project_id, autosave=False)
    if category_id:
        session.select_category(category_id)
    return session.render()


@mcp.tool()
def get_document() -> Dict[str, Any]:
    """Return the whole stored document as JSON."""

    return _store().read().to_dict()


@mcp.tool()
def select_project(project_id: str) -> Dict[str, Any]:
    """Make a project the current one and persist the selection."""

    return _edit("select_project", project_id)


@mcp.tool()
def add_project(title: str) -> Dict[str, Any]:
    """Create a project with a default 30-day countdown and an empty category, and select it."""

    return _edit("add_project", title)


@mcp.tool()
def delete_project(project_id: str, confirm: bool = False) -> Dict[str, Any]:
    """Delete a project. Requires confirm=true; the last remaining project cannot be deleted."""

    return _edit("delete_project", project_id, confirm=confirm)


@mcp.tool()
def update_project(
    title: Optional[str] = None,
    subtitle: Optional[str] = None,
    project_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Change a project's title and/or subtitle."""

    pid = _active_project_id(_session(), project_id)
    result: Dict[str, Any] = {"success": False, "message": "Nothing to update"}
    for field_name, value in (("title", title), ("subtitle", subtitle)):
        if value is not None:
            result = _edit("update_project_field", pid, field_name, value)
            if not result["success"]:
                break
    return result


@mcp.tool()
def add_dday(label: str, date: str, color: str = "--neon-cyan", project_id: Optional[str] = None) -> Dict[str, Any]:
    """Add a countdown target. ``date`` is an ISO date or datetime."""

    return _edit("add_dday", _active_project_id(_session(), project_id), label, date, color)


@mcp.tool()
def delete_dday(dday_id: str, confirm: bool = False, project_id: Optional[str] = None) -> Dict[str, Any]:
    """Delete a countdown target. Requires confirm=true."""

    return _edit("delete_dday", _active_project_id(_session(), project_id), dday_id, confirm=confirm)


@mcp.tool()
def add_category(label: str, project_id: Optional[str] = None) -> Dict[str, Any]:
    return _edit("add_category", _active_project_id(_session(), project_id), label)


@mcp.tool()
def rename_category(category_id: str, label: str, project_id: Optional[str] = None) -> Dict[str, Any]:
    return _edit("rename_category", _active_project_id(_session(), project_id), category_id, label)


@mcp.tool()
def delete_category(category_id: str, confirm: bool = False, project_id: Optional[str] = None) -> Dict[str, Any]:
    """Delete a category with all of its goals. Requires confirm=true."""

    return _edit("delete_category", _active_project_id(_session(), project_id), category_id, confirm=confirm)


@mcp.tool()
def add_goal_item(category_id: str, project_id: Optional[str] = None) -> Dict[str, Any]:
    return _edit("add_goal_item", _active_project_id(_session(), project_id), category_id)


@mcp.tool()
def update_goal_item(
    category_id: str,
    item_id: str,
    label: Optional[str] = None,
    target_date: Optional[str] = None,
    project_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Change a goal's label and/or target date (ISO date, empty string clears it)."""

    pid = _active_project_id(_session(), project_id)
    result: Dict[str, Any] = {"success": False, "message": "Nothing to update"}
    if label is not None:
        result = _edit("update_goal_label", pid, category_id, item_id, label)
        if not result["success"]:
            return result
    if target_date is not None:
        result = _edit("set_target_date", pid, category_id, item_id, target_date)
    return result


@mcp.tool()
def toggle_goal_expanded(category_id: str, item_id: str, project_id: Optional[str] = None) -> Dict[str, Any]:
    return _edit("toggle_expand", _active_project_id(_session(), project_id), category_id, item_id)


@mcp.tool()
def delete_goal_item(
    category_id: str, item_id: str, confirm: bool = False, project_id: Optional[str] = None
) -> Dict[str, Any]:
    """Delete a goal and its tasks. Requires confirm=true."""

    return _edit("delete_goal_item", _active_project_id(_session(), project_id), category_id, item_id, confirm=confirm)


@mcp.tool()
def add_sub_item(category_id: str, item_id: str, project_id: Optional[str] = None) -> Dict[str, Any]:
    return _edit("add_sub_item", _active_project_id(_session(), project_id), category_id, item_id)


@mcp.tool()
def update_sub_item(
    category_id: str, item_id: str, sub_id: str, label: str, project_id: Optional[str] = None
) -> Dict[str, Any]:
    return _edit("update_sub_label", _active_project_id(_session(), project_id), category_id, item_id, sub_id, label)


@mcp.tool()
def toggle_sub_item(category_id: str, item_id: str, sub_id: str, project_id: Optional[str] = None) -> Dict[str, Any]:
    """Check or uncheck a task."""

    return _edit("toggle_sub_item", _active_project_id(_session(), project_id), category_id, item_id, sub_id)


@mcp.tool()
def delete_sub_item(
    category_id: str, item_id: str, sub_id: str, confirm: bool = False, project_id: Optional[str] = None
) -> Dict[str, Any]:
    """Delete a task. Requires confirm=true."""

    return _edit(
        "delete_sub_item", _active_project_id(_session(), project_id), category_id, item_id, sub_id, confirm=confirm
    )


@mcp.resource("dashboard://current")
def resource_dashboard() -> str:
    """Text view of the current project, refreshed on every read."""

    return _session().render(datetime.now())


if __name__ == "__main__":
    startup()
    uvicorn.run(
        create_app(),
        host=os.getenv("DASHBOARD_HOST", DEFAULT_HOST),
        port=int(os.getenv("DASHBOARD_PORT", DEFAULT_PORT)),
    )

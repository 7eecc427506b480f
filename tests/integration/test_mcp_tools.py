"""Integration tests for the MCP tools exposed by main.py.

Tools are called directly; each one reads the stored document, applies
one edit and writes the whole document back.
"""

import pytest

import main
from dashboard.store import JsonFileStore


@pytest.fixture
def store(tmp_path, monkeypatch):
    path = tmp_path / "server-data"
    monkeypatch.setenv("DASHBOARD_DATA_DIR", str(path))
    return JsonFileStore(path)


class TestProjectTools:
    def test_add_and_select_project(self, store):
        result = main.add_project("Diet plan")

        assert result["success"] is True
        document = store.read()
        assert len(document.projects) == 2
        assert document.current_project_id == result["current_project_id"]

        assert main.select_project("p1")["success"] is True
        assert store.read().current_project_id == "p1"

    def test_delete_requires_confirmation(self, store):
        new_id = main.add_project("Temp")["current_project_id"]

        result = main.delete_project(new_id)

        assert result["success"] is False
        assert result["requires_confirmation"] is True
        assert len(store.read().projects) == 2

        assert main.delete_project(new_id, confirm=True)["success"] is True
        assert [p.id for p in store.read().projects] == ["p1"]

    def test_last_project_cannot_be_deleted(self, store):
        result = main.delete_project("p1", confirm=True)

        assert result == {"success": False, "operation": "delete_project", "message": "At least one project must exist."}
        assert not store.data_path.exists()

    def test_update_project(self, store):
        result = main.update_project(title="Renamed", subtitle="Sub")

        assert result["success"] is True
        project = store.read().projects[0]
        assert (project.title, project.subtitle) == ("Renamed", "Sub")

    def test_update_project_nothing(self, store):
        assert main.update_project()["success"] is False


class TestChecklistTools:
    def test_toggle_sub_item(self, store):
        assert main.toggle_sub_item("c1", "w1", "w1-1")["success"] is True

        assert store.read().projects[0].categories[0].items[0].sub_items[0].checked is True

    def test_goal_lifecycle(self, store):
        main.add_goal_item("c1")
        item_id = store.read().projects[0].categories[0].items[-1].id

        main.update_goal_item("c1", item_id, label="Mock exam", target_date="2026-03-01")
        main.add_sub_item("c1", item_id)
        item = store.read().projects[0].categories[0].items[-1]
        assert (item.label, item.target_date, len(item.sub_items)) == ("Mock exam", "2026-03-01", 1)

        sub_id = item.sub_items[0].id
        main.update_sub_item("c1", item_id, sub_id, "Solve 2024 paper")
        assert store.read().projects[0].categories[0].items[-1].sub_items[0].label == "Solve 2024 paper"

        main.toggle_goal_expanded("c1", item_id)
        assert store.read().projects[0].categories[0].items[-1].is_expanded is False

        assert main.delete_sub_item("c1", item_id, sub_id, confirm=True)["success"] is True
        assert main.delete_goal_item("c1", item_id, confirm=True)["success"] is True
        assert [i.id for i in store.read().projects[0].categories[0].items] == ["w1"]

    def test_category_tools(self, store):
        main.add_category("Practical")
        category = store.read().projects[0].categories[-1]

        main.rename_category(category.id, "Hands-on")
        assert store.read().projects[0].categories[-1].label == "Hands-on"

        main.delete_category(category.id, confirm=True)
        assert [c.id for c in store.read().projects[0].categories] == ["c1"]

    def test_dday_tools(self, store):
        assert main.add_dday("Interview", "2026-05-01T10:00:00Z")["success"] is True
        ddays = store.read().projects[0].dday_config
        assert ddays[-1].label == "Interview"

        assert main.delete_dday(ddays[-1].id, confirm=True)["success"] is True
        assert len(store.read().projects[0].dday_config) == 2

    def test_unknown_ids_report_errors(self, store):
        result = main.toggle_sub_item("c1", "w1", "missing")

        assert result["success"] is False
        assert "missing" in result["message"]

    def test_invalid_dday(self, store):
        assert main.add_dday("", "2026-05-01")["success"] is False


class TestViews:
    def test_get_document(self, store):
        assert main.get_document()["currentProjectId"] == "p1"

    def test_get_dashboard(self, store):
        text = main.get_dashboard()

        assert text.startswith("2026 BIG DATA ANALYST")
        assert "Progress:" in text

    def test_get_dashboard_for_category(self, store):
        main.add_category("Practical")
        category_id = store.read().projects[0].categories[-1].id

        text = main.get_dashboard(category_id=category_id)

        assert "Written | [Practical]" in text

    def test_resource(self, store):
        assert "D-DAY DASHBOARD" in main.resource_dashboard()

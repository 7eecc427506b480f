"""Unit tests for the dashboard document models.

This module tests serialization to the persisted camelCase shape,
tolerant parsing of malformed input and project lookup.
"""

import pytest

from dashboard.models import (
    Category,
    DDay,
    Document,
    DocumentFormatError,
    GoalItem,
    Project,
    SubItem,
    default_document,
    new_id,
)


@pytest.fixture
def sample_project_dict():
    return {
        "id": "p1",
        "title": "Exam",
        "subtitle": "D-DAY DASHBOARD",
        "theme": "neon-blue",
        "dDayConfig": [
            {"id": "d1", "label": "Written", "date": "2026-04-04T09:00:00", "color": "--neon-cyan"},
        ],
        "categories": [
            {
                "id": "c1",
                "label": "Written",
                "items": [
                    {
                        "id": "w1",
                        "label": "Part 1",
                        "targetDate": "2026-01-31",
                        "isExpanded": True,
                        "subItems": [{"id": "w1-1", "label": "Read", "checked": True}],
                    }
                ],
            }
        ],
    }


class TestSerialization:
    """Test cases for to_dict/from_dict."""

    def test_project_from_dict(self, sample_project_dict):
        project = Project.from_dict(sample_project_dict)

        assert project.id == "p1"
        assert project.dday_config[0].color == "--neon-cyan"
        item = project.categories[0].items[0]
        assert item.target_date == "2026-01-31"
        assert item.is_expanded is True
        assert item.sub_items[0] == SubItem(id="w1-1", label="Read", checked=True)

    def test_project_to_dict_uses_camel_case(self, sample_project_dict):
        project = Project.from_dict(sample_project_dict)

        assert project.to_dict() == sample_project_dict

    def test_document_to_dict(self, sample_project_dict):
        document = Document.from_dict({"currentProjectId": "p1", "projects": [sample_project_dict]})

        result = document.to_dict()
        assert result["currentProjectId"] == "p1"
        assert result["projects"] == [sample_project_dict]

    def test_sequences_are_tuples(self, sample_project_dict):
        project = Project.from_dict(sample_project_dict)

        assert isinstance(project.categories, tuple)
        assert isinstance(project.categories[0].items[0].sub_items, tuple)

    def test_models_are_frozen(self):
        sub = SubItem(id="s1", label="Task")

        with pytest.raises(AttributeError):
            sub.checked = True


class TestMalformedInput:
    """Missing nested fields default to empty values instead of failing."""

    def test_missing_dday_config(self):
        project = Project.from_dict({"id": "p1", "title": "No countdowns"})

        assert project.dday_config == ()
        assert project.categories == ()

    def test_null_sequences(self):
        item = GoalItem.from_dict({"id": "g1", "label": "Goal", "subItems": None})

        assert item.sub_items == ()
        assert item.target_date == ""
        assert item.is_expanded is False

    def test_non_mapping_entries_are_skipped(self):
        category = Category.from_dict({"id": "c1", "label": "Tab", "items": ["junk", {"id": "g1", "label": "Goal"}]})

        assert [item.id for item in category.items] == ["g1"]

    def test_missing_color_uses_default_token(self):
        dday = DDay.from_dict({"id": "d1", "label": "Exam", "date": "2026-04-04T09:00:00"})

        assert dday.color == "--neon-cyan"

    def test_string_booleans_are_not_true(self):
        item = GoalItem.from_dict(
            {"id": "g1", "label": "Goal", "isExpanded": "false", "subItems": [{"id": "s1", "label": "t", "checked": "false"}]}
        )

        assert item.is_expanded is False
        assert item.sub_items[0].checked is False

    def test_document_must_be_mapping(self):
        with pytest.raises(DocumentFormatError):
            Document.from_dict(["not", "a", "document"])

    def test_empty_document(self):
        document = Document.from_dict({})

        assert document.current_project_id == ""
        assert document.projects == ()
        assert document.active_project() is None


class TestLookups:
    """Test cases for finding nodes in the tree."""

    def test_active_project_matches_current_id(self):
        document = Document(
            current_project_id="p2",
            projects=(Project(id="p1", title="One"), Project(id="p2", title="Two")),
        )

        assert document.active_project().title == "Two"

    def test_active_project_falls_back_to_first(self):
        document = Document(current_project_id="gone", projects=(Project(id="p1", title="One"),))

        assert document.active_project().id == "p1"

    def test_find_helpers(self):
        item = GoalItem(id="g1", label="Goal", sub_items=(SubItem(id="s1", label="Task"),))
        category = Category(id="c1", label="Tab", items=(item,))
        project = Project(
            id="p1",
            title="One",
            dday_config=(DDay(id="d1", label="Exam", date="2026-04-04T09:00:00"),),
            categories=(category,),
        )

        assert project.find_category("c1") is category
        assert project.find_dday("d1").label == "Exam"
        assert category.find_item("g1") is item
        assert item.find_sub_item("s1").label == "Task"
        assert project.find_category("missing") is None


class TestDefaults:
    def test_default_document_has_one_project(self):
        document = default_document()

        assert len(document.projects) == 1
        assert document.current_project_id == document.projects[0].id
        project = document.projects[0]
        assert len(project.dday_config) == 2
        assert project.categories[0].items[0].sub_items

    def test_new_id_is_timestamp_derived(self):
        assert new_id("p", 1767225600000) == "p-1767225600000"
        assert new_id("c").startswith("c-")

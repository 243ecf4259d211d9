"""
Unit Tests for Exporters and Report Navigation
"""
import asyncio
import csv
import io
import json

import pytest
import yaml

from schema_analyzer.config import AnalyzerConfig, ExportFormat, ReportConfig
from schema_analyzer.report import (
    ReportNavigator,
    ReportState,
    export,
    to_csv,
    to_json,
    to_markdown,
    to_yaml,
    write_export,
)
from schema_analyzer.schema import (
    StatisticsAggregate,
    SchemaModel,
    analyze_base,
)
from schema_analyzer.sources import SnapshotBase, SnapshotField, SnapshotTable
from schema_analyzer.utils import ConfigurationError


@pytest.fixture
def model(sample_base):
    return asyncio.run(analyze_base(sample_base, AnalyzerConfig(max_sample_records=2))).model


class TestExporters:
    """Tests for export encodings"""

    def test_json_export(self, model):
        data = json.loads(to_json(model))

        assert data["base_name"] == "Project Tracker"
        assert [t["name"] for t in data["tables"]] == ["Projects", "Tasks"]
        status = data["tables"][0]["fields"][1]
        assert status["options"]["choices"][1] == {"id": "unknown", "name": "Archived", "color": "default"}
        assert data["statistics"]["total_fields"] == 9
        assert len(data["relationships"]) == 2

    def test_json_without_field_ids(self, model):
        """Field ids are omitted when disabled"""
        data = json.loads(to_json(model, include_field_ids=False))
        assert all("id" not in f for t in data["tables"] for f in t["fields"])
        assert data["tables"][0]["id"] == "tblProjects"

    def test_yaml_matches_json(self, model):
        assert yaml.safe_load(to_yaml(model)) == json.loads(to_json(model))

    def test_markdown_export(self, model):
        text = to_markdown(model)

        assert text.startswith("# Schema: Project Tracker")
        assert "- Tables: 2" in text
        assert "- Relationships: 2" in text
        assert "| Field | ID | Type | Category | Description |" in text
        assert "| Status | fldStatus | singleSelect | SELECT | - |" in text
        assert "| Projects | Tasks | Tasks | Many-to-Many |" in text
        assert "| Tasks | Project | Projects | One-to-One/Many |" in text

    def test_markdown_without_ids(self, model):
        text = to_markdown(model, include_field_ids=False)
        assert "| Field | Type | Category | Description |" in text
        assert "fldStatus" not in text

    def test_csv_export(self, model):
        rows = list(csv.reader(io.StringIO(to_csv(model))))

        assert rows[0] == ["Table", "Field", "Field ID", "Type", "Category", "Description", "Options"]
        assert len(rows) == 1 + 9
        budget = next(r for r in rows if r[1] == "Budget")
        assert json.loads(budget[6]) == {"precision": 2, "symbol": "$"}

    def test_export_dispatch(self, model):
        assert export(model, "csv") == to_csv(model)
        assert export(model, ExportFormat.MARKDOWN) == to_markdown(model)

    def test_export_unknown_format(self, model):
        with pytest.raises(ConfigurationError) as exc_info:
            export(model, "xml")
        assert exc_info.value.config_key == "format"

    def test_write_export_infers_format(self, model, tmp_path):
        """The file suffix picks the format"""
        path = write_export(model, tmp_path / "schema.yml")
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["base_id"] == "appTracker"

        path = write_export(model, tmp_path / "schema.md")
        assert path.read_text(encoding="utf-8").startswith("# Schema:")


class TestNavigatorTransitions:
    """Tests for the report state machine"""

    def test_starts_at_overview(self, model):
        nav = ReportNavigator(model)
        assert nav.state == ReportState.OVERVIEW
        assert not nav.is_done
        assert "table:tblProjects" in nav.available_choices()
        assert "back" not in nav.available_choices()

    def test_table_detail_and_back(self, model):
        nav = ReportNavigator(model)
        assert nav.select("table:tblTasks") == ReportState.TABLE_DETAIL
        assert nav.selected_table.name == "Tasks"

        nav.select("table:Projects")
        assert nav.selected_table.id == "tblProjects"

        assert nav.select("back") == ReportState.OVERVIEW
        assert nav.history == [
            ReportState.OVERVIEW,
            ReportState.TABLE_DETAIL,
            ReportState.TABLE_DETAIL,
            ReportState.OVERVIEW,
        ]

    @pytest.mark.parametrize("choice,state", [
        ("relationships", ReportState.RELATIONSHIPS),
        ("statistics", ReportState.STATISTICS),
        ("full", ReportState.FULL_SCHEMA),
        ("export", ReportState.EXPORT),
        ("done", ReportState.DONE),
    ])
    def test_overview_targets(self, model, choice, state):
        nav = ReportNavigator(model)
        assert nav.select(choice) == state

    def test_invalid_choice_rejected(self, model):
        """Choices outside the current state raise without moving"""
        nav = ReportNavigator(model)
        nav.select("statistics")
        with pytest.raises(ValueError):
            nav.select("full")
        assert nav.state == ReportState.STATISTICS

    def test_unknown_table_rejected(self, model):
        nav = ReportNavigator(model)
        with pytest.raises(ValueError, match="Unknown table"):
            nav.select("table:tblMissing")
        with pytest.raises(ValueError):
            nav.select("table")

    def test_done_is_terminal(self, model):
        nav = ReportNavigator(model)
        nav.select("done")
        assert nav.is_done
        assert nav.available_choices() == []
        with pytest.raises(ValueError):
            nav.select("back")

    def test_export_format_selection(self, model):
        nav = ReportNavigator(model)
        nav.select("export:csv")
        assert nav.export_format == ExportFormat.CSV
        assert "export:yaml" in nav.available_choices()

        nav.select("export:markdown")
        assert nav.render().startswith("# Export (MARKDOWN)")
        with pytest.raises(ValueError, match="Unknown export format"):
            nav.select("export:pdf")


class TestNavigatorScreens:
    """Tests for rendered screens"""

    def test_overview(self, model):
        text = ReportNavigator(model).render()
        assert "**Base:** Project Tracker" in text
        assert "- **Records:** 13" in text
        assert "*All active projects*" in text
        assert "- **Primary Field:** Title" in text

    def test_table_detail(self, model):
        nav = ReportNavigator(model)
        nav.select("table:tblProjects")
        text = nav.render()

        assert text.startswith("# Table: Projects")
        assert "*ID: fldStatus*" in text
        assert "    - Archived (default)" in text
        assert "- **Links to:** Tasks" in text
        assert "- **Board** (kanban)" in text
        assert "## Sample Records" in text
        assert "- Item 2" in text

    def test_table_detail_hides_ids(self, model):
        nav = ReportNavigator(model, AnalyzerConfig(include_field_ids=False))
        nav.select("table:tblProjects")
        assert "*ID:" not in nav.render()

    def test_choice_truncation(self):
        choices = [{"id": f"sel{i}", "name": f"Option {i}"} for i in range(14)]
        table = SnapshotTable(id="tbl1", name="T", fields=[
            SnapshotField(id="fldS", name="S", type="singleSelect", options={"choices": choices}),
        ])
        model = asyncio.run(analyze_base(SnapshotBase(id="a", name="b", tables=[table]))).model
        nav = ReportNavigator(model, report_config=ReportConfig(max_choices_displayed=10))
        nav.select("table:tbl1")
        text = nav.render()

        assert "  - Choices (14):" in text
        assert "    - Option 9 (default)" in text
        assert "Option 10" not in text
        assert "    - ... and 4 more" in text

    def test_relationships(self, model):
        nav = ReportNavigator(model)
        nav.select("relationships")
        text = nav.render()
        assert "## Projects" in text
        assert "- **Tasks** → **Tasks** (Many-to-Many)" in text
        assert "- **Project** → **Projects** (One-to-One/Many)" in text

    def test_no_relationships(self):
        empty = SchemaModel(base_id="a", base_name="b")
        nav = ReportNavigator(empty)
        nav.select("relationships")
        assert "*No linked record relationships found*" in nav.render()

    def test_statistics(self, model):
        nav = ReportNavigator(model)
        nav.select("statistics")
        text = nav.render()
        assert "- **singleLineText**: 2 (22.2%)" in text
        assert "| Tasks | 10 | 5 |" in text

    def test_failed_statistics_note(self):
        stats = StatisticsAggregate(total_tables=3, error="Could not calculate all statistics")
        nav = ReportNavigator(SchemaModel(base_id="a", base_name="b", statistics=stats))
        nav.select("statistics")
        assert "Note: Could not calculate all statistics" in nav.render()

    def test_statistics_not_computed(self):
        nav = ReportNavigator(SchemaModel(base_id="a", base_name="b"))
        nav.select("statistics")
        assert "*Statistics were not computed for this run*" in nav.render()

    def test_full_schema_truncated(self, model):
        nav = ReportNavigator(model, report_config=ReportConfig(full_schema_char_limit=200))
        nav.select("full")
        text = nav.render()
        assert "... (truncated - use export for the full schema)" in text
        assert text.startswith("# Full Schema")

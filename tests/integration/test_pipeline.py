"""
Integration Tests for the Schema Analyzer Pipeline
Tests end-to-end runs from snapshot files through the report and the CLI
"""
import asyncio
import io
import json
import os
import sys

import pytest
import yaml

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from schema_analyzer import AnalyzerConfig, ReportNavigator, analyze_base, load_snapshot
from schema_analyzer.cli import explore_report, main


EVENTS_SNAPSHOT = """
id: appEvents
name: Event Planning
tables:
  - id: tblEvents
    name: Events
    description: Conferences and meetups
    fields:
      - {id: fldEventName, name: Event, type: singleLineText}
      - id: fldKind
        name: Kind
        type: singleSelect
        options:
          choices:
            - {id: selTalk, name: Talk, color: blueLight2}
            - {name: Workshop}
      - {id: fldStart, name: Starts, type: dateTime,
         options: {dateFormat: {name: iso}, timeFormat: {name: 24hour}, timeZone: Europe/Berlin}}
      - {id: fldVenue, name: Venue, type: multipleRecordLinks,
         options: {linkedTableId: tblVenues, prefersSingleRecordLink: true}}
      - {id: fldSponsor, name: Sponsor, type: multipleRecordLinks,
         options: {linkedTableId: tblSponsorsArchived}}
      - {id: fldBroken, name: Broken}
    views:
      - {id: viwGrid, name: All events, type: grid}
      - {id: viwCal, name: Calendar, type: calendar}
    records:
      - {id: recE1, name: PyCon}
      - {id: recE2}
      - {id: recE3, name: Meetup}
  - id: tblVenues
    name: Venues
    fields:
      - {id: fldVenueName, name: Name, type: singleLineText}
      - {id: fldCapacity, name: Capacity, type: number, options: {precision: 0}}
      - {id: fldEvents, name: Events, type: multipleRecordLinks,
         options: {linkedTableId: tblEvents, inverseLinkFieldId: fldVenue}}
    views:
      - {id: viwVenues, name: Grid view}
    record_count: 40
"""


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "events.yaml"
    path.write_text(EVENTS_SNAPSHOT, encoding="utf-8")
    return path


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("SCHEMA_ANALYZER_"):
            monkeypatch.delenv(key)
    # Keep a stray .env in the working directory out of the run
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestSnapshotPipeline:
    """End-to-end analysis of a snapshot file"""

    def test_full_analysis(self, snapshot_path):
        base = load_snapshot(snapshot_path)
        result = asyncio.run(analyze_base(base, AnalyzerConfig(max_sample_records=2)))
        model = result.model

        events, venues = model.tables
        assert [f.name for f in events.fields] == ["Event", "Kind", "Starts", "Venue", "Sponsor"]
        assert [s.name for s in events.sample_records] == ["PyCon", "Record 2"]
        assert venues.record_count == 40
        assert venues.views[0].type == "Unknown"

        # Sponsor points outside the base, so only two edges remain
        assert [(r.from_field_name, r.to_table_name) for r in model.relationships] == [
            ("Venue", "Venues"), ("Events", "Events"),
        ]
        assert model.statistics.total_records == 43
        assert model.statistics.table_sizes[0].table_name == "Venues"

        assert [(o.scope, o.item_id) for o in result.outcomes] == [("field", "fldBroken")]

    def test_report_walkthrough(self, snapshot_path):
        base = load_snapshot(snapshot_path)
        model = asyncio.run(analyze_base(base)).model
        nav = ReportNavigator(model)

        nav.select("table:tblEvents")
        detail = nav.render()
        assert "- **Links to:** Venues" in detail
        assert "  - timeZone: \"Europe/Berlin\"" in detail

        nav.select("back")
        nav.select("relationships")
        assert "(One-to-One/Many)" in nav.render()

        nav.select("back")
        nav.select("export:yaml")
        assert yaml.safe_load(nav.render().split("```")[1])["base_name"] == "Event Planning"

    def test_scripted_explore(self, snapshot_path):
        """The interactive loop follows numbered and named choices"""
        model = asyncio.run(analyze_base(load_snapshot(snapshot_path))).model
        nav = ReportNavigator(model)
        answers = iter(["statistics", "bogus", "back", "done"])
        out = io.StringIO()

        explore_report(nav, input_fn=lambda prompt: next(answers), out=out)

        assert nav.is_done
        assert "# Detailed Statistics" in out.getvalue()
        assert "Choice 'bogus' is not available from statistics" in out.getvalue()

    @pytest.mark.parametrize("interrupt", [EOFError, KeyboardInterrupt])
    def test_closed_input_ends_explore(self, snapshot_path, interrupt):
        """End of input or an interrupt finishes the session"""
        model = asyncio.run(analyze_base(load_snapshot(snapshot_path))).model
        nav = ReportNavigator(model)
        answers = iter(["relationships"])

        def read(prompt):
            for answer in answers:
                return answer
            raise interrupt

        out = io.StringIO()
        explore_report(nav, input_fn=read, out=out)

        assert nav.is_done
        assert "(One-to-One/Many)" in out.getvalue()

    def test_null_field_entry_skipped(self, tmp_path):
        """A null field entry is contained as a skipped field"""
        path = tmp_path / "nulls.yaml"
        path.write_text(
            "name: Nulls\ntables:\n"
            "  - id: tblA\n    name: A\n    fields:\n      - null\n"
            "      - {id: fldName, name: Name, type: singleLineText}\n",
            encoding="utf-8",
        )

        result = asyncio.run(analyze_base(load_snapshot(path)))

        assert [f.name for f in result.model.tables[0].fields] == ["Name"]
        assert [o.scope for o in result.outcomes] == ["field"]


class TestCommandLine:
    """Tests for the schema-analyzer command"""

    def test_overview(self, clean_env, snapshot_path, capsys):
        assert main(["analyze", str(snapshot_path)]) == 0
        out = capsys.readouterr().out
        assert "**Base:** Event Planning" in out

    def test_json_to_stdout(self, clean_env, snapshot_path, capsys):
        assert main(["analyze", str(snapshot_path), "--format", "json", "--no-statistics"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["statistics"] is None
        assert len(data["relationships"]) == 2

    def test_output_file(self, clean_env, snapshot_path, tmp_path):
        target = tmp_path / "schema.csv"
        assert main(["analyze", str(snapshot_path), "--output", str(target), "--no-field-ids"]) == 0
        header = target.read_text(encoding="utf-8").splitlines()[0]
        assert header == "Table,Field,Type,Category,Description,Options"

    def test_statistics_view(self, clean_env, snapshot_path, capsys):
        assert main(["analyze", str(snapshot_path), "--view", "statistics"]) == 0
        assert "## Table Sizes" in capsys.readouterr().out

    def test_sample_limit_from_env(self, clean_env, snapshot_path, capsys):
        clean_env.setenv("SCHEMA_ANALYZER_MAX_SAMPLE_RECORDS", "1")
        assert main(["analyze", str(snapshot_path), "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data["tables"][1]["sample_records"]) == 1

    def test_empty_base_fails(self, clean_env, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"id": "appEmpty", "name": "Empty", "tables": []}))

        assert main(["analyze", str(path)]) == 1
        assert "No tables found in this base." in capsys.readouterr().err

    def test_missing_snapshot(self, clean_env, tmp_path, capsys):
        assert main(["analyze", str(tmp_path / "nope.yaml")]) == 1
        assert "Snapshot file not found" in capsys.readouterr().err

    def test_malformed_table_entry(self, clean_env, tmp_path, capsys):
        path = tmp_path / "malformed.json"
        path.write_text(json.dumps({"name": "Bad", "tables": [{"id": "tblA", "record_count": "lots"}]}))

        assert main(["analyze", str(path)]) == 1
        assert "record_count of table tblA must be an integer" in capsys.readouterr().err

    def test_invalid_sample_limit(self, clean_env, snapshot_path, capsys):
        assert main(["analyze", str(snapshot_path), "--max-samples", "-2"]) == 2
        assert "ConfigurationError" in capsys.readouterr().err

    def test_invalid_env(self, clean_env, snapshot_path, capsys):
        clean_env.setenv("SCHEMA_ANALYZER_EXPORT_FORMAT", "pdf")
        assert main(["analyze", str(snapshot_path)]) == 2

"""
Shared fixtures for schema analyzer tests
"""
import os
import sys

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from schema_analyzer.sources import (
    SnapshotBase,
    SnapshotField,
    SnapshotRecord,
    SnapshotTable,
    SnapshotView,
)


class FailingQueryTable(SnapshotTable):
    """Table whose record query always raises"""

    async def select_records(self, fields=None):
        raise ConnectionError("metadata service unavailable")


def make_records(count, prefix="rec", named=True):
    return [
        SnapshotRecord(id=f"{prefix}{i + 1}", name=f"Item {i + 1}" if named else None)
        for i in range(count)
    ]


def link_field(field_id, name, target, prefers_single=False, inverse=None):
    return SnapshotField(
        id=field_id,
        name=name,
        type="multipleRecordLinks",
        options={
            "linkedTableId": target,
            "inverseLinkFieldId": inverse,
            "prefersSingleRecordLink": prefers_single,
        },
    )


@pytest.fixture
def projects_table():
    """Projects table with a link to tasks"""
    return SnapshotTable(
        id="tblProjects",
        name="Projects",
        description="All active projects",
        fields=[
            SnapshotField(id="fldName", name="Name", type="singleLineText"),
            SnapshotField(
                id="fldStatus",
                name="Status",
                type="singleSelect",
                options={"choices": [
                    {"id": "selA", "name": "Active", "color": "greenBright"},
                    {"name": "Archived"},
                ]},
            ),
            SnapshotField(id="fldBudget", name="Budget", type="currency",
                          options={"precision": 2, "symbol": "$"}),
            link_field("fldTasks", "Tasks", "tblTasks", inverse="fldProject"),
        ],
        views=[
            SnapshotView(id="viwGrid", name="Grid view", type="grid"),
            SnapshotView(id="viwKanban", name="Board", type="kanban"),
        ],
        records=make_records(3, prefix="recP"),
    )


@pytest.fixture
def tasks_table():
    """Tasks table linking back to projects"""
    return SnapshotTable(
        id="tblTasks",
        name="Tasks",
        fields=[
            SnapshotField(id="fldTitle", name="Title", type="singleLineText"),
            link_field("fldProject", "Project", "tblProjects", prefers_single=True,
                       inverse="fldTasks"),
            SnapshotField(id="fldDue", name="Due", type="dateTime",
                          options={"dateFormat": {"name": "iso"}, "timeFormat": {"name": "24hour"},
                                   "timeZone": "UTC"}),
            SnapshotField(id="fldDone", name="Done", type="checkbox",
                          options={"icon": "check", "color": "greenBright"}),
            SnapshotField(id="fldScore", name="Score", type="formula", is_computed=True,
                          options={"isValid": True}),
        ],
        views=[SnapshotView(id="viwAll", name="All tasks", type="grid")],
        records=make_records(10, prefix="recT"),
    )


@pytest.fixture
def sample_base(projects_table, tasks_table):
    return SnapshotBase(id="appTracker", name="Project Tracker",
                        tables=[projects_table, tasks_table])

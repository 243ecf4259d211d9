"""
Data Sources Package
Read-only handles over a base for the schema analyzer
"""
from .base import (
    BaseHandle,
    TableHandle,
    FieldHandle,
    ViewHandle,
    RecordHandle,
)
from .snapshot import (
    SnapshotBase,
    SnapshotTable,
    SnapshotField,
    SnapshotView,
    SnapshotRecord,
    load_snapshot,
)

__all__ = [
    "BaseHandle",
    "TableHandle",
    "FieldHandle",
    "ViewHandle",
    "RecordHandle",
    "SnapshotBase",
    "SnapshotTable",
    "SnapshotField",
    "SnapshotView",
    "SnapshotRecord",
    "load_snapshot",
]

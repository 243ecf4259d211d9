"""
Snapshot Data Source

An in-memory base built from a JSON or YAML description. Useful for
documenting an exported base offline and for exercising the analyzer in tests.

Expected file format:
```yaml
id: appXYZ
name: Project Tracker
tables:
  - id: tblProjects
    name: Projects
    description: All active projects
    fields:
      - id: fldName
        name: Name
        type: singleLineText
      - id: fldStatus
        name: Status
        type: singleSelect
        options:
          choices:
            - {id: selA, name: Active, color: greenBright}
      - id: fldTasks
        name: Tasks
        type: multipleRecordLinks
        options: {linkedTableId: tblTasks, prefersSingleRecordLink: false}
    views:
      - {id: viwGrid, name: Grid view, type: grid}
    records:
      - {id: rec1, name: Website relaunch}
    # or, instead of records, a bare count:
    # record_count: 120
```
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import yaml

from ..utils import SnapshotLoadError, get_logger

logger = get_logger(__name__)


def _entries(data: Mapping, key: str, owner: str) -> list:
    """The list stored under ``key``; absent or null means empty"""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotLoadError(f"\"{key}\" of {owner} must be a list, got {type(value).__name__}")
    return value


@dataclass
class SnapshotRecord:
    id: str
    name: Optional[str] = None


@dataclass
class SnapshotField:
    id: Optional[str]
    name: Optional[str]
    type: Optional[str]
    description: Optional[str] = None
    is_computed: Optional[bool] = None
    options: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "SnapshotField":
        """Non-mapping entries become a field with no attributes, which the walker skips"""
        if not isinstance(data, Mapping):
            return cls(id=None, name=None, type=None)
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            type=data.get("type"),
            description=data.get("description"),
            is_computed=data.get("is_computed", data.get("isComputed")),
            options=data.get("options"),
        )


@dataclass
class SnapshotView:
    id: Optional[str]
    name: Optional[str]
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "SnapshotView":
        if not isinstance(data, Mapping):
            return cls(id=None, name=None)
        return cls(id=data.get("id"), name=data.get("name"), type=data.get("type"))


@dataclass
class SnapshotTable:
    id: str
    name: str
    description: Optional[str] = None
    fields: List[SnapshotField] = field(default_factory=list)
    views: List[SnapshotView] = field(default_factory=list)
    records: List[SnapshotRecord] = field(default_factory=list)

    async def select_records(self, fields: Optional[List[str]] = None) -> List[SnapshotRecord]:
        """Return all records; field projection is irrelevant for identity-only records"""
        return list(self.records)

    @classmethod
    def from_dict(cls, data: Any) -> "SnapshotTable":
        """
        Create a table from its dictionary description

        Raises:
            SnapshotLoadError: If the entry, its records or its record_count are malformed
        """
        if not isinstance(data, Mapping):
            raise SnapshotLoadError(f"Table entry must be a mapping, got {type(data).__name__}")

        table_id = data.get("id")
        owner = f"table {table_id}"

        if "records" in data:
            records = []
            for r in _entries(data, "records", owner):
                if not isinstance(r, Mapping):
                    raise SnapshotLoadError(
                        f"Record entries of {owner} must be mappings, got {type(r).__name__}"
                    )
                records.append(SnapshotRecord(id=r.get("id"), name=r.get("name")))
        else:
            raw_count = data.get("record_count", 0)
            try:
                count = int(raw_count)
            except (TypeError, ValueError) as e:
                raise SnapshotLoadError(
                    f"record_count of {owner} must be an integer, got {raw_count!r}",
                    original_error=e,
                ) from e
            records = [SnapshotRecord(id=f"{table_id}-rec{i + 1}") for i in range(count)]

        return cls(
            id=table_id,
            name=data.get("name"),
            description=data.get("description"),
            fields=[SnapshotField.from_dict(f) for f in _entries(data, "fields", owner)],
            views=[SnapshotView.from_dict(v) for v in _entries(data, "views", owner)],
            records=records,
        )


@dataclass
class SnapshotBase:
    id: str
    name: str
    tables: List[SnapshotTable] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SnapshotBase":
        """Create a base from its dictionary description"""
        if not isinstance(data, dict):
            raise SnapshotLoadError("Snapshot root must be a mapping")

        return cls(
            id=data.get("id", "unknown"),
            name=data.get("name", "Untitled base"),
            tables=[SnapshotTable.from_dict(t) for t in _entries(data, "tables", "base")],
        )


def load_snapshot(path: Union[str, Path]) -> SnapshotBase:
    """
    Load a snapshot base from a JSON or YAML file

    Raises:
        SnapshotLoadError: If the file is missing or not a valid snapshot
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotLoadError(f"Snapshot file not found: {path}", path=str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise SnapshotLoadError(
            f"Could not parse snapshot {path}: {e}", path=str(path), original_error=e
        ) from e

    try:
        base = SnapshotBase.from_dict(data)
    except SnapshotLoadError as e:
        raise SnapshotLoadError(
            f"Invalid snapshot {path}: {e.message}", path=str(path), original_error=e.original_error
        ) from e
    logger.info(f"Loaded snapshot '{base.name}' with {len(base.tables)} tables from {path}")
    return base

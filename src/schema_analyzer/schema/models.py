"""
Schema Model Definitions

These models represent the descriptive understanding of a base: its tables,
fields, views, the link graph between tables and aggregate statistics.
All models are frozen; a SchemaModel is read-only once built.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple
import json
import yaml

from .options import EmptyOptions, FieldOptions


UNKNOWN_PRIMARY_FIELD_ID = "unknown"
UNKNOWN_PRIMARY_FIELD_NAME = "Unknown"
NO_DESCRIPTION = "No description"
LINKED_RECORD = "linkedRecord"


class FieldCategory(str, Enum):
    """Semantic grouping of field types"""
    TEXT = "TEXT"
    NUMERIC = "NUMERIC"
    DATE = "DATE"
    SELECT = "SELECT"
    RELATIONAL = "RELATIONAL"
    ATTACHMENT = "ATTACHMENT"
    CHECKBOX = "CHECKBOX"
    USER = "USER"
    COMPUTED = "COMPUTED"
    OTHER = "OTHER"


class LinkType(str, Enum):
    """Display cardinality of a link field"""
    ONE_TO_ONE_OR_MANY = "One-to-One/Many"
    MANY_TO_MANY = "Many-to-Many"


@dataclass(frozen=True)
class FieldModel:
    """Descriptive information about a single field"""
    id: str
    name: str
    type: str
    category: FieldCategory
    description: str = ""
    is_computed: bool = False
    options: FieldOptions = field(default_factory=EmptyOptions)

    # Link fields only
    linked_table_id: Optional[str] = None
    inverse_link_field_id: Optional[str] = None
    prefers_single_link: bool = False

    @property
    def is_link(self) -> bool:
        return self.type == "multipleRecordLinks"

    def to_dict(self, include_id: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if include_id:
            data["id"] = self.id
        data.update({
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "category": self.category.value,
            "is_computed": self.is_computed,
            "options": self.options.to_dict(),
        })
        if self.is_link:
            data["linked_table_id"] = self.linked_table_id
            data["inverse_link_field_id"] = self.inverse_link_field_id
            data["prefers_single_link"] = self.prefers_single_link
        return data


@dataclass(frozen=True)
class ViewModel:
    """A named, typed presentation of a table"""
    id: str
    name: str
    type: str = "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type}


@dataclass(frozen=True)
class SampleRecord:
    """Identity of a sampled record; field values are never read"""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class TableModel:
    """Descriptive information about a table"""
    id: str
    name: str
    description: str = NO_DESCRIPTION
    primary_field_id: str = UNKNOWN_PRIMARY_FIELD_ID
    primary_field_name: str = UNKNOWN_PRIMARY_FIELD_NAME
    fields: Tuple[FieldModel, ...] = ()
    views: Tuple[ViewModel, ...] = ()
    record_count: int = 0
    sample_records: Tuple[SampleRecord, ...] = ()

    @property
    def has_description(self) -> bool:
        return bool(self.description) and self.description != NO_DESCRIPTION

    def get_field(self, name: str) -> Optional[FieldModel]:
        """Get field by name (case-insensitive)"""
        name_lower = name.lower()
        for f in self.fields:
            if f.name == name or f.name.lower() == name_lower:
                return f
        return None

    def category_counts(self) -> Dict[str, int]:
        """Field count per category, in first-seen order"""
        counts: Dict[str, int] = {}
        for f in self.fields:
            counts[f.category.value] = counts.get(f.category.value, 0) + 1
        return counts

    def to_dict(self, include_field_ids: bool = True) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "primary_field_id": self.primary_field_id,
            "primary_field_name": self.primary_field_name,
            "fields": [f.to_dict(include_id=include_field_ids) for f in self.fields],
            "views": [v.to_dict() for v in self.views],
            "record_count": self.record_count,
            "sample_records": [r.to_dict() for r in self.sample_records],
        }


@dataclass(frozen=True)
class RelationshipEdge:
    """A link field in one table pointing at another analyzed table"""
    from_table_id: str
    from_field_id: str
    to_table_id: str
    kind: str = LINKED_RECORD
    prefers_single_link: bool = False

    # Display names, resolved when the edge is derived
    from_table_name: str = ""
    from_field_name: str = ""
    to_table_name: str = ""

    @property
    def link_type(self) -> LinkType:
        if self.prefers_single_link:
            return LinkType.ONE_TO_ONE_OR_MANY
        return LinkType.MANY_TO_MANY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_table_id": self.from_table_id,
            "from_table": self.from_table_name,
            "from_field_id": self.from_field_id,
            "from_field": self.from_field_name,
            "to_table_id": self.to_table_id,
            "to_table": self.to_table_name,
            "kind": self.kind,
            "prefers_single_link": self.prefers_single_link,
        }


@dataclass(frozen=True)
class TableSize:
    """Record and field counts for one table"""
    table_id: str
    table_name: str
    record_count: int
    field_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_id": self.table_id,
            "table_name": self.table_name,
            "record_count": self.record_count,
            "field_count": self.field_count,
        }


@dataclass(frozen=True)
class StatisticsAggregate:
    """
    Aggregate statistics derived from the table models

    When derivation fails, ``error`` is set and the derived fields stay empty.
    """
    total_tables: int = 0
    total_fields: int = 0
    total_views: int = 0
    total_records: int = 0
    field_type_distribution: Mapping[str, int] = field(default_factory=dict)
    field_category_distribution: Mapping[str, int] = field(default_factory=dict)
    table_sizes: Tuple[TableSize, ...] = ()
    error: Optional[str] = None

    def __post_init__(self):
        # Distributions are exposed read-only
        for name in ("field_type_distribution", "field_category_distribution"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @property
    def failed(self) -> bool:
        return self.error is not None

    def percentage(self, count: int) -> float:
        """Share of all fields, rounded to one decimal"""
        if self.total_fields <= 0:
            return 0.0
        return round(count / self.total_fields * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        if self.failed:
            return {"total_tables": self.total_tables, "error": self.error}
        return {
            "total_tables": self.total_tables,
            "total_fields": self.total_fields,
            "total_views": self.total_views,
            "total_records": self.total_records,
            "field_type_distribution": dict(self.field_type_distribution),
            "field_category_distribution": dict(self.field_category_distribution),
            "table_sizes": [t.to_dict() for t in self.table_sizes],
        }


@dataclass(frozen=True)
class SchemaModel:
    """
    Complete descriptive model of a base

    Built once by the SchemaBuilder and read-only afterwards.
    """
    base_id: str
    base_name: str
    tables: Tuple[TableModel, ...] = ()
    relationships: Tuple[RelationshipEdge, ...] = ()
    statistics: Optional[StatisticsAggregate] = None
    generated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self, include_field_ids: bool = True) -> Dict[str, Any]:
        return {
            "base_id": self.base_id,
            "base_name": self.base_name,
            "generated_at": self.generated_at.isoformat(),
            "tables": [t.to_dict(include_field_ids=include_field_ids) for t in self.tables],
            "relationships": [r.to_dict() for r in self.relationships],
            "statistics": self.statistics.to_dict() if self.statistics else None,
        }

    def to_json(self, indent: int = 2, include_field_ids: bool = True) -> str:
        """Export as JSON"""
        return json.dumps(self.to_dict(include_field_ids), indent=indent, default=str)

    def to_yaml(self, include_field_ids: bool = True) -> str:
        """Export as YAML"""
        return yaml.safe_dump(
            self.to_dict(include_field_ids), default_flow_style=False, sort_keys=False
        )

    def get_table(self, key: str) -> Optional[TableModel]:
        """Get table by id, or by name (case-insensitive)"""
        for table in self.tables:
            if table.id == key or table.name == key:
                return table
        key_lower = key.lower()
        for table in self.tables:
            if table.name.lower() == key_lower:
                return table
        return None

    def get_relationships_for_table(self, table_id: str) -> List[RelationshipEdge]:
        """Get all edges touching a table"""
        return [
            r for r in self.relationships
            if r.from_table_id == table_id or r.to_table_id == table_id
        ]

    def get_related_tables(self, table_id: str) -> Set[str]:
        """Ids of all tables linked to or from the given table"""
        related = set()
        for r in self.relationships:
            if r.from_table_id == table_id:
                related.add(r.to_table_id)
            elif r.to_table_id == table_id:
                related.add(r.from_table_id)
        return related

    def relationships_by_table(self) -> Dict[str, List[RelationshipEdge]]:
        """Edges grouped by source table name, in edge order"""
        grouped: Dict[str, List[RelationshipEdge]] = {}
        for rel in self.relationships:
            grouped.setdefault(rel.from_table_name, []).append(rel)
        return grouped

    def without_timestamp(self) -> Dict[str, Any]:
        """Dictionary form with generated_at removed, for run-to-run comparison"""
        data = self.to_dict()
        data.pop("generated_at")
        return data

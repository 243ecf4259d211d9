"""
Table Walker

Walks one table handle and produces its TableModel. Record sampling, every
field and every view are guarded individually: a failure is recorded as an
ItemOutcome, logged, and the walk carries on with reduced data.
"""
from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .categories import categorize
from .models import (
    FieldModel,
    SampleRecord,
    TableModel,
    ViewModel,
    NO_DESCRIPTION,
    UNKNOWN_PRIMARY_FIELD_ID,
    UNKNOWN_PRIMARY_FIELD_NAME,
)
from .options import EmptyOptions, extract_link_target, extract_options
from ..config import AnalyzerConfig
from ..sources.base import FieldHandle, TableHandle, ViewHandle
from ..utils import (
    AnalyzerMetrics,
    ErrorContext,
    MalformedFieldError,
    MalformedViewError,
    OptionExtractionError,
    RecordQueryError,
    SchemaAnalyzerError,
    get_logger,
    log_context,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ItemOutcome:
    """A contained failure: what was skipped or degraded, and why"""
    scope: str  # "field", "view", "options", "records" or "statistics"
    error_type: str
    message: str
    table_id: Optional[str] = None
    table_name: Optional[str] = None
    item_id: Optional[str] = None
    item_name: Optional[str] = None

    @classmethod
    def from_error(cls, scope: str, error: SchemaAnalyzerError) -> "ItemOutcome":
        ctx = error.context
        return cls(
            scope=scope,
            error_type=error.__class__.__name__,
            message=error.message,
            table_id=ctx.table_id,
            table_name=ctx.table_name,
            item_id=ctx.item_id,
            item_name=ctx.item_name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "error_type": self.error_type,
            "message": self.message,
            "table_id": self.table_id,
            "table_name": self.table_name,
            "item_id": self.item_id,
            "item_name": self.item_name,
        }


@dataclass
class TableWalkResult:
    """A table model together with the failures contained while building it"""
    table: TableModel
    outcomes: List[ItemOutcome] = field(default_factory=list)


class ProgressObserver(Protocol):
    """Receives per-table progress notifications"""

    def on_table_started(self, index: int, total: int, table_name: str) -> None:
        ...

    def on_table_completed(self, index: int, total: int, table: TableModel) -> None:
        ...


class LoggingProgressObserver:
    """Default observer: reports progress through the log"""

    def on_table_started(self, index: int, total: int, table_name: str) -> None:
        logger.info(f"Analyzing table {index + 1}/{total}: {table_name}")

    def on_table_completed(self, index: int, total: int, table: TableModel) -> None:
        logger.info(
            f"Completed analysis of {table.name} "
            f"({len(table.fields)} fields, {len(table.views)} views, {table.record_count} records)"
        )


class TableWalker:
    """
    Builds TableModels from table handles

    Usage:
        walker = TableWalker(AnalyzerConfig(max_sample_records=3))
        result = await walker.walk(table, index=0, total=1)
        result.table.fields, result.outcomes
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        observer: Optional[ProgressObserver] = None,
    ):
        self.config = config or AnalyzerConfig()
        self.observer = observer or LoggingProgressObserver()

    async def walk(self, table: TableHandle, index: int = 0, total: int = 1) -> TableWalkResult:
        """Walk one table: primary field, record sample, fields, views"""
        table_id = getattr(table, "id", None)
        table_name = getattr(table, "name", None) or "Unnamed table"
        outcomes: List[ItemOutcome] = []
        start = time.time()

        self.observer.on_table_started(index, total, table_name)

        with log_context(table_name=table_name):
            primary_field_id, primary_field_name = self._primary_field(table)
            record_count, samples = await self._sample_records(table, outcomes)
            fields = self._walk_fields(table, outcomes)
            views = self._walk_views(table, outcomes)

        model = TableModel(
            id=table_id,
            name=table_name,
            description=getattr(table, "description", None) or NO_DESCRIPTION,
            primary_field_id=primary_field_id,
            primary_field_name=primary_field_name,
            fields=tuple(fields),
            views=tuple(views),
            record_count=record_count,
            sample_records=samples,
        )

        AnalyzerMetrics.record_table(time.time() - start, len(fields), len(views))
        self.observer.on_table_completed(index, total, model)
        return TableWalkResult(table=model, outcomes=outcomes)

    def _primary_field(self, table: TableHandle) -> Tuple[str, str]:
        """The first field is the primary field"""
        try:
            fields = table.fields
            if fields:
                first = fields[0]
                return (
                    getattr(first, "id", None) or UNKNOWN_PRIMARY_FIELD_ID,
                    getattr(first, "name", None) or UNKNOWN_PRIMARY_FIELD_NAME,
                )
        except Exception as e:
            logger.warning(f"Could not determine primary field: {e}")
        return UNKNOWN_PRIMARY_FIELD_ID, UNKNOWN_PRIMARY_FIELD_NAME

    async def _sample_records(
        self, table: TableHandle, outcomes: List[ItemOutcome]
    ) -> Tuple[int, Tuple[SampleRecord, ...]]:
        """Count records and keep the first few as samples, from one query"""
        try:
            result = table.select_records(fields=[])
            if inspect.isawaitable(result):
                result = await result
            # Query-result objects expose their records on an attribute
            records = list(getattr(result, "records", result))

            sample_size = min(self.config.max_sample_records, len(records))
            samples = tuple(
                SampleRecord(
                    id=record.id,
                    name=getattr(record, "name", None) or f"Record {i + 1}",
                )
                for i, record in enumerate(records[:sample_size])
            )
            return len(records), samples
        except Exception as e:
            error = RecordQueryError(
                f"Could not query records for {getattr(table, 'name', None)}: {e}",
                context=self._context(table),
                original_error=e,
            )
            self._contain(outcomes, "records", error)
            return 0, ()

    def _walk_fields(self, table: TableHandle, outcomes: List[ItemOutcome]) -> List[FieldModel]:
        fields: List[FieldModel] = []
        for handle in table.fields or []:
            try:
                fields.append(self.analyze_field(handle, table, outcomes))
            except SchemaAnalyzerError as e:
                self._contain(outcomes, "field", e)
            except Exception as e:
                error = MalformedFieldError(
                    f"Error analyzing field {getattr(handle, 'name', None)}: {e}",
                    context=self._context(table, handle),
                    original_error=e,
                )
                self._contain(outcomes, "field", error)
        return fields

    def _walk_views(self, table: TableHandle, outcomes: List[ItemOutcome]) -> List[ViewModel]:
        views: List[ViewModel] = []
        for handle in table.views or []:
            try:
                views.append(self.analyze_view(handle, table))
            except SchemaAnalyzerError as e:
                self._contain(outcomes, "view", e)
            except Exception as e:
                error = MalformedViewError(
                    f"Error analyzing view {getattr(handle, 'name', None)}: {e}",
                    context=self._context(table, handle),
                    original_error=e,
                )
                self._contain(outcomes, "view", error)
        return views

    def analyze_field(
        self,
        handle: FieldHandle,
        table: Optional[TableHandle] = None,
        outcomes: Optional[List[ItemOutcome]] = None,
    ) -> FieldModel:
        """
        Build the FieldModel for one field handle

        Raises:
            MalformedFieldError: If the field lacks an id, name or type
        """
        missing = [
            key for key in ("id", "name", "type")
            if handle is None or not getattr(handle, key, None)
        ]
        if missing:
            raise MalformedFieldError(
                "Field missing required properties",
                missing=missing,
                context=self._context(table, handle),
            )

        field_type = handle.type
        raw_options = getattr(handle, "options", None)

        try:
            options = extract_options(field_type, raw_options)
        except OptionExtractionError as e:
            e.context = self._context(table, handle)
            if outcomes is not None:
                self._contain(outcomes, "options", e)
            else:
                logger.warning(str(e))
            options = EmptyOptions()

        link = extract_link_target(raw_options if field_type == "multipleRecordLinks" else None)

        return FieldModel(
            id=handle.id,
            name=handle.name,
            type=field_type,
            category=categorize(field_type),
            description=getattr(handle, "description", None) or "",
            is_computed=bool(getattr(handle, "is_computed", None) or False),
            options=options,
            linked_table_id=link.linked_table_id,
            inverse_link_field_id=link.inverse_link_field_id,
            prefers_single_link=link.prefers_single_link,
        )

    def analyze_view(self, handle: ViewHandle, table: Optional[TableHandle] = None) -> ViewModel:
        """
        Build the ViewModel for one view handle

        Raises:
            MalformedViewError: If the view lacks an id or name
        """
        missing = [
            key for key in ("id", "name")
            if handle is None or not getattr(handle, key, None)
        ]
        if missing:
            raise MalformedViewError(
                "View missing required properties",
                missing=missing,
                context=self._context(table, handle),
            )

        return ViewModel(
            id=handle.id,
            name=handle.name,
            type=getattr(handle, "type", None) or "Unknown",
        )

    @staticmethod
    def _context(table: Any = None, item: Any = None) -> ErrorContext:
        return ErrorContext(
            table_id=getattr(table, "id", None),
            table_name=getattr(table, "name", None),
            item_id=getattr(item, "id", None),
            item_name=getattr(item, "name", None),
        )

    @staticmethod
    def _contain(outcomes: List[ItemOutcome], scope: str, error: SchemaAnalyzerError) -> None:
        outcomes.append(ItemOutcome.from_error(scope, error))
        AnalyzerMetrics.record_skipped_item(scope, error.__class__.__name__)
        logger.warning(
            str(error),
            extra={"extra_fields": {"scope": scope, **error.context.to_dict()}},
        )

"""
Schema Builder

Orchestrates a complete analysis run:
1. Walk every table of the base in source order
2. Derive the relationship graph from link fields
3. Derive aggregate statistics
4. Freeze the result into a SchemaModel
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    FieldCategory,
    RelationshipEdge,
    SchemaModel,
    StatisticsAggregate,
    TableModel,
    TableSize,
)
from .walker import ItemOutcome, ProgressObserver, TableWalker
from ..config import AnalyzerConfig
from ..sources.base import BaseHandle
from ..utils import (
    AnalyzerMetrics,
    ErrorContext,
    FatalAnalysisError,
    StatisticsDerivationError,
    get_logger,
    log_context,
    log_operation,
)

logger = get_logger(__name__)

STATISTICS_ERROR = "Could not calculate all statistics"


@dataclass
class AnalysisResult:
    """The frozen schema model plus every failure contained along the way"""
    model: SchemaModel
    outcomes: List[ItemOutcome] = field(default_factory=list)
    run_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True when no field, view, query or statistics failure was contained"""
        return not self.outcomes

    def outcomes_for(self, scope: str) -> List[ItemOutcome]:
        return [o for o in self.outcomes if o.scope == scope]


def derive_relationships(tables: Sequence[TableModel]) -> Tuple[RelationshipEdge, ...]:
    """
    One edge per link field whose target table is part of this run

    Links to tables outside ``tables`` are dropped. No reverse edge is
    synthesized; a link field in the target table yields its own edge.
    """
    by_id: Dict[str, TableModel] = {}
    for table in tables:
        by_id.setdefault(table.id, table)

    edges: List[RelationshipEdge] = []
    for table in tables:
        for f in table.fields:
            if f.category != FieldCategory.RELATIONAL or f.type != "multipleRecordLinks":
                continue
            if not f.linked_table_id:
                continue

            target = by_id.get(f.linked_table_id)
            if target is None:
                logger.debug(
                    f"Link {table.name}.{f.name} targets table {f.linked_table_id} "
                    f"outside this analysis"
                )
                continue

            edges.append(RelationshipEdge(
                from_table_id=table.id,
                from_field_id=f.id,
                to_table_id=target.id,
                prefers_single_link=f.prefers_single_link,
                from_table_name=table.name,
                from_field_name=f.name,
                to_table_name=target.name,
            ))

    return tuple(edges)


def compute_statistics(tables: Sequence[TableModel]) -> StatisticsAggregate:
    """
    Totals, type/category distributions and table sizes in one pass

    Raises:
        StatisticsDerivationError: If anything in the pass fails
    """
    try:
        type_distribution: Dict[str, int] = {}
        category_distribution: Dict[str, int] = {}
        total_fields = total_views = total_records = 0

        for table in tables:
            total_fields += len(table.fields)
            total_views += len(table.views)
            total_records += table.record_count or 0
            for f in table.fields:
                type_distribution[f.type] = type_distribution.get(f.type, 0) + 1
                category = f.category.value
                category_distribution[category] = category_distribution.get(category, 0) + 1

        # sorted() is stable with reverse=True, so ties keep analysis order
        table_sizes = sorted(
            (
                TableSize(
                    table_id=t.id,
                    table_name=t.name,
                    record_count=t.record_count or 0,
                    field_count=len(t.fields),
                )
                for t in tables
            ),
            key=lambda size: size.record_count,
            reverse=True,
        )

        return StatisticsAggregate(
            total_tables=len(tables),
            total_fields=total_fields,
            total_views=total_views,
            total_records=total_records,
            field_type_distribution=type_distribution,
            field_category_distribution=category_distribution,
            table_sizes=tuple(table_sizes),
        )
    except Exception as e:
        raise StatisticsDerivationError(
            f"Error calculating statistics: {e}", original_error=e
        ) from e


def failed_statistics(total_tables: int, message: str = STATISTICS_ERROR) -> StatisticsAggregate:
    """Aggregate carrying only the error marker"""
    return StatisticsAggregate(total_tables=total_tables, error=message)


def derive_statistics(
    tables: Sequence[TableModel],
    outcomes: Optional[List[ItemOutcome]] = None,
) -> StatisticsAggregate:
    """
    Total variant of compute_statistics: failures yield an error-marked aggregate

    When ``outcomes`` is given, a failure is also recorded there.
    """
    try:
        return compute_statistics(tables)
    except StatisticsDerivationError as e:
        if outcomes is not None:
            outcomes.append(ItemOutcome.from_error("statistics", e))
        AnalyzerMetrics.record_skipped_item("statistics", e.__class__.__name__)
        logger.warning(str(e))
        return failed_statistics(len(tables))


class SchemaBuilder:
    """
    Builds a SchemaModel from a base handle

    Usage:
        builder = SchemaBuilder(AnalyzerConfig(max_sample_records=3))
        result = await builder.build(base)
        model = result.model
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        observer: Optional[ProgressObserver] = None,
        walker: Optional[TableWalker] = None,
    ):
        self.config = config or AnalyzerConfig()
        self.walker = walker or TableWalker(self.config, observer)

    async def build(self, base: BaseHandle) -> AnalysisResult:
        """
        Run a complete analysis

        Raises:
            FatalAnalysisError: If the base has no tables, cannot be read, or
                something fails outside the per-item guards
        """
        run_id = str(uuid.uuid4())
        base_id = getattr(base, "id", None) or "unknown"
        base_name = getattr(base, "name", None) or "Untitled base"
        start = time.time()

        with log_context(run_id=run_id, base_name=base_name):
            tables = self._list_tables(base, base_id)
            outcomes: List[ItemOutcome] = []

            try:
                with log_operation(logger, "schema_analysis", base_id=base_id) as op:
                    table_models = await self._walk_tables(tables, outcomes)

                    relationships: Tuple[RelationshipEdge, ...] = ()
                    if self.config.compute_relationships:
                        relationships = derive_relationships(table_models)
                        logger.info(f"Found {len(relationships)} relationships")

                    statistics = None
                    if self.config.compute_statistics:
                        statistics = derive_statistics(table_models, outcomes)

                    op["tables"] = len(table_models)
                    op["relationships"] = len(relationships)
                    op["contained_failures"] = len(outcomes)
            except FatalAnalysisError:
                raise
            except Exception as e:
                raise FatalAnalysisError(
                    f"Error during analysis: {e}",
                    context=ErrorContext(run_id=run_id, base_id=base_id),
                    original_error=e,
                ) from e

        model = SchemaModel(
            base_id=base_id,
            base_name=base_name,
            tables=tuple(table_models),
            relationships=relationships,
            statistics=statistics,
            generated_at=datetime.utcnow(),
        )
        AnalyzerMetrics.record_run(time.time() - start, len(model.tables), len(relationships))
        return AnalysisResult(model=model, outcomes=outcomes, run_id=run_id)

    def _list_tables(self, base: BaseHandle, base_id: str) -> list:
        try:
            tables = list(base.tables or [])
        except Exception as e:
            raise FatalAnalysisError(
                f"Could not read tables of base {base_id}: {e}",
                context=ErrorContext(base_id=base_id),
                original_error=e,
            ) from e

        if not tables:
            raise FatalAnalysisError(
                "No tables found in this base.",
                context=ErrorContext(base_id=base_id),
            )
        return tables

    async def _walk_tables(self, tables: list, outcomes: List[ItemOutcome]) -> List[TableModel]:
        """Tables strictly in source order, one in flight at a time"""
        models: List[TableModel] = []
        total = len(tables)
        for index, table in enumerate(tables):
            result = await self.walker.walk(table, index=index, total=total)
            models.append(result.table)
            outcomes.extend(result.outcomes)
        return models


async def analyze_base(
    base: BaseHandle,
    config: Optional[AnalyzerConfig] = None,
    observer: Optional[ProgressObserver] = None,
) -> AnalysisResult:
    """Simplest entry point: build the schema model of a base"""
    return await SchemaBuilder(config, observer).build(base)

"""
Schema Introspection Module

Walks a base through read-only handles and builds a frozen SchemaModel:
- Normalize type-dependent field options into option records
- Categorize field types
- Walk tables, fields and views with per-item failure containment
- Derive the link graph and aggregate statistics

Usage:
    result = await analyze_base(base, AnalyzerConfig(max_sample_records=3))
    model = result.model
    for edge in model.relationships:
        print(edge.from_table_name, "->", edge.to_table_name)
"""

from .models import (
    FieldCategory,
    LinkType,
    FieldModel,
    ViewModel,
    SampleRecord,
    TableModel,
    RelationshipEdge,
    TableSize,
    StatisticsAggregate,
    SchemaModel,
)

from .options import (
    FieldOptions,
    EmptyOptions,
    Choice,
    SelectOptions,
    NumberOptions,
    DateOptions,
    CheckboxOptions,
    RatingOptions,
    LookupOptions,
    RollupOptions,
    CountOptions,
    FormulaOptions,
    LinkTarget,
    extract_options,
    normalize_options,
    extract_link_target,
)

from .categories import FIELD_TYPE_CATEGORIES, categorize

from .walker import (
    ItemOutcome,
    TableWalkResult,
    ProgressObserver,
    LoggingProgressObserver,
    TableWalker,
)

from .builder import (
    AnalysisResult,
    SchemaBuilder,
    derive_relationships,
    compute_statistics,
    derive_statistics,
    failed_statistics,
    analyze_base,
)

__all__ = [
    # Models
    "FieldCategory",
    "LinkType",
    "FieldModel",
    "ViewModel",
    "SampleRecord",
    "TableModel",
    "RelationshipEdge",
    "TableSize",
    "StatisticsAggregate",
    "SchemaModel",

    # Options
    "FieldOptions",
    "EmptyOptions",
    "Choice",
    "SelectOptions",
    "NumberOptions",
    "DateOptions",
    "CheckboxOptions",
    "RatingOptions",
    "LookupOptions",
    "RollupOptions",
    "CountOptions",
    "FormulaOptions",
    "LinkTarget",
    "extract_options",
    "normalize_options",
    "extract_link_target",

    # Categories
    "FIELD_TYPE_CATEGORIES",
    "categorize",

    # Walker
    "ItemOutcome",
    "TableWalkResult",
    "ProgressObserver",
    "LoggingProgressObserver",
    "TableWalker",

    # Builder (main entry point)
    "AnalysisResult",
    "SchemaBuilder",
    "derive_relationships",
    "compute_statistics",
    "derive_statistics",
    "failed_statistics",
    "analyze_base",
]

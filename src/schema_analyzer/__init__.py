"""
Schema Analyzer
===============

Inspects the schema of a multi-table base (tables, fields, views and the
links between tables), builds a frozen descriptive model of it, derives
relationship and statistics summaries, and renders the result as a navigable
report or as JSON, YAML, Markdown or CSV exports.

Quick Start:
------------

    import asyncio
    from schema_analyzer import AnalyzerConfig, analyze_base, load_snapshot, to_markdown

    base = load_snapshot("base.yaml")
    result = asyncio.run(analyze_base(base, AnalyzerConfig(max_sample_records=3)))

    print(to_markdown(result.model))
    for outcome in result.outcomes:
        print("skipped:", outcome.scope, outcome.item_name, outcome.message)

Any object exposing the read-only handle attributes in
``schema_analyzer.sources.base`` can stand in for the snapshot base.
"""

__version__ = "1.0.0"
__author__ = "Schema Analyzer Contributors"

# Configuration
from .config import (
    ExportFormat,
    LogLevel,
    AnalyzerConfig,
    ReportConfig,
    SystemConfig,
)

# Schema introspection
from .schema import (
    FieldCategory,
    FieldModel,
    ViewModel,
    TableModel,
    RelationshipEdge,
    StatisticsAggregate,
    SchemaModel,
    ItemOutcome,
    AnalysisResult,
    TableWalker,
    SchemaBuilder,
    categorize,
    normalize_options,
    derive_relationships,
    derive_statistics,
    analyze_base,
)

# Data sources
from .sources import SnapshotBase, load_snapshot

# Report
from .report import (
    ReportState,
    ReportNavigator,
    to_json,
    to_yaml,
    to_markdown,
    to_csv,
    export,
    write_export,
)

# Utilities
from .utils import (
    setup_logging,
    get_logger,
    SchemaAnalyzerError,
    MalformedFieldError,
    MalformedViewError,
    OptionExtractionError,
    RecordQueryError,
    StatisticsDerivationError,
    FatalAnalysisError,
    ConfigurationError,
    SnapshotLoadError,
)

__all__ = [
    "__version__",
    # Configuration
    "ExportFormat",
    "LogLevel",
    "AnalyzerConfig",
    "ReportConfig",
    "SystemConfig",
    # Schema
    "FieldCategory",
    "FieldModel",
    "ViewModel",
    "TableModel",
    "RelationshipEdge",
    "StatisticsAggregate",
    "SchemaModel",
    "ItemOutcome",
    "AnalysisResult",
    "TableWalker",
    "SchemaBuilder",
    "categorize",
    "normalize_options",
    "derive_relationships",
    "derive_statistics",
    "analyze_base",
    # Sources
    "SnapshotBase",
    "load_snapshot",
    # Report
    "ReportState",
    "ReportNavigator",
    "to_json",
    "to_yaml",
    "to_markdown",
    "to_csv",
    "export",
    "write_export",
    # Utilities
    "setup_logging",
    "get_logger",
    "SchemaAnalyzerError",
    "MalformedFieldError",
    "MalformedViewError",
    "OptionExtractionError",
    "RecordQueryError",
    "StatisticsDerivationError",
    "FatalAnalysisError",
    "ConfigurationError",
    "SnapshotLoadError",
]

"""
Utilities Package for the Schema Analyzer
"""
from .logging import (
    setup_logging,
    get_logger,
    set_run_id,
    get_run_id,
    clear_context,
    log_context,
    log_operation,
)

from .errors import (
    ErrorSeverity,
    ErrorCategory,
    ErrorContext,
    SchemaAnalyzerError,
    MalformedFieldError,
    MalformedViewError,
    OptionExtractionError,
    RecordQueryError,
    StatisticsDerivationError,
    FatalAnalysisError,
    ConfigurationError,
    SnapshotLoadError,
    format_error_for_operator,
)

from .metrics import (
    MetricsCollector,
    get_metrics_collector,
    counter,
    gauge,
    timer,
    time_operation,
    AnalyzerMetrics,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_run_id",
    "get_run_id",
    "clear_context",
    "log_context",
    "log_operation",
    # Errors
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    "SchemaAnalyzerError",
    "MalformedFieldError",
    "MalformedViewError",
    "OptionExtractionError",
    "RecordQueryError",
    "StatisticsDerivationError",
    "FatalAnalysisError",
    "ConfigurationError",
    "SnapshotLoadError",
    "format_error_for_operator",
    # Metrics
    "MetricsCollector",
    "get_metrics_collector",
    "counter",
    "gauge",
    "timer",
    "time_operation",
    "AnalyzerMetrics",
]

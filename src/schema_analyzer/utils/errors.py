"""
Error Handling Module for the Schema Analyzer
Defines custom exceptions and error handling utilities
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime


class ErrorSeverity(str, Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification"""
    FIELD = "field"
    VIEW = "view"
    OPTIONS = "options"
    RECORDS = "records"
    STATISTICS = "statistics"
    SOURCE = "source"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Additional context for errors"""
    run_id: Optional[str] = None
    base_id: Optional[str] = None
    table_id: Optional[str] = None
    table_name: Optional[str] = None
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "base_id": self.base_id,
            "table_id": self.table_id,
            "table_name": self.table_name,
            "item_id": self.item_id,
            "item_name": self.item_name,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class SchemaAnalyzerError(Exception):
    """Base exception for the Schema Analyzer"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[ErrorContext] = None,
        recoverable: bool = True,
        suggestions: Optional[List[str]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"


class MalformedFieldError(SchemaAnalyzerError):
    """Field record missing id, name or type"""

    def __init__(
        self,
        message: str,
        missing: Optional[List[str]] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Field will be omitted from the table model"]
        if missing:
            suggestions.append(f"Missing properties: {', '.join(missing)}")

        super().__init__(
            message=message,
            category=ErrorCategory.FIELD,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=True,
            suggestions=suggestions,
            original_error=original_error
        )
        self.missing = missing or []


class MalformedViewError(SchemaAnalyzerError):
    """View record missing id or name"""

    def __init__(
        self,
        message: str,
        missing: Optional[List[str]] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["View will be omitted from the table model"]
        if missing:
            suggestions.append(f"Missing properties: {', '.join(missing)}")

        super().__init__(
            message=message,
            category=ErrorCategory.VIEW,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=True,
            suggestions=suggestions,
            original_error=original_error
        )
        self.missing = missing or []


class OptionExtractionError(SchemaAnalyzerError):
    """Field options could not be normalized"""

    def __init__(
        self,
        message: str,
        field_type: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Field is kept with empty options"]
        if field_type:
            suggestions.append(f"Check the options payload shape for type '{field_type}'")

        super().__init__(
            message=message,
            category=ErrorCategory.OPTIONS,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=True,
            suggestions=suggestions,
            original_error=original_error
        )
        self.field_type = field_type


class RecordQueryError(SchemaAnalyzerError):
    """Record query for a table failed"""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.RECORDS,
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recoverable=True,
            suggestions=[
                "Record count is reported as 0",
                "Check read access to the table records",
            ],
            original_error=original_error
        )


class StatisticsDerivationError(SchemaAnalyzerError):
    """Statistics aggregate could not be computed"""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.STATISTICS,
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recoverable=True,
            suggestions=["Statistics carry an error marker instead of values"],
            original_error=original_error
        )


class FatalAnalysisError(SchemaAnalyzerError):
    """Unrecoverable failure that aborts the whole analysis run"""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.SOURCE,
            severity=ErrorSeverity.CRITICAL,
            context=context,
            recoverable=False,
            suggestions=[
                "Verify the data source is reachable",
                "Ensure the base contains at least one table",
            ],
            original_error=original_error
        )


class ConfigurationError(SchemaAnalyzerError):
    """Configuration errors"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Review configuration settings"]
        if config_key:
            suggestions.append(f"Check configuration for key: {config_key}")

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            suggestions=suggestions,
            original_error=original_error
        )
        self.config_key = config_key


class SnapshotLoadError(SchemaAnalyzerError):
    """Snapshot file could not be read or parsed"""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Snapshot files must be JSON or YAML mappings"]
        if path:
            suggestions.append(f"Check that '{path}' exists and is readable")

        super().__init__(
            message=message,
            category=ErrorCategory.SOURCE,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            suggestions=suggestions,
            original_error=original_error
        )
        self.path = path


def format_error_for_operator(error: SchemaAnalyzerError) -> str:
    """Format an error for display to the person running the analysis"""
    lines = [
        f"Error Type: {error.__class__.__name__}",
        f"Category: {error.category.value}",
        f"Message: {error.message}",
    ]

    if error.context.table_name:
        lines.append(f"Table: {error.context.table_name}")

    if error.suggestions:
        lines.append("Suggestions:")
        for suggestion in error.suggestions:
            lines.append(f"  - {suggestion}")

    if error.original_error:
        lines.append(f"Original Error: {str(error.original_error)}")

    return "\n".join(lines)

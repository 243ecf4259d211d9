"""
Configuration Management for the Schema Analyzer
Uses Pydantic for validation and type safety
"""
from __future__ import annotations

import os
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, ValidationError

from .utils.errors import ConfigurationError


class ExportFormat(str, Enum):
    """Supported export encodings"""
    JSON = "json"
    YAML = "yaml"
    MARKDOWN = "markdown"
    CSV = "csv"


class LogLevel(str, Enum):
    """Log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AnalyzerConfig(BaseModel):
    """Resolved settings for one analysis run"""
    max_sample_records: int = Field(default=5, ge=0)
    include_field_ids: bool = True
    compute_relationships: bool = True
    compute_statistics: bool = True

    model_config = {"frozen": True}

    def with_overrides(self, **overrides: Any) -> "AnalyzerConfig":
        """Return a new validated config with the given values replaced"""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return AnalyzerConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid analyzer settings: {e.errors()[0]['msg']}",
                config_key=str(e.errors()[0]["loc"][0]),
                original_error=e,
            ) from e


class ReportConfig(BaseModel):
    """Presentation settings for the report layer"""
    default_format: ExportFormat = ExportFormat.JSON
    full_schema_char_limit: int = Field(default=10000, ge=100)
    export_char_limit: int = Field(default=50000, ge=100)
    max_choices_displayed: int = Field(default=10, ge=1, le=100)

    model_config = {"frozen": True, "use_enum_values": True}


class SystemConfig(BaseModel):
    """Main system configuration"""
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    log_level: LogLevel = LogLevel.INFO
    json_logs: bool = False
    log_file: Optional[str] = None

    model_config = {"frozen": True, "use_enum_values": True}

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "SystemConfig":
        """Create configuration from SCHEMA_ANALYZER_* environment variables"""
        if dotenv:
            from dotenv import load_dotenv
            load_dotenv()

        try:
            analyzer = AnalyzerConfig(
                max_sample_records=int(os.getenv("SCHEMA_ANALYZER_MAX_SAMPLE_RECORDS", "5")),
                include_field_ids=_env_flag("SCHEMA_ANALYZER_INCLUDE_FIELD_IDS", True),
                compute_relationships=_env_flag("SCHEMA_ANALYZER_COMPUTE_RELATIONSHIPS", True),
                compute_statistics=_env_flag("SCHEMA_ANALYZER_COMPUTE_STATISTICS", True),
            )
            report = ReportConfig(
                default_format=ExportFormat(os.getenv("SCHEMA_ANALYZER_EXPORT_FORMAT", "json")),
            )
            return cls(
                analyzer=analyzer,
                report=report,
                log_level=LogLevel(os.getenv("SCHEMA_ANALYZER_LOG_LEVEL", "INFO").upper()),
                json_logs=_env_flag("SCHEMA_ANALYZER_JSON_LOGS", False),
                log_file=os.getenv("SCHEMA_ANALYZER_LOG_FILE"),
            )
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(
                f"Invalid environment configuration: {e}",
                original_error=e,
            ) from e


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")

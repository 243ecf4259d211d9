"""
Report Package
Presentation and export of a finished SchemaModel
"""
from .exporters import (
    EXPORTERS,
    FILE_EXTENSIONS,
    to_json,
    to_yaml,
    to_markdown,
    to_csv,
    export,
    write_export,
)
from .navigator import ReportState, ReportNavigator

__all__ = [
    "EXPORTERS",
    "FILE_EXTENSIONS",
    "to_json",
    "to_yaml",
    "to_markdown",
    "to_csv",
    "export",
    "write_export",
    "ReportState",
    "ReportNavigator",
]

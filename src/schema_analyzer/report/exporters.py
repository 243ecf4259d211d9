"""
Export encodings for a finished SchemaModel

Every encoding is a projection of the model; nothing is derived here that the
model does not already carry.
"""
from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Callable, Dict, List, Union

from ..config import ExportFormat
from ..schema.models import SchemaModel, TableModel
from ..utils import ConfigurationError, get_logger

logger = get_logger(__name__)


def to_json(model: SchemaModel, include_field_ids: bool = True) -> str:
    """Structured-data export"""
    return model.to_json(include_field_ids=include_field_ids)


def to_yaml(model: SchemaModel, include_field_ids: bool = True) -> str:
    """Structured-data export, YAML flavour"""
    return model.to_yaml(include_field_ids=include_field_ids)


def _cell(value: str) -> str:
    """Make a value safe for a Markdown table cell"""
    return str(value).replace("|", "\\|").replace("\n", " ")


def _summary_counts(model: SchemaModel) -> Dict[str, int]:
    stats = model.statistics
    if stats is not None and not stats.failed:
        return {
            "Tables": stats.total_tables,
            "Fields": stats.total_fields,
            "Records": stats.total_records,
        }
    return {
        "Tables": len(model.tables),
        "Fields": sum(len(t.fields) for t in model.tables),
        "Records": sum(t.record_count for t in model.tables),
    }


def _markdown_table(table: TableModel, include_field_ids: bool) -> List[str]:
    lines = [f"### {table.name}", ""]
    if table.has_description:
        lines.extend([f"> {table.description}", ""])

    lines.extend(["#### Fields", ""])
    if include_field_ids:
        lines.append("| Field | ID | Type | Category | Description |")
        lines.append("|-------|----|------|----------|-------------|")
    else:
        lines.append("| Field | Type | Category | Description |")
        lines.append("|-------|------|----------|-------------|")

    for f in table.fields:
        cells = [_cell(f.name)]
        if include_field_ids:
            cells.append(f.id)
        cells.extend([f.type, f.category.value, _cell(f.description or "-")])
        lines.append("| " + " | ".join(cells) + " |")

    lines.append("")
    return lines


def to_markdown(model: SchemaModel, include_field_ids: bool = True) -> str:
    """Human-readable document export"""
    lines = [
        f"# Schema: {model.base_name}",
        "",
        f"Generated: {model.generated_at.strftime('%Y-%m-%d %H:%M:%S')} UTC",
        "",
        "## Summary",
        "",
    ]
    for label, value in _summary_counts(model).items():
        lines.append(f"- {label}: {value}")
    lines.append(f"- Relationships: {len(model.relationships)}")
    lines.extend(["", "## Tables", ""])

    for table in model.tables:
        lines.extend(_markdown_table(table, include_field_ids))

    if model.relationships:
        lines.extend([
            "## Relationships",
            "",
            "| From Table | From Field | To Table | Type |",
            "|------------|------------|----------|------|",
        ])
        for rel in model.relationships:
            lines.append(
                f"| {_cell(rel.from_table_name)} | {_cell(rel.from_field_name)} | "
                f"{_cell(rel.to_table_name)} | {rel.link_type.value} |"
            )
        lines.append("")

    return "\n".join(lines)


def to_csv(model: SchemaModel, include_field_ids: bool = True) -> str:
    """Tabular export: one row per field"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    header = ["Table", "Field"]
    if include_field_ids:
        header.append("Field ID")
    header.extend(["Type", "Category", "Description", "Options"])
    writer.writerow(header)

    for table in model.tables:
        for f in table.fields:
            row = [table.name, f.name]
            if include_field_ids:
                row.append(f.id)
            row.extend([
                f.type,
                f.category.value,
                f.description or "",
                json.dumps(f.options.to_dict()),
            ])
            writer.writerow(row)

    return buffer.getvalue()


EXPORTERS: Dict[ExportFormat, Callable[[SchemaModel, bool], str]] = {
    ExportFormat.JSON: to_json,
    ExportFormat.YAML: to_yaml,
    ExportFormat.MARKDOWN: to_markdown,
    ExportFormat.CSV: to_csv,
}

FILE_EXTENSIONS: Dict[ExportFormat, str] = {
    ExportFormat.JSON: ".json",
    ExportFormat.YAML: ".yaml",
    ExportFormat.MARKDOWN: ".md",
    ExportFormat.CSV: ".csv",
}


def export(
    model: SchemaModel,
    fmt: Union[ExportFormat, str] = ExportFormat.JSON,
    include_field_ids: bool = True,
) -> str:
    """
    Encode a model in the requested format

    Raises:
        ConfigurationError: If the format is not supported
    """
    try:
        fmt = ExportFormat(fmt)
    except ValueError as e:
        raise ConfigurationError(
            f"Unsupported export format: {fmt}", config_key="format", original_error=e
        ) from e
    return EXPORTERS[fmt](model, include_field_ids)


def write_export(
    model: SchemaModel,
    path: Union[str, Path],
    fmt: Union[ExportFormat, str, None] = None,
    include_field_ids: bool = True,
) -> Path:
    """Write an export to disk; the format defaults to the file extension"""
    path = Path(path)
    if fmt is None:
        by_suffix = {ext: f for f, ext in FILE_EXTENSIONS.items()}
        by_suffix[".yml"] = ExportFormat.YAML
        fmt = by_suffix.get(path.suffix.lower(), ExportFormat.JSON)

    content = export(model, fmt, include_field_ids)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    logger.info(f"Exported schema to {path}")
    return path

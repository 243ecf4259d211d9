"""
Report Navigation

A finite state machine over the report screens. Each screen renders a
Markdown string from the frozen SchemaModel; ``select`` moves between screens.

States and choices:
    OVERVIEW      -> table:<id>, relationships, statistics, full, export[:<fmt>], done
    TABLE_DETAIL  -> table:<id>, back, done
    RELATIONSHIPS -> back, done
    STATISTICS    -> back, done
    FULL_SCHEMA   -> back, done
    EXPORT        -> export:<fmt>, back, done
    DONE          (terminal)
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional

from .exporters import export
from ..config import AnalyzerConfig, ExportFormat, ReportConfig
from ..schema.models import FieldModel, SchemaModel, TableModel


class ReportState(str, Enum):
    OVERVIEW = "overview"
    TABLE_DETAIL = "table_detail"
    RELATIONSHIPS = "relationships"
    STATISTICS = "statistics"
    FULL_SCHEMA = "full_schema"
    EXPORT = "export"
    DONE = "done"


_TARGETS: Dict[str, ReportState] = {
    "table": ReportState.TABLE_DETAIL,
    "relationships": ReportState.RELATIONSHIPS,
    "statistics": ReportState.STATISTICS,
    "full": ReportState.FULL_SCHEMA,
    "export": ReportState.EXPORT,
    "back": ReportState.OVERVIEW,
    "done": ReportState.DONE,
}

_ALLOWED: Dict[ReportState, FrozenSet[str]] = {
    ReportState.OVERVIEW: frozenset({"table", "relationships", "statistics", "full", "export", "done"}),
    ReportState.TABLE_DETAIL: frozenset({"table", "back", "done"}),
    ReportState.RELATIONSHIPS: frozenset({"back", "done"}),
    ReportState.STATISTICS: frozenset({"back", "done"}),
    ReportState.FULL_SCHEMA: frozenset({"back", "done"}),
    ReportState.EXPORT: frozenset({"export", "back", "done"}),
    ReportState.DONE: frozenset(),
}


class ReportNavigator:
    """
    Drives the report screens from discrete selections

    Usage:
        nav = ReportNavigator(model)
        print(nav.render())
        nav.select("table:tblProjects")
        print(nav.render())
        nav.select("done")
    """

    def __init__(
        self,
        model: SchemaModel,
        analyzer_config: Optional[AnalyzerConfig] = None,
        report_config: Optional[ReportConfig] = None,
    ):
        self.model = model
        self.analyzer_config = analyzer_config or AnalyzerConfig()
        self.report_config = report_config or ReportConfig()
        self.state = ReportState.OVERVIEW
        self.selected_table: Optional[TableModel] = None
        self.export_format = ExportFormat(self.report_config.default_format)
        self.history: List[ReportState] = [self.state]

        self._renderers: Dict[ReportState, Callable[[], str]] = {
            ReportState.OVERVIEW: self.render_overview,
            ReportState.TABLE_DETAIL: self.render_table_detail,
            ReportState.RELATIONSHIPS: self.render_relationships,
            ReportState.STATISTICS: self.render_statistics,
            ReportState.FULL_SCHEMA: self.render_full_schema,
            ReportState.EXPORT: self.render_export,
            ReportState.DONE: lambda: "",
        }

    @property
    def is_done(self) -> bool:
        return self.state == ReportState.DONE

    def available_choices(self) -> List[str]:
        """Choices valid in the current state, table choices expanded"""
        choices: List[str] = []
        for head in sorted(_ALLOWED[self.state]):
            if head == "table":
                choices.extend(f"table:{t.id}" for t in self.model.tables)
            elif head == "export" and self.state == ReportState.EXPORT:
                choices.extend(f"export:{fmt.value}" for fmt in ExportFormat)
            else:
                choices.append(head)
        return choices

    def select(self, choice: str) -> ReportState:
        """
        Apply a selection and return the new state

        Raises:
            ValueError: If the choice is not valid in the current state
        """
        head, _, arg = choice.partition(":")
        if head not in _ALLOWED[self.state]:
            raise ValueError(f"Choice '{choice}' is not available from {self.state.value}")

        if head == "table":
            table = self.model.get_table(arg) if arg else None
            if table is None:
                raise ValueError(f"Unknown table: {arg}")
            self.selected_table = table
        elif head == "export" and arg:
            try:
                self.export_format = ExportFormat(arg)
            except ValueError as e:
                raise ValueError(f"Unknown export format: {arg}") from e

        self.state = _TARGETS[head]
        self.history.append(self.state)
        return self.state

    def render(self) -> str:
        """Render the current screen"""
        return self._renderers[self.state]()

    # Screens

    def render_overview(self) -> str:
        model = self.model
        lines = [
            "# Schema Analysis Report",
            f"**Base:** {model.base_name}",
            f"**Generated:** {model.generated_at.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            "",
        ]

        stats = model.statistics
        if stats is not None:
            lines.extend([
                "## Summary Statistics",
                f"- **Tables:** {stats.total_tables}",
                f"- **Fields:** {stats.total_fields}",
                f"- **Views:** {stats.total_views}",
                f"- **Records:** {stats.total_records:,}",
                f"- **Relationships:** {len(model.relationships)}",
                "",
            ])

        lines.append("## Tables Overview")
        lines.append("")
        for table in model.tables:
            lines.append(f"### {table.name}")
            if table.has_description:
                lines.append(f"*{table.description}*")
            lines.extend([
                f"- **Records:** {table.record_count:,}",
                f"- **Fields:** {len(table.fields)}",
                f"- **Views:** {len(table.views)}",
                f"- **Primary Field:** {table.primary_field_name}",
                "",
                "**Field Categories:**",
            ])
            for category, count in table.category_counts().items():
                lines.append(f"- {category}: {count}")
            lines.append("---")
            lines.append("")

        return "\n".join(lines)

    def _render_field(self, f: FieldModel) -> List[str]:
        lines = [f"### {f.name}"]
        if self.analyzer_config.include_field_ids:
            lines.append(f"*ID: {f.id}*")
        lines.append(f"- **Type:** {f.type} ({f.category.value})")
        if f.description:
            lines.append(f"- **Description:** {f.description}")
        if f.is_computed:
            lines.append("- **Computed Field**")
        if f.is_link and f.linked_table_id:
            target = self.model.get_table(f.linked_table_id)
            target_name = target.name if target else f.linked_table_id
            lines.append(f"- **Links to:** {target_name}")

        options = f.options.to_dict()
        if options:
            lines.append("- **Options:**")
            choices = options.get("choices")
            if choices is not None:
                limit = self.report_config.max_choices_displayed
                lines.append(f"  - Choices ({len(choices)}):")
                for choice in choices[:limit]:
                    lines.append(f"    - {choice['name']} ({choice['color']})")
                if len(choices) > limit:
                    lines.append(f"    - ... and {len(choices) - limit} more")
            else:
                for key, value in options.items():
                    lines.append(f"  - {key}: {json.dumps(value)}")
        lines.append("")
        return lines

    def render_table_detail(self) -> str:
        table = self.selected_table
        if table is None:
            return ""

        lines = [f"# Table: {table.name}", ""]
        if table.has_description:
            lines.extend([f"*{table.description}*", ""])

        if table.fields:
            lines.extend(["## Fields", ""])
            for f in table.fields:
                lines.extend(self._render_field(f))
        else:
            lines.extend(["## Fields", "*No fields found in this table*", ""])

        if table.views:
            lines.extend(["## Views", ""])
            for view in table.views:
                lines.append(f"- **{view.name}** ({view.type})")
        else:
            lines.extend(["## Views", "*No views found in this table*"])

        if table.sample_records:
            lines.extend(["", "## Sample Records", ""])
            for record in table.sample_records:
                lines.append(f"- {record.name}")

        return "\n".join(lines)

    def render_relationships(self) -> str:
        lines = ["# Table Relationships", ""]
        if not self.model.relationships:
            lines.append("*No linked record relationships found*")
            return "\n".join(lines)

        for table_name, edges in self.model.relationships_by_table().items():
            lines.append(f"## {table_name}")
            for rel in edges:
                lines.append(
                    f"- **{rel.from_field_name}** → **{rel.to_table_name}** ({rel.link_type.value})"
                )
            lines.append("")

        return "\n".join(lines)

    def render_statistics(self) -> str:
        lines = ["# Detailed Statistics", ""]
        stats = self.model.statistics
        if stats is None:
            lines.append("*Statistics were not computed for this run*")
            return "\n".join(lines)

        if stats.error:
            lines.extend([f"Note: {stats.error}", ""])

        for title, distribution in (
            ("Field Type Distribution", stats.field_type_distribution),
            ("Field Category Distribution", stats.field_category_distribution),
        ):
            if not distribution:
                continue
            lines.append(f"## {title}")
            for key, count in sorted(distribution.items(), key=lambda kv: kv[1], reverse=True):
                lines.append(f"- **{key}**: {count} ({stats.percentage(count):.1f}%)")
            lines.append("")

        if stats.table_sizes:
            lines.extend([
                "## Table Sizes",
                "| Table | Records | Fields |",
                "|-------|---------|--------|",
            ])
            for size in stats.table_sizes:
                lines.append(f"| {size.table_name} | {size.record_count:,} | {size.field_count} |")

        return "\n".join(lines)

    def render_full_schema(self) -> str:
        limit = self.report_config.full_schema_char_limit
        text = self.model.to_json(include_field_ids=self.analyzer_config.include_field_ids)
        lines = ["# Full Schema", "", "```json", text[:limit]]
        if len(text) > limit:
            lines.append("... (truncated - use export for the full schema)")
        lines.append("```")
        return "\n".join(lines)

    def render_export(self) -> str:
        limit = self.report_config.export_char_limit
        text = export(self.model, self.export_format, self.analyzer_config.include_field_ids)
        lines = [
            f"# Export ({self.export_format.value.upper()})",
            "",
            "```",
            text[:limit],
        ]
        if len(text) > limit:
            lines.append("... (truncated)")
        lines.append("```")
        return "\n".join(lines)

"""Output formatters for report sections."""

import json
import logging
from typing import Any, Dict, List

from .licenses import license_display_name
from .sections import Section, Table
from .tree import FilteredNode

logger = logging.getLogger(__name__)

INDENT = "  "


class OutputFormatter:
    """Formatter for the supported output formats."""

    @staticmethod
    def format_as_text(sections: List[Section]) -> str:
        """Format sections as plain text with aligned tables."""
        lines: List[str] = []
        for section in sections:
            OutputFormatter._text_section(section, lines, level=0)
        return '\n'.join(lines).rstrip('\n') + '\n'

    @staticmethod
    def _text_section(section: Section, lines: List[str], level: int) -> None:
        underline = "=" if level == 0 else "-"
        lines.append(section.title)
        lines.append(underline * len(section.title))
        lines.append("")

        for paragraph in section.paragraphs:
            lines.append(paragraph)
            lines.append("")

        for table in section.tables:
            lines.extend(OutputFormatter._text_table(table))
            lines.append("")

        if section.tree is not None:
            lines.extend(OutputFormatter._text_tree(section.tree))
            lines.append("")

        if section.license_groups is not None:
            for license_name, projects in section.license_groups.items():
                lines.append(f"{license_display_name(license_name)}: {', '.join(projects)}")
            lines.append("")

        for subsection in section.subsections:
            OutputFormatter._text_section(subsection, lines, level + 1)

    @staticmethod
    def _text_table(table: Table) -> List[str]:
        rows = [table.header] + table.rows
        if table.total_row is not None:
            rows = rows + [table.total_header or table.header, table.total_row]

        width = max(len(row) for row in rows)
        widths = [0] * width
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        def render(row: List[str]) -> str:
            return " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip()

        separator = "-+-".join("-" * w for w in widths)
        lines = [render(table.header), separator]
        lines.extend(render(row) for row in table.rows)
        if table.total_row is not None:
            lines.append(separator)
            lines.append(render(table.total_header or table.header))
            lines.append(render(table.total_row))
        return lines

    @staticmethod
    def _text_tree(node: FilteredNode, depth: int = 0) -> List[str]:
        lines = [f"{INDENT * depth}{node.label.rstrip()}"]
        for child in node.children:
            lines.extend(OutputFormatter._text_tree(child, depth + 1))
        return lines

    @staticmethod
    def format_as_json(sections: List[Section]) -> str:
        """Format sections as a JSON document."""
        document = {"sections": [OutputFormatter._json_section(section) for section in sections]}
        return json.dumps(document, indent=2) + '\n'

    @staticmethod
    def _json_section(section: Section) -> Dict[str, Any]:
        data: Dict[str, Any] = {"key": section.key, "title": section.title}
        if section.paragraphs:
            data["paragraphs"] = list(section.paragraphs)
        if section.tables:
            data["tables"] = [OutputFormatter._json_table(table) for table in section.tables]
        if section.tree is not None:
            data["tree"] = OutputFormatter._json_node(section.tree)
        if section.license_groups is not None:
            data["licenses"] = [
                {"name": license_display_name(name), "projects": projects}
                for name, projects in section.license_groups.items()
            ]
        if section.subsections:
            data["sections"] = [OutputFormatter._json_section(sub) for sub in section.subsections]
        return data

    @staticmethod
    def _json_table(table: Table) -> Dict[str, Any]:
        data: Dict[str, Any] = {"header": table.header, "rows": table.rows}
        if table.total_row is not None:
            data["totalHeader"] = table.total_header
            data["totalRow"] = table.total_row
        if table.links:
            data["links"] = [
                {"row": row, "column": column, "url": url}
                for (row, column), url in sorted(table.links.items())
            ]
        return data

    @staticmethod
    def _json_node(node: FilteredNode) -> Dict[str, Any]:
        return {
            "id": node.artifact.id,
            "purl": node.artifact.purl,
            "scope": None if node.is_root else node.artifact.scope.value,
            "detailId": node.detail_id,
            "toggleId": node.toggle_id,
            "details": node.details,
            "children": [OutputFormatter._json_node(child) for child in node.children],
        }

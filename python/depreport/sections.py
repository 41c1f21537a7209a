"""Structured report sections handed to output formatters."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .tree import FilteredNode


@dataclass
class Table:
    """
    A table of display strings.

    Attributes:
        header: Column labels
        rows: Body rows, one display string per column
        total_header: Header repeated above the totals row, first label replaced
        total_row: Aggregate row, if the table has one
        links: Optional link targets keyed by (row index, column index)
    """

    header: List[str]
    rows: List[List[str]] = field(default_factory=list)
    total_header: Optional[List[str]] = None
    total_row: Optional[List[str]] = None
    links: Dict[Tuple[int, int], str] = field(default_factory=dict)

    def add_row(self, cells: List[str], links: Optional[Dict[int, str]] = None) -> None:
        row_index = len(self.rows)
        self.rows.append(list(cells))
        for column, url in (links or {}).items():
            self.links[(row_index, column)] = url


@dataclass
class Section:
    """A titled report section with paragraphs, tables, an optional tree or license groups."""

    key: str
    title: str
    paragraphs: List[str] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)
    subsections: List['Section'] = field(default_factory=list)
    tree: Optional[FilteredNode] = None
    license_groups: Optional[Dict[str, List[str]]] = None

    def find(self, key: str) -> Optional['Section']:
        """Find this section or a nested subsection by key."""
        if self.key == key:
            return self
        for subsection in self.subsections:
            found = subsection.find(key)
            if found is not None:
                return found
        return None

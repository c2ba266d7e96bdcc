"""
Data models for the SQL dumper.
"""

from dataclasses import dataclass, field


@dataclass
class ColumnType:
    """Classification of a single column, used for escaping and selection."""
    is_numeric: bool
    is_blob: bool
    is_virtual: bool
    type: str
    type_sql: str


@dataclass
class SchemaObjects:
    """Names of every object to dump, in discovery order."""
    tables: list[str] = field(default_factory=list)
    views: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    procedures: list[str] = field(default_factory=list)
    functions: list[str] = field(default_factory=list)
    events: list[str] = field(default_factory=list)


@dataclass
class TableStats:
    """Statistics for a single table's row export."""
    name: str
    row_count: int = 0


@dataclass
class DumpStats:
    """Overall dump statistics."""
    tables: list[TableStats] = field(default_factory=list)
    views: int = 0
    triggers: int = 0
    routines: int = 0
    events: int = 0

    @property
    def total_rows(self) -> int:
        return sum(table.row_count for table in self.tables)

"""
Row export for a single table: escaping, INSERT batching and the
lock/transaction bracketing around each table's data.
"""

import logging
from contextlib import closing
from enum import Enum
from typing import Any, Callable, Optional, Union

from .adapters.base import TypeAdapter
from .column_types import get_column_names, get_column_stmt
from .compress import CompressNone
from .connection import DatabaseConnection
from .models import ColumnType, TableStats
from .settings import DumpSettings

TableRowHook = Callable[[str, dict[str, Any]], dict[str, Any]]
ColumnValueHook = Callable[[str, str, Any, dict[str, Any]], Any]

STATEMENT_END = ";\n"


def get_insert_verb(settings: DumpSettings) -> str:
    """Insert verb for every statement of a table."""
    if settings.is_enabled('replace'):
        return "REPLACE INTO"
    if settings.is_enabled('insert-ignore'):
        return "INSERT IGNORE INTO"
    return "INSERT INTO"


def escape(
    value: Any,
    column_type: ColumnType,
    settings: DumpSettings,
    connection: DatabaseConnection
) -> str:
    """
    Turn a column value into a literal for the dump.

    Blob columns selected with HEX() arrive as hex text and are written as
    0x literals. Numeric values pass through unquoted, everything else is
    quoted by the connection.
    """
    if value is None:
        return 'NULL'

    if settings.is_enabled('hex-blob') and column_type.is_blob:
        if column_type.type == 'bit' or value:
            if isinstance(value, (bytes, bytearray)):
                value = bytes(value).decode('ascii')
            return f"0x{value}"
        return "''"

    if column_type.is_numeric:
        if isinstance(value, bool):
            return '1' if value else '0'
        return str(value)

    return connection.quote(value)


class BatchState(Enum):
    """Where the batcher is within the current INSERT statement."""
    AWAITING_FIRST_ROW = "awaiting_first_row"
    ACCUMULATING = "accumulating"
    FLUSHED = "flushed"


class InsertBatcher:
    """Packs value tuples into INSERT statements bounded by net_buffer_length.

    With extended-insert every row after the first is appended to the open
    statement as ``,(...)``. A statement is terminated before it would grow
    past the budget, so only a single row that is larger than the budget on
    its own produces an oversized statement, and that one is flushed at once.
    Without extended-insert every row is its own statement.
    """

    def __init__(
        self,
        sink: CompressNone,
        table: str,
        settings: DumpSettings,
        column_names: Optional[list[str]] = None
    ):
        self.sink = sink
        self.table = table
        self.column_names = column_names or []
        self.extended_insert = settings.is_enabled('extended-insert')
        self.net_buffer_length = settings.get_net_buffer_length()
        self.verb = get_insert_verb(settings)
        self.state = BatchState.AWAITING_FIRST_ROW
        self.line_size = 0
        self.statements = 0

    def _statement_head(self) -> str:
        if self.column_names:
            return f"{self.verb} `{self.table}` ({', '.join(self.column_names)}) VALUES "
        return f"{self.verb} `{self.table}` VALUES "

    def _terminate(self) -> None:
        self.sink.write(STATEMENT_END)
        self.state = BatchState.FLUSHED
        self.line_size = 0

    def add(self, values: list[str]) -> None:
        """Write one row's escaped values."""
        tuple_text = f"({','.join(values)})"

        if self.state is BatchState.ACCUMULATING and self.extended_insert:
            chunk = f",{tuple_text}"
            projected = self.line_size + len(chunk.encode('utf-8')) + len(STATEMENT_END)
            if projected > self.net_buffer_length:
                self._terminate()

        if self.state is not BatchState.ACCUMULATING or not self.extended_insert:
            self.line_size += self.sink.write(self._statement_head() + tuple_text)
            self.state = BatchState.ACCUMULATING
            self.statements += 1
        else:
            self.line_size += self.sink.write(f",{tuple_text}")

        if self.line_size + len(STATEMENT_END) > self.net_buffer_length or not self.extended_insert:
            self._terminate()

    def finish(self) -> None:
        """Terminate the open statement, if any."""
        if self.state is BatchState.ACCUMULATING:
            self._terminate()


class TableDumper:
    """Streams the rows of one table into the sink."""

    def __init__(
        self,
        connection: DatabaseConnection,
        adapter: TypeAdapter,
        sink: CompressNone,
        settings: DumpSettings,
        transform_table_row: Optional[TableRowHook] = None,
        transform_column_value: Optional[ColumnValueHook] = None
    ):
        self.connection = connection
        self.adapter = adapter
        self.sink = sink
        self.settings = settings
        self.transform_table_row = transform_table_row
        self.transform_column_value = transform_column_value

    def build_select_query(
        self,
        table: str,
        column_stmt: list[str],
        where: Union[str, bool, None] = None,
        limit: Union[str, int, bool, None] = None
    ) -> str:
        """Build the SELECT used to read a table's rows."""
        query = f"SELECT {','.join(column_stmt)} FROM `{table}`"

        if where:
            query += f" WHERE {where}"

        if limit is not None and limit is not False:
            query += f" LIMIT {limit}"

        return query

    def prepare_column_values(
        self,
        table: str,
        row: dict[str, Any],
        column_types: dict[str, ColumnType]
    ) -> list[str]:
        """Apply the transform hooks and escape every value of a row."""
        if self.transform_table_row:
            row = self.transform_table_row(table, row)

        values = []
        for column, value in row.items():
            if self.transform_column_value:
                value = self.transform_column_value(table, column, value, row)
            values.append(escape(value, column_types[column], self.settings, self.connection))
        return values

    def dump_rows(
        self,
        table: str,
        column_types: dict[str, ColumnType],
        where: Union[str, bool, None] = None,
        limit: Union[str, int, bool, None] = None
    ) -> TableStats:
        """
        Dump a table's rows as INSERT statements.

        Transaction and lock statements are always released, even when
        reading or writing rows fails.

        Returns:
            TableStats with the number of rows dumped.
        """
        stats = TableStats(name=table)

        # column_stmt may switch complete-insert on, so it is built first
        column_stmt = get_column_stmt(column_types, self.settings)
        column_names = []
        if self.settings.is_enabled('complete-insert'):
            column_names = get_column_names(column_types, self.settings)

        query = self.build_select_query(table, column_stmt, where, limit)
        logging.debug(f"Dumping table '{table}' with query: {query[:200]}")

        try:
            self.prepare_list_values(table)
            batcher = InsertBatcher(self.sink, table, self.settings, column_names)
            with closing(self.connection.query(query)) as rows:
                for row in rows:
                    stats.row_count += 1
                    batcher.add(self.prepare_column_values(table, row, column_types))
            batcher.finish()
        finally:
            self.end_list_values(table, stats.row_count)

        return stats

    def prepare_list_values(self, table: str) -> None:
        """Write the data header and open transaction/lock brackets."""
        if not self.settings.skip_comments():
            self.sink.write(
                "--\n"
                f"-- Dumping data for table `{table}`\n"
                "--\n\n"
            )

        if self.settings.is_enabled('single-transaction'):
            self.connection.exec(self.adapter.setup_transaction())
            self.connection.exec(self.adapter.start_transaction())
        elif self.settings.is_enabled('lock-tables'):
            self.adapter.lock_table(table)

        if self.settings.is_enabled('add-locks'):
            self.sink.write(self.adapter.start_add_lock_table(table))

        if self.settings.is_enabled('disable-keys'):
            self.sink.write(self.adapter.start_add_disable_keys(table))

        # Disable autocommit for faster reload
        if self.settings.is_enabled('no-autocommit'):
            self.sink.write(self.adapter.start_disable_autocommit())

    def end_list_values(self, table: str, count: int = 0) -> None:
        """Close the brackets opened by prepare_list_values()."""
        try:
            if self.settings.is_enabled('no-autocommit'):
                self.sink.write(self.adapter.end_disable_autocommit())

            if self.settings.is_enabled('disable-keys'):
                self.sink.write(self.adapter.end_add_disable_keys(table))

            if self.settings.is_enabled('add-locks'):
                self.sink.write(self.adapter.end_add_lock_table(table))

            self.sink.write("\n")

            if not self.settings.skip_comments():
                self.sink.write(
                    f"-- Dumped table `{table}` with {count} row(s)\n"
                    "--\n\n"
                )
        finally:
            if self.settings.is_enabled('single-transaction'):
                self.connection.exec(self.adapter.commit_transaction())
            elif self.settings.is_enabled('lock-tables'):
                self.adapter.unlock_table(table)

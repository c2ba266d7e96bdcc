"""
Dump orchestration: sequences structure export, data export and the
header/footer of a single dump file.
"""

import logging
from email.utils import formatdate
from numbers import Number
from typing import Any, Callable, Optional, Union

from . import __version__
from . import adapters
from .adapters.base import TypeAdapter
from .column_types import get_table_column_types
from .compress import CompressManagerFactory, CompressNone
from .connection import DatabaseConnection
from .dsn import parse_dsn
from .exceptions import SchemaResolutionError
from .matcher import matches
from .models import ColumnType, DumpStats, SchemaObjects
from .schema import SchemaEnumerator
from .settings import DumpSettings
from .table_dumper import ColumnValueHook, TableDumper, TableRowHook

InfoHook = Callable[[str, dict[str, Any]], None]


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Number):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


class DatabaseDumper:
    """Dumps one database into a single output stream.

    Usage::

        dumper = DatabaseDumper('mysql:host=localhost;dbname=app', 'user', 'secret',
                                {'compress': 'gzip'})
        dumper.set_table_wheres({'logs': 'created_at > NOW() - INTERVAL 1 DAY'})
        dumper.start('app.sql.gz')
    """

    def __init__(
        self,
        dsn: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        settings: Optional[dict[str, Any]] = None,
        connection_options: Optional[dict[str, Any]] = None
    ):
        self.dsn = parse_dsn(dsn, adapters.registered_dialects())
        self.user = user
        self.password = password
        self.connection_options = connection_options or {}
        self.settings = DumpSettings(settings)

        self.connection: Optional[DatabaseConnection] = None
        self.adapter: Optional[TypeAdapter] = None
        self.sink: CompressNone = CompressManagerFactory.create(
            self.settings.get_compress_method(),
            self.settings.get_compress_level()
        )

        self.objects = SchemaObjects()
        self.table_column_types: dict[str, dict[str, ColumnType]] = {}
        self.stats = DumpStats()

        # Keyed on table name, e.g. 'users' => 'date_registered > NOW() - INTERVAL 6 MONTH'
        self.table_wheres: dict[str, str] = {}
        self.table_limits: dict[str, Any] = {}

        self.transform_table_row: Optional[TableRowHook] = None
        self.transform_column_value: Optional[ColumnValueHook] = None
        self.info_hook: Optional[InfoHook] = None

    @property
    def host(self) -> str:
        return self.dsn.host

    @property
    def db_name(self) -> str:
        return self.dsn.dbname

    def set_table_wheres(self, table_wheres: dict[str, str]) -> None:
        self.table_wheres = dict(table_wheres)

    def get_table_where(self, table: str) -> Union[str, bool]:
        """Table specific conditions override the default 'where'."""
        if self.table_wheres.get(table):
            return self.table_wheres[table]
        if self.settings.get('where'):
            return self.settings.get('where')
        return False

    def set_table_limits(self, table_limits: dict[str, Any]) -> None:
        """Keyed by table name, with a row count or an [offset, count] pair."""
        self.table_limits = dict(table_limits)

    def get_table_limit(self, table: str) -> Union[str, int, bool]:
        """
        Get the LIMIT for a table.

        Returns:
            The count, "offset,count" for a two element pair, or False when
            there is no limit or it is malformed.
        """
        if table not in self.table_limits:
            return False

        limit = self.table_limits[table]

        if isinstance(limit, (list, tuple)):
            if len(limit) != 2 or not all(_is_numeric(part) for part in limit):
                return False
            return f"{limit[0]},{limit[1]}"

        if not _is_numeric(limit):
            return False

        return limit

    def set_transform_table_row_hook(self, hook: TableRowHook) -> None:
        """Set a callable (table, row) -> row applied before escaping."""
        self.transform_table_row = hook

    def set_transform_column_value_hook(self, hook: ColumnValueHook) -> None:
        """Set a callable (table, column, value, row) -> value applied before escaping."""
        self.transform_column_value = hook

    def set_info_hook(self, hook: InfoHook) -> None:
        """Set a callable (kind, info) used to report dump progress."""
        self.info_hook = hook

    def add_type_adapter(self, dialect: str, adapter_class: type) -> None:
        adapters.register_adapter(dialect, adapter_class)

    def get_adapter(self, connection: DatabaseConnection) -> TypeAdapter:
        adapter_class = adapters.get_adapter_class(self.dsn.dialect)
        return adapter_class(connection, self.settings)

    def _connect(self) -> None:
        self.connection = DatabaseConnection.from_dsn(
            self.dsn,
            self.user,
            self.password,
            init_commands=self.settings.get_init_commands(),
            options=self.connection_options,
        )
        self.connection.connect()
        self.adapter = self.get_adapter(self.connection)

    def start(self, filename: Optional[str] = None) -> DumpStats:
        """
        Run the dump.

        Args:
            filename: File to write the dump to, stdout when empty.

        Returns:
            DumpStats for the run.
        """
        self._connect()
        try:
            self.sink.open(filename)
            try:
                self._dump()
            finally:
                self.sink.close()
        finally:
            self.connection.disconnect()

        logging.info(
            f"Dump of '{self.db_name}' complete: {len(self.stats.tables)} table(s), "
            f"{self.stats.total_rows} row(s)"
        )
        return self.stats

    def _dump(self) -> None:
        if not self.settings.skip_comments():
            self.sink.write(self.get_dump_file_header())

        # Store server settings and use saner defaults to dump
        self.sink.write(self.adapter.backup_parameters())

        if self.settings.is_enabled('databases'):
            self.sink.write(self.adapter.get_database_header(self.db_name))
            if self.settings.is_enabled('add-drop-database'):
                self.sink.write(self.adapter.drop_database(self.db_name))

        self.objects = SchemaEnumerator(
            self.connection, self.adapter, self.settings, self.db_name
        ).enumerate()

        if self.settings.is_enabled('databases'):
            self.sink.write(self.adapter.create_database(self.db_name))

        missing = self.settings.get_included_tables()
        if missing:
            raise SchemaResolutionError(missing)

        self.export_tables()
        self.export_views()
        self.export_triggers()
        self.export_functions()
        self.export_procedures()
        self.export_events()

        self.sink.write(self.adapter.restore_parameters())

        if not self.settings.skip_comments():
            self.sink.write(self.get_dump_file_footer())

    def get_dump_file_header(self) -> str:
        header = (
            f"-- sqldump {__version__}\n"
            "--\n"
            f"-- Host: {self.host}\tDatabase: {self.db_name}\n"
            "-- ------------------------------------------------------\n"
        )

        version = self.adapter.get_version()
        if version:
            header += f"-- Server version \t{version}\n"

        if not self.settings.skip_dump_date():
            header += f"-- Date: {formatdate(localtime=True)}\n\n"

        return header

    def get_dump_file_footer(self) -> str:
        footer = "-- Dump completed"
        if not self.settings.skip_dump_date():
            footer += f" on: {formatdate(localtime=True)}"
        return footer + "\n"

    def _is_excluded(self, name: str) -> bool:
        return matches(name, self.settings.get_excluded_tables())

    def _skips_data(self, table: str) -> bool:
        if self.settings.is_no_data_for_all():
            return True
        return matches(table, self.settings.get_no_data())

    def export_tables(self) -> None:
        table_dumper = TableDumper(
            self.connection,
            self.adapter,
            self.sink,
            self.settings,
            transform_table_row=self.transform_table_row,
            transform_column_value=self.transform_column_value,
        )

        for table in self.objects.tables:
            if self._is_excluded(table):
                logging.debug(f"Table '{table}' excluded")
                continue

            self.get_table_structure(table)

            if self._skips_data(table):
                logging.info(f"  {table}: structure only")
            else:
                table_stats = table_dumper.dump_rows(
                    table,
                    self.table_column_types[table],
                    where=self.get_table_where(table),
                    limit=self.get_table_limit(table),
                )
                self.stats.tables.append(table_stats)
                logging.info(f"  {table}: {table_stats.row_count} rows")

                if self.info_hook:
                    self.info_hook('table', {'name': table, 'row_count': table_stats.row_count})

            self.table_column_types.pop(table, None)

    def get_table_structure(self, table: str) -> None:
        """Write the table definition and cache its column types."""
        if not self.settings.is_enabled('no-create-info'):
            if not self.settings.skip_comments():
                self.sink.write(
                    "--\n"
                    f"-- Table structure for table `{table}`\n"
                    "--\n\n"
                )

            rows = self.connection.fetch_all(self.adapter.show_create_table(table))
            if rows:
                if self.settings.is_enabled('add-drop-table'):
                    self.sink.write(self.adapter.drop_table(table))
                self.sink.write(self.adapter.create_table(rows[0]))

        self.table_column_types[table] = get_table_column_types(
            self.connection, self.adapter, self.settings, table
        )

    def export_views(self) -> None:
        if self.settings.is_enabled('no-create-info'):
            return

        views = [view for view in self.objects.views if not self._is_excluded(view)]

        # Stand-in tables first, so views and triggers referring to
        # other views can be created in any order
        for view in views:
            self.table_column_types[view] = get_table_column_types(
                self.connection, self.adapter, self.settings, view
            )
            self.get_view_structure_table(view)
            self.table_column_types.pop(view, None)

        for view in views:
            self.get_view_structure_view(view)

        self.stats.views = len(views)

    def get_view_structure_table(self, view: str) -> None:
        if not self.settings.skip_comments():
            self.sink.write(
                "--\n"
                f"-- Stand-In structure for view `{view}`\n"
                "--\n\n"
            )

        if self.connection.fetch_all(self.adapter.show_create_view(view)):
            if self.settings.is_enabled('add-drop-table'):
                self.sink.write(self.adapter.drop_view(view))
            self.sink.write(self.create_stand_in_table(view))

    def create_stand_in_table(self, view: str) -> str:
        """CREATE TABLE standing in for a view, with the view's column types."""
        columns = [
            f"`{name}` {column_type.type_sql}"
            for name, column_type in self.table_column_types[view].items()
        ]
        body = "\n,".join(columns)
        return f"CREATE TABLE IF NOT EXISTS `{view}` (\n{body}\n);\n"

    def get_view_structure_view(self, view: str) -> None:
        if not self.settings.skip_comments():
            self.sink.write(
                "--\n"
                f"-- View structure for view `{view}`\n"
                "--\n\n"
            )

        rows = self.connection.fetch_all(self.adapter.show_create_view(view))
        if rows:
            # The stand-in table has to go before the view can be created
            self.sink.write(self.adapter.drop_view(view))
            self.sink.write(self.adapter.create_view(rows[0]))

    def export_triggers(self) -> None:
        for trigger in self.objects.triggers:
            rows = self.connection.fetch_all(self.adapter.show_create_trigger(trigger))
            if rows:
                if self.settings.is_enabled('add-drop-trigger'):
                    self.sink.write(self.adapter.drop_trigger(trigger))
                self.sink.write(self.adapter.create_trigger(rows[0]))
        self.stats.triggers = len(self.objects.triggers)

    def _routines_comment(self, kind: str) -> None:
        if not self.settings.skip_comments():
            self.sink.write(
                "--\n"
                f"-- Dumping {kind} for database '{self.db_name}'\n"
                "--\n\n"
            )

    def export_functions(self) -> None:
        for function in self.objects.functions:
            self._routines_comment('routines')
            rows = self.connection.fetch_all(self.adapter.show_create_function(function))
            if rows:
                self.sink.write(self.adapter.create_function(rows[0]))
        self.stats.routines += len(self.objects.functions)

    def export_procedures(self) -> None:
        for procedure in self.objects.procedures:
            self._routines_comment('routines')
            rows = self.connection.fetch_all(self.adapter.show_create_procedure(procedure))
            if rows:
                self.sink.write(self.adapter.create_procedure(rows[0]))
        self.stats.routines += len(self.objects.procedures)

    def export_events(self) -> None:
        for event in self.objects.events:
            self._routines_comment('events')
            rows = self.connection.fetch_all(self.adapter.show_create_event(event))
            if rows:
                self.sink.write(self.adapter.create_event(rows[0]))
        self.stats.events = len(self.objects.events)

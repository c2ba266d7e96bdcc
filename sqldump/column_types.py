"""
Column classification and column selection SQL.
"""

import logging

from .adapters.base import TypeAdapter
from .connection import DatabaseConnection
from .models import ColumnType
from .settings import DumpSettings
from .utils import as_text


def get_table_column_types(
    connection: DatabaseConnection,
    adapter: TypeAdapter,
    settings: DumpSettings,
    table: str
) -> dict[str, ColumnType]:
    """
    Classify every column of a table or view.

    A virtual (generated) column switches complete-insert on for the rest of
    the run, since its value cannot be inserted.

    Returns:
        Mapping of column name to ColumnType, in column order.
    """
    column_types: dict[str, ColumnType] = {}

    for column in connection.fetch_all(adapter.show_columns(table)):
        parsed = adapter.parse_column_type(column)
        column_type = ColumnType(
            is_numeric=parsed['is_numeric'],
            is_blob=parsed['is_blob'],
            is_virtual=parsed['is_virtual'],
            type=parsed['type'],
            type_sql=as_text(column['Type']),
        )
        column_types[as_text(column['Field'])] = column_type

        if column_type.is_virtual and not settings.is_enabled('complete-insert'):
            logging.debug(f"Virtual column '{column['Field']}' in '{table}', enabling complete-insert")
            settings.set_complete_insert()

    return column_types


def get_column_stmt(column_types: dict[str, ColumnType], settings: DumpSettings) -> list[str]:
    """Build the column list used to select a table's rows."""
    hex_blob = settings.is_enabled('hex-blob')
    columns = []

    for name, column_type in column_types.items():
        if column_type.type == 'bit' and hex_blob:
            columns.append(f"LPAD(HEX(`{name}`),2,'0') AS `{name}`")
        elif column_type.is_blob and hex_blob:
            columns.append(f"HEX(`{name}`) AS `{name}`")
        elif column_type.is_virtual:
            settings.set_complete_insert()
        else:
            columns.append(f"`{name}`")

    return columns


def get_column_names(column_types: dict[str, ColumnType], settings: DumpSettings) -> list[str]:
    """Build the quoted column list used by complete inserts."""
    columns = []

    for name, column_type in column_types.items():
        if column_type.is_virtual:
            settings.set_complete_insert()
        else:
            columns.append(f"`{name}`")

    return columns

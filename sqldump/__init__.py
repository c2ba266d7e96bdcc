"""
SQL Dumper
==========
Logical database dumps written as replayable SQL, with support for:
- Table/view include and exclude lists, with /regex/ patterns
- Per-table WHERE clauses and row limits
- Structure-only tables (no-data)
- Views, triggers, stored routines and events
- Row and column transform hooks
- Compression support (gzip, bzip2, zstandard, lz4)
- Pluggable dialect adapters
"""

__version__ = "1.0.0"

from .adapters import TypeAdapter, TypeAdapterMysql, register_adapter
from .compress import CompressManagerFactory
from .config import ConfigLoader
from .connection import DatabaseConnection
from .database_dumper import DatabaseDumper
from .dsn import Dsn, parse_dsn
from .exceptions import (
    AdapterCapabilityError,
    ConfigError,
    ConfigurationError,
    ConnectionStringError,
    DatabaseConnectionError,
    DumpError,
    QueryError,
    SchemaResolutionError,
)
from .main import main
from .models import ColumnType, DumpStats, SchemaObjects, TableStats
from .settings import DumpSettings
from .table_dumper import TableDumper
from .utils import format_settings_display, print_dry_run_info, setup_logging

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "ConfigLoader",
    "DatabaseConnection",
    "DatabaseDumper",
    "DumpSettings",
    "TableDumper",
    "CompressManagerFactory",
    # Adapters
    "TypeAdapter",
    "TypeAdapterMysql",
    "register_adapter",
    # DSN
    "Dsn",
    "parse_dsn",
    # Models
    "ColumnType",
    "DumpStats",
    "SchemaObjects",
    "TableStats",
    # Errors
    "AdapterCapabilityError",
    "ConfigError",
    "ConfigurationError",
    "ConnectionStringError",
    "DatabaseConnectionError",
    "DumpError",
    "SchemaResolutionError",
    "QueryError",
    # Utilities
    "format_settings_display",
    "print_dry_run_info",
    "setup_logging",
]

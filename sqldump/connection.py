"""
Database connection management for the SQL dumper.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterator, Optional

import mysql.connector
from mysql.connector import Error as MySQLError

from .dsn import Dsn
from .exceptions import DatabaseConnectionError, QueryError


class DatabaseConnection:
    """Manages a MySQL connection with context manager support.

    This is the data source the dumper reads from: schema queries are fetched
    whole, row data is streamed from an unbuffered cursor.
    """

    DEFAULT_PORT = 3306
    DEFAULT_CHARSET = 'utf8mb4'

    # Characters escaped inside quoted string literals
    ESCAPE_MAP = {
        '\\': '\\\\',
        '\0': '\\0',
        '\n': '\\n',
        '\r': '\\r',
        "'": "\\'",
        '"': '\\"',
        '\x1a': '\\Z',
    }

    def __init__(
        self,
        host: str,
        port: Optional[int],
        user: Optional[str],
        password: Optional[str],
        database: Optional[str] = None,
        unix_socket: Optional[str] = None,
        init_commands: Optional[list[str]] = None,
        options: Optional[dict[str, Any]] = None
    ):
        self.host = host
        self.port = port or self.DEFAULT_PORT
        self.user = user
        self.password = password
        self.database = database
        self.unix_socket = unix_socket
        self.init_commands = init_commands or []
        self.options = options or {}
        self.connection = None

        self._escape_table = str.maketrans(self.ESCAPE_MAP)
        self._type_formatters: dict[type, callable] = {
            bool: lambda v: '1' if v else '0',
            int: str,
            float: repr,
            Decimal: str,
            bytes: lambda v: f"X'{v.hex()}'",
            bytearray: lambda v: f"X'{bytes(v).hex()}'",
            datetime: lambda v: f"'{v.isoformat(sep=' ')}'",
            date: lambda v: f"'{v.isoformat()}'",
            time: lambda v: f"'{v.isoformat()}'",
            timedelta: self._format_timedelta,
        }

    @classmethod
    def from_dsn(
        cls,
        dsn: Dsn,
        user: Optional[str],
        password: Optional[str],
        init_commands: Optional[list[str]] = None,
        options: Optional[dict[str, Any]] = None
    ) -> "DatabaseConnection":
        """Build a connection from a parsed DSN."""
        return cls(
            host=dsn.host,
            port=dsn.port,
            user=user,
            password=password,
            database=dsn.dbname,
            unix_socket=dsn.unix_socket,
            init_commands=init_commands,
            options=options,
        )

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection and run session init commands."""
        params = {
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'charset': self.DEFAULT_CHARSET,
            'use_unicode': True,
            'consume_results': True,
        }
        if self.unix_socket:
            params['unix_socket'] = self.unix_socket
        else:
            params['host'] = self.host
            params['port'] = self.port
        params.update(self.options)

        try:
            self.connection = mysql.connector.connect(**params)
        except MySQLError as e:
            logging.error(f"Failed to connect to database: {e}")
            raise DatabaseConnectionError(self.host, str(e)) from e

        logging.info(f"Connected to {self.host}:{self.port}/{self.database or 'N/A'}")

        for command in self.init_commands:
            self.exec(command)

    def disconnect(self) -> None:
        """Close database connection."""
        if self.connection and self.connection.is_connected():
            self.connection.close()
            logging.debug("Database connection closed")

    def fetch_all(self, query: str) -> list[dict[str, Any]]:
        """Execute a query and return every row as a column-keyed dict."""
        try:
            cursor = self.connection.cursor(dictionary=True, buffered=True)
            try:
                cursor.execute(query)
                return cursor.fetchall()
            finally:
                cursor.close()
        except MySQLError as e:
            raise self._query_error(query, e) from e

    def query(self, query: str) -> Iterator[dict[str, Any]]:
        """Execute a query and stream rows from an unbuffered cursor.

        Rows are dicts keyed by column name in select order. The cursor is
        closed once the iterator is exhausted or discarded.
        """
        try:
            cursor = self.connection.cursor(dictionary=True, buffered=False)
            try:
                cursor.execute(query)
                for row in cursor:
                    yield row
            finally:
                cursor.close()
        except MySQLError as e:
            raise self._query_error(query, e) from e

    def exec(self, statement: str) -> None:
        """Execute a statement that returns no result set."""
        try:
            cursor = self.connection.cursor()
            try:
                cursor.execute(statement)
            finally:
                cursor.close()
        except MySQLError as e:
            raise self._query_error(statement, e) from e

    @staticmethod
    def _query_error(statement: str, error: MySQLError) -> QueryError:
        logging.error(f"Query failed: {error}")
        return QueryError(statement, str(error))

    def get_server_version(self) -> str:
        """Get the server version string."""
        return self.connection.get_server_info() or ''

    def quote(self, value: Any) -> str:
        """Quote a value as an SQL literal.

        Uses type-based dispatch for driver types, everything else is
        rendered as an escaped string literal.
        """
        if value is None:
            return 'NULL'

        formatter = self._type_formatters.get(type(value))
        if formatter:
            return formatter(value)

        return f"'{str(value).translate(self._escape_table)}'"

    @staticmethod
    def _format_timedelta(value: timedelta) -> str:
        # TIME columns come back as timedelta
        seconds = int(value.total_seconds())
        sign = '-' if seconds < 0 else ''
        hours, remainder = divmod(abs(seconds), 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"'{sign}{hours:02d}:{minutes:02d}:{seconds:02d}'"

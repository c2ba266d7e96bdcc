"""
DSN parsing for the SQL dumper.

Several examples of a DSN string:
    mysql:host=localhost;dbname=testdb
    mysql:host=localhost;port=3307;dbname=testdb
    mysql:unix_socket=/tmp/mysql.sock;dbname=testdb
"""

from dataclasses import dataclass, field
from typing import Optional

from .exceptions import (
    ConnectionStringError,
    EmptyDsnError,
    MissingDatabaseNameError,
    MissingDialectError,
    MissingHostError,
    UnknownDialectError,
)


@dataclass
class Dsn:
    """Parsed connection string."""
    dsn: str
    dialect: str
    host: str
    dbname: str
    port: Optional[int] = None
    unix_socket: Optional[str] = None
    params: dict[str, str] = field(default_factory=dict)


def parse_dsn(dsn: str, known_dialects: Optional[set[str]] = None) -> Dsn:
    """
    Parse a DSN string.

    Args:
        dsn: Connection string of the form ``dialect:key=value;key=value``.
        known_dialects: Dialects with a registered adapter. When given, an
            unknown dialect fails before any connection attempt.

    Returns:
        Dsn with host (or unix socket path) and database name resolved.
    """
    # A colon at position zero reports the same error as an empty string.
    pos = dsn.find(':') if dsn else -1
    if pos <= 0:
        raise EmptyDsnError("Empty DSN string")

    dialect = dsn[:pos].strip().lower()
    if not dialect:
        raise MissingDialectError("Missing database type from DSN string")

    if known_dialects is not None and dialect not in known_dialects:
        raise UnknownDialectError(f"There is no adapter for type '{dialect}'")

    params: dict[str, str] = {}
    for pair in dsn[pos + 1:].split(';'):
        if not pair.strip():
            continue
        key, _, value = pair.partition('=')
        params[key.strip().lower()] = value.strip()

    host = params.get('host')
    unix_socket = params.get('unix_socket')
    if not host and not unix_socket:
        raise MissingHostError("Missing host from DSN string")

    dbname = params.get('dbname')
    if not dbname:
        raise MissingDatabaseNameError("Missing database name from DSN string")

    port = params.get('port')
    if port and not port.isdigit():
        raise ConnectionStringError(f"Invalid port '{port}' in DSN string")

    return Dsn(
        dsn=dsn,
        dialect=dialect,
        host=host or unix_socket,
        dbname=dbname,
        port=int(port) if port else None,
        unix_socket=unix_socket or None,
        params=params,
    )

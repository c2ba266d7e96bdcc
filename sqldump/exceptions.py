"""
Exceptions raised by the SQL dumper.

Every error is fatal for the run that raised it: nothing is retried and a
partially written dump must be treated as invalid.
"""


class DumpError(Exception):
    """Base class for all dumper errors."""


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationError(DumpError):
    """Invalid or conflicting dump settings."""


ConfigError = ConfigurationError


# =============================================================================
# CONNECTION STRING
# =============================================================================

class ConnectionStringError(DumpError):
    """Malformed DSN, raised before any I/O happens."""


class EmptyDsnError(ConnectionStringError):
    """DSN is empty or has no dialect separator."""


class MissingDialectError(ConnectionStringError):
    """DSN has no dialect segment."""


class MissingHostError(ConnectionStringError):
    """DSN has neither host nor unix_socket."""


class MissingDatabaseNameError(ConnectionStringError):
    """DSN has no dbname."""


# =============================================================================
# ADAPTERS
# =============================================================================

class AdapterCapabilityError(DumpError):
    """Unsupported dialect or an adapter class not implementing the contract."""


class UnknownDialectError(ConnectionStringError, AdapterCapabilityError):
    """DSN names a dialect that has no registered adapter."""


# =============================================================================
# RUNTIME
# =============================================================================

class DatabaseConnectionError(DumpError):
    """Database unreachable or authentication failed."""

    def __init__(self, host: str, message: str):
        self.host = host
        super().__init__(f"Connection to {host} failed with message: {message}")


class SchemaResolutionError(DumpError):
    """Requested tables or views were not found in the database."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Table '{','.join(self.missing)}' not found in database")


class QueryError(DumpError):
    """A statement failed on the server in the middle of a run."""

    def __init__(self, statement: str, message: str):
        self.statement = statement
        super().__init__(f"Query '{statement[:200]}' failed with message: {message}")

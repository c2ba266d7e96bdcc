"""
Adapter contract: every piece of dialect-specific SQL the dumper emits or
executes comes from a TypeAdapter.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..connection import DatabaseConnection
from ..settings import DumpSettings


class TypeAdapter(ABC):
    """Dialect-specific SQL builder.

    Statement builders return SQL text; show_* / list_* builders return
    queries the dumper runs against the connection, create_* builders turn
    the resulting row into dump text. lock_table() and unlock_table() act on
    the connection directly.
    """

    def __init__(self, connection: DatabaseConnection, settings: DumpSettings):
        self.connection = connection
        self.settings = settings

    # Listing

    @abstractmethod
    def show_tables(self, database_name: str) -> str: ...

    @abstractmethod
    def show_views(self, database_name: str) -> str: ...

    @abstractmethod
    def show_triggers(self, database_name: str) -> str: ...

    @abstractmethod
    def show_procedures(self, database_name: str) -> str: ...

    @abstractmethod
    def show_functions(self, database_name: str) -> str: ...

    @abstractmethod
    def show_events(self, database_name: str) -> str: ...

    @abstractmethod
    def show_columns(self, table_name: str) -> str: ...

    # Object definitions

    @abstractmethod
    def show_create_table(self, table_name: str) -> str: ...

    @abstractmethod
    def create_table(self, row: dict[str, Any]) -> str: ...

    @abstractmethod
    def drop_table(self, table_name: str) -> str: ...

    @abstractmethod
    def show_create_view(self, view_name: str) -> str: ...

    @abstractmethod
    def create_view(self, row: dict[str, Any]) -> str: ...

    @abstractmethod
    def drop_view(self, view_name: str) -> str: ...

    @abstractmethod
    def show_create_trigger(self, trigger_name: str) -> str: ...

    @abstractmethod
    def create_trigger(self, row: dict[str, Any]) -> str: ...

    @abstractmethod
    def drop_trigger(self, trigger_name: str) -> str: ...

    @abstractmethod
    def show_create_procedure(self, procedure_name: str) -> str: ...

    @abstractmethod
    def create_procedure(self, row: dict[str, Any]) -> str: ...

    @abstractmethod
    def show_create_function(self, function_name: str) -> str: ...

    @abstractmethod
    def create_function(self, row: dict[str, Any]) -> str: ...

    @abstractmethod
    def show_create_event(self, event_name: str) -> str: ...

    @abstractmethod
    def create_event(self, row: dict[str, Any]) -> str: ...

    # Database

    @abstractmethod
    def get_database_header(self, database_name: str) -> str: ...

    @abstractmethod
    def create_database(self, database_name: str) -> str: ...

    @abstractmethod
    def drop_database(self, database_name: str) -> str: ...

    @abstractmethod
    def backup_parameters(self) -> str: ...

    @abstractmethod
    def restore_parameters(self) -> str: ...

    # Transactions and locks

    @abstractmethod
    def setup_transaction(self) -> str: ...

    @abstractmethod
    def start_transaction(self) -> str: ...

    @abstractmethod
    def commit_transaction(self) -> str: ...

    @abstractmethod
    def lock_table(self, table_name: str) -> None: ...

    @abstractmethod
    def unlock_table(self, table_name: str) -> None: ...

    @abstractmethod
    def start_add_lock_table(self, table_name: str) -> str: ...

    @abstractmethod
    def end_add_lock_table(self, table_name: str) -> str: ...

    @abstractmethod
    def start_add_disable_keys(self, table_name: str) -> str: ...

    @abstractmethod
    def end_add_disable_keys(self, table_name: str) -> str: ...

    @abstractmethod
    def start_disable_autocommit(self) -> str: ...

    @abstractmethod
    def end_disable_autocommit(self) -> str: ...

    # Metadata

    @abstractmethod
    def parse_column_type(self, column: dict[str, Any]) -> dict[str, Any]:
        """Classify a show_columns() row.

        Returns a dict with 'type', 'is_numeric', 'is_blob' and 'is_virtual'.
        """

    @abstractmethod
    def get_version(self) -> str: ...

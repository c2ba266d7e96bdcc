"""
Discovery of the schema objects to dump.
"""

import logging
from typing import Any

from .adapters.base import TypeAdapter
from .connection import DatabaseConnection
from .models import SchemaObjects
from .settings import DumpSettings


def _first_value(row: dict[str, Any]) -> str:
    return next(iter(row.values()))


class SchemaEnumerator:
    """Lists tables, views, triggers, routines and events of a database."""

    def __init__(
        self,
        connection: DatabaseConnection,
        adapter: TypeAdapter,
        settings: DumpSettings,
        database: str
    ):
        self.connection = connection
        self.adapter = adapter
        self.settings = settings
        self.database = database

    def enumerate(self) -> SchemaObjects:
        """
        Read every object name in discovery order.

        Include-tables entries matched neither as a table nor as a view are
        written back to the settings, so the caller can report them.
        """
        objects = SchemaObjects()

        objects.tables, unmatched_tables = self._filter_included(
            self.adapter.show_tables(self.database),
            self.settings.get_included_tables()
        )
        objects.views, _ = self._filter_included(
            self.adapter.show_views(self.database),
            self.settings.get_included_views()
        )
        self.settings.set_included_tables(
            [name for name in unmatched_tables if name not in objects.views]
        )

        if not self.settings.skip_triggers():
            objects.triggers = self._list(self.adapter.show_triggers(self.database), 'Trigger')

        if self.settings.is_enabled('routines'):
            objects.procedures = self._list(self.adapter.show_procedures(self.database), 'procedure_name')
            objects.functions = self._list(self.adapter.show_functions(self.database), 'function_name')

        if self.settings.is_enabled('events'):
            objects.events = self._list(self.adapter.show_events(self.database), 'event_name')

        logging.info(
            f"Found {len(objects.tables)} table(s), {len(objects.views)} view(s), "
            f"{len(objects.triggers)} trigger(s), {len(objects.procedures)} procedure(s), "
            f"{len(objects.functions)} function(s), {len(objects.events)} event(s) in '{self.database}'"
        )
        return objects

    def _filter_included(self, query: str, included: list[str]) -> tuple[list[str], list[str]]:
        """
        Keep only included names when an include list is set.

        Returns:
            The kept names and the include-list entries left unmatched.
        """
        remaining = list(included)
        names = []

        for row in self.connection.fetch_all(query):
            name = _first_value(row)
            if not included:
                names.append(name)
            elif name in remaining:
                names.append(name)
                remaining.remove(name)

        return names, remaining

    def _list(self, query: str, column: str) -> list[str]:
        return [row[column] for row in self.connection.fetch_all(query)]

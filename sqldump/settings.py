"""
Dump settings: the validated option bag shared by every dump component.
"""

from typing import Any, Optional

from . import options
from .exceptions import ConfigurationError


class DumpSettings:
    """Validated dump options with typed accessors.

    Settings are read-only after construction except for
    set_included_tables() and set_complete_insert(). The latter is flipped on
    by column classification as soon as any table has a virtual column, so
    every following INSERT names its columns too.
    """

    def __init__(self, raw_options: Optional[dict[str, Any]] = None):
        raw_options = dict(raw_options or {})

        if raw_options.get("replace") and raw_options.get("insert-ignore"):
            raise ConfigurationError("Cannot use both replace and insert-ignore options simultaneously")

        unknown = [key for key in raw_options if key not in options.OPTIONS]
        if unknown:
            raise ConfigurationError(f"Unexpected value in dump settings: ({', '.join(unknown)})")

        for key in options.LIST_OPTIONS:
            if key in raw_options and not isinstance(raw_options[key], list):
                raise ConfigurationError("Include-tables and exclude-tables should be arrays")

        options.validate_all(raw_options)
        options.warn_deprecated(raw_options)

        self._settings = options.get_defaults()
        self._settings.update(raw_options)

        if isinstance(self._settings["compress"], str):
            self._settings["compress"] = self._settings["compress"].lower()

        # include-views defaults to include-tables when not set
        if self._settings.get("include-views") is None:
            self._settings["include-views"] = list(self._settings["include-tables"])

    def get(self, key: str) -> Any:
        """Get the resolved value of an option."""
        return self._settings.get(key)

    def is_enabled(self, key: str) -> bool:
        """Check the boolean truthiness of an option."""
        return bool(self._settings.get(key))

    def get_compress_method(self) -> str:
        return self._settings["compress"]

    def get_compress_level(self) -> int:
        return self._settings["compress-level"]

    def get_default_character_set(self) -> str:
        return self._settings["default-character-set"]

    def get_included_tables(self) -> list[str]:
        return self._settings["include-tables"]

    def set_included_tables(self, tables: list[str]) -> None:
        self._settings["include-tables"] = list(tables)

    def get_excluded_tables(self) -> list[str]:
        return self._settings["exclude-tables"]

    def get_included_views(self) -> list[str]:
        return self._settings["include-views"]

    def get_no_data(self) -> list[str]:
        """Get the no-data name/pattern list. A blanket boolean yields []."""
        no_data = self._settings["no-data"]
        return no_data if isinstance(no_data, list) else []

    def is_no_data_for_all(self) -> bool:
        """Check whether no-data was set as a blanket boolean."""
        return self._settings["no-data"] is True

    def get_net_buffer_length(self) -> int:
        return self._settings["net_buffer_length"]

    def set_complete_insert(self, enabled: bool = True) -> None:
        self._settings["complete-insert"] = enabled

    def skip_comments(self) -> bool:
        return self.is_enabled("skip-comments")

    def skip_definer(self) -> bool:
        return self.is_enabled("skip-definer")

    def skip_dump_date(self) -> bool:
        return self.is_enabled("skip-dump-date")

    def skip_triggers(self) -> bool:
        return self.is_enabled("skip-triggers")

    def skip_tz_utc(self) -> bool:
        return self.is_enabled("skip-tz-utc")

    def get_init_commands(self) -> list[str]:
        """Session setup statements run right after connecting."""
        commands = [f"SET NAMES {self.get_default_character_set()}"]
        if not self.skip_tz_utc():
            commands.append("SET TIME_ZONE='+00:00'")
        return commands

    def as_dict(self) -> dict[str, Any]:
        """Copy of every resolved option."""
        return dict(self._settings)

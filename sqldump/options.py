"""
Registry of recognized dump options.

Each option carries its default value, an optional validator and optional
deprecation info. The registry is built once at import time and consulted by
DumpSettings when it is constructed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .exceptions import ConfigurationError

COMPRESS_NONE = "none"
COMPRESS_GZIP = "gzip"
COMPRESS_BZIP2 = "bzip2"
COMPRESS_ZSTANDARD = "zstandard"
COMPRESS_LZ4 = "lz4"

COMPRESS_METHODS = (
    COMPRESS_NONE,
    COMPRESS_GZIP,
    COMPRESS_BZIP2,
    COMPRESS_ZSTANDARD,
    COMPRESS_LZ4,
)

CHARACTER_SETS = ("utf8", "utf8mb4")

MIN_NET_BUFFER_LENGTH = 1024

# Options whose value must be a list of table/view names
LIST_OPTIONS = ("include-tables", "exclude-tables", "include-views")


@dataclass(frozen=True)
class Deprecation:
    """Deprecation notice attached to an option."""
    reason: str
    alternative: str
    since: str


@dataclass(frozen=True)
class ConfigOption:
    """Metadata describing a single option."""
    default: Any
    validator: Optional[Callable[[Any], None]] = None
    deprecation: Optional[Deprecation] = None


def _compress_method(value: Any) -> None:
    if not isinstance(value, str) or value.lower() not in COMPRESS_METHODS:
        raise ConfigurationError(
            f"Invalid value for 'compress': {value!r}. Must be a valid compression method "
            f"({', '.join(COMPRESS_METHODS)})"
        )


def _compress_level(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 9:
        raise ConfigurationError(
            f"Invalid value for 'compress-level': {value!r}. Compression level must be between 0 and 9"
        )


def _character_set(value: Any) -> None:
    if value not in CHARACTER_SETS:
        raise ConfigurationError(
            f"Invalid value for 'default-character-set': {value!r}. Must be utf8 or utf8mb4"
        )


def _net_buffer_length(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < MIN_NET_BUFFER_LENGTH:
        raise ConfigurationError(
            f"Invalid value for 'net_buffer_length': {value!r}. "
            f"Net buffer length must be at least {MIN_NET_BUFFER_LENGTH}"
        )


def _name_list(value: Any) -> None:
    if not isinstance(value, list):
        raise ConfigurationError("Include-tables and exclude-tables should be arrays")


def _no_data(value: Any) -> None:
    if not isinstance(value, (bool, list)):
        raise ConfigurationError("No-data should be a boolean or an array of table names")


OPTIONS: dict[str, ConfigOption] = {
    "include-tables": ConfigOption([], _name_list),
    "exclude-tables": ConfigOption([], _name_list),
    "include-views": ConfigOption(None),
    "no-data": ConfigOption([], _no_data),
    "compress": ConfigOption(COMPRESS_NONE, _compress_method),
    "compress-level": ConfigOption(0, _compress_level),
    "default-character-set": ConfigOption("utf8", _character_set),
    "net_buffer_length": ConfigOption(1000000, _net_buffer_length),
    "where": ConfigOption(""),
    "add-drop-database": ConfigOption(False),
    "add-drop-table": ConfigOption(False),
    "add-drop-trigger": ConfigOption(True),
    "add-locks": ConfigOption(True),
    "complete-insert": ConfigOption(False),
    "databases": ConfigOption(False),
    "disable-keys": ConfigOption(True),
    "events": ConfigOption(False),
    "extended-insert": ConfigOption(True),
    "hex-blob": ConfigOption(True),
    "if-not-exists": ConfigOption(False),
    "insert-ignore": ConfigOption(False),
    "lock-tables": ConfigOption(True),
    "no-autocommit": ConfigOption(True),
    "no-create-info": ConfigOption(False),
    "replace": ConfigOption(False),
    "reset-auto-increment": ConfigOption(False),
    "routines": ConfigOption(False),
    "single-transaction": ConfigOption(True),
    "skip-comments": ConfigOption(False),
    "skip-definer": ConfigOption(False),
    "skip-dump-date": ConfigOption(False),
    "skip-triggers": ConfigOption(False),
    "skip-tz-utc": ConfigOption(False),
    "disable-foreign-keys-check": ConfigOption(
        True,
        deprecation=Deprecation(
            reason="This option is deprecated, foreign key checks are always disabled in the dump preamble",
            alternative="Use init_commands on the connection to change session variables",
            since="2.0",
        ),
    ),
}


def get_defaults() -> dict[str, Any]:
    """Get default values for every recognized option."""
    defaults = {}
    for key, option in OPTIONS.items():
        default = option.default
        defaults[key] = list(default) if isinstance(default, list) else default
    return defaults


def validate(key: str, value: Any) -> None:
    """Validate a single option value.

    Unknown options are skipped so custom extensions can pass through.
    """
    option = OPTIONS.get(key)
    if option is None or option.validator is None:
        return
    option.validator(value)


def validate_all(settings: dict[str, Any]) -> None:
    """Validate every option in a settings mapping."""
    for key, value in settings.items():
        validate(key, value)


def check_deprecated(key: str) -> Optional[Deprecation]:
    """Return deprecation info for an option, or None if it is current."""
    option = OPTIONS.get(key)
    if option is None:
        return None
    return option.deprecation


def warn_deprecated(settings: dict[str, Any]) -> None:
    """Log a warning for every deprecated option present in settings."""
    for key in settings:
        deprecation = check_deprecated(key)
        if deprecation:
            logging.warning(
                f"Option '{key}' is deprecated since {deprecation.since}: "
                f"{deprecation.reason}. {deprecation.alternative}"
            )

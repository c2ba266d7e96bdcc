"""
Utility functions for the SQL dumper.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .options import get_defaults
from .settings import DumpSettings


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration.

    Log output goes to stderr because the dump itself may be written to
    stdout.
    """
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def as_text(value: Any) -> str:
    """Column metadata may come back as bytes depending on the server."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    return str(value)


def format_settings_display(settings: DumpSettings) -> list[str]:
    """Format the options that differ from their defaults."""
    defaults = get_defaults()
    parts = []
    for key, value in settings.as_dict().items():
        if key == 'include-views' and value == settings.get_included_tables():
            continue
        if defaults.get(key) != value:
            parts.append(f"{key}={value}")
    return parts


def print_dry_run_info(
    dsn: str,
    settings: DumpSettings,
    table_wheres: dict[str, str],
    table_limits: dict[str, Any],
    output_file: Optional[str]
) -> None:
    """Log what would be dumped in dry-run mode."""
    logging.info(f"Would dump: {dsn}")
    logging.info(f"  Output: {output_file or 'stdout'} (compress={settings.get_compress_method()})")

    settings_parts = format_settings_display(settings)
    if settings_parts:
        logging.info(f"  Settings: {', '.join(settings_parts)}")
    else:
        logging.info("  Settings: defaults")

    for table, where in table_wheres.items():
        logging.info(f"  - {table} (where='{where}')")
    for table, limit in table_limits.items():
        logging.info(f"  - {table} (limit={limit})")

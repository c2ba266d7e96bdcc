#!/usr/bin/env python3
"""
SQL Dumper - CLI Entry Point
============================
Writes a logical dump of one database as replayable SQL, with support for:
- Table include/exclude lists and regex patterns
- Per-table WHERE clauses and row limits
- Extended inserts bounded by net_buffer_length
- Views, triggers, routines and events
- gzip, bzip2, zstandard and lz4 compression
"""

import argparse
import logging
import sys

import yaml
from mysql.connector import Error as MySQLError

from .config import ConfigLoader
from .database_dumper import DatabaseDumper
from .exceptions import DumpError
from .settings import DumpSettings
from .utils import print_dry_run_info, setup_logging


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='SQL Dumper - Logical database backup tool'
    )
    parser.add_argument(
        '-c', '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '-o', '--output',
        help='Write the dump to this file instead of output.file (stdout when neither is set)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be dumped without actually dumping'
    )

    args = parser.parse_args()

    # Load configuration
    try:
        config = ConfigLoader(args.config)
        connection = config.get_connection()
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}", file=sys.stderr)
        sys.exit(1)
    except DumpError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    log_settings = config.get_logging_settings()
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    output_file = args.output or config.get_output_settings().get('file')
    table_wheres = config.get_table_wheres()
    table_limits = config.get_table_limits()

    # Dry run mode
    if args.dry_run:
        logging.info("DRY RUN MODE - No data will be dumped")
        try:
            settings = DumpSettings(config.get_dump_settings())
        except DumpError as e:
            logging.error(f"Invalid settings: {e}")
            sys.exit(1)
        print_dry_run_info(connection['dsn'], settings, table_wheres, table_limits, output_file)
        sys.exit(0)

    # Run dump
    try:
        dumper = DatabaseDumper(
            connection['dsn'],
            connection['user'],
            connection['password'],
            config.get_dump_settings(),
            connection['options']
        )
        dumper.set_table_wheres(table_wheres)
        dumper.set_table_limits(table_limits)
        stats = dumper.start(output_file)

        # Print summary
        logging.info("=" * 50)
        logging.info("DUMP COMPLETE")
        logging.info(f"Tables: {len(stats.tables)}")
        logging.info(f"Total Rows: {stats.total_rows}")
        logging.info(f"Views: {stats.views}, Triggers: {stats.triggers}, "
                     f"Routines: {stats.routines}, Events: {stats.events}")

    except DumpError as e:
        logging.error(f"Dump failed: {e}")
        sys.exit(1)
    except MySQLError as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()

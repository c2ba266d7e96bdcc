"""
Unit tests for main.py
"""

import logging
from unittest import mock

import pytest
import yaml
from mysql.connector import Error as MySQLError

from sqldump.exceptions import DatabaseConnectionError
from sqldump.main import main
from sqldump.models import DumpStats, TableStats


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "connection": {"dsn": "mysql:host=localhost;dbname=shop", "user": "root", "password": "pw"},
        "settings": {"compress": "gzip"},
        "table_wheres": {"users": "id > 1"},
        "table_limits": {"orders": 10},
        "output": {"file": str(tmp_path / "shop.sql.gz")},
    }))
    return path


@pytest.fixture(autouse=True)
def no_logging_setup():
    with mock.patch('sqldump.main.setup_logging'):
        yield


def run_main(*args):
    with mock.patch('sys.argv', ['sqldump', *args]):
        main()


class TestMain:
    """Tests for the command line entry point."""

    @mock.patch('sqldump.main.DatabaseDumper')
    def test_runs_dump(self, dumper_class, config_file, tmp_path):
        dumper_class.return_value.start.return_value = DumpStats(tables=[TableStats("users", 3)])

        run_main('-c', str(config_file))

        dumper_class.assert_called_once_with(
            "mysql:host=localhost;dbname=shop", "root", "pw", {"compress": "gzip"}, {}
        )
        dumper = dumper_class.return_value
        dumper.set_table_wheres.assert_called_once_with({"users": "id > 1"})
        dumper.set_table_limits.assert_called_once_with({"orders": 10})
        dumper.start.assert_called_once_with(str(tmp_path / "shop.sql.gz"))

    @mock.patch('sqldump.main.DatabaseDumper')
    def test_output_argument_wins(self, dumper_class, config_file):
        dumper_class.return_value.start.return_value = DumpStats()

        run_main('-c', str(config_file), '-o', '/tmp/other.sql')

        dumper_class.return_value.start.assert_called_once_with('/tmp/other.sql')

    @mock.patch('sqldump.main.DatabaseDumper')
    def test_dump_error_exits(self, dumper_class, config_file):
        dumper_class.return_value.start.side_effect = DatabaseConnectionError("localhost", "refused")

        with pytest.raises(SystemExit) as exc_info:
            run_main('-c', str(config_file))
        assert exc_info.value.code == 1

    @mock.patch('sqldump.main.DatabaseDumper')
    def test_driver_error_exits(self, dumper_class, config_file, caplog):
        dumper_class.return_value.start.side_effect = MySQLError("Lost connection to MySQL server")

        with pytest.raises(SystemExit) as exc_info:
            run_main('-c', str(config_file))

        assert exc_info.value.code == 1
        assert "Fatal error: Lost connection to MySQL server" in caplog.text

    def test_missing_config(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            run_main('-c', str(tmp_path / "missing.yaml"))
        assert exc_info.value.code == 1

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("connection: [unclosed")
        with pytest.raises(SystemExit) as exc_info:
            run_main('-c', str(path))
        assert exc_info.value.code == 1

    @mock.patch('sqldump.main.DatabaseDumper')
    def test_dry_run(self, dumper_class, config_file, caplog):
        with caplog.at_level(logging.INFO):
            with pytest.raises(SystemExit) as exc_info:
                run_main('-c', str(config_file), '--dry-run')

        assert exc_info.value.code == 0
        dumper_class.assert_not_called()
        assert "Would dump: mysql:host=localhost;dbname=shop" in caplog.text
        assert "- users (where='id > 1')" in caplog.text

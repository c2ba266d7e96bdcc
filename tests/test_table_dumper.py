"""
Unit tests for table_dumper.py
"""

from unittest import mock

import pytest

from sqldump.adapters import TypeAdapterMysql
from sqldump.connection import DatabaseConnection
from sqldump.models import ColumnType
from sqldump.settings import DumpSettings
from sqldump.table_dumper import (
    BatchState,
    InsertBatcher,
    TableDumper,
    escape,
    get_insert_verb,
)


class FakeSink:
    """Collects written text, reporting UTF-8 byte counts like a real sink."""

    def __init__(self):
        self.chunks = []

    def write(self, text):
        self.chunks.append(text)
        return len(text.encode('utf-8'))

    @property
    def text(self):
        return ''.join(self.chunks)


def column(type_, numeric=False, blob=False, virtual=False):
    return ColumnType(is_numeric=numeric, is_blob=blob, is_virtual=virtual, type=type_, type_sql=type_)


INT = column('int', numeric=True)
VARCHAR = column('varchar')
BLOB = column('blob', blob=True)
BIT = column('bit', numeric=True, blob=True)


class TestEscape:
    """Tests for value escaping."""

    @pytest.fixture
    def connection(self):
        return DatabaseConnection("localhost", 3306, "root", "secret")

    @pytest.fixture
    def settings(self):
        return DumpSettings()

    def test_null(self, connection, settings):
        assert escape(None, VARCHAR, settings, connection) == "NULL"
        assert escape(None, INT, settings, connection) == "NULL"

    def test_numeric_unquoted(self, connection, settings):
        assert escape(42, INT, settings, connection) == "42"
        assert escape("42", INT, settings, connection) == "42"

    def test_string_quoted(self, connection, settings):
        assert escape("O'Brien", VARCHAR, settings, connection) == "'O\\'Brien'"

    def test_hex_blob(self, connection, settings):
        assert escape("DEADBEEF", BLOB, settings, connection) == "0xDEADBEEF"
        assert escape(b"CAFE", BLOB, settings, connection) == "0xCAFE"

    def test_empty_blob(self, connection, settings):
        assert escape("", BLOB, settings, connection) == "''"

    def test_empty_bit_keeps_hex(self, connection, settings):
        assert escape("", BIT, settings, connection) == "0x"
        assert escape("01", BIT, settings, connection) == "0x01"

    def test_blob_without_hex_blob(self, connection):
        settings = DumpSettings({'hex-blob': False})
        assert escape(b"\x01", BLOB, settings, connection) == "X'01'"


class TestInsertVerb:

    def test_default(self):
        assert get_insert_verb(DumpSettings()) == "INSERT INTO"

    def test_replace(self):
        assert get_insert_verb(DumpSettings({'replace': True})) == "REPLACE INTO"

    def test_insert_ignore(self):
        assert get_insert_verb(DumpSettings({'insert-ignore': True})) == "INSERT IGNORE INTO"


class TestInsertBatcher:
    """Tests for packing rows into INSERT statements."""

    @pytest.fixture
    def sink(self):
        return FakeSink()

    def test_extended_insert(self, sink):
        batcher = InsertBatcher(sink, 'users', DumpSettings())
        batcher.add(["1", "'a'"])
        batcher.add(["2", "'b'"])
        batcher.finish()

        assert sink.text == "INSERT INTO `users` VALUES (1,'a'),(2,'b');\n"
        assert batcher.statements == 1
        assert batcher.state is BatchState.FLUSHED

    def test_no_rows_writes_nothing(self, sink):
        batcher = InsertBatcher(sink, 'users', DumpSettings())
        batcher.finish()
        assert sink.text == ""
        assert batcher.state is BatchState.AWAITING_FIRST_ROW

    def test_one_statement_per_row(self, sink):
        batcher = InsertBatcher(sink, 'users', DumpSettings({'extended-insert': False}))
        batcher.add(["1"])
        batcher.add(["2"])
        batcher.finish()

        assert sink.text == "INSERT INTO `users` VALUES (1);\nINSERT INTO `users` VALUES (2);\n"
        assert batcher.statements == 2

    def test_column_names(self, sink):
        batcher = InsertBatcher(sink, 't', DumpSettings({'replace': True}), ["`id`", "`name`"])
        batcher.add(["1", "'a'"])
        batcher.finish()
        assert sink.text == "REPLACE INTO `t` (`id`, `name`) VALUES (1,'a');\n"

    def test_statements_bounded_by_net_buffer_length(self, sink):
        settings = DumpSettings({'net_buffer_length': 1024})
        batcher = InsertBatcher(sink, 'logs', settings)
        value = "'" + "x" * 90 + "'"
        for i in range(100):
            batcher.add([str(i), value])
        batcher.finish()

        statements = [s for s in sink.text.split(";\n") if s]
        assert len(statements) == batcher.statements > 1
        assert sum(s.count("(") for s in statements) == 100
        for statement in statements:
            assert statement.startswith("INSERT INTO `logs` VALUES (")
            assert len((statement + ";\n").encode('utf-8')) <= 1024

    def test_oversized_row_is_its_own_statement(self, sink):
        settings = DumpSettings({'net_buffer_length': 1024})
        batcher = InsertBatcher(sink, 't', settings)
        batcher.add(["1"])
        batcher.add(["'" + "y" * 2000 + "'"])
        batcher.add(["3"])
        batcher.finish()

        statements = sink.text.split(";\n")[:-1]
        assert len(statements) == 3
        assert statements[0] == "INSERT INTO `t` VALUES (1)"
        assert statements[1].startswith("INSERT INTO `t` VALUES ('yyy")
        assert statements[2] == "INSERT INTO `t` VALUES (3)"

    def test_statement_filling_budget_with_terminator(self, sink):
        """Test a statement that reaches the budget exactly once terminated."""
        settings = DumpSettings({'net_buffer_length': 1024})
        batcher = InsertBatcher(sink, 't', settings)
        # 23 byte head + 999 byte tuple + 2 byte terminator
        batcher.add(["'" + "y" * 995 + "'"])
        assert batcher.state is BatchState.ACCUMULATING
        batcher.add(["1"])
        batcher.finish()

        statements = [s + ";\n" for s in sink.text.split(";\n")[:-1]]
        assert len(statements) == 2
        assert len(statements[0].encode('utf-8')) == 1024
        assert statements[1] == "INSERT INTO `t` VALUES (1);\n"

    def test_terminator_counted_against_budget(self, sink):
        """Test a row that fills the budget without its terminator is flushed at once."""
        settings = DumpSettings({'net_buffer_length': 1024})
        batcher = InsertBatcher(sink, 't', settings)
        # 23 byte head + 1001 byte tuple
        batcher.add(["'" + "y" * 997 + "'"])
        assert batcher.state is BatchState.FLUSHED
        assert sink.text.endswith(";\n")
        batcher.add(["1"])
        batcher.finish()

        statements = [s + ";\n" for s in sink.text.split(";\n")[:-1]]
        assert len(statements) == 2
        assert len(statements[0].encode('utf-8')) == 1026
        assert statements[1] == "INSERT INTO `t` VALUES (1);\n"

    @pytest.mark.parametrize("options, rows, min_statements", [
        ({}, [["1", "'a'"], ["2", "'b'"], ["3", "NULL"]], 1),
        ({'extended-insert': False}, [["1", "'a'"], ["2", "'b'"], ["3", "NULL"]], 3),
        ({'net_buffer_length': 1024}, [[str(i), "'" + "z" * 120 + "'"] for i in range(40)], 2),
    ])
    def test_same_rows_same_output(self, options, rows, min_statements):
        """Test batching the same rows twice produces identical text."""
        outputs = []
        for _ in range(2):
            sink = FakeSink()
            batcher = InsertBatcher(sink, 'events', DumpSettings(options))
            for row in rows:
                batcher.add(row)
            batcher.finish()
            outputs.append((sink.text, batcher.statements))

        assert outputs[0] == outputs[1]
        assert outputs[0][1] >= min_statements
        assert outputs[0][0].count(";\n") == outputs[0][1]


class TestTableDumper:
    """Tests for dumping a single table's rows."""

    @pytest.fixture
    def connection(self):
        conn = mock.MagicMock()
        conn.query.return_value = (row for row in [
            {'id': 1, 'name': 'a'},
            {'id': 2, 'name': None},
        ])
        conn.quote.side_effect = lambda v: f"'{v}'"
        return conn

    @pytest.fixture
    def column_types(self):
        return {'id': INT, 'name': VARCHAR}

    def make_dumper(self, connection, settings, **hooks):
        sink = FakeSink()
        adapter = TypeAdapterMysql(connection, settings)
        return TableDumper(connection, adapter, sink, settings, **hooks), sink

    def test_build_select_query(self, connection):
        dumper, _ = self.make_dumper(connection, DumpSettings())
        assert dumper.build_select_query('t', ["`a`", "`b`"]) == "SELECT `a`,`b` FROM `t`"
        assert dumper.build_select_query('t', ["`a`"], "a > 1", 10) == \
            "SELECT `a` FROM `t` WHERE a > 1 LIMIT 10"
        assert dumper.build_select_query('t', ["`a`"], False, "5,10") == "SELECT `a` FROM `t` LIMIT 5,10"
        assert dumper.build_select_query('t', ["`a`"], "", False) == "SELECT `a` FROM `t`"

    def test_dump_rows(self, connection, column_types):
        dumper, sink = self.make_dumper(connection, DumpSettings())

        stats = dumper.dump_rows('users', column_types)

        assert stats.name == 'users'
        assert stats.row_count == 2
        connection.query.assert_called_once_with("SELECT `id`,`name` FROM `users`")
        assert sink.text == (
            "--\n-- Dumping data for table `users`\n--\n\n"
            "LOCK TABLES `users` WRITE;\n"
            "/*!40000 ALTER TABLE `users` DISABLE KEYS */;\n"
            "SET autocommit=0;\n"
            "INSERT INTO `users` VALUES (1,'a'),(2,NULL);\n"
            "COMMIT;\n"
            "/*!40000 ALTER TABLE `users` ENABLE KEYS */;\n"
            "UNLOCK TABLES;\n"
            "\n"
            "-- Dumped table `users` with 2 row(s)\n--\n\n"
        )

    def test_single_transaction_bracketing(self, connection, column_types):
        dumper, _ = self.make_dumper(connection, DumpSettings())
        dumper.dump_rows('users', column_types)

        assert connection.exec.call_args_list == [
            mock.call("SET SESSION TRANSACTION ISOLATION LEVEL REPEATABLE READ"),
            mock.call("START TRANSACTION /*!40100 WITH CONSISTENT SNAPSHOT */"),
            mock.call("COMMIT"),
        ]

    def test_lock_tables_bracketing(self, connection, column_types):
        settings = DumpSettings({'single-transaction': False})
        dumper, _ = self.make_dumper(connection, settings)
        dumper.dump_rows('users', column_types)

        assert connection.exec.call_args_list == [
            mock.call("LOCK TABLES `users` READ LOCAL"),
            mock.call("UNLOCK TABLES"),
        ]

    def test_release_on_failure(self, connection, column_types):
        """Test the transaction is committed even when reading rows fails."""
        def broken_rows():
            yield {'id': 1, 'name': 'a'}
            raise RuntimeError("lost connection")

        connection.query.return_value = broken_rows()
        dumper, sink = self.make_dumper(connection, DumpSettings())

        with pytest.raises(RuntimeError):
            dumper.dump_rows('users', column_types)

        assert connection.exec.call_args_list[-1] == mock.call("COMMIT")
        assert "UNLOCK TABLES;\n" in sink.text

    @pytest.mark.parametrize("options, release", [
        ({}, "COMMIT"),
        ({'single-transaction': False}, "UNLOCK TABLES"),
    ])
    def test_release_when_header_write_fails(self, connection, column_types, options, release):
        """Test brackets opened before a failing header write are still released."""
        class FailingSink(FakeSink):
            def write(self, text):
                if text.startswith("LOCK TABLES"):
                    raise OSError("disk full")
                return super().write(text)

        settings = DumpSettings(options)
        sink = FailingSink()
        dumper = TableDumper(connection, TypeAdapterMysql(connection, settings), sink, settings)

        with pytest.raises(OSError):
            dumper.dump_rows('users', column_types)

        connection.query.assert_not_called()
        assert connection.exec.call_args_list[-1] == mock.call(release)

    def test_where_and_limit(self, connection, column_types):
        dumper, _ = self.make_dumper(connection, DumpSettings({'skip-comments': True}))
        dumper.dump_rows('users', column_types, where="id > 0", limit="0,1")
        connection.query.assert_called_once_with("SELECT `id`,`name` FROM `users` WHERE id > 0 LIMIT 0,1")

    def test_complete_insert(self, connection, column_types):
        settings = DumpSettings({
            'complete-insert': True,
            'skip-comments': True,
            'add-locks': False,
            'disable-keys': False,
            'no-autocommit': False,
        })
        dumper, sink = self.make_dumper(connection, settings)
        dumper.dump_rows('users', column_types)
        assert sink.text == "INSERT INTO `users` (`id`, `name`) VALUES (1,'a'),(2,NULL);\n\n"

    def test_hooks(self, connection, column_types):
        calls = []

        def transform_row(table, row):
            calls.append(('row', table))
            return {**row, 'name': (row['name'] or '').upper()}

        def transform_value(table, col, value, row):
            calls.append(('value', col))
            return value * 10 if col == 'id' else value

        settings = DumpSettings({'skip-comments': True, 'add-locks': False,
                                 'disable-keys': False, 'no-autocommit': False})
        dumper, sink = self.make_dumper(
            connection, settings,
            transform_table_row=transform_row,
            transform_column_value=transform_value,
        )
        dumper.dump_rows('users', column_types)

        assert sink.text == "INSERT INTO `users` VALUES (10,'A'),(20,'');\n\n"
        assert calls[:3] == [('row', 'users'), ('value', 'id'), ('value', 'name')]

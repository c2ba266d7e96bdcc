"""
Unit tests for matcher.py
"""

import pytest

from sqldump.matcher import compile_pattern, is_regex, matches


class TestMatches:
    """Tests for name matching."""

    def test_exact_name(self):
        assert matches("users", ["orders", "users"])
        assert not matches("users_archive", ["users"])

    def test_empty_list(self):
        assert not matches("users", [])

    def test_regex(self):
        assert matches("tmp_import", ["/^tmp_/"])
        assert not matches("import_tmp", ["/^tmp_/"])

    def test_regex_searches_anywhere(self):
        assert matches("users_log_2024", ["/_log_/"])

    def test_regex_flags(self):
        assert matches("LOG_EVENTS", ["/^log_/i"])
        assert not matches("LOG_EVENTS", ["/^log_/"])

    def test_mixed_list(self):
        patterns = ["sessions", "/^cache_/"]
        assert matches("sessions", patterns)
        assert matches("cache_pages", patterns)
        assert not matches("users", patterns)


class TestCompilePattern:
    """Tests for pattern compilation helpers."""

    def test_is_regex(self):
        assert is_regex("/^a/")
        assert not is_regex("a")

    @pytest.mark.parametrize("pattern,body", [
        ("/^tmp_/", "^tmp_"),
        ("/a\\/b/", "a\\/b"),
    ])
    def test_body(self, pattern, body):
        assert compile_pattern(pattern).pattern == body

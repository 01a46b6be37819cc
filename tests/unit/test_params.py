"""Unit tests for placeholder translation."""

from __future__ import annotations

import pytest

from row_bridge.core.exceptions import ParameterBindingError
from row_bridge.core.params import bind_params, normalize_params, param_names, rewrite_positional


class TestRewritePositional:
    def test_numbers_placeholders_in_order(self) -> None:
        sql = "SELECT * FROM [Foo] WHERE [Fruit] = ? AND [Vegetable] > ?"
        text, count = rewrite_positional(sql, brackets=True)
        assert text == "SELECT * FROM [Foo] WHERE [Fruit] = :p0 AND [Vegetable] > :p1"
        assert count == 2

    def test_no_placeholders(self) -> None:
        assert rewrite_positional("SELECT * FROM t") == ("SELECT * FROM t", 0)

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM t WHERE a = 'why?' AND b = ?"
        text, count = rewrite_positional(sql)
        assert text == "SELECT * FROM t WHERE a = 'why?' AND b = :p0"
        assert count == 1

    def test_quoted_identifier_exclusion(self) -> None:
        sql = 'SELECT "what?", `who?` FROM t WHERE c = ?'
        text, _ = rewrite_positional(sql)
        assert text == 'SELECT "what?", `who?` FROM t WHERE c = :p0'

    def test_brackets_only_when_requested(self) -> None:
        sql = "SELECT [a?] FROM t WHERE arr[?] = ?"
        assert rewrite_positional(sql, brackets=True)[0] == "SELECT [a?] FROM t WHERE arr[?] = :p0"
        assert rewrite_positional(sql)[0] == "SELECT [a:p0] FROM t WHERE arr[:p1] = :p2"

    def test_custom_prefix(self) -> None:
        assert rewrite_positional("a = ? OR b = ?", prefix="arg")[0] == "a = :arg0 OR b = :arg1"


class TestNormalizeParams:
    def test_named_passthrough(self) -> None:
        sql = "SELECT * FROM users WHERE id = :user_id"
        assert normalize_params(sql, "named") == sql

    def test_pyformat_conversion(self) -> None:
        sql = "SELECT * FROM users WHERE id = :user_id"
        expected = "SELECT * FROM users WHERE id = %(user_id)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_qmark_conversion(self) -> None:
        sql = "SELECT * FROM t WHERE a = :p0 AND b = :p1"
        assert normalize_params(sql, "qmark") == "SELECT * FROM t WHERE a = ? AND b = ?"

    def test_format_conversion(self) -> None:
        sql = "SELECT * FROM t WHERE a = :p0"
        assert normalize_params(sql, "format") == "SELECT * FROM t WHERE a = %s"

    def test_typecast_exclusion(self) -> None:
        sql = "SELECT value::integer FROM t WHERE id = :id"
        expected = "SELECT value::integer FROM t WHERE id = %(id)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM t WHERE col = ':not_a_param' AND id = :id"
        expected = "SELECT * FROM t WHERE col = ':not_a_param' AND id = %(id)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_percent_escaped_for_percent_styles(self) -> None:
        sql = "SELECT * FROM t WHERE name LIKE 'a%' AND id = :id"
        expected = "SELECT * FROM t WHERE name LIKE 'a%%' AND id = %(id)s"
        assert normalize_params(sql, "pyformat") == expected
        assert normalize_params(sql, "qmark") == "SELECT * FROM t WHERE name LIKE 'a%' AND id = ?"

    def test_duplicate_param_names(self) -> None:
        sql = "SELECT * FROM t WHERE a = :val OR b = :val"
        expected = "SELECT * FROM t WHERE a = %(val)s OR b = %(val)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_unknown_paramstyle(self) -> None:
        with pytest.raises(ValueError, match="numeric"):
            normalize_params("SELECT :a", "numeric")


class TestBindParams:
    def test_named_keeps_mapping(self) -> None:
        sql, params = bind_params("SELECT * FROM t WHERE a = :p0", {"p0": 1}, "named")
        assert sql == "SELECT * FROM t WHERE a = :p0"
        assert params == {"p0": 1}

    def test_positional_orders_by_appearance(self) -> None:
        sql, params = bind_params(
            "SELECT * FROM t WHERE b = :b AND a = :a OR b = :b",
            {"a": 1, "b": 2},
            "qmark",
        )
        assert sql == "SELECT * FROM t WHERE b = ? AND a = ? OR b = ?"
        assert params == (2, 1, 2)

    def test_missing_value_named(self) -> None:
        with pytest.raises(ParameterBindingError, match="p1"):
            bind_params("SELECT * FROM t WHERE a = :p0 AND b = :p1", {"p0": 1}, "pyformat")

    def test_missing_value_positional(self) -> None:
        with pytest.raises(ParameterBindingError, match="p0") as exc_info:
            bind_params("SELECT * FROM t WHERE a = :p0", None, "format")
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_param_names_skip_literals(self) -> None:
        assert param_names("SELECT ':x' FROM t WHERE a = :a AND b::int = :b") == ("a", "b")

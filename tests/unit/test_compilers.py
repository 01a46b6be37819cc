"""Unit tests for the compiler registry."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects.mssql.base import MSDialect
from sqlalchemy.dialects.mysql.base import MySQLDialect
from sqlalchemy.dialects.oracle.base import OracleDialect
from sqlalchemy.dialects.postgresql.base import PGDialect
from sqlalchemy.dialects.sqlite.base import SQLiteDialect
from sqlalchemy.engine.default import DefaultDialect
from sqlalchemy.sql.compiler import IdentifierPreparer

from row_bridge.core import compilers
from row_bridge.core.enums import CompilerType, DatabaseBackend
from row_bridge.core.exceptions import CompilerNotFoundError, InvalidProviderError


class PercentIdentifierPreparer(IdentifierPreparer):
    def __init__(self, dialect: DefaultDialect) -> None:
        super().__init__(dialect, initial_quote="%%")


class PercentDialect(DefaultDialect):
    """Quotes identifiers as %%name%%."""

    name = "percent"
    preparer = PercentIdentifierPreparer
    supports_statement_cache = True


class TestGet:
    @pytest.mark.parametrize(
        ("compiler_type", "dialect_class"),
        [
            (CompilerType.SQLSERVER, MSDialect),
            (CompilerType.MYSQL, MySQLDialect),
            (CompilerType.POSTGRES, PGDialect),
            (CompilerType.SQLITE, SQLiteDialect),
            (CompilerType.ORACLE, OracleDialect),
        ],
    )
    def test_known_types(self, compiler_type: CompilerType, dialect_class: type) -> None:
        assert isinstance(compilers.get(compiler_type), dialect_class)

    def test_compilers_are_positional(self) -> None:
        compiler = compilers.get(CompilerType.POSTGRES)
        assert compiler.paramstyle == "qmark"
        assert compiler.positional

    def test_same_instance_is_reused(self) -> None:
        assert compilers.get(CompilerType.MYSQL) is compilers.get(CompilerType.MYSQL)

    def test_custom_raises(self) -> None:
        with pytest.raises(CompilerNotFoundError):
            compilers.get(CompilerType.CUSTOM)

    def test_not_found_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="No compiler found"):
            compilers.get("firebird")  # type: ignore[arg-type]


class TestCustomRegistration:
    def test_register_and_remove(self) -> None:
        assert compilers.try_get_custom(DatabaseBackend.ORACLE) is None

        percent = compilers.build_compiler(PercentDialect)
        compilers.register_for(DatabaseBackend.ORACLE, percent)
        assert compilers.try_get_custom(DatabaseBackend.ORACLE) is percent

        compilers.register_for(DatabaseBackend.ORACLE, None)
        assert compilers.try_get_custom(DatabaseBackend.ORACLE) is None

    def test_remove_unregistered_is_noop(self) -> None:
        compilers.register_for(DatabaseBackend.MYSQL, None)
        assert compilers.try_get_custom(DatabaseBackend.MYSQL) is None

    def test_register_requires_backend(self) -> None:
        with pytest.raises(InvalidProviderError):
            compilers.register_for("oracle", compilers.build_compiler(PercentDialect))  # type: ignore[arg-type]

    def test_try_get_custom_none_raises(self) -> None:
        with pytest.raises(ValueError):
            compilers.try_get_custom(None)  # type: ignore[arg-type]

    def test_for_backend_prefers_custom(self) -> None:
        assert isinstance(compilers.for_backend(DatabaseBackend.SQLITE), SQLiteDialect)

        percent = compilers.build_compiler(PercentDialect)
        compilers.register_for(DatabaseBackend.SQLITE, percent)
        assert compilers.for_backend(DatabaseBackend.SQLITE) is percent
        assert isinstance(compilers.for_backend(DatabaseBackend.POSTGRESQL), PGDialect)


class TestBackends:
    @pytest.mark.parametrize(
        ("backend", "compiler_type", "paramstyle"),
        [
            (DatabaseBackend.SQLSERVER, CompilerType.SQLSERVER, "qmark"),
            (DatabaseBackend.SQLITE, CompilerType.SQLITE, "named"),
            (DatabaseBackend.POSTGRESQL, CompilerType.POSTGRES, "pyformat"),
            (DatabaseBackend.MYSQL, CompilerType.MYSQL, "pyformat"),
            (DatabaseBackend.ORACLE, CompilerType.ORACLE, "named"),
        ],
    )
    def test_backend_defaults(
        self, backend: DatabaseBackend, compiler_type: CompilerType, paramstyle: str
    ) -> None:
        assert backend.compiler_type is compiler_type
        assert backend.paramstyle == paramstyle

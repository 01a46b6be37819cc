"""Compiler and database backend enumerations."""

from __future__ import annotations

from enum import Enum


class CompilerType(Enum):
    """SQL dialects the query builder can compile for.

    CUSTOM selects the process-wide custom compiler instead of a built-in one.
    """

    SQLSERVER = "sqlserver"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"
    ORACLE = "oracle"
    CUSTOM = "custom"


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLSERVER = "sqlserver"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"

    @property
    def compiler_type(self) -> CompilerType:
        """Default compiler for statements sent to this backend."""
        return _BACKEND_COMPILERS[self]

    @property
    def paramstyle(self) -> str:
        """DB-API paramstyle of the usual driver for this backend."""
        return _BACKEND_PARAMSTYLES[self]


_BACKEND_COMPILERS: dict[DatabaseBackend, CompilerType] = {
    DatabaseBackend.SQLSERVER: CompilerType.SQLSERVER,
    DatabaseBackend.SQLITE: CompilerType.SQLITE,
    DatabaseBackend.POSTGRESQL: CompilerType.POSTGRES,
    DatabaseBackend.MYSQL: CompilerType.MYSQL,
    DatabaseBackend.ORACLE: CompilerType.ORACLE,
}

# sqlite3 / oracledb: named, psycopg / mysql-connector: pyformat, pyodbc: qmark
_BACKEND_PARAMSTYLES: dict[DatabaseBackend, str] = {
    DatabaseBackend.SQLSERVER: "qmark",
    DatabaseBackend.SQLITE: "named",
    DatabaseBackend.POSTGRESQL: "pyformat",
    DatabaseBackend.MYSQL: "pyformat",
    DatabaseBackend.ORACLE: "named",
}

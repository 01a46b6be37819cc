"""Compiler registry.

Maps each built-in CompilerType to a lazily built, process-wide SQLAlchemy
dialect, and holds custom compilers registered per DatabaseBackend.

Every compiler renders positional ``?`` placeholders (the ``qmark``
paramstyle); the placeholder rewrite in ``row_bridge.query`` depends on it.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from sqlalchemy.dialects import mssql, mysql, oracle, postgresql, sqlite
from sqlalchemy.engine.interfaces import Dialect

from row_bridge.core.enums import CompilerType, DatabaseBackend
from row_bridge.core.exceptions import CompilerNotFoundError, InvalidProviderError

logger = logging.getLogger(__name__)

COMPILER_PARAMSTYLE = "qmark"

# Concrete driver dialects: the package default driver differs between
# SQLAlchemy releases, and some (psycopg 3) render ::type casts on binds.
_FACTORIES: dict[CompilerType, Callable[..., Dialect]] = {
    CompilerType.SQLSERVER: mssql.pyodbc.dialect,
    CompilerType.MYSQL: mysql.mysqldb.dialect,
    CompilerType.POSTGRES: postgresql.psycopg2.dialect,
    CompilerType.SQLITE: sqlite.pysqlite.dialect,
    CompilerType.ORACLE: oracle.cx_oracle.dialect,
}

_defaults: dict[CompilerType, Dialect] = {}
_custom: dict[DatabaseBackend, Dialect] = {}
_lock = threading.Lock()


def build_compiler(factory: Callable[..., Any]) -> Dialect:
    """Instantiate a dialect class with the positional paramstyle."""
    return factory(paramstyle=COMPILER_PARAMSTYLE)


def get(compiler_type: CompilerType) -> Dialect:
    """Return the built-in compiler for *compiler_type*.

    Raises:
        CompilerNotFoundError: For CUSTOM or any type without a built-in compiler.
    """
    factory = _FACTORIES.get(compiler_type)
    if factory is None:
        raise CompilerNotFoundError(compiler_type)

    with _lock:
        compiler = _defaults.get(compiler_type)
        if compiler is None:
            compiler = build_compiler(factory)
            _defaults[compiler_type] = compiler
            logger.debug("Built %s compiler %s", compiler_type.value, type(compiler).__name__)
        return compiler


def register_for(backend: DatabaseBackend, compiler: Dialect | None) -> None:
    """Register a custom compiler for *backend*.

    The compiler is used in place of the backend's default. Passing ``None``
    removes any registration.

    Raises:
        InvalidProviderError: If *backend* is not a DatabaseBackend.
    """
    if not isinstance(backend, DatabaseBackend):
        raise InvalidProviderError(backend)

    with _lock:
        if compiler is not None:
            _custom[backend] = compiler
            logger.debug("Registered %s compiler for %s", type(compiler).__name__, backend.value)
        elif _custom.pop(backend, None) is not None:
            logger.debug("Removed custom compiler for %s", backend.value)


def try_get_custom(backend: DatabaseBackend) -> Dialect | None:
    """Return the custom compiler registered for *backend*, if any."""
    if backend is None:
        raise ValueError("backend must not be None")
    with _lock:
        return _custom.get(backend)


def for_backend(backend: DatabaseBackend) -> Dialect:
    """Return the compiler used for statements sent to *backend*."""
    custom = try_get_custom(backend)
    if custom is not None:
        return custom
    return get(backend.compiler_type)


def clear_custom() -> None:
    """Remove every custom registration."""
    with _lock:
        _custom.clear()

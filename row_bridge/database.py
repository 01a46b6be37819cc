"""Database - typed queries over a DB-API connection.

Accepts either Sql statements or SQLAlchemy Core statements. Core
statements are compiled with the compiler registered for the database's
backend, and typed reads fill in the SELECT from the model's mapping.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterator, Sequence
from contextlib import closing, contextmanager
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Generic, TypeVar, Union

from sqlalchemy import Select, func, literal_column, select
from sqlalchemy.engine.interfaces import Dialect
from sqlalchemy.sql.expression import ClauseElement

from row_bridge.core import compilers, settings
from row_bridge.core.enums import DatabaseBackend
from row_bridge.core.exceptions import ExecutionError, MultipleRowsError, NoRowsError
from row_bridge.core.params import bind_params
from row_bridge.core.sql import Sql
from row_bridge.mapping.model import ModelMapper
from row_bridge.mapping.poco_data import PocoData
from row_bridge.mapping.protocol import NameMapper
from row_bridge.query.extensions import generate_select, to_sql

logger = logging.getLogger(__name__)

T = TypeVar("T")

Statement = Union[Sql, ClauseElement]


@dataclass
class Page(Generic[T]):
    """One page of results plus the totals of the whole result set."""

    current_page: int
    items_per_page: int
    total_items: int
    total_pages: int
    items: list[T] = field(default_factory=list)


def _columns(cursor: Any) -> list[str] | None:
    if cursor.description is None:
        return None
    return [desc[0] for desc in cursor.description]


def _as_pairs(columns: list[str], row: Any) -> list[tuple[str, Any]]:
    # Rows may already be dict-like (psycopg dict_row, MySQL dict cursor)
    if isinstance(row, dict):
        return list(row.items())
    return list(zip(columns, row, strict=True))


def _split_row(pairs: list[tuple[str, Any]], columns: list[set[str]]) -> list[dict[str, Any]]:
    parts: list[dict[str, Any]] = [{} for _ in columns]
    current = 0
    for name, value in pairs:
        for index in range(current, len(columns)):
            if name in columns[index] and name not in parts[index]:
                parts[index][name] = value
                current = index
                break
    return parts


class Database:
    """Typed query surface over an open DB-API connection.

    Args:
        connection: An open DB-API 2.0 connection.
        backend: Backend the connection talks to; selects the compiler and
            the default driver paramstyle.
        default_mapper: Name mapper for this database; falls back to the
            process-wide default mapper.
        paramstyle: Override of the driver paramstyle.
    """

    def __init__(
        self,
        connection: Any,
        backend: DatabaseBackend | str,
        *,
        default_mapper: NameMapper | None = None,
        paramstyle: str | None = None,
    ) -> None:
        if connection is None:
            raise ValueError("connection must not be None")
        self.connection = connection
        self.backend = DatabaseBackend(backend)
        self.paramstyle = paramstyle or self.backend.paramstyle
        self._default_mapper = default_mapper
        self._in_transaction = False

    @property
    def compiler(self) -> Dialect:
        """Compiler for this backend: a registered custom one, else the default."""
        return compilers.for_backend(self.backend)

    @property
    def default_mapper(self) -> NameMapper:
        if self._default_mapper is not None:
            return self._default_mapper
        return settings.get_default_mapper()

    def to_sql(self, statement: Statement) -> Sql:
        """Return *statement* as Sql, compiling Core statements for this backend."""
        if statement is None:
            raise ValueError("statement must not be None")
        if isinstance(statement, Sql):
            return statement
        return to_sql(statement, self.compiler)

    # --- Statement level ---

    def _cursor(self, sql: Sql) -> Any:
        driver_sql, driver_params = bind_params(sql.sql, sql.params, self.paramstyle)
        logger.debug("Executing %s", driver_sql)
        cursor = self.connection.cursor()
        try:
            cursor.execute(driver_sql, driver_params)
        except Exception as e:
            cursor.close()
            raise ExecutionError(f"Statement failed: {sql.sql}: {e}") from e
        return cursor

    def _iter_pairs(self, sql: Sql) -> Iterator[list[tuple[str, Any]]]:
        """Yield each row as ``(column, value)`` pairs, keeping repeated column names."""
        cursor = self._cursor(sql)
        try:
            columns = _columns(cursor)
            if columns is None:
                return
            while True:
                batch = cursor.fetchmany()
                if not batch:
                    break
                for row in batch:
                    yield _as_pairs(columns, row)
        finally:
            cursor.close()

    def _iter_rows(self, sql: Sql) -> Iterator[dict[str, Any]]:
        with closing(self._iter_pairs(sql)) as rows:
            for pairs in rows:
                yield dict(pairs)

    def fetch_rows(self, statement: Statement) -> list[dict[str, Any]]:
        """Run *statement* and return every row as a dict."""
        return list(self._iter_rows(self.to_sql(statement)))

    def execute(self, statement: Statement) -> int:
        """Execute a write statement. Returns affected row count.

        Commits unless a transaction() block is active.
        """
        cursor = self._cursor(self.to_sql(statement))
        try:
            rowcount = int(cursor.rowcount)
        finally:
            cursor.close()
        if not self._in_transaction:
            self.connection.commit()
        return rowcount

    def execute_scalar(self, statement: Statement) -> Any:
        """Fetch a single scalar value (first column of first row)."""
        cursor = self._cursor(self.to_sql(statement))
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is None:
            return None
        if isinstance(row, dict):
            return next(iter(row.values()))
        return row[0]

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """Commit on success, roll back on exception."""
        if self._in_transaction:
            raise ExecutionError("A transaction is already active on this database")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self.connection.rollback()
            raise
        else:
            self.connection.commit()
        finally:
            self._in_transaction = False

    # --- Typed reads ---

    def _select_for(self, model: type, statement: Statement, mapper: NameMapper) -> Sql:
        if isinstance(statement, Sql):
            return statement
        if statement is None:
            raise ValueError("statement must not be None")
        return self.to_sql(generate_select(statement, model, mapper))

    def query(
        self,
        model: type[T],
        statement: Statement,
        mapper: NameMapper | None = None,
    ) -> Generator[T, None, None]:
        """Lazily yield *model* instances for *statement*."""
        mapper = mapper or self.default_mapper
        sql = self._select_for(model, statement, mapper)
        return self._map_rows(ModelMapper(model, mapper=mapper), sql)

    def _map_rows(self, row_mapper: ModelMapper[T], sql: Sql) -> Generator[T, None, None]:
        with closing(self._iter_rows(sql)) as rows:
            for row in rows:
                yield row_mapper.map_one(row)

    def fetch(self, model: type[T], statement: Statement, mapper: NameMapper | None = None) -> list[T]:
        """Fetch all matching rows as *model* instances."""
        return list(self.query(model, statement, mapper))

    def _take(self, model: type[T], statement: Statement, mapper: NameMapper | None, n: int) -> list[T]:
        rows = self.query(model, statement, mapper)
        try:
            return list(islice(rows, n))
        finally:
            rows.close()

    def single(self, model: type[T], statement: Statement, mapper: NameMapper | None = None) -> T:
        """Return the only matching row; raises if there are zero or several."""
        items = self._take(model, statement, mapper, 2)
        if not items:
            raise NoRowsError("single")
        if len(items) > 1:
            raise MultipleRowsError("single", len(items))
        return items[0]

    def single_or_default(
        self,
        model: type[T],
        statement: Statement,
        mapper: NameMapper | None = None,
    ) -> T | None:
        """Return the only matching row or None; raises if there are several."""
        items = self._take(model, statement, mapper, 2)
        if len(items) > 1:
            raise MultipleRowsError("single_or_default", len(items))
        return items[0] if items else None

    def first(self, model: type[T], statement: Statement, mapper: NameMapper | None = None) -> T:
        """Return the first matching row; raises NoRowsError if there is none."""
        items = self._take(model, statement, mapper, 1)
        if not items:
            raise NoRowsError("first")
        return items[0]

    def first_or_default(
        self,
        model: type[T],
        statement: Statement,
        mapper: NameMapper | None = None,
    ) -> T | None:
        items = self._take(model, statement, mapper, 1)
        return items[0] if items else None

    # --- Multi-model reads ---

    def query_multi(
        self,
        models: Sequence[type],
        statement: Statement,
        callback: Callable[..., Any] | None = None,
        mapper: NameMapper | None = None,
    ) -> Generator[Any, None, None]:
        """Lazily yield each row split across several *models*.

        Columns are assigned left to right. A column stays with the current
        model while it maps to one of that model's columns not yet filled,
        otherwise it goes to the next model that takes it. A model whose
        columns are all NULL (the far side of an outer join) maps to None.

        Each row yields ``callback(*objects)``, skipping None results, or the
        tuple of objects when there is no callback.
        """
        if not models:
            raise ValueError("models must not be empty")
        mapper = mapper or self.default_mapper
        sql = self.to_sql(statement)
        row_mappers = [ModelMapper(model, mapper=mapper) for model in models]
        columns = [set(PocoData.for_type(model, mapper).columns) for model in models]
        return self._map_multi(row_mappers, columns, sql, callback)

    def _map_multi(
        self,
        row_mappers: list[ModelMapper[Any]],
        columns: list[set[str]],
        sql: Sql,
        callback: Callable[..., Any] | None,
    ) -> Generator[Any, None, None]:
        with closing(self._iter_pairs(sql)) as rows:
            for pairs in rows:
                objects = tuple(
                    None if all(value is None for value in part.values()) else row_mapper.map_one(part)
                    for row_mapper, part in zip(row_mappers, _split_row(pairs, columns))
                )
                if callback is None:
                    yield objects
                    continue
                result = callback(*objects)
                if result is not None:
                    yield result

    def fetch_multi(
        self,
        models: Sequence[type],
        statement: Statement,
        callback: Callable[..., Any] | None = None,
        mapper: NameMapper | None = None,
    ) -> list[Any]:
        """Fetch all rows split across *models*; see query_multi."""
        return list(self.query_multi(models, statement, callback, mapper))

    # --- Paging ---

    def _paged_select(self, model: type, statement: Statement, mapper: NameMapper) -> Select:
        if not isinstance(statement, Select):
            raise TypeError(f"Paging needs a query-builder SELECT, got {type(statement).__name__}")
        return generate_select(statement, model, mapper)

    def _limit(self, query: Select, limit: int, offset: int) -> Select:
        # SQL Server only pages with OFFSET ... FETCH, which requires an ORDER BY
        if self.compiler.name == "mssql" and not query._order_by_clauses:
            query = query.order_by(literal_column("(SELECT NULL)"))
        return query.limit(limit).offset(offset)

    def skip_take(
        self,
        model: type[T],
        skip: int,
        take: int,
        statement: Statement,
        mapper: NameMapper | None = None,
    ) -> list[T]:
        """Fetch *take* rows after skipping *skip* rows."""
        if skip < 0 or take < 0:
            raise ValueError("skip and take must not be negative")
        mapper = mapper or self.default_mapper
        query = self._paged_select(model, statement, mapper)
        return self.fetch(model, self._limit(query, take, skip), mapper)

    def page(
        self,
        model: type[T],
        page: int,
        items_per_page: int,
        statement: Statement,
        mapper: NameMapper | None = None,
    ) -> Page[T]:
        """Fetch page *page* (1-based) and count the whole result set."""
        if page < 1 or items_per_page < 1:
            raise ValueError("page and items_per_page must be at least 1")
        mapper = mapper or self.default_mapper
        query = self._paged_select(model, statement, mapper)

        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total_items = int(self.execute_scalar(count_query) or 0)
        total_pages = -(-total_items // items_per_page)

        items = self.fetch(
            model,
            self._limit(query, items_per_page, (page - 1) * items_per_page),
            mapper,
        )
        return Page(page, items_per_page, total_items, total_pages, items)

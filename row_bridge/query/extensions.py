"""Bridge between SQLAlchemy Core statements and Sql.

Mapping conventions drive the statement (``for_type``, ``generate_select``,
``table_for``), and ``to_sql`` compiles it for a dialect and rewrites the
positional ``?`` placeholders as ``:p0, :p1, ...`` with the bindings in
order.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar, Union

from sqlalchemy import Select, Sequence, column, literal_column, table
from sqlalchemy.engine.interfaces import Dialect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import ClauseElement, TableClause
from sqlalchemy.sql.visitors import replacement_traverse

from row_bridge.core import compilers, settings
from row_bridge.core.enums import CompilerType
from row_bridge.core.exceptions import CustomCompilerMissingError, QueryCompilationError
from row_bridge.core.params import rewrite_positional
from row_bridge.core.sql import Sql
from row_bridge.mapping.poco_data import PocoData
from row_bridge.mapping.protocol import NameMapper

logger = logging.getLogger(__name__)

Q = TypeVar("Q", bound=ClauseElement)

CompilerSpec = Union[CompilerType, str, Dialect, type, None]


def resolve_compiler(compiler: CompilerSpec = None) -> Dialect:
    """Turn a compiler argument into a dialect instance.

    ``None`` selects the process-wide default. A CompilerType (or its value)
    selects a built-in compiler, or the custom compiler for CUSTOM. A dialect
    class is instantiated; a dialect instance is used as-is.
    """
    if compiler is None:
        compiler = settings.get_default_compiler_type()
    if isinstance(compiler, str):
        compiler = CompilerType(compiler)

    if isinstance(compiler, CompilerType):
        if compiler is CompilerType.CUSTOM:
            custom = settings.get_custom_compiler()
            if custom is None:
                raise CustomCompilerMissingError()
            return custom
        return compilers.get(compiler)

    if isinstance(compiler, type):
        return compilers.build_compiler(compiler)
    return compiler


def _mapper(mapper: NameMapper | None) -> NameMapper:
    return mapper if mapper is not None else settings.get_default_mapper()


def _type_of(target: Any) -> type:
    if target is None:
        raise ValueError("type must not be None")
    return target if isinstance(target, type) else type(target)


def has_select(query: ClauseElement) -> bool:
    """True if *query* is a SELECT with an explicit column list."""
    return isinstance(query, Select) and len(query.selected_columns) > 0


def has_from(query: ClauseElement) -> bool:
    """True if *query* reads from or writes to at least one table."""
    if isinstance(query, Select):
        return len(query.get_final_froms()) > 0
    return getattr(query, "table", None) is not None


def to_sql(query: ClauseElement, compiler: CompilerSpec = None) -> Sql:
    """Compile *query* and return it as an Sql statement.

    A SELECT without a column list reads ``*``.

    Raises:
        ValueError: If *query* is None.
        CustomCompilerMissingError: If CUSTOM is requested without a custom compiler.
        QueryCompilationError: If the statement cannot be compiled.
    """
    if query is None:
        raise ValueError("query must not be None")

    dialect = resolve_compiler(compiler)
    if dialect.paramstyle != compilers.COMPILER_PARAMSTYLE:
        raise QueryCompilationError(
            f"compiler {type(dialect).__name__} uses paramstyle '{dialect.paramstyle}', "
            f"expected '{compilers.COMPILER_PARAMSTYLE}'"
        )

    if isinstance(query, Select) and not has_select(query):
        if not has_from(query):
            raise QueryCompilationError("a SELECT needs a FROM clause or a column list")
        query = query.with_only_columns(literal_column("*"))

    try:
        compiled = query.compile(dialect=dialect, compile_kwargs={"render_postcompile": True})
        values = compiled.params
        bindings = tuple(values[name] for name in compiled.positiontup or ())
    except SQLAlchemyError as e:
        raise QueryCompilationError(str(e)) from e

    brackets = dialect.identifier_preparer.initial_quote == "["
    text, placeholder_count = rewrite_positional(compiled.string, brackets=brackets)
    if placeholder_count != len(bindings):
        raise QueryCompilationError(
            f"{placeholder_count} placeholders but {len(bindings)} bindings"
        )

    if settings.get_settings().log_sql:
        logger.debug("Compiled [%s] %s with %d bindings", dialect.name, text, len(bindings))
    return Sql(text, bindings)


def for_type(query: Select, cls: type, mapper: NameMapper | None = None) -> Select:
    """Select from the table mapped to *cls*, replacing any existing FROM.

    Columns bound to a replaced table follow it to the mapped table.

    Raises:
        TypeError: If *query* is not a SELECT.
        ValueError: If the existing FROM is a join or subquery.
    """
    if query is None:
        raise ValueError("query must not be None")
    if not isinstance(query, Select):
        raise TypeError(f"for_type needs a SELECT, got {type(query).__name__}; use table_for")
    info = _mapper(mapper).table_info(_type_of(cls))
    mapped = table(info.table_name)

    froms = query.get_final_froms()
    if not froms:
        return query.select_from(mapped)
    if not all(isinstance(f, TableClause) for f in froms):
        raise ValueError("for_type can only replace a FROM made of plain tables")

    def _replace(element: Any) -> TableClause | None:
        return mapped if any(element is f for f in froms) else None

    return replacement_traverse(query, {}, _replace)  # type: ignore[no-any-return]


def for_object(query: Select, obj: Any, mapper: NameMapper | None = None) -> Select:
    """Select from the table mapped to the class of *obj*."""
    if obj is None:
        raise ValueError("obj must not be None")
    return for_type(query, type(obj), mapper)


def generate_select(query: Q, target: Any, mapper: NameMapper | None = None) -> Q:
    """Fill in the column list and table of a SELECT from *target*'s mapping.

    *target* is a class or an instance. A query that already selects
    columns, or is not a SELECT, is returned unchanged. A class with no
    mapped columns selects ``NULL``; one whose columns are all result
    columns keeps an empty column list, which compiles to ``*``. The mapped
    table is only added when the query has no FROM.
    """
    if query is None:
        raise ValueError("query must not be None")
    if not isinstance(query, Select) or has_select(query):
        return query

    poco = PocoData.for_type(_type_of(target), _mapper(mapper))
    if not poco.columns:
        query = query.with_only_columns(literal_column("NULL"))
    elif poco.query_columns:
        query = query.with_only_columns(*(column(name) for name in poco.query_columns))

    if not has_from(query):
        query = query.select_from(table(poco.table_info.table_name))
    return query  # type: ignore[return-value]


def table_for(target: Any, mapper: NameMapper | None = None) -> TableClause:
    """Lightweight table carrying every mapped column of *target*.

    Use it as the target of ``insert()``, ``update()`` and ``delete()``.
    """
    poco = PocoData.for_type(_type_of(target), _mapper(mapper))
    return table(poco.table_info.table_name, *(column(name) for name in poco.columns))


def values_for(
    obj: Any,
    mapper: NameMapper | None = None,
    *,
    include_primary_key: bool | None = None,
) -> dict[str, Any]:
    """Column values of *obj*, ready for ``insert().values()`` / ``update().values()``.

    Result columns are skipped. The primary key is skipped when it is
    auto-incremented, unless *include_primary_key* says otherwise. A skipped
    primary key with a sequence name takes the sequence's next value instead,
    unless *include_primary_key* is False.
    """
    if obj is None:
        raise ValueError("obj must not be None")
    poco = PocoData.for_type(type(obj), _mapper(mapper))
    info = poco.table_info
    use_sequence = include_primary_key is None and info.sequence_name is not None
    if include_primary_key is None:
        include_primary_key = not info.auto_increment

    values: dict[str, Any] = {}
    for name, poco_column in poco.columns.items():
        if poco_column.result_column:
            continue
        if name == info.primary_key and not include_primary_key:
            if use_sequence:
                values[name] = Sequence(info.sequence_name).next_value()
            continue
        values[name] = getattr(obj, poco_column.field_name)
    return values

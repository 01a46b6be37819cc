"""row-bridge - drive SQLAlchemy Core queries from micro-ORM mapping conventions."""

from __future__ import annotations

from row_bridge.core.enums import CompilerType, DatabaseBackend
from row_bridge.core.exceptions import (
    ColumnMismatchError,
    CompilerError,
    CompilerNotFoundError,
    CustomCompilerMissingError,
    ExecutionError,
    InvalidProviderError,
    MappingError,
    MultipleRowsError,
    NoRowsError,
    ParameterBindingError,
    QueryCompilationError,
    RowBridgeError,
)
from row_bridge.core.settings import BridgeSettings
from row_bridge.core.sql import Sql
from row_bridge.database import Database, Page
from row_bridge.mapping import (
    Column,
    ConventionMapper,
    Ignore,
    Inflector,
    ModelMapper,
    PocoData,
    ResultColumn,
    UnderscoreMapper,
    explicit_columns,
    primary_key,
    table_name,
)
from row_bridge.query import (
    for_object,
    for_type,
    generate_select,
    has_from,
    has_select,
    table_for,
    to_sql,
    values_for,
)

__all__ = [
    # Statements
    "Sql",
    # Database
    "Database",
    "Page",
    # Query
    "to_sql",
    "for_type",
    "for_object",
    "generate_select",
    "table_for",
    "values_for",
    "has_from",
    "has_select",
    # Mapping
    "ConventionMapper",
    "UnderscoreMapper",
    "Inflector",
    "PocoData",
    "ModelMapper",
    "Column",
    "ResultColumn",
    "Ignore",
    "table_name",
    "primary_key",
    "explicit_columns",
    # Configuration
    "BridgeSettings",
    # Enums
    "CompilerType",
    "DatabaseBackend",
    # Exceptions
    "RowBridgeError",
    "CompilerError",
    "CompilerNotFoundError",
    "CustomCompilerMissingError",
    "InvalidProviderError",
    "QueryCompilationError",
    "MappingError",
    "ColumnMismatchError",
    "ExecutionError",
    "ParameterBindingError",
    "NoRowsError",
    "MultipleRowsError",
]

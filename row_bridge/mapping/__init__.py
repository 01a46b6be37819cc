"""Mapping layer - class shape to table/column names, rows to typed objects."""

from __future__ import annotations

from row_bridge.mapping.conventions import (
    Column,
    ColumnInfo,
    ConventionMapper,
    Ignore,
    Inflector,
    ResultColumn,
    TableInfo,
    UnderscoreMapper,
    explicit_columns,
    primary_key,
    table_name,
)
from row_bridge.mapping.poco_data import PocoColumn, PocoData
from row_bridge.mapping.model import ModelMapper
from row_bridge.mapping.protocol import NameMapper, RowMapper

__all__ = [
    "ConventionMapper",
    "UnderscoreMapper",
    "Inflector",
    "TableInfo",
    "ColumnInfo",
    "Column",
    "ResultColumn",
    "Ignore",
    "table_name",
    "primary_key",
    "explicit_columns",
    "PocoData",
    "PocoColumn",
    "ModelMapper",
    "NameMapper",
    "RowMapper",
]

"""Mapper protocols.

NameMapper resolves table and column names for a class; ConventionMapper is
the built-in implementation. RowMapper turns row dicts into objects;
ModelMapper is the built-in implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from row_bridge.mapping.conventions import ColumnInfo, TableInfo

T = TypeVar("T", covariant=True)


@runtime_checkable
class NameMapper(Protocol):
    """Table and column naming protocol."""

    def table_info(self, cls: type) -> TableInfo:
        """Resolve the table mapping for a class."""
        ...

    def column_info(self, cls: type, field_name: str, annotation: Any = ...) -> ColumnInfo | None:
        """Resolve one field's column mapping, or None when it has no column."""
        ...


class RowMapper(Protocol[T]):
    """Row-to-object mapping protocol."""

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row dict to a target object."""
        ...

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map multiple row dicts to a list of target objects."""
        ...

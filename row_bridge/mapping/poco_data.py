"""Per-class mapping metadata.

PocoData combines a ConventionMapper with a class's fields into the table
name, the ordered column list and the columns used for auto-generated
SELECT statements. It is resolved on every call; nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from row_bridge.mapping.conventions import ColumnInfo, ConventionMapper, TableInfo, model_fields


@dataclass(frozen=True)
class PocoColumn:
    """A mapped field and its column metadata."""

    field_name: str
    column_info: ColumnInfo

    @property
    def column_name(self) -> str:
        return self.column_info.column_name

    @property
    def result_column(self) -> bool:
        return self.column_info.result_column


@dataclass(frozen=True)
class PocoData:
    """Resolved table and column mapping for one class."""

    type: type
    table_info: TableInfo
    columns: dict[str, PocoColumn] = field(default_factory=dict)  # column_name -> PocoColumn

    @classmethod
    def for_type(cls, target: type, mapper: ConventionMapper) -> PocoData:
        """Resolve the mapping of *target* through *mapper*."""
        if target is None:
            raise ValueError("type must not be None")
        if mapper is None:
            raise ValueError("mapper must not be None")

        columns: dict[str, PocoColumn] = {}
        for field_name, annotation in model_fields(target):
            info = mapper.column_info(target, field_name, annotation)
            if info is not None:
                columns[info.column_name] = PocoColumn(field_name, info)

        return cls(target, mapper.table_info(target), columns)

    @property
    def query_columns(self) -> list[str]:
        """Column names selected by generated queries (result columns excluded)."""
        return [name for name, column in self.columns.items() if not column.result_column]

    @property
    def field_aliases(self) -> dict[str, str]:
        """Column name -> field name, for reading rows back into the class."""
        return {name: column.field_name for name, column in self.columns.items()}

"""Row-to-model mapper.

Supports dataclasses, Pydantic models, and plain classes. Column names are
translated back to field names through the class's convention mapping.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from row_bridge.core import settings
from row_bridge.core.exceptions import ColumnMismatchError
from row_bridge.mapping.conventions import ConventionMapper, model_fields
from row_bridge.mapping.poco_data import PocoData

T = TypeVar("T")


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


class ModelMapper(Generic[T]):
    """Row-to-model mapper driven by convention mapping.

    Detection order:
    1. Pydantic BaseModel -> model_validate(row)
    2. dataclass / plain class -> target_class(**row)

    Columns that match no field are dropped when the class declares its
    fields. Naive datetimes read into a field marked ``force_to_utc`` are
    tagged as UTC.

    Args:
        target_class: The class to construct from row data.
        aliases: Optional column-name to field-name mapping, applied on top
            of the convention mapping.
        mapper: Convention mapper; defaults to the process-wide default.
    """

    def __init__(
        self,
        target_class: type[T],
        aliases: dict[str, str] | None = None,
        mapper: ConventionMapper | None = None,
    ) -> None:
        self._target_class = target_class
        self._is_pydantic = _is_pydantic_model(target_class)
        poco = PocoData.for_type(target_class, mapper or settings.get_default_mapper())
        self._aliases = {**poco.field_aliases, **(aliases or {})}
        self._fields = {name for name, _annotation in model_fields(target_class)}
        self._utc_fields = {c.field_name for c in poco.columns.values() if c.column_info.force_to_utc}

    def _apply_aliases(self, row: dict[str, Any]) -> dict[str, Any]:
        """Rename columns to field names and drop unmatched columns."""
        result = {}
        for key, value in row.items():
            mapped_key = self._aliases.get(key, key)
            if self._fields and mapped_key not in self._fields:
                continue
            if (
                mapped_key in self._utc_fields
                and isinstance(value, datetime)
                and value.tzinfo is None
            ):
                value = value.replace(tzinfo=timezone.utc)
            result[mapped_key] = value
        return result

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row to target_class instance."""
        row = self._apply_aliases(row)

        if self._is_pydantic:
            try:
                return self._target_class.model_validate(row)  # type: ignore[attr-defined, no-any-return]
            except Exception as e:
                raise ColumnMismatchError(
                    self._target_class.__name__,
                    [str(e)],
                ) from e

        try:
            return self._target_class(**row)
        except TypeError as e:
            raise ColumnMismatchError(
                self._target_class.__name__,
                [str(e)],
            ) from e

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one."""
        return [self.map_one(row) for row in rows]

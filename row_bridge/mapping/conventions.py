"""Convention-based table and column name resolution.

A ConventionMapper reads a class's shape (dataclass fields, Pydantic model
fields, annotations or ``__init__`` parameters) and turns it into table and
column names. Names can be overridden with class decorators and
``typing.Annotated`` markers::

    @table_name("people")
    @dataclass
    class Person:
        id: int
        full_name: Annotated[str, Column("name")]
        age: Annotated[int, ResultColumn()]
        cache: Annotated[dict, Ignore()] = field(default_factory=dict)
"""

from __future__ import annotations

import dataclasses
import inspect
import re
import typing
from dataclasses import dataclass
from typing import Any, Annotated, Callable, ClassVar, TypeVar

C = TypeVar("C", bound=type)

_TABLE_NAME_ATTR = "__row_bridge_table_name__"
_PRIMARY_KEY_ATTR = "__row_bridge_primary_key__"
_EXPLICIT_COLUMNS_ATTR = "__row_bridge_explicit_columns__"


# --- Resolved metadata ---


@dataclass(frozen=True)
class TableInfo:
    """Table-level mapping for a class."""

    table_name: str
    primary_key: str
    auto_increment: bool = True
    sequence_name: str | None = None


@dataclass(frozen=True)
class ColumnInfo:
    """Column-level mapping for one field."""

    column_name: str
    result_column: bool = False
    force_to_utc: bool = False


# --- Markers ---


@dataclass(frozen=True)
class Column:
    """Field marker: map to *name* instead of the inflected field name."""

    name: str | None = None
    result_column: bool = False
    force_to_utc: bool = False


@dataclass(frozen=True)
class ResultColumn(Column):
    """Field marker: read from result rows but never auto-selected."""

    result_column: bool = True


@dataclass(frozen=True)
class Ignore:
    """Field marker: the field has no column."""


@dataclass(frozen=True)
class _PrimaryKey:
    name: str
    auto_increment: bool
    sequence_name: str | None


def table_name(name: str) -> Callable[[C], C]:
    """Class decorator overriding the mapped table name."""

    def decorate(cls: C) -> C:
        setattr(cls, _TABLE_NAME_ATTR, name)
        return cls

    return decorate


def primary_key(
    name: str,
    auto_increment: bool = True,
    sequence_name: str | None = None,
) -> Callable[[C], C]:
    """Class decorator naming the primary key column."""

    def decorate(cls: C) -> C:
        setattr(cls, _PRIMARY_KEY_ATTR, _PrimaryKey(name, auto_increment, sequence_name))
        return cls

    return decorate


def explicit_columns(cls: C) -> C:
    """Class decorator: only fields marked with Column are mapped."""
    setattr(cls, _EXPLICIT_COLUMNS_ATTR, True)
    return cls


# --- Inflection ---


class Inflector:
    """Word inflections used by name conventions."""

    @staticmethod
    def underscore(word: str) -> str:
        """``SomeID`` -> ``some_id``, ``SomeClass`` -> ``some_class``."""
        word = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", word)
        word = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", word)
        return re.sub(r"[-\s]", "_", word).lower()

    @staticmethod
    def pascalize(word: str) -> str:
        """``some_class`` -> ``SomeClass``."""
        return "".join(part[:1].upper() + part[1:] for part in re.split(r"[_\-\s]+", word) if part)

    @classmethod
    def camelize(cls, word: str) -> str:
        """``some_class`` -> ``someClass``."""
        pascal = cls.pascalize(word)
        return pascal[:1].lower() + pascal[1:]

    @staticmethod
    def pluralize(word: str) -> str:
        """Naive English plural: ``box`` -> ``boxes``, ``city`` -> ``cities``."""
        if not word:
            return word
        lower = word.lower()
        if lower.endswith(("s", "x", "z", "ch", "sh")):
            return word + "es"
        if lower.endswith("y") and lower[-2:-1] not in ("a", "e", "i", "o", "u"):
            return word[:-1] + "ies"
        return word + "s"


Inflection = Callable[[Inflector, str], str]


def _no_inflection(_inflector: Inflector, name: str) -> str:
    return name


# --- Class shape ---


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotations
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
        return hints


def _is_class_var(annotation: Any) -> bool:
    if typing.get_origin(annotation) is Annotated:
        annotation = typing.get_args(annotation)[0]
    if annotation is ClassVar or typing.get_origin(annotation) is ClassVar:
        return True
    return isinstance(annotation, str) and annotation.startswith(("ClassVar", "typing.ClassVar"))


def model_fields(cls: type) -> list[tuple[str, Any]]:
    """Return ``(field_name, annotation)`` pairs in declaration order.

    Detection order:
    1. Pydantic BaseModel -> model_fields
    2. dataclass -> dataclasses.fields
    3. Annotated class attributes across the MRO
    4. ``__init__`` parameters
    """
    pydantic_fields = getattr(cls, "model_fields", None)
    if isinstance(pydantic_fields, dict):
        # Pydantic keeps unrecognised Annotated extras in FieldInfo.metadata
        return [
            (name, Annotated[(info.annotation, *info.metadata)] if info.metadata else info.annotation)
            for name, info in pydantic_fields.items()
            if not name.startswith("_")
        ]

    hints = _type_hints(cls)

    if dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
    else:
        names = []
        for klass in reversed(cls.__mro__):
            for name in getattr(klass, "__annotations__", {}):
                if name not in names:
                    names.append(name)
        if not names:
            return _init_fields(cls)

    return [
        (name, hints.get(name, Any))
        for name in names
        if not name.startswith("_") and not _is_class_var(hints.get(name))
    ]


def _init_fields(cls: type) -> list[tuple[str, Any]]:
    if cls.__init__ is object.__init__:
        return []
    try:
        signature = inspect.signature(cls.__init__)
    except (TypeError, ValueError):
        return []
    fields = []
    for param in list(signature.parameters.values())[1:]:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD) or param.name.startswith("_"):
            continue
        annotation = Any if param.annotation is param.empty else param.annotation
        fields.append((param.name, annotation))
    return fields


def field_markers(annotation: Any) -> tuple[Any, ...]:
    """Return the Annotated metadata attached to *annotation*."""
    if typing.get_origin(annotation) is Annotated:
        return tuple(annotation.__metadata__)
    return ()


# --- Mapper ---


class ConventionMapper:
    """Resolves table and column names from class shape and markers.

    Args:
        inflect_table_name: ``(inflector, class_name) -> table_name``.
        inflect_column_name: ``(inflector, field_name) -> column_name``.
    """

    inflector = Inflector()

    def __init__(
        self,
        inflect_table_name: Inflection | None = None,
        inflect_column_name: Inflection | None = None,
    ) -> None:
        self.inflect_table_name: Inflection = inflect_table_name or _no_inflection
        self.inflect_column_name: Inflection = inflect_column_name or _no_inflection

    def table_info(self, cls: type) -> TableInfo:
        """Resolve the table mapping for *cls*."""
        if cls is None:
            raise ValueError("cls must not be None")

        name = getattr(cls, _TABLE_NAME_ATTR, None)
        if name is None:
            name = self.inflect_table_name(self.inflector, cls.__name__)

        marker: _PrimaryKey | None = getattr(cls, _PRIMARY_KEY_ATTR, None)
        if marker is not None:
            return TableInfo(name, marker.name, marker.auto_increment, marker.sequence_name)

        return TableInfo(name, self._guess_primary_key(cls))

    def column_info(self, cls: type, field_name: str, annotation: Any = Any) -> ColumnInfo | None:
        """Resolve the column mapping for one field, or None if it is not mapped."""
        markers = field_markers(annotation)
        if any(isinstance(m, Ignore) for m in markers):
            return None

        column = next((m for m in markers if isinstance(m, Column)), None)
        if column is None:
            if getattr(cls, _EXPLICIT_COLUMNS_ATTR, False):
                return None
            column = Column()

        name = column.name or self.inflect_column_name(self.inflector, field_name)
        return ColumnInfo(name, column.result_column, column.force_to_utc)

    def _guess_primary_key(self, cls: type) -> str:
        candidates = ("id", f"{cls.__name__}id".lower(), f"{cls.__name__}_id".lower())
        for field_name, _annotation in model_fields(cls):
            if field_name.lower() in candidates:
                return self.inflect_column_name(self.inflector, field_name)
        return self.inflect_column_name(self.inflector, "id")


class UnderscoreMapper(ConventionMapper):
    """ConventionMapper that snake_cases table and column names."""

    def __init__(self) -> None:
        super().__init__(
            inflect_table_name=lambda i, name: i.underscore(name),
            inflect_column_name=lambda i, name: i.underscore(name),
        )

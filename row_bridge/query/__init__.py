"""Query layer - drive SQLAlchemy Core statements from mappings and convert them to Sql."""

from __future__ import annotations

from row_bridge.query.extensions import (
    for_object,
    for_type,
    generate_select,
    has_from,
    has_select,
    resolve_compiler,
    table_for,
    to_sql,
    values_for,
)

__all__ = [
    "to_sql",
    "resolve_compiler",
    "for_type",
    "for_object",
    "generate_select",
    "table_for",
    "values_for",
    "has_from",
    "has_select",
]

"""Parameterized SQL statement.

Placeholders use ``:name`` syntax. Positional arguments bind to the
generated names ``:p0``, ``:p1``, ... in order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

POSITIONAL_PREFIX = "p"


def positional_name(index: int) -> str:
    """Placeholder name for the positional argument at *index*."""
    return f"{POSITIONAL_PREFIX}{index}"


@dataclass(frozen=True)
class Sql:
    """A SQL statement plus the values bound to its positional placeholders."""

    sql: str
    args: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        if self.sql is None:
            raise ValueError("sql must not be None")
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    @property
    def params(self) -> dict[str, Any]:
        """Arguments keyed by placeholder name (``p0``, ``p1``, ...)."""
        return {positional_name(i): value for i, value in enumerate(self.args)}

    def __str__(self) -> str:
        return self.sql

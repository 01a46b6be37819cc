"""SQL placeholder translation.

Rewrites the query builder's positional ``?`` placeholders into ``:name``
placeholders, and converts ``:name`` parameters to the driver's paramstyle.
String literals, quoted identifiers and PostgreSQL ``::typecast`` syntax
are left untouched.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from row_bridge.core.exceptions import ParameterBindingError
from row_bridge.core.sql import POSITIONAL_PREFIX

# Matches :name but not ::typecast and not inside words
# Negative lookbehind for : (handles ::), \w (handles mid-word colons)
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Single-quoted literals and the identifier quoting styles of the supported dialects
_QUOTED_PATTERN = re.compile(
    r"'(?:[^'\\]|\\.)*'"
    r'|"(?:[^"]|"")*"'
    r"|`(?:[^`]|``)*`"
)

# SQL Server also quotes identifiers with [brackets]; elsewhere [ is an array subscript
_BRACKETED_PATTERN = re.compile(_QUOTED_PATTERN.pattern + r"|\[(?:[^\]]|\]\])*\]")

_PARAMSTYLES = ("named", "pyformat", "qmark", "format")


def _segments(sql: str, brackets: bool = False) -> list[tuple[str, bool]]:
    """Split *sql* into ``(text, is_quoted)`` segments."""
    pattern = _BRACKETED_PATTERN if brackets else _QUOTED_PATTERN
    parts: list[tuple[str, bool]] = []
    last_end = 0

    for match in pattern.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append((sql[last_end:start], False))
        parts.append((match.group(), True))
        last_end = end

    if last_end < len(sql):
        parts.append((sql[last_end:], False))

    return parts


@lru_cache(maxsize=256)
def rewrite_positional(
    sql: str,
    prefix: str = POSITIONAL_PREFIX,
    brackets: bool = False,
) -> tuple[str, int]:
    """Replace each ``?`` placeholder with ``:<prefix><index>``.

    Indexes start at 0 and follow textual order. Set *brackets* for dialects
    that quote identifiers as ``[name]``.

    Returns:
        Tuple of (rewritten_sql, placeholder_count).
    """
    count = 0

    def _next(_match: re.Match[str]) -> str:
        nonlocal count
        name = f":{prefix}{count}"
        count += 1
        return name

    parts = [
        text if quoted else re.sub(r"\?", _next, text)
        for text, quoted in _segments(sql, brackets)
    ]
    return "".join(parts), count


@lru_cache(maxsize=256)
def param_names(sql: str) -> tuple[str, ...]:
    """Return the ``:name`` parameters of *sql* in textual order (with repeats)."""
    names: list[str] = []
    for text, quoted in _segments(sql):
        if not quoted:
            names.extend(_PARAM_PATTERN.findall(text))
    return tuple(names)


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert :name parameters to the target param style.

    Args:
        sql: SQL string with :name parameters.
        paramstyle: Target style - 'named' (no conversion), 'pyformat' (%(name)s),
            'qmark' (?) or 'format' (%s).

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        return sql
    if paramstyle not in _PARAMSTYLES:
        raise ValueError(f"Unsupported paramstyle: {paramstyle}")
    return _convert(sql, paramstyle)


@lru_cache(maxsize=256)
def _convert(sql: str, paramstyle: str) -> str:
    """Convert :name params outside quoted segments."""
    if paramstyle == "pyformat":
        replacement = r"%(\1)s"
    elif paramstyle == "format":
        replacement = "%s"
    else:
        replacement = "?"

    # Percent-style drivers scan literals too, so escape every literal %
    escape = paramstyle in ("pyformat", "format")

    parts: list[str] = []
    for text, quoted in _segments(sql):
        if escape:
            text = text.replace("%", "%%")
        parts.append(text if quoted else _PARAM_PATTERN.sub(replacement, text))
    return "".join(parts)


def bind_params(
    sql: str,
    params: dict[str, Any] | None,
    paramstyle: str,
) -> tuple[str, dict[str, Any] | tuple[Any, ...]]:
    """Return ``(driver_sql, driver_params)`` for *sql* and its named *params*.

    Named styles keep the mapping; positional styles get a tuple ordered by
    placeholder appearance.

    Raises:
        ParameterBindingError: If a placeholder has no value in *params*.
    """
    params = params or {}
    driver_sql = normalize_params(sql, paramstyle)

    if paramstyle in ("named", "pyformat"):
        missing = [name for name in param_names(sql) if name not in params]
        if missing:
            raise ParameterBindingError(sql, f"missing values for {sorted(set(missing))}")
        return driver_sql, dict(params)

    try:
        return driver_sql, tuple(params[name] for name in param_names(sql))
    except KeyError as e:
        raise ParameterBindingError(sql, f"missing value for {e.args[0]!r}") from e

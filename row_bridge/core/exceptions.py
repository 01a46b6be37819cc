"""row-bridge exception hierarchy.

All exceptions are row-bridge specific. Raw driver and query-builder
exceptions are always chained, never exposed directly to callers.
"""

from __future__ import annotations


class RowBridgeError(Exception):
    """Base exception for all row-bridge errors."""


# --- Compiler ---


class CompilerError(RowBridgeError):
    """Base for compiler selection and compilation errors."""


class CompilerNotFoundError(CompilerError, ValueError):
    """Raised when no built-in compiler exists for a compiler type."""

    def __init__(self, compiler_type: object) -> None:
        self.compiler_type = compiler_type
        super().__init__(f"No compiler found for type '{compiler_type}'")


class CustomCompilerMissingError(CompilerError, RuntimeError):
    """Raised when CUSTOM is requested but no custom compiler was provided."""

    def __init__(self) -> None:
        super().__init__("Compiler type is 'custom' but no custom compiler was provided")


class InvalidProviderError(CompilerError, TypeError):
    """Raised when a compiler is registered for something that is not a backend."""

    def __init__(self, provider: object) -> None:
        self.provider = provider
        super().__init__(f"'{provider!r}' is not a DatabaseBackend")


class QueryCompilationError(CompilerError):
    """Raised when a statement cannot be compiled to SQL."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Cannot compile query: {detail}")


# --- Mapping ---


class MappingError(RowBridgeError):
    """Base for mapping errors."""


class ColumnMismatchError(MappingError):
    """Raised when required fields cannot be mapped from row columns."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: missing fields {missing_fields}")


# --- Execution ---


class ExecutionError(RowBridgeError):
    """Base for statement execution errors."""


class ParameterBindingError(ExecutionError):
    """Raised on parameter binding failures."""

    def __init__(self, statement: str, detail: str) -> None:
        self.statement = statement
        super().__init__(f"Parameter binding error for '{statement}': {detail}")


class NoRowsError(ExecutionError):
    """Raised when single or first finds no rows."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} found no rows (expected at least 1)")


class MultipleRowsError(ExecutionError):
    """Raised when single or single_or_default encounters more than one row."""

    def __init__(self, operation: str, row_count: int) -> None:
        self.operation = operation
        self.row_count = row_count
        super().__init__(f"{operation} returned more than one row (read {row_count})")

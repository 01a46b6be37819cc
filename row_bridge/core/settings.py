"""Process-wide defaults.

BridgeSettings loads the initial values from the environment
(``ROW_BRIDGE_DEFAULT_COMPILER``, ``ROW_BRIDGE_LOG_SQL``). Runtime changes go
through the setters below, which serialize assignment on one lock.
"""

from __future__ import annotations

import logging
import threading

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.interfaces import Dialect

from row_bridge.core.enums import CompilerType
from row_bridge.mapping.conventions import ConventionMapper

logger = logging.getLogger(__name__)


class BridgeSettings(BaseSettings):
    """Environment-driven configuration."""

    model_config = SettingsConfigDict(env_prefix="ROW_BRIDGE_", extra="ignore")

    default_compiler: CompilerType = CompilerType.SQLSERVER
    log_sql: bool = False


_lock = threading.Lock()
_settings = BridgeSettings()
_default_compiler_type: CompilerType = _settings.default_compiler
_custom_compiler: Dialect | None = None
_default_mapper: ConventionMapper = ConventionMapper()


def get_settings() -> BridgeSettings:
    return _settings


def get_default_compiler_type() -> CompilerType:
    """Compiler used when a conversion does not name one."""
    return _default_compiler_type


def set_default_compiler_type(value: CompilerType) -> None:
    """Change the default compiler type.

    Switching to a different, non-CUSTOM type drops the custom compiler.
    """
    global _default_compiler_type, _custom_compiler
    value = CompilerType(value)
    with _lock:
        if value != _default_compiler_type and value != CompilerType.CUSTOM:
            _custom_compiler = None
        _default_compiler_type = value
    logger.debug("Default compiler type set to %s", value.value)


def get_custom_compiler() -> Dialect | None:
    """Custom compiler used when the default type is CUSTOM."""
    return _custom_compiler


def set_custom_compiler(compiler: Dialect | None) -> None:
    """Set the custom compiler; a non-None compiler also makes CUSTOM the default."""
    global _default_compiler_type, _custom_compiler
    with _lock:
        if compiler is not None:
            _default_compiler_type = CompilerType.CUSTOM
        _custom_compiler = compiler
    logger.debug("Custom compiler set to %s", type(compiler).__name__ if compiler else None)


def get_default_mapper() -> ConventionMapper:
    """Mapper used to resolve table and column names when none is given."""
    return _default_mapper


def set_default_mapper(mapper: ConventionMapper) -> None:
    global _default_mapper
    if mapper is None:
        raise ValueError("mapper must not be None")
    with _lock:
        _default_mapper = mapper


def reset() -> None:
    """Restore the defaults loaded at import time."""
    global _default_compiler_type, _custom_compiler, _default_mapper
    with _lock:
        _default_compiler_type = _settings.default_compiler
        _custom_compiler = None
        _default_mapper = ConventionMapper()

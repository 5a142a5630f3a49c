"""
Core building blocks: configuration, errors, drivers, parameter typing, the
injection guard and the query cache.
"""

from .cache import DatabaseCache
from .config import DatabaseConfig, DriverEnum, Settings
from .connect import DRIVERS, Driver, connect, cursor_to_dicts, execute, get_driver
from .errors import DatabaseError, DatabaseStatementError, ErrorKind
from .param_type import ParamType, SqlParameter, deduce_param_type, typed_parameters
from .safety import find_sql_injection, validate_sql_query

__all__ = [
    "DatabaseCache",
    "DatabaseConfig",
    "DriverEnum",
    "Settings",
    "DRIVERS",
    "Driver",
    "connect",
    "cursor_to_dicts",
    "execute",
    "get_driver",
    "DatabaseError",
    "DatabaseStatementError",
    "ErrorKind",
    "ParamType",
    "SqlParameter",
    "deduce_param_type",
    "typed_parameters",
    "find_sql_injection",
    "validate_sql_query",
]

"""
symnext_db: build parameterized SQL with chained builders, run it through an
injection guard, and read results through strict forward-only cursors.
"""

from .core.config import DatabaseConfig, DriverEnum, Settings
from .core.errors import DatabaseError, DatabaseStatementError, ErrorKind
from .database import Database, QueryLogEntry
from .reducer import ArrayReducer
from .results import DatabaseStatementResult, DatabaseTabularResult, FetchOrientation, FetchType
from .statements import STATEMENT_CLASSES, DatabaseStatement, DatabaseSubQuery
from .transaction import DatabaseTransaction, DatabaseTransactionResult

__all__ = [
    "Database",
    "DatabaseConfig",
    "DriverEnum",
    "Settings",
    "DatabaseError",
    "DatabaseStatementError",
    "ErrorKind",
    "QueryLogEntry",
    "ArrayReducer",
    "DatabaseStatementResult",
    "DatabaseTabularResult",
    "FetchOrientation",
    "FetchType",
    "STATEMENT_CLASSES",
    "DatabaseStatement",
    "DatabaseSubQuery",
    "DatabaseTransaction",
    "DatabaseTransactionResult",
]

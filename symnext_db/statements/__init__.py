"""
Statement builders, one class per SQL statement kind.

``STATEMENT_CLASSES`` maps a kind name to its class; ``Database.statement_for``
uses it to build statements from a kind chosen at runtime.
"""

from .alter import DatabaseAlter
from .base import DatabaseStatement
from .create import DatabaseCreate
from .delete import DatabaseDelete
from .insert import DatabaseInsert
from .query import DatabaseQuery, DatabaseSubQuery
from .set import DatabaseSet
from .show import DatabaseDescribe, DatabaseShow
from .table import DatabaseDrop, DatabaseOptimize, DatabaseRename, DatabaseTruncate
from .update import DatabaseUpdate

STATEMENT_CLASSES: dict[str, type[DatabaseStatement]] = {
    "statement": DatabaseStatement,
    "select": DatabaseQuery,
    "insert": DatabaseInsert,
    "update": DatabaseUpdate,
    "delete": DatabaseDelete,
    "create": DatabaseCreate,
    "alter": DatabaseAlter,
    "drop": DatabaseDrop,
    "show": DatabaseShow,
    "describe": DatabaseDescribe,
    "rename": DatabaseRename,
    "optimize": DatabaseOptimize,
    "truncate": DatabaseTruncate,
    "set": DatabaseSet,
}


def get_statement_class(kind: str) -> type[DatabaseStatement]:
    """Look up a statement class by kind name (``"select"``, ``"insert"``, ...)."""
    try:
        return STATEMENT_CLASSES[kind.lower()]
    except KeyError as e:
        raise ValueError(f"Unsupported statement kind: {kind}") from e


__all__ = [
    "STATEMENT_CLASSES",
    "get_statement_class",
    "DatabaseStatement",
    "DatabaseQuery",
    "DatabaseSubQuery",
    "DatabaseInsert",
    "DatabaseUpdate",
    "DatabaseDelete",
    "DatabaseCreate",
    "DatabaseAlter",
    "DatabaseDrop",
    "DatabaseShow",
    "DatabaseDescribe",
    "DatabaseRename",
    "DatabaseOptimize",
    "DatabaseTruncate",
    "DatabaseSet",
]

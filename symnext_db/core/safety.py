"""
Injection guard for serialized SQL.

A heuristic, defense-in-depth layer, not a parser: it scans the final SQL
text for substrings that have no business in a statement produced by the
builders (values always travel as bound parameters, identifiers are ticked).

Two modes:

- strict (every builder-made statement): reject ``--``, ``'``, ``"``, ``#``,
  ``/*``, ``*/`` and ``;`` anywhere in the text.
- non-strict (trusted scripts run through ``Database.import_sql``): only the
  quote-then-comment idiom (``'--``, ``';--``, ``' --``, ``'/*``) is rejected.

Usage::

    reason = find_sql_injection("SELECT 1; DROP TABLE x")
    # "Query contains illegal character: `;`."
    validate_sql_query(sql, strict=True)  # raises DatabaseStatementError
"""

from symnext_db.core.errors import DatabaseStatementError, ErrorKind

_INJECTION_PATTERNS = ("'--", "';--", "' --", "'/*")

# Checked in this order; the first hit is reported.
_STRICT_TOKENS = ("--", "'", '"', "#", "/*", "*/", ";")


def find_sql_injection(query: str, strict: bool = True) -> str | None:
    """Return the rejection reason for *query*, or None when it is acceptable."""
    for pattern in _INJECTION_PATTERNS:
        if pattern in query:
            return "Query contains SQL injection."
    if not strict:
        return None
    for token in _STRICT_TOKENS:
        if token in query:
            label = "characters" if token == "--" else "character"
            return f"Query contains illegal {label}: `{token}`."
    return None


def validate_sql_query(query: str, strict: bool = True) -> None:
    """Raise DatabaseStatementError (kind VALIDATION) when *query* is rejected."""
    reason = find_sql_injection(query, strict)
    if reason is not None:
        raise DatabaseStatementError(reason, kind=ErrorKind.VALIDATION, query=query)

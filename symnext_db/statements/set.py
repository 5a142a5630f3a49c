"""SET statements for session variables (``SET time_zone = :time_zone``)."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement

if TYPE_CHECKING:
    from symnext_db.database import Database

# names, @user_vars and @@session.system_vars
_VARIABLE = re.compile(r"^(@@?)?[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class DatabaseSet(DatabaseStatement):
    """``SET variable = :variable``. The variable name is emitted as is."""

    def __init__(self, db: Database, variable: str) -> None:
        super().__init__(db, "SET")
        if not _VARIABLE.match(variable):
            raise DatabaseStatementError(f"Invalid variable name: {variable}")
        self._variable = variable
        self.unsafe_append_sql_part("variable", variable)

    def get_statement_structure(self) -> list[str]:
        return ["statement", "variable", "value"]

    def value(self, value: Any) -> DatabaseSet:
        """Value to assign. Can only be called once."""
        self._require_once("value", "value")
        placeholder = self.bind_value("value", self._variable, value)
        self.unsafe_append_sql_part("value", f"= {placeholder}")
        return self

    def finalize(self) -> DatabaseSet:
        if not self.is_finalized() and not self.contains_sql_parts("value"):
            raise DatabaseStatementError("DatabaseSet needs a value")
        return super().finalize()

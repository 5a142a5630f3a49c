"""
Run a callback between BEGIN and COMMIT.

    result = db.transaction(lambda db: db.insert("tbl_x").values({...}).execute()).execute()
    if not result.success():
        log(result.error)

A raising callback rolls the transaction back; the exception is kept on the
result instead of propagating. A callback returning ``False`` also rolls back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from symnext_db.database import Database

logger = logging.getLogger(__name__)


class DatabaseTransactionResult:
    """Success flag of a transaction (and the error that aborted it, if any)."""

    def __init__(self, success: bool, error: BaseException | None = None) -> None:
        self._success = success
        self.error = error

    def success(self) -> bool:
        return self._success


class DatabaseTransaction:
    """Wraps *tx*, called with the Database handle, in one transaction."""

    def __init__(self, db: Database, tx: Callable[[Database], Any]) -> None:
        self._db = db
        self._tx = tx

    def execute(self) -> DatabaseTransactionResult:
        self._db.begin_transaction()
        try:
            outcome = self._tx(self._db)
        except Exception as e:
            self._db.roll_back()
            logger.warning("Transaction rolled back: %s", e)
            return DatabaseTransactionResult(False, error=e)
        except BaseException:
            # KeyboardInterrupt, SystemExit: roll back and let them propagate.
            self._db.roll_back()
            raise
        if outcome is False:
            self._db.roll_back()
            logger.warning("Transaction rolled back: callback returned False")
            return DatabaseTransactionResult(False)
        return DatabaseTransactionResult(self._db.commit())

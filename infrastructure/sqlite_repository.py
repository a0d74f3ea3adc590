from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from domain.errors import StorageError
from domain.expenses import Expense
from infrastructure.repositories import ExpenseRepository
from storage.sqlite_storage import SQLiteStorage

logger = logging.getLogger(__name__)


class SQLiteExpenseRepository(ExpenseRepository):
    """ExpenseRepository implementation backed by SQLite.

    Point operations use targeted statements. ``update`` of a missing id
    touches no rows and is a no-op; ``save_all`` upserts in one transaction.
    """

    backend_name = "sqlite"

    def __init__(self, db_path: str = "expenses.db", schema_path: str | None = None) -> None:
        try:
            self._storage = SQLiteStorage(db_path)
            self._storage.initialize_schema(schema_path)
        except (sqlite3.Error, OSError) as exc:
            logger.exception("Failed to open SQLite database %s", db_path)
            raise StorageError(f"Cannot open {db_path}", backend=self.backend_name) from exc
        self._conn = self._storage.connection
        # One connection is shared by every caller of this instance.
        self._lock = threading.RLock()

    def close(self) -> None:
        self._storage.close()

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except sqlite3.Error as exc:
                logger.error("SQLite %s failed: %s", action, exc)
                raise StorageError(f"SQLite {action} failed", backend=self.backend_name) from exc

    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        with self._guard(action):
            with self._conn:
                yield

    def create(self, expense: Expense) -> None:
        with self._transaction("insert"):
            self._storage.insert_expense(expense)

    def read(self, expense_id: int | str) -> Expense | None:
        with self._guard("select"):
            return self._storage.get_expense(expense_id)

    def update(self, expense: Expense) -> None:
        with self._transaction("update"):
            if self._storage.update_expense(expense) == 0:
                logger.debug("Update skipped, expense %s not found", expense.id)

    def delete_by_id(self, expense_id: int | str) -> None:
        with self._transaction("delete"):
            self._storage.delete_expense(expense_id)

    def load_all(self) -> list[Expense]:
        with self._guard("select"):
            return self._storage.get_expenses()

    def save_all(self, expenses: Iterable[Expense]) -> None:
        with self._transaction("bulk upsert"):
            for expense in expenses:
                self._storage.save_expense(expense)

    def find_by_merchant(self, merchant: str) -> list[Expense]:
        with self._guard("select"):
            return self._storage.find_by_merchant(merchant)

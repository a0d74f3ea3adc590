from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from domain.errors import StorageError
from domain.expenses import Expense
from infrastructure.repositories import ExpenseRepository
from storage.mongo_storage import MongoStorage

logger = logging.getLogger(__name__)


class MongoExpenseRepository(ExpenseRepository):
    """ExpenseRepository over a MongoDB collection.

    ``update`` is an upsert. Concurrency is left to the server and the
    client's connection pool.
    """

    backend_name = "mongo"

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017/",
        database: str = "expensesdb",
        collection: str = "expenses",
        *,
        server_selection_timeout_ms: int = 5000,
        client: MongoClient | None = None,
    ) -> None:
        with self._guard("connect"):
            self._storage = MongoStorage(
                uri,
                database,
                collection,
                server_selection_timeout_ms=server_selection_timeout_ms,
                client=client,
            )
        logger.info("Using MongoDB collection %s.%s", database, collection)

    def close(self) -> None:
        self._storage.close()

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except PyMongoError as exc:
            logger.error("MongoDB %s failed: %s", action, exc)
            raise StorageError(f"MongoDB {action} failed", backend=self.backend_name) from exc

    def ping(self) -> None:
        with self._guard("ping"):
            self._storage.ping()

    def create(self, expense: Expense) -> None:
        with self._guard("insert"):
            self._storage.insert_expense(expense)

    def read(self, expense_id: int | str) -> Expense | None:
        with self._guard("find"):
            return self._storage.get_expense(expense_id)

    def update(self, expense: Expense) -> None:
        with self._guard("replace"):
            self._storage.save_expense(expense)

    def delete_by_id(self, expense_id: int | str) -> None:
        with self._guard("delete"):
            self._storage.delete_expense(expense_id)

    def load_all(self) -> list[Expense]:
        with self._guard("find"):
            return self._storage.get_expenses()

    def save_all(self, expenses: Iterable[Expense]) -> None:
        with self._guard("bulk upsert"):
            for expense in expenses:
                self._storage.save_expense(expense)

    def find_by_merchant(self, merchant: str) -> list[Expense]:
        with self._guard("find"):
            return self._storage.find_by_merchant(merchant)

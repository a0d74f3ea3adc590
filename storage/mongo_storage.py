from __future__ import annotations

from pymongo import MongoClient

from domain.expenses import Expense

from .base import Storage


class MongoStorage(Storage):
    """Document-store adapter: one document per expense keyed by ``_id``."""

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017/",
        database: str = "expensesdb",
        collection: str = "expenses",
        *,
        server_selection_timeout_ms: int = 5000,
        client: MongoClient | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            client = MongoClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
        self._client = client
        self._collection = client[database][collection]

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def ping(self) -> None:
        self._client.admin.command("ping")

    @staticmethod
    def _to_document(expense: Expense) -> dict:
        return {
            "_id": expense.id,
            "date": expense.date_text,
            "value": float(expense.value),
            "merchant": expense.merchant,
        }

    @staticmethod
    def _to_expense(doc: dict) -> Expense:
        doc_id = doc["_id"]
        return Expense(
            id=doc_id if isinstance(doc_id, int) else str(doc_id),
            date=str(doc["date"])[:10],
            value=doc["value"],
            merchant=str(doc.get("merchant", "") or ""),
        )

    def get_expenses(self) -> list[Expense]:
        return [self._to_expense(doc) for doc in self._collection.find()]

    def get_expense(self, expense_id: int | str) -> Expense | None:
        doc = self._collection.find_one({"_id": expense_id})
        return self._to_expense(doc) if doc is not None else None

    def find_by_merchant(self, merchant: str) -> list[Expense]:
        # Case-insensitive exact match via collation strength 2.
        cursor = self._collection.find(
            {"merchant": merchant}, collation={"locale": "en", "strength": 2}
        )
        return [self._to_expense(doc) for doc in cursor]

    def insert_expense(self, expense: Expense) -> None:
        self._collection.insert_one(self._to_document(expense))

    def save_expense(self, expense: Expense) -> None:
        self._collection.replace_one(
            {"_id": expense.id}, self._to_document(expense), upsert=True
        )

    def delete_expense(self, expense_id: int | str) -> int:
        return self._collection.delete_one({"_id": expense_id}).deleted_count

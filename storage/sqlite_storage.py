from __future__ import annotations

import sqlite3
from pathlib import Path

from domain.expenses import Expense

from .base import Storage


class SQLiteStorage(Storage):
    """SQLite-backed storage adapter without domain/business logic."""

    def __init__(self, db_path: str = "expenses.db") -> None:
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode = WAL;")

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def initialize_schema(self, schema_path: str | None = None) -> None:
        if schema_path is None:
            schema_path = str(Path(__file__).resolve().parents[1] / "db" / "schema.sql")
        schema = Path(schema_path).read_text(encoding="utf-8")
        self._conn.executescript(schema)
        self._conn.commit()

    @staticmethod
    def _row_to_expense(row: sqlite3.Row) -> Expense:
        return Expense(
            id=int(row["id"]),
            date=str(row["date"]),
            value=float(row["price"]),
            merchant=str(row["merchant"]),
        )

    @staticmethod
    def _params(expense: Expense) -> tuple:
        return (expense.id, expense.date_text, float(expense.value), expense.merchant)

    def get_expenses(self) -> list[Expense]:
        rows = self._conn.execute(
            """
            SELECT id, date, price, merchant
            FROM expenses
            ORDER BY id
            """
        ).fetchall()
        return [self._row_to_expense(row) for row in rows]

    def get_expense(self, expense_id: int | str) -> Expense | None:
        row = self._conn.execute(
            "SELECT id, date, price, merchant FROM expenses WHERE id = ?",
            (expense_id,),
        ).fetchone()
        return self._row_to_expense(row) if row is not None else None

    def find_by_merchant(self, merchant: str) -> list[Expense]:
        rows = self._conn.execute(
            """
            SELECT id, date, price, merchant
            FROM expenses
            WHERE merchant = ? COLLATE NOCASE
            ORDER BY id
            """,
            (merchant,),
        ).fetchall()
        return [self._row_to_expense(row) for row in rows]

    def insert_expense(self, expense: Expense) -> None:
        self._conn.execute(
            "INSERT INTO expenses (id, date, price, merchant) VALUES (?, ?, ?, ?)",
            self._params(expense),
        )

    def update_expense(self, expense: Expense) -> int:
        cursor = self._conn.execute(
            "UPDATE expenses SET date = ?, price = ?, merchant = ? WHERE id = ?",
            (expense.date_text, float(expense.value), expense.merchant, expense.id),
        )
        return cursor.rowcount

    def save_expense(self, expense: Expense) -> None:
        self._conn.execute(
            """
            INSERT INTO expenses (id, date, price, merchant)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                date = excluded.date,
                price = excluded.price,
                merchant = excluded.merchant
            """,
            self._params(expense),
        )

    def delete_expense(self, expense_id: int | str) -> int:
        cursor = self._conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
        return cursor.rowcount

from __future__ import annotations

import sqlite3

import pytest

from domain.errors import StorageError
from domain.expenses import Expense
from infrastructure.sqlite_repository import SQLiteExpenseRepository
from storage.sqlite_storage import SQLiteStorage


def _expense(expense_id, value=10.0, merchant="Walmart", on="2025-01-01"):
    return Expense(id=expense_id, date=on, value=value, merchant=merchant)


@pytest.fixture
def repo(tmp_path):
    repository = SQLiteExpenseRepository(str(tmp_path / "expenses.db"))
    yield repository
    repository.close()


def test_schema_creates_expenses_table(tmp_path) -> None:
    storage = SQLiteStorage(str(tmp_path / "schema.db"))
    storage.initialize_schema()
    columns = [row["name"] for row in storage.connection.execute("PRAGMA table_info(expenses)")]
    storage.close()
    assert columns == ["id", "date", "price", "merchant"]


def test_create_and_read(repo) -> None:
    expense = _expense(1, 99.95, "Walmart")
    repo.create(expense)
    assert repo.read(1) == expense
    assert repo.read(2) is None


def test_duplicate_create_raises_storage_error(repo) -> None:
    repo.create(_expense(1))
    with pytest.raises(StorageError) as info:
        repo.create(_expense(1, 20.0, "Costco"))
    assert isinstance(info.value.__cause__, sqlite3.IntegrityError)
    assert repo.read(1).merchant == "Walmart"


@pytest.mark.parametrize("value", [0.0, -12.5])
def test_non_positive_price_violates_constraint(repo, value) -> None:
    with pytest.raises(StorageError):
        repo.create(_expense(1, value))
    assert repo.load_all() == []


def test_update_existing_and_missing(repo) -> None:
    repo.create(_expense(1))
    repo.update(_expense(1, 42.0, "Costco", on="2025-03-01"))
    repo.update(_expense(9, 1.0, "Ghost"))
    assert repo.read(1) == _expense(1, 42.0, "Costco", on="2025-03-01")
    assert repo.read(9) is None


def test_delete_by_id(repo) -> None:
    repo.create(_expense(1))
    repo.delete_by_id(1)
    repo.delete_by_id(1)
    assert repo.read(1) is None


def test_load_all_is_ordered_by_id(repo) -> None:
    for expense_id in (3, 1, 2):
        repo.create(_expense(expense_id))
    assert [e.id for e in repo.load_all()] == [1, 2, 3]


def test_save_all_upserts(repo) -> None:
    repo.create(_expense(1, 10.0))
    repo.save_all([_expense(1, 11.0), _expense(2, 20.0, "Costco")])
    assert [(e.id, e.value) for e in repo.load_all()] == [(1, 11.0), (2, 20.0)]


def test_save_all_rolls_back_on_failure(repo) -> None:
    repo.create(_expense(1, 10.0))
    with pytest.raises(StorageError):
        repo.save_all([_expense(2, 5.0), _expense(3, -1.0)])
    assert [e.id for e in repo.load_all()] == [1]


def test_find_by_merchant(repo) -> None:
    repo.save_all([_expense(1, merchant="Costco"), _expense(2, merchant="HEB")])
    assert [e.id for e in repo.find_by_merchant("COSTCO")] == [1]


def test_data_persists_across_connections(tmp_path) -> None:
    db_path = str(tmp_path / "expenses.db")
    with SQLiteExpenseRepository(db_path) as first:
        first.create(_expense(1, 99.95))
    with SQLiteExpenseRepository(db_path) as second:
        assert second.read(1) == _expense(1, 99.95)


def test_unopenable_database_raises_storage_error(tmp_path) -> None:
    with pytest.raises(StorageError):
        SQLiteExpenseRepository(str(tmp_path / "missing" / "dir" / "expenses.db"))

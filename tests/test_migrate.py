from __future__ import annotations

from unittest.mock import Mock

import pytest

from domain.expenses import Expense
from infrastructure.repositories import (
    CsvFileExpenseRepository,
    ExpenseRepository,
    JsonFileExpenseRepository,
)
from infrastructure.sqlite_repository import SQLiteExpenseRepository
from migrate import copy_expenses, main

EXPENSES = [
    Expense(id=1, date="2025-01-01", value=99.95, merchant="Walmart"),
    Expense(id=2, date="2025-01-02", value=85.75, merchant="Costco"),
    Expense(id=3, date="2025-01-03", value=10000, merchant="Private Jet"),
]


def test_copy_json_to_sqlite(tmp_path) -> None:
    source = JsonFileExpenseRepository(str(tmp_path / "expenses.json"))
    source.save_all(EXPENSES)
    with SQLiteExpenseRepository(str(tmp_path / "expenses.db")) as target:
        assert copy_expenses(source, target) == 3
        assert target.load_all() == EXPENSES


def test_copy_is_an_upsert(tmp_path) -> None:
    source = JsonFileExpenseRepository(str(tmp_path / "expenses.json"))
    source.save_all(EXPENSES)
    target = CsvFileExpenseRepository(str(tmp_path / "expenses.csv"))
    target.create(Expense(id=1, date="2024-12-31", value=1.0, merchant="Old"))

    copy_expenses(source, target)

    assert set(target.load_all()) == set(EXPENSES)


def test_dry_run_writes_nothing() -> None:
    source = Mock(spec=ExpenseRepository)
    source.load_all.return_value = EXPENSES
    target = Mock(spec=ExpenseRepository)

    assert copy_expenses(source, target, dry_run=True) == 3
    target.save_all.assert_not_called()


@pytest.mark.parametrize("value, merchant", [(-50, "Refund"), (0, "Free"), (5.0, "  ")])
def test_invalid_source_records_are_rejected(value, merchant) -> None:
    source = Mock(spec=ExpenseRepository)
    source.load_all.return_value = EXPENSES + [
        Expense(id=9, date="2025-01-09", value=value, merchant=merchant)
    ]
    target = Mock(spec=ExpenseRepository)

    with pytest.raises(ValueError, match="Expense 9"):
        copy_expenses(source, target)
    target.save_all.assert_not_called()


def test_duplicate_source_ids_are_rejected() -> None:
    source = Mock(spec=ExpenseRepository)
    source.load_all.return_value = EXPENSES + [EXPENSES[0]]
    target = Mock(spec=ExpenseRepository)

    with pytest.raises(ValueError, match="duplicate"):
        copy_expenses(source, target)
    target.save_all.assert_not_called()


def test_cli_migration(tmp_path, capsys) -> None:
    json_path = tmp_path / "expenses.json"
    csv_path = tmp_path / "expenses.csv"
    JsonFileExpenseRepository(str(json_path)).save_all(EXPENSES)

    code = main(
        [
            "--source", "json",
            "--source-path", str(json_path),
            "--target", "csv",
            "--target-path", str(csv_path),
        ]
    )

    assert code == 0
    assert "[ok] Migration finished successfully" in capsys.readouterr().out
    assert CsvFileExpenseRepository(str(csv_path)).load_all() == EXPENSES


def test_cli_refuses_same_store(tmp_path) -> None:
    path = str(tmp_path / "expenses.json")
    assert main(["--source", "json", "--source-path", path, "--target", "json", "--target-path", path]) == 1


def test_cli_reports_storage_failure(tmp_path, capsys) -> None:
    broken = tmp_path / "expenses.json"
    broken.write_text("{oops", encoding="utf-8")

    code = main(
        [
            "--source", "json",
            "--source-path", str(broken),
            "--target", "sqlite",
            "--target-path", str(tmp_path / "expenses.db"),
        ]
    )

    assert code == 1
    assert "[error] Migration failed" in capsys.readouterr().out

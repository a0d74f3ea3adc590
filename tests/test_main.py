from __future__ import annotations

import json

import pytest
from openpyxl import Workbook

from main import main


@pytest.fixture
def store(tmp_path):
    return str(tmp_path / "expenses.json")


def _run(store, *args):
    return main(["--backend", "json", "--path", store, *args])


def test_list_seeds_and_prints(store, capsys) -> None:
    assert _run(store, "list") == 0
    out = capsys.readouterr().out
    assert "Walmart" in out
    assert "257.93" in out


def test_no_seed_keeps_store_empty(store, capsys) -> None:
    assert _run(store, "--no-seed", "sum") == 0
    assert capsys.readouterr().out.strip().endswith("0.00")


def test_add_and_duplicate(store, capsys) -> None:
    assert _run(store, "add", "10", "12.5", "Target", "--date", "2025-05-05") == 0
    assert "merchant=Target" in capsys.readouterr().out
    assert _run(store, "add", "10", "3", "Elsewhere") == 1
    assert "already exists" in capsys.readouterr().out


def test_get_update_delete(store, capsys) -> None:
    assert _run(store, "update", "1", "--value", "100") == 0
    assert "value=100.0" in capsys.readouterr().out
    assert _run(store, "delete", "1") == 0
    assert _run(store, "get", "1") == 1
    assert "not found" in capsys.readouterr().out
    assert _run(store, "delete", "1") == 1


def test_invalid_value_is_reported(store, capsys) -> None:
    assert _run(store, "add", "11", "-5", "Refund") == 1
    assert "[error]" in capsys.readouterr().out


def test_corrupt_store_is_storage_failure(store, capsys) -> None:
    with open(store, "w", encoding="utf-8") as f:
        f.write("{broken")
    assert _run(store, "list") == 2
    assert "Storage failure" in capsys.readouterr().out


def test_export_then_import(store, tmp_path, capsys) -> None:
    xlsx = str(tmp_path / "expenses.xlsx")
    assert _run(store, "export", xlsx) == 0

    other = str(tmp_path / "other.json")
    assert main(["--backend", "json", "--path", other, "--no-seed", "import", xlsx]) == 0
    with open(other, encoding="utf-8") as f:
        assert len(json.load(f)) == 4


def test_search(store, capsys) -> None:
    assert _run(store, "search", "heb") == 0
    assert "merchant=HEB" in capsys.readouterr().out


def test_import_rejects_non_positive_values(store, tmp_path, capsys) -> None:
    xlsx = str(tmp_path / "bad.xlsx")
    wb = Workbook()
    ws = wb.active
    ws.title = "Expenses"
    ws.append(["ID", "Date", "Value", "Merchant"])
    ws.append([1, "2025-01-01", 12.5, "Target"])
    ws.append([2, "2025-01-02", -50, "Refund"])
    wb.save(xlsx)

    assert _run(store, "list") == 0
    capsys.readouterr()
    assert _run(store, "import", xlsx) == 1
    assert "Expense 2" in capsys.readouterr().out
    with open(store, encoding="utf-8") as f:
        assert [item["merchant"] for item in json.load(f)] == [
            "Walmart",
            "Costco",
            "HEB",
            "Buffalo Wild Wings",
        ]

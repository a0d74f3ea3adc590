import pytest
from openpyxl import Workbook, load_workbook

from domain.expenses import Expense
from utils.excel_utils import HEADERS, expenses_from_xlsx, expenses_to_xlsx

EXPENSES = [
    Expense(id=1, date="2025-01-01", value=99.95, merchant="Walmart"),
    Expense(id=2, date="2025-01-02", value=85.75, merchant="Costco"),
]


def test_expenses_xlsx_layout(tmp_path):
    path = tmp_path / "report" / "expenses.xlsx"
    expenses_to_xlsx(EXPENSES, str(path))

    wb = load_workbook(path, data_only=True)
    try:
        ws = wb["Expenses"]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    assert list(rows[0]) == HEADERS
    assert list(rows[1]) == [1, "2025-01-01", 99.95, "Walmart"]
    assert list(rows[-1]) == ["TOTAL", None, 185.7, None]


def test_expenses_xlsx_import_skips_total_row(tmp_path):
    path = tmp_path / "expenses.xlsx"
    expenses_to_xlsx(EXPENSES, str(path))
    assert expenses_from_xlsx(str(path)) == EXPENSES


def test_import_skips_invalid_rows(tmp_path):
    path = tmp_path / "manual.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Expenses"
    ws.append(HEADERS)
    ws.append([1, "2025-01-01", 10.0, "Walmart"])
    ws.append([2, "yesterday", 5.0, "Costco"])
    ws.append([None, None, None, None])
    ws.append([3, "2025-01-03", "n/a", "HEB"])
    wb.save(path)
    wb.close()

    expenses = expenses_from_xlsx(str(path))
    assert [e.id for e in expenses] == [1]


def test_import_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        expenses_from_xlsx(str(tmp_path / "absent.xlsx"))

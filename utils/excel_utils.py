import logging
import os
from datetime import date, datetime

from openpyxl import Workbook, load_workbook

from domain.expenses import Expense

logger = logging.getLogger(__name__)

SHEET_TITLE = "Expenses"
HEADERS = ["ID", "Date", "Value", "Merchant"]


def expenses_to_xlsx(expenses: list[Expense], filepath: str) -> None:
    """Export expenses with a closing TOTAL row."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(HEADERS)
    for expense in expenses:
        ws.append([expense.id, expense.date_text, round(expense.value, 2), expense.merchant])
    total = round(sum(expense.value for expense in expenses), 2)
    ws.append(["TOTAL", None, total, None])

    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    wb.save(filepath)
    wb.close()


def _cell_date(value) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value or "").strip()


def expenses_from_xlsx(filepath: str) -> list[Expense]:
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"XLSX file not found: {filepath}")

    wb = load_workbook(filepath, data_only=True)
    try:
        ws = wb[SHEET_TITLE] if SHEET_TITLE in wb.sheetnames else wb.worksheets[0]
        expenses: list[Expense] = []
        for index, row in enumerate(ws.iter_rows(min_row=2, values_only=True), start=2):
            if not row or all(cell in (None, "") for cell in row):
                continue
            expense_id, date_value, value, merchant = (list(row) + [None] * 4)[:4]
            if str(expense_id or "").strip().upper() == "TOTAL":
                continue
            try:
                expenses.append(
                    Expense(
                        id=expense_id if isinstance(expense_id, int) else str(expense_id or ""),
                        date=_cell_date(date_value),
                        value=value,
                        merchant=str(merchant or ""),
                    )
                )
            except ValueError as e:
                logger.warning("Skipping invalid row %s in %s: %s", index, filepath, e)
        return expenses
    finally:
        wb.close()

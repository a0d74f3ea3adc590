from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date as dt_date

from prettytable import PrettyTable

from domain.expenses import Expense
from domain.validation import (
    ensure_merchant_present,
    ensure_positive_value,
    normalize_expense_id,
    parse_value,
    parse_ymd,
)
from infrastructure.repositories import ExpenseRepository

logger = logging.getLogger(__name__)

SEED_EXPENSES: tuple[tuple[int, float, str], ...] = (
    (1, 99.95, "Walmart"),
    (2, 55.99, "Costco"),
    (3, 29.99, "HEB"),
    (4, 72.00, "Buffalo Wild Wings"),
)


def _validated_value(value) -> float:
    amount = parse_value(value)
    ensure_positive_value(amount)
    return amount


def ensure_valid_expense(expense: Expense) -> None:
    """Apply the create-time rules to an already built expense."""
    try:
        _validated_value(expense.value)
        ensure_merchant_present(expense.merchant)
    except ValueError as e:
        raise ValueError(f"Expense {expense.id}: {e}") from e


class ExpenseService:
    """Business rules over any ExpenseRepository.

    Constructing the service seeds an empty store, so construction may write
    to storage. Pass ``seed=False`` to skip that.
    """

    def __init__(self, repository: ExpenseRepository, *, seed: bool = True) -> None:
        self._repository = repository
        if seed:
            self.seed()

    @property
    def repository(self) -> ExpenseRepository:
        return self._repository

    def create_new_expense(
        self,
        expense_id: int | str,
        value: float,
        merchant: str,
        *,
        on: dt_date | str | None = None,
    ) -> Expense | None:
        """Create an expense dated today (or ``on``); None if the id is taken."""
        expense_id = normalize_expense_id(expense_id)
        amount = _validated_value(value)
        ensure_merchant_present(merchant)
        if self._repository.read(expense_id) is not None:
            logger.info("Expense %s already exists, create skipped", expense_id)
            return None
        expense = Expense(
            id=expense_id,
            date=parse_ymd(on) if on is not None else dt_date.today(),
            value=amount,
            merchant=merchant.strip(),
        )
        self._repository.create(expense)
        return expense

    def get_expense(self, expense_id: int | str) -> Expense | None:
        return self._repository.read(normalize_expense_id(expense_id))

    def list_expenses(self) -> list[Expense]:
        return self._repository.load_all()

    def update_expense(
        self,
        expense_id: int | str,
        *,
        value: float | None = None,
        merchant: str | None = None,
        on: dt_date | str | None = None,
    ) -> Expense | None:
        """Replace the given fields of an existing expense; None if it is missing."""
        current = self._repository.read(normalize_expense_id(expense_id))
        if current is None:
            return None
        changes: dict = {}
        if value is not None:
            changes["value"] = _validated_value(value)
        if merchant is not None:
            ensure_merchant_present(merchant)
            changes["merchant"] = merchant.strip()
        if on is not None:
            changes["date"] = parse_ymd(on)
        updated = replace(current, **changes)
        self._repository.update(updated)
        return updated

    def delete_expense(self, expense_id: int | str) -> bool:
        expense_id = normalize_expense_id(expense_id)
        if self._repository.read(expense_id) is None:
            return False
        self._repository.delete_by_id(expense_id)
        return True

    def import_expenses(self, expenses: list[Expense]) -> int:
        """Upsert ``expenses`` in one ``save_all`` call.

        Every record is validated first; one bad record rejects the whole
        batch and nothing is written.
        """
        for expense in expenses:
            ensure_valid_expense(expense)
        self._repository.save_all(expenses)
        logger.info("Imported %s expense(s)", len(expenses))
        return len(expenses)

    def search_by_merchant(self, merchant: str) -> list[Expense]:
        return self._repository.find_by_merchant(merchant.strip())

    def sum_expenses(self) -> float:
        return round(sum(expense.value for expense in self._repository.load_all()), 2)

    def expenses_table(self) -> str:
        table = PrettyTable()
        table.field_names = ["ID", "Date", "Value", "Merchant"]
        table.align["Value"] = "r"
        table.align["Merchant"] = "l"
        expenses = self._repository.load_all()
        for expense in expenses:
            table.add_row([expense.id, expense.date_text, f"{expense.value:.2f}", expense.merchant])
        total = round(sum(expense.value for expense in expenses), 2)
        table.add_row(["TOTAL", "", f"{total:.2f}", ""], divider=True)
        return str(table)

    def print_expenses(self) -> str:
        text = self.expenses_table()
        print(text)
        return text

    def seed(self) -> bool:
        """Populate an empty store with the demo expenses.

        Returns True when records were written, False when the store already
        had data and was left untouched.
        """
        if self._repository.load_all():
            logger.info("Expenses loaded from repository")
            return False
        logger.info("No expenses found in repository, generating defaults")
        for expense_id, value, merchant in SEED_EXPENSES:
            self.create_new_expense(expense_id, value, merchant)
        return True

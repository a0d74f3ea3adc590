from __future__ import annotations

from typing import Protocol

from domain.expenses import Expense


class Storage(Protocol):
    """Low-level storage contract for engine adapters."""

    def get_expenses(self) -> list[Expense]:
        ...

    def get_expense(self, expense_id: int | str) -> Expense | None:
        ...

    def save_expense(self, expense: Expense) -> None:
        ...

    def delete_expense(self, expense_id: int | str) -> int:
        ...

    def close(self) -> None:
        ...

from __future__ import annotations

import argparse
import logging
import sys

from app.expense_service import ExpenseService
from backup import create_backup
from bootstrap import BACKENDS, build_repository
from domain.errors import StorageError
from infrastructure.repositories import FileExpenseRepository
from utils.excel_utils import expenses_from_xlsx, expenses_to_xlsx


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track expenses on a pluggable storage backend.")
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=None,
        help="Storage backend (default: EXPENSES_BACKEND or json)",
    )
    parser.add_argument("--path", default=None, help="Override the file/database path")
    parser.add_argument("--no-seed", action="store_true", help="Do not seed an empty store")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="Print every expense")
    sub.add_parser("sum", help="Print the total of all expenses")

    add = sub.add_parser("add", help="Create an expense dated today")
    add.add_argument("id")
    add.add_argument("value", type=float)
    add.add_argument("merchant")
    add.add_argument("--date", default=None, help="YYYY-MM-DD instead of today")

    get = sub.add_parser("get", help="Show one expense")
    get.add_argument("id")

    update = sub.add_parser("update", help="Change fields of an expense")
    update.add_argument("id")
    update.add_argument("--value", type=float, default=None)
    update.add_argument("--merchant", default=None)
    update.add_argument("--date", default=None)

    delete = sub.add_parser("delete", help="Delete an expense")
    delete.add_argument("id")

    search = sub.add_parser("search", help="Find expenses by merchant")
    search.add_argument("merchant")

    export = sub.add_parser("export", help="Export expenses to an XLSX file")
    export.add_argument("xlsx_path")

    imp = sub.add_parser("import", help="Upsert expenses from an XLSX file")
    imp.add_argument("xlsx_path")
    return parser


def _backup_if_file(service: ExpenseService) -> None:
    repository = service.repository
    if isinstance(repository, FileExpenseRepository):
        create_backup(repository.file_path)


def run_command(service: ExpenseService, args: argparse.Namespace) -> int:
    command = args.command
    if command == "list":
        service.print_expenses()
    elif command == "sum":
        print(f"{service.sum_expenses():.2f}")
    elif command == "add":
        expense = service.create_new_expense(args.id, args.value, args.merchant, on=args.date)
        if expense is None:
            print(f"Expense {args.id} already exists")
            return 1
        print(expense)
    elif command == "get":
        expense = service.get_expense(args.id)
        if expense is None:
            print(f"Expense {args.id} not found")
            return 1
        print(expense)
    elif command == "update":
        expense = service.update_expense(
            args.id, value=args.value, merchant=args.merchant, on=args.date
        )
        if expense is None:
            print(f"Expense {args.id} not found")
            return 1
        print(expense)
    elif command == "delete":
        _backup_if_file(service)
        if not service.delete_expense(args.id):
            print(f"Expense {args.id} not found")
            return 1
        print(f"Expense {args.id} deleted")
    elif command == "search":
        for expense in service.search_by_merchant(args.merchant):
            print(expense)
    elif command == "export":
        expenses_to_xlsx(service.list_expenses(), args.xlsx_path)
        print(f"Exported to {args.xlsx_path}")
    elif command == "import":
        expenses = expenses_from_xlsx(args.xlsx_path)
        _backup_if_file(service)
        count = service.import_expenses(expenses)
        print(f"Imported {count} expense(s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)-8s %(name)s - %(message)s")

    try:
        with build_repository(args.backend, path=args.path) as repository:
            service = ExpenseService(repository, seed=not args.no_seed)
            return run_command(service, args)
    except StorageError as exc:
        print(f"[error] Storage failure: {exc}")
        return 2
    except (ValueError, FileNotFoundError) as exc:
        print(f"[error] {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import argparse
import sys

from app.expense_service import ensure_valid_expense
from bootstrap import BACKENDS, build_repository
from domain.errors import StorageError
from domain.expenses import Expense
from infrastructure.repositories import ExpenseRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Copy expenses from one storage backend into another."
    )
    parser.add_argument("--source", required=True, choices=BACKENDS, help="Backend to read from")
    parser.add_argument("--target", required=True, choices=BACKENDS, help="Backend to write to")
    parser.add_argument("--source-path", default=None, help="File/database path of the source")
    parser.add_argument("--target-path", default=None, help="File/database path of the target")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and validate the source without writing to the target",
    )
    return parser.parse_args(argv)


def _duplicate_ids(expenses: list[Expense]) -> list:
    seen: set = set()
    duplicates = []
    for expense in expenses:
        if expense.id in seen:
            duplicates.append(expense.id)
        seen.add(expense.id)
    return duplicates


def copy_expenses(
    source: ExpenseRepository, target: ExpenseRepository, *, dry_run: bool = False
) -> int:
    """Upsert every source expense into ``target`` and return how many were copied."""
    expenses = source.load_all()
    duplicates = _duplicate_ids(expenses)
    if duplicates:
        raise ValueError(f"Source contains duplicate ids: {duplicates}")
    for expense in expenses:
        ensure_valid_expense(expense)
    if dry_run:
        print(f"[dry-run] {len(expenses)} expense(s) would be copied, nothing written")
        return len(expenses)
    target.save_all(expenses)
    print(f"[migrate] {len(expenses)} expense(s) copied")
    return len(expenses)


def run_migration(args: argparse.Namespace) -> int:
    if args.source == args.target and args.source_path == args.target_path:
        print("[error] Source and target are the same store")
        return 1
    print(f"== MIGRATION: {args.source} -> {args.target} ==")
    try:
        with build_repository(args.source, path=args.source_path) as source:
            with build_repository(args.target, path=args.target_path) as target:
                copy_expenses(source, target, dry_run=args.dry_run)
    except (StorageError, ValueError) as exc:
        print(f"[error] Migration failed: {exc}")
        return 1
    print("[ok] Migration finished successfully")
    return 0


def main(argv: list[str] | None = None) -> int:
    return run_migration(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable

from domain.errors import StorageError
from domain.expenses import CSV_HEADER, Expense

logger = logging.getLogger(__name__)


class ExpenseRepository(ABC):
    """Storage-agnostic contract every expense backend satisfies."""

    backend_name = "abstract"

    @abstractmethod
    def create(self, expense: Expense) -> None:
        """Insert a new expense."""
        pass

    @abstractmethod
    def read(self, expense_id: int | str) -> Expense | None:
        """Return the expense with ``expense_id`` or None when absent."""
        pass

    @abstractmethod
    def update(self, expense: Expense) -> None:
        """Replace the stored expense that has the same id."""
        pass

    @abstractmethod
    def delete_by_id(self, expense_id: int | str) -> None:
        """Remove the expense if present; absent ids are ignored."""
        pass

    @abstractmethod
    def load_all(self) -> list[Expense]:
        """Return every stored expense.

        File stores keep insertion order, SQLite orders by id and MongoDB
        returns natural order. Malformed file rows are skipped with a warning.
        """
        pass

    @abstractmethod
    def save_all(self, expenses: Iterable[Expense]) -> None:
        """Create every expense that is absent and update the rest."""
        pass

    def find_by_merchant(self, merchant: str) -> list[Expense]:
        """Case-insensitive exact merchant match."""
        wanted = merchant.strip().casefold()
        return [
            expense for expense in self.load_all() if expense.merchant.strip().casefold() == wanted
        ]

    def close(self) -> None:
        """Release the underlying medium."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FileExpenseRepository(ExpenseRepository):
    """Whole-file backend base.

    Each operation loads the full dataset, mutates it in memory and rewrites
    the file atomically. The read-modify-write cycle holds a lock shared by
    every repository pointed at the same path. ``update`` of a missing id is
    a silent no-op.
    """

    _path_locks: dict[str, threading.RLock] = {}
    _path_locks_guard = threading.Lock()

    def __init__(self, file_path: str):
        self._file_path = file_path
        abs_path = os.path.abspath(file_path)
        with self._path_locks_guard:
            if abs_path not in self._path_locks:
                self._path_locks[abs_path] = threading.RLock()
            self._lock = self._path_locks[abs_path]

    @property
    def file_path(self) -> str:
        return self._file_path

    @abstractmethod
    def _parse(self, text: str) -> list[Expense]:
        pass

    @abstractmethod
    def _render(self, expenses: list[Expense]) -> str:
        pass

    def _load(self) -> list[Expense]:
        with self._lock:
            try:
                with open(self._file_path, encoding="utf-8") as f:
                    text = f.read()
            except FileNotFoundError:
                return []
            except OSError as exc:
                logger.exception("Failed to read %s", self._file_path)
                raise StorageError(
                    f"Cannot read {self._file_path}", backend=self.backend_name
                ) from exc
            return self._parse(text)

    def _save(self, expenses: list[Expense]) -> None:
        with self._lock:
            directory = os.path.dirname(self._file_path) or "."
            suffix = os.path.splitext(self._file_path)[1]
            try:
                fd, tmp_path = tempfile.mkstemp(
                    prefix=".expenses_", suffix=suffix, dir=directory
                )
            except OSError as exc:
                logger.exception("Failed to create temporary file in %s", directory)
                raise StorageError(
                    f"Cannot write {self._file_path}", backend=self.backend_name
                ) from exc
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(self._render(expenses))
                os.replace(tmp_path, self._file_path)
            except OSError as exc:
                logger.exception("Failed to write %s", self._file_path)
                raise StorageError(
                    f"Cannot write {self._file_path}", backend=self.backend_name
                ) from exc
            finally:
                try:
                    if os.path.exists(tmp_path):
                        os.remove(tmp_path)
                except OSError:
                    logger.exception("Failed to cleanup temporary file during save: %s", tmp_path)

    def create(self, expense: Expense) -> None:
        with self._lock:
            expenses = self._load()
            expenses.append(expense)
            self._save(expenses)

    def read(self, expense_id: int | str) -> Expense | None:
        for expense in self._load():
            if expense.id == expense_id:
                return expense
        return None

    def update(self, expense: Expense) -> None:
        with self._lock:
            expenses = self._load()
            if not any(item.id == expense.id for item in expenses):
                logger.debug("Update skipped, expense %s not found", expense.id)
                return
            self._save([expense if item.id == expense.id else item for item in expenses])

    def delete_by_id(self, expense_id: int | str) -> None:
        with self._lock:
            expenses = self._load()
            remaining = [item for item in expenses if item.id != expense_id]
            if len(remaining) != len(expenses):
                self._save(remaining)

    def load_all(self) -> list[Expense]:
        return self._load()

    def save_all(self, expenses: Iterable[Expense]) -> None:
        with self._lock:
            current = self._load()
            positions = {item.id: index for index, item in enumerate(current)}
            for expense in expenses:
                if expense.id in positions:
                    current[positions[expense.id]] = expense
                else:
                    positions[expense.id] = len(current)
                    current.append(expense)
            self._save(current)


class TextFileExpenseRepository(FileExpenseRepository):
    """One ``Expense [id=..., date=..., value=..., merchant=...]`` line per record."""

    backend_name = "text"

    def __init__(self, file_path: str = "expenses.txt"):
        super().__init__(file_path)

    def _parse(self, text: str) -> list[Expense]:
        expenses = []
        for index, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                expenses.append(Expense.from_text_line(line))
            except ValueError as e:
                logger.warning("Skipping invalid line %s in %s: %s", index, self._file_path, e)
        return expenses

    def _render(self, expenses: list[Expense]) -> str:
        return "".join(f"{expense}\n" for expense in expenses)


class CsvFileExpenseRepository(FileExpenseRepository):
    """Header line followed by ``id, date, value, merchant`` rows, unescaped."""

    backend_name = "csv"

    def __init__(self, file_path: str = "expenses.csv"):
        super().__init__(file_path)

    def _parse(self, text: str) -> list[Expense]:
        lines = text.splitlines()
        if not lines:
            return []
        expenses = []
        # First line is the header.
        for index, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue
            try:
                expenses.append(Expense.from_csv_row(line))
            except ValueError as e:
                logger.warning("Skipping invalid row %s in %s: %s", index, self._file_path, e)
        return expenses

    def _render(self, expenses: list[Expense]) -> str:
        rows = [CSV_HEADER] + [expense.to_csv_row() for expense in expenses]
        return "\n".join(rows) + "\n"


class JsonFileExpenseRepository(FileExpenseRepository):
    """A single JSON array of ``{id, date, value, merchant}`` objects."""

    backend_name = "json"

    def __init__(self, file_path: str = "expenses.json"):
        super().__init__(file_path)

    def _parse(self, text: str) -> list[Expense]:
        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt JSON data in %s", self._file_path)
            raise StorageError(
                f"Corrupt JSON in {self._file_path}", backend=self.backend_name
            ) from exc
        if not isinstance(data, list):
            raise StorageError(
                f"Expected a JSON array in {self._file_path}", backend=self.backend_name
            )
        expenses = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping non-dict expense at index %s", index)
                continue
            try:
                expenses.append(Expense.from_payload(item))
            except ValueError as e:
                logger.warning("Skipping invalid expense at index %s: %s", index, e)
        return expenses

    def _render(self, expenses: list[Expense]) -> str:
        payload = [expense.to_payload() for expense in expenses]
        return json.dumps(payload, indent=2, ensure_ascii=False)

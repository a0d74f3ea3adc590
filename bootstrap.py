from __future__ import annotations

import logging

import config
from app.expense_service import ExpenseService
from infrastructure.mongo_repository import MongoExpenseRepository
from infrastructure.repositories import (
    CsvFileExpenseRepository,
    ExpenseRepository,
    JsonFileExpenseRepository,
    TextFileExpenseRepository,
)
from infrastructure.sqlite_repository import SQLiteExpenseRepository

logger = logging.getLogger(__name__)

BACKENDS = ("text", "csv", "json", "sqlite", "mongo")


def build_repository(
    backend: str | None = None,
    *,
    path: str | None = None,
    mongo_uri: str | None = None,
    mongo_client=None,
) -> ExpenseRepository:
    """Return the repository named by ``backend`` (defaults to ``config.BACKEND``).

    ``path`` overrides the configured file or database location for the
    file and SQLite backends.
    """
    name = (backend or config.BACKEND).strip().lower()
    if name not in BACKENDS:
        raise ValueError(f"Unknown backend: {name}. Must be one of {list(BACKENDS)}")

    logger.info("Storage selected: %s", name)
    if name == "text":
        return TextFileExpenseRepository(path or config.TEXT_PATH)
    if name == "csv":
        return CsvFileExpenseRepository(path or config.CSV_PATH)
    if name == "json":
        return JsonFileExpenseRepository(path or config.JSON_PATH)
    if name == "sqlite":
        return SQLiteExpenseRepository(
            path or config.SQLITE_PATH,
            schema_path=config.SCHEMA_PATH,
        )
    return MongoExpenseRepository(
        mongo_uri or config.MONGO_URI,
        config.MONGO_DATABASE,
        config.MONGO_COLLECTION,
        server_selection_timeout_ms=config.MONGO_TIMEOUT_MS,
        client=mongo_client,
    )


def build_service(backend: str | None = None, *, seed: bool = True, **overrides) -> ExpenseService:
    repository = build_repository(backend, **overrides)
    return ExpenseService(repository, seed=seed)

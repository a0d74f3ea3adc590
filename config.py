import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent

BACKEND = os.environ.get("EXPENSES_BACKEND", "json")
DATA_DIR = Path(os.environ.get("EXPENSES_DATA_DIR", str(PROJECT_ROOT)))

TEXT_PATH = str(DATA_DIR / "expenses.txt")
CSV_PATH = str(DATA_DIR / "expenses.csv")
JSON_PATH = str(DATA_DIR / "expenses.json")
SQLITE_PATH = str(DATA_DIR / "expenses.db")
# Relative values are taken from the project root.
SCHEMA_PATH = str(PROJECT_ROOT / os.environ.get("EXPENSES_SCHEMA_PATH", "db/schema.sql"))
BACKUP_KEEP = int(os.environ.get("EXPENSES_BACKUP_KEEP", "10"))

MONGO_URI = os.environ.get("EXPENSES_MONGO_URI", "mongodb://localhost:27017/")
MONGO_DATABASE = "expensesdb"
MONGO_COLLECTION = "expenses"
MONGO_TIMEOUT_MS = int(os.environ.get("EXPENSES_MONGO_TIMEOUT_MS", "5000"))

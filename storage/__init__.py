from .base import Storage
from .mongo_storage import MongoStorage
from .sqlite_storage import SQLiteStorage

__all__ = ["Storage", "MongoStorage", "SQLiteStorage"]

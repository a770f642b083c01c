"""Database module for leakscope scan history."""

from leakscope.database.connection import get_session, init_db, close_db
from leakscope.database.models import HistoryRecord
from leakscope.database.repository import HistoryRepository

__all__ = [
    "get_session",
    "init_db",
    "close_db",
    "HistoryRecord",
    "HistoryRepository",
]

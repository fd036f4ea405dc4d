"""Lunch poll persistence layer.

Provides SQLite-backed storage for poll snapshots, with listing,
prefix lookup, export (JSON/Markdown), and deletion.
"""

from lunchpoll.persistence.database import close_db, init_db
from lunchpoll.persistence.export import export_json, export_markdown
from lunchpoll.persistence.store import PollStore, PollSummary

__all__ = [
    "PollStore",
    "PollSummary",
    "close_db",
    "export_json",
    "export_markdown",
    "init_db",
]

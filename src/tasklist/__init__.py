"""Single-user task list: in-memory engine, SQLite slot storage, CSV export."""

__version__ = "0.1.0"

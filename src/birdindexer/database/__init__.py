from birdindexer.database.operations import (
    backup_sqlite_database,
    compact_sqlite_database,
    create_new_sqlite_database,
    get_scoped_sqlite_session,
)

__all__ = (
    "backup_sqlite_database",
    "compact_sqlite_database",
    "create_new_sqlite_database",
    "get_scoped_sqlite_session",
)

# ABOUTME: Callback interface fired from cleanup trigger bodies.
# ABOUTME: Binds _DELETE_FILE and _OBJECT_REMOVED SQL functions to a MediaHooks object.

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DELETE_FILE_FUNCTION = "_DELETE_FILE"
OBJECT_REMOVED_FUNCTION = "_OBJECT_REMOVED"


@runtime_checkable
class MediaHooks(Protocol):
    """Receives side-effect notifications from the cleanup triggers.

    Each method is called exactly once per matching deleted row.
    """

    def delete_file(self, path: str | None) -> None: ...

    def object_removed(self, row_id: int) -> None: ...


class LoggingHooks:
    """Default hooks: record the notification in the debug log and do nothing else."""

    def delete_file(self, path: str | None) -> None:
        logger.debug("Trigger requested deletion of %s", path)

    def object_removed(self, row_id: int) -> None:
        logger.debug("Trigger reported removal of files row %s", row_id)


@dataclass
class RecordingHooks:
    """Hooks that keep every notification, in the order they fired."""

    deleted_files: list[str | None] = field(default_factory=list)
    removed_objects: list[int] = field(default_factory=list)

    def delete_file(self, path: str | None) -> None:
        self.deleted_files.append(path)

    def object_removed(self, row_id: int) -> None:
        self.removed_objects.append(row_id)


def register_hooks(conn: sqlite3.Connection, hooks: MediaHooks) -> None:
    """Expose the hooks to SQL so trigger bodies can call them."""
    conn.create_function(DELETE_FILE_FUNCTION, 1, hooks.delete_file)
    conn.create_function(OBJECT_REMOVED_FUNCTION, 1, hooks.object_removed)

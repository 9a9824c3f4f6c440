# ABOUTME: Exception types raised by the schema lifecycle layer.
# ABOUTME: SQLite storage failures are not wrapped; they propagate as sqlite3 errors.


class MediaIndexError(Exception):
    """Base class for schema lifecycle errors."""


class StructuralConflictError(MediaIndexError):
    """Raised when creating a schema object that already exists.

    Always a sequencing bug: structural rebuilds must go through a pristine
    reset before the schema is created again.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Schema object '{name}' already exists")
        self.name = name


class UnreadableVersionError(MediaIndexError):
    """Raised when the stored schema version marker cannot be interpreted."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"Unreadable schema version marker: {raw!r}")
        self.raw = raw


class BoundaryTransformError(MediaIndexError):
    """Raised when a version boundary transformation could not complete.

    The boundary's transaction has been rolled back, so the stored version
    still names the last boundary that was fully applied.
    """

    def __init__(self, version: int) -> None:
        super().__init__(f"Schema upgrade to version {version} failed")
        self.version = version


class PristineResetError(MediaIndexError):
    """Raised when schema objects remain after every drop ordering was tried."""

    def __init__(self, remaining: list[str]) -> None:
        super().__init__(f"Could not drop schema objects: {', '.join(remaining)}")
        self.remaining = remaining

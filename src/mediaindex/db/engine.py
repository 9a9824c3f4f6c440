# ABOUTME: Migration engine that brings a database to a target schema version.
# ABOUTME: Chooses between fresh create, stepwise upgrade and destructive downgrade.

import logging
import sqlite3
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from mediaindex.db.errors import BoundaryTransformError, UnreadableVersionError
from mediaindex.db.migrations import BOUNDARIES, Boundary, MigrationOptions
from mediaindex.db.pristine import make_pristine
from mediaindex.db.schema import (
    TRIGGER,
    VERSION_LATEST,
    VERSION_LEGACY,
    VIEW,
    create_latest_schema,
    create_schema,
    latest_schema,
)
from mediaindex.db.version import read_version, write_version

logger = logging.getLogger(__name__)

SchemaBuilder = Callable[[sqlite3.Connection, bool], None]


class MigrationState(Enum):
    """Where the stored version sits relative to the target."""

    UNINITIALIZED = "uninitialized"
    UNSUPPORTED = "unsupported"
    STALE = "stale"
    AHEAD = "ahead"
    CURRENT = "current"


@dataclass(frozen=True)
class MigrationPlan:
    """The transition chosen for one database."""

    state: MigrationState
    stored: int | None
    target: int
    boundaries: tuple[int, ...] = ()

    @property
    def rebuilds(self) -> bool:
        """Whether the plan discards the existing structure and rows."""
        return self.state in (
            MigrationState.UNINITIALIZED,
            MigrationState.UNSUPPORTED,
            MigrationState.AHEAD,
        )


def plan_migration(
    stored: int | None,
    target: int,
    boundaries: Mapping[int, Boundary] = BOUNDARIES,
) -> MigrationPlan:
    """Decide how to move from the stored version to the target.

    Stored versions older than VERSION_LEGACY cannot be upgraded in place and
    are rebuilt like an empty database. Upgrades list every registered
    boundary above the stored version up to and including the target, in
    ascending order.
    """
    if target < 1:
        raise ValueError(f"Target version must be positive, got {target}")

    if stored is None:
        return MigrationPlan(MigrationState.UNINITIALIZED, stored, target)
    if stored == target:
        return MigrationPlan(MigrationState.CURRENT, stored, target)
    if stored > target:
        return MigrationPlan(MigrationState.AHEAD, stored, target)
    if stored < VERSION_LEGACY:
        return MigrationPlan(MigrationState.UNSUPPORTED, stored, target)

    steps = tuple(sorted(v for v in boundaries if stored < v <= target))
    return MigrationPlan(MigrationState.STALE, stored, target, steps)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block as one immediate transaction, DDL included.

    Any transaction the caller left open is committed first. The block is
    rolled back if it raises.
    """
    if conn.in_transaction:
        conn.commit()
    previous = conn.isolation_level
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.isolation_level = previous


def _read_stored_version(conn: sqlite3.Connection) -> int | None:
    try:
        return read_version(conn)
    except UnreadableVersionError as exc:
        logger.warning("%s; rebuilding the schema from scratch", exc)
        return None


def _refresh_views_and_triggers(conn: sqlite3.Connection, internal: bool) -> None:
    """Replace every view and trigger with the latest definitions."""
    make_pristine(conn, kinds=(TRIGGER, VIEW))
    create_schema(conn, [obj for obj in latest_schema(internal) if obj.kind in (VIEW, TRIGGER)])


def _rebuild(
    conn: sqlite3.Connection,
    plan: MigrationPlan,
    options: MigrationOptions,
    on_create: SchemaBuilder | None,
) -> None:
    # Without a builder every target gets the latest structure; later upgrades
    # skip the columns and indexes that already exist.
    on_create = on_create or create_latest_schema

    if plan.state is MigrationState.AHEAD:
        logger.warning(
            "Database version %d is newer than %d; discarding all data", plan.stored, plan.target
        )
    elif plan.state is MigrationState.UNSUPPORTED:
        logger.warning(
            "Database version %d is too old to upgrade; discarding all data", plan.stored
        )
    else:
        logger.info("Creating schema at version %d", plan.target)

    with transaction(conn):
        make_pristine(conn)
        on_create(conn, options.internal)
        write_version(conn, plan.target)


def _upgrade(
    conn: sqlite3.Connection,
    plan: MigrationPlan,
    options: MigrationOptions,
    boundaries: Mapping[int, Boundary],
) -> None:
    logger.info("Upgrading schema from version %d to %d", plan.stored, plan.target)
    # With no registered boundary in range only the marker and views move.
    steps: tuple[int | None, ...] = plan.boundaries or (None,)
    for index, version in enumerate(steps):
        last = index == len(steps) - 1
        with transaction(conn):
            if version is not None:
                try:
                    boundaries[version](conn, options)
                except sqlite3.Error as exc:
                    raise BoundaryTransformError(version) from exc
            if last and plan.target == VERSION_LATEST:
                _refresh_views_and_triggers(conn, options.internal)
            write_version(conn, plan.target if last else version)
        if version is not None:
            logger.info("Applied schema boundary %d", version)


def migrate(
    conn: sqlite3.Connection,
    target: int = VERSION_LATEST,
    options: MigrationOptions | None = None,
    on_create: SchemaBuilder | None = None,
    boundaries: Mapping[int, Boundary] = BOUNDARIES,
) -> MigrationPlan:
    """Bring the database to the target version and return the plan taken.

    Fresh, unsupported and downgraded databases are wiped with a pristine
    reset and rebuilt by on_create (the latest schema by default) in a
    single transaction. Stale databases are upgraded one boundary per
    transaction, each stamping its own version, so an interrupted run
    resumes from the last completed boundary.

    Args:
        conn: Connection the caller holds exclusively for the whole run.
        target: Version to reach.
        options: Partition and key settings passed to every boundary.
        on_create: Builds the structure for rebuilds, given (conn, internal).
            Defaults to the latest schema, stamped with the target version.
        boundaries: Registered transformations by resulting version.

    Raises:
        BoundaryTransformError: If a boundary fails; earlier boundaries stay applied.
    """
    options = options or MigrationOptions()
    plan = plan_migration(_read_stored_version(conn), target, boundaries)

    if plan.state is MigrationState.CURRENT:
        logger.debug("Schema already at version %d", plan.target)
    elif plan.rebuilds:
        _rebuild(conn, plan, options, on_create)
    else:
        _upgrade(conn, plan, options, boundaries)
    return plan

"""Store — repository pattern over the ordered card tables.

The Store is the single dependency injected into every service. It owns the
database engine and the plugin event bus. Services own their transaction
boundaries via :meth:`Store.transaction`:

- **Writes**: ``BEGIN IMMEDIATE`` on SQLite (the write lock is taken before
  the first read), ``SELECT ... FOR UPDATE`` on board rows elsewhere.
  Commit on normal exit, rollback on exception.
- **Reads**: :meth:`Store.read` yields the same helper API on a plain
  connection for callers that only look.

INVARIANT: ``cards.position`` and ``cards.board_id`` are only ever written
through :meth:`StoreTransaction.write_positions` (plus the initial insert).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, exists, func, or_, select, update

from boardctl.domain.ordering import CardSlot, PositionWrite
from boardctl.infrastructure.database.engine import begin_write, init_database
from boardctl.infrastructure.database.schema import (
    boards,
    cards,
    environment_members,
    environments,
)
from boardctl.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

    from boardctl.config.settings import BoardSettings
    from boardctl.plugins.event_bus import EventBus


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within transaction() / read()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active connection with the ordered-list data-access helpers."""

    conn: Connection

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_card(self, card_id: str) -> Row[Any] | None:
        """Fetch one card row, or None."""
        return self.conn.execute(select(cards).where(cards.c.id == card_id)).first()

    def get_board(self, board_id: str) -> Row[Any] | None:
        """Fetch one board row, or None."""
        return self.conn.execute(select(boards).where(boards.c.id == board_id)).first()

    def list_ordered(self, board_id: str) -> list[CardSlot]:
        """The board's cards as ``(card_id, position)`` slots, ascending.

        Ties (only possible on a damaged board) break on card id so the
        order is deterministic.
        """
        rows = self.conn.execute(
            select(cards.c.id, cards.c.position)
            .where(cards.c.board_id == board_id)
            .order_by(cards.c.position, cards.c.id)
        ).fetchall()
        return [CardSlot(card_id=row.id, position=row.position) for row in rows]

    def list_cards(self, board_id: str) -> list[Row[Any]]:
        """Full card rows for a board, ascending by position."""
        return list(
            self.conn.execute(
                select(cards)
                .where(cards.c.board_id == board_id)
                .order_by(cards.c.position, cards.c.id)
            ).fetchall()
        )

    def count_cards(self, board_id: str) -> int:
        """Number of cards currently on *board_id*."""
        return int(
            self.conn.execute(
                select(func.count()).select_from(cards).where(cards.c.board_id == board_id)
            ).scalar_one()
        )

    def board_ids(self) -> list[str]:
        """Every board id, sorted."""
        rows = self.conn.execute(select(boards.c.id).order_by(boards.c.id)).fetchall()
        return [row.id for row in rows]

    def can_access_board(self, actor_id: str, board_id: str) -> bool:
        """True if *actor_id* owns or is a member of the board's environment."""
        is_member = exists().where(
            and_(
                environment_members.c.environment_id == environments.c.id,
                environment_members.c.user_id == actor_id,
            )
        )
        row = self.conn.execute(
            select(boards.c.id)
            .select_from(boards.join(environments, boards.c.environment_id == environments.c.id))
            .where(
                boards.c.id == board_id,
                or_(environments.c.owner_id == actor_id, is_member),
            )
        ).first()
        return row is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def lock_boards(self, board_ids: Iterable[str]) -> list[str]:
        """Row-lock the given boards in id order; returns the ids that exist.

        A sorted lock order keeps two cross-board moves between the same pair
        of boards from deadlocking. SQLite does not render ``FOR UPDATE``;
        there the IMMEDIATE transaction already holds the database write lock.
        """
        ordered = sorted(set(board_ids))
        rows = self.conn.execute(
            select(boards.c.id)
            .where(boards.c.id.in_(ordered))
            .order_by(boards.c.id)
            .with_for_update()
        ).fetchall()
        return [row.id for row in rows]

    def lock_card(self, card_id: str, *board_ids: str) -> Row[Any] | None:
        """Lock the card's current board plus *board_ids*; returns the card row.

        The card is re-read after each lock. Once its board is locked no
        other writer can take it elsewhere, so the row returned reflects the
        latest committed location. None if the card no longer exists.
        """
        locked: set[str] = set()
        while True:
            current = self.get_card(card_id)
            if current is None:
                return None
            needed = {current.board_id, *board_ids} - locked
            if not needed:
                return current
            self.lock_boards(needed)
            locked |= needed

    def write_positions(self, writes: Iterable[PositionWrite]) -> int:
        """Apply reconciler output. Returns the number of rows written."""
        modified = now_iso()
        count = 0
        for write in writes:
            self.conn.execute(
                update(cards)
                .where(cards.c.id == write.card_id)
                .values(board_id=write.board_id, position=write.position, modified=modified)
            )
            count += 1
        return count


# ---------------------------------------------------------------------------
# Store: the repository
# ---------------------------------------------------------------------------


class Store:
    """Repository encapsulating database access and event dispatch.

    Constructed once at startup from :class:`BoardSettings`. Services
    receive the Store via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: BoardSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            settings.database_url,
            busy_timeout=settings.database.busy_timeout,
            echo=settings.database.echo,
        )
        self._event_bus: EventBus | None = None

    @property
    def root(self) -> Path:
        """The deployment root directory."""
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> BoardSettings:
        """The resolved settings for this store."""
        return self._settings

    @property
    def event_bus(self) -> EventBus | None:
        """The plugin event bus (None if not initialized)."""
        return self._event_bus

    def init_event_bus(self, *, sync: bool = False) -> None:
        """Initialize the plugin event bus.

        Creates a PluginManager, discovers entry-point and local plugins,
        registers the built-in activity log, and wires up the EventBus.
        """
        from boardctl.plugins.builtins.activity_log import ActivityLogPlugin
        from boardctl.plugins.event_bus import EventBus
        from boardctl.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load(local_dir=self._settings.plugin_dir)

        if self._settings.plugins.activity_log:
            pm.register_plugin(ActivityLogPlugin(self._engine), name="activity-log-builtin")

        events = self._settings.events
        self._event_bus = EventBus(
            self._engine,
            pm,
            sync=sync,
            max_retries=events.max_retries,
            max_workers=events.max_workers,
        )

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Read-then-write transaction for one logical operation.

        Everything read through the yielded helper is consistent with what
        gets written: no other writer can commit in between. On exception
        the whole transaction rolls back and nothing partial is visible.

        Usage::

            with store.transaction() as txn:
                slots = txn.list_ordered(board_id)
                txn.write_positions(compact(slots, board_id))
        """
        with begin_write(self._engine) as conn:
            yield StoreTransaction(conn=conn)

    @contextmanager
    def read(self) -> Iterator[StoreTransaction]:
        """Read-only access to the helper API (no write lock taken)."""
        with self._engine.connect() as conn:
            yield StoreTransaction(conn=conn)

    def list_ordered(self, board_id: str) -> list[CardSlot]:
        """Committed ordering of *board_id* (outside any caller transaction)."""
        with self.read() as reader:
            return reader.list_ordered(board_id)

    def close(self) -> None:
        """Drain the event executor and release pooled connections."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
            self._event_bus = None
        self._engine.dispose()

"""AccessGate — may this actor touch this board?"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from boardctl.infrastructure.store import Store


class AccessGate:
    """Board-level authorization.

    An actor may act on a board when they own its environment or are a
    member of it. Unknown boards are simply inaccessible; callers report
    both cases as not found so board existence never leaks.
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def can_access_board(self, actor_id: str, board_id: str) -> bool:
        with self._store.read() as reader:
            return reader.can_access_board(actor_id, board_id)

    def can_access_boards(self, actor_id: str, *board_ids: str) -> bool:
        """True only if every board in *board_ids* is accessible."""
        with self._store.read() as reader:
            return all(reader.can_access_board(actor_id, b) for b in set(board_ids))

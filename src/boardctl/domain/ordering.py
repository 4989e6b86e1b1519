"""Position reconciliation — dense per-board card ordering.

A board with N cards holds positions exactly ``{0, ..., N-1}``. The
functions here are pure: they take the ordered lists as read from the
store and return the position writes that realize a move, without touching
storage.

New positions are always derived from list *indexes*, never from arithmetic
on stored values. For a settled list this is the same thing (index ==
position), and it means a list that arrives with a gap is written back dense.

INVARIANT: Applying a plan's writes to the lists it was computed from leaves
every affected board dense.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CardSlot:
    """A card's stored position, as read from its board's ordered list."""

    card_id: str
    position: int


@dataclass(frozen=True)
class PositionWrite:
    """One row update: place *card_id* on *board_id* at *position*."""

    card_id: str
    board_id: str
    position: int


@dataclass(frozen=True)
class MovePlan:
    """The write set for one relocation plus the moved card's final placement."""

    card_id: str
    board_id: str
    position: int
    writes: tuple[PositionWrite, ...] = field(default_factory=tuple)

    @property
    def is_noop(self) -> bool:
        return not self.writes


def clamp_position(requested: int, size: int) -> int:
    """Clamp *requested* into ``[0, size - 1]`` (``0`` when *size* is 0)."""
    if size <= 0:
        return 0
    return min(max(0, requested), size - 1)


def reconcile(
    source: Sequence[CardSlot],
    moving_card_id: str,
    source_board_id: str,
    destination_board_id: str,
    requested_position: int,
    destination: Sequence[CardSlot] | None = None,
) -> MovePlan:
    """Compute the writes that move *moving_card_id* to *requested_position*.

    Args:
        source: The source board's cards, ascending by position. Must
            contain the moving card.
        moving_card_id: The card being relocated.
        source_board_id: Board the card currently sits on.
        destination_board_id: Board the card should end up on. Equal to
            *source_board_id* for a reorder within one board.
        requested_position: Caller-supplied zero-based target. Out-of-range
            values are clamped, never rejected.
        destination: The destination board's cards, ascending by position.
            Ignored for same-board moves; ``None`` means empty.

    Returns:
        A :class:`MovePlan`. Its ``writes`` are unordered; an empty tuple
        means the move is a no-op. A moving card absent from *source*
        also yields an empty plan.
    """
    if source_board_id == destination_board_id:
        return _reconcile_within(source, moving_card_id, source_board_id, requested_position)
    return _reconcile_across(
        source,
        destination or (),
        moving_card_id,
        source_board_id,
        destination_board_id,
        requested_position,
    )


def _reconcile_within(
    slots: Sequence[CardSlot],
    moving_card_id: str,
    board_id: str,
    requested_position: int,
) -> MovePlan:
    from_idx = _index_of(slots, moving_card_id)
    to_idx = clamp_position(requested_position, len(slots))
    if from_idx is None:
        return MovePlan(card_id=moving_card_id, board_id=board_id, position=to_idx)
    if from_idx == to_idx:
        return MovePlan(
            card_id=moving_card_id,
            board_id=board_id,
            position=slots[from_idx].position,
        )

    reordered = [s for s in slots if s.card_id != moving_card_id]
    reordered.insert(to_idx, slots[from_idx])

    writes = tuple(
        PositionWrite(slot.card_id, board_id, idx)
        for idx, slot in enumerate(reordered)
        if slot.position != idx
    )
    return MovePlan(card_id=moving_card_id, board_id=board_id, position=to_idx, writes=writes)


def _reconcile_across(
    source: Sequence[CardSlot],
    destination: Sequence[CardSlot],
    moving_card_id: str,
    source_board_id: str,
    destination_board_id: str,
    requested_position: int,
) -> MovePlan:
    # The arriving card makes the destination one longer, so appending at
    # len(destination) is a valid target.
    to_idx = min(max(0, requested_position), len(destination))
    if _index_of(source, moving_card_id) is None:
        return MovePlan(card_id=moving_card_id, board_id=source_board_id, position=to_idx)

    writes: list[PositionWrite] = []

    # Open the slot: everything at or after the target moves up one.
    for idx, slot in enumerate(destination):
        new_position = idx if idx < to_idx else idx + 1
        if slot.position != new_position:
            writes.append(PositionWrite(slot.card_id, destination_board_id, new_position))

    writes.append(PositionWrite(moving_card_id, destination_board_id, to_idx))

    # Close the gap: everything after the departed card moves down one.
    remaining = [s for s in source if s.card_id != moving_card_id]
    writes.extend(compact(remaining, source_board_id))

    return MovePlan(
        card_id=moving_card_id,
        board_id=destination_board_id,
        position=to_idx,
        writes=tuple(writes),
    )


def compact(slots: Sequence[CardSlot], board_id: str) -> list[PositionWrite]:
    """Writes that renumber *slots* densely, preserving their order."""
    return [
        PositionWrite(slot.card_id, board_id, idx)
        for idx, slot in enumerate(slots)
        if slot.position != idx
    ]


def is_dense(slots: Iterable[CardSlot]) -> bool:
    """True when the positions are exactly ``{0, ..., n-1}`` with no duplicates."""
    positions = sorted(slot.position for slot in slots)
    return positions == list(range(len(positions)))


def apply_writes(
    boards: Mapping[str, Sequence[CardSlot]],
    writes: Iterable[PositionWrite],
) -> dict[str, list[CardSlot]]:
    """Return the board lists that result from applying *writes* to *boards*.

    Boards that only appear as a write target start out empty. Each result
    list is sorted by position (card id breaks ties).
    """
    placement: dict[str, tuple[str, int]] = {}
    for board_id, slots in boards.items():
        for slot in slots:
            placement[slot.card_id] = (board_id, slot.position)
    for write in writes:
        placement[write.card_id] = (write.board_id, write.position)

    result: dict[str, list[CardSlot]] = {board_id: [] for board_id in boards}
    for card_id, (board_id, position) in placement.items():
        result.setdefault(board_id, []).append(CardSlot(card_id, position))
    for slots in result.values():
        slots.sort(key=lambda s: (s.position, s.card_id))
    return result


def _index_of(slots: Sequence[CardSlot], card_id: str) -> int | None:
    for idx, slot in enumerate(slots):
        if slot.card_id == card_id:
            return idx
    return None

"""WorkspaceService — users, environments, memberships, and boards.

Just enough tenancy to put cards somewhere: an environment has one owner
and any number of plain members. Owners and members may list what they can
see; only the owner may add members or create, edit, and remove boards.
Roles and invitations are out of scope.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from boardctl.domain.ids import generate_id, slugify, unique_slug
from boardctl.infrastructure.database.schema import (
    boards,
    cards,
    environment_members,
    environments,
    users,
)
from boardctl.services._helpers import clean_text, now_iso
from boardctl.services.base import BaseService
from boardctl.services.notifier import EVENT_BOARD_DELETED
from boardctl.services.result import CONFLICT, INVALID_INPUT, NOT_FOUND, ServiceResult
from boardctl.services.telemetry import trace_span, traced


class WorkspaceService(BaseService):
    """Tenancy scaffolding around the card engine."""

    def create_user(self, name: str, *, email: str | None = None) -> ServiceResult:
        op = "create_user"
        clean_name = clean_text(name)
        if clean_name is None:
            return ServiceResult.failure(op, INVALID_INPUT, "User name must not be empty")

        user_id = generate_id("user")
        try:
            with self._store.transaction() as txn:
                txn.conn.execute(
                    insert(users).values(
                        id=user_id,
                        name=clean_name,
                        email=clean_text(email),
                        created=now_iso(),
                    )
                )
        except IntegrityError:
            return ServiceResult.failure(
                op, CONFLICT, f"A user with email '{email}' already exists"
            )

        return ServiceResult(ok=True, op=op, data={"id": user_id, "name": clean_name})

    @traced
    def create_environment(self, name: str, owner_id: str) -> ServiceResult:
        """Create an environment owned by *owner_id*, with a unique slug."""
        op = "create_environment"
        clean_name = clean_text(name)
        if clean_name is None:
            return ServiceResult.failure(op, INVALID_INPUT, "Environment name must not be empty")

        env_id = generate_id("environment")
        with self._store.transaction() as txn:
            owner = txn.conn.execute(select(users.c.id).where(users.c.id == owner_id)).first()
            if owner is None:
                return ServiceResult.failure(op, NOT_FOUND, f"No user found with ID '{owner_id}'")

            taken = {row.slug for row in txn.conn.execute(select(environments.c.slug)).fetchall()}
            slug = unique_slug(slugify(clean_name) or "environment", taken)
            txn.conn.execute(
                insert(environments).values(
                    id=env_id,
                    name=clean_name,
                    slug=slug,
                    owner_id=owner_id,
                    created=now_iso(),
                )
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"id": env_id, "name": clean_name, "slug": slug, "owner_id": owner_id},
        )

    def list_environments(self, actor_id: str) -> ServiceResult:
        """Environments *actor_id* owns or belongs to, oldest first."""
        op = "list_environments"
        member_of = select(environment_members.c.environment_id).where(
            environment_members.c.user_id == actor_id
        )
        board_counts = (
            select(boards.c.environment_id, func.count().label("n"))
            .group_by(boards.c.environment_id)
            .subquery()
        )
        card_counts = (
            select(boards.c.environment_id, func.count(cards.c.id).label("n"))
            .select_from(boards.join(cards, cards.c.board_id == boards.c.id))
            .group_by(boards.c.environment_id)
            .subquery()
        )
        query = (
            select(
                environments,
                func.coalesce(board_counts.c.n, 0).label("boards_count"),
                func.coalesce(card_counts.c.n, 0).label("cards_count"),
            )
            .select_from(
                environments.outerjoin(
                    board_counts, board_counts.c.environment_id == environments.c.id
                ).outerjoin(card_counts, card_counts.c.environment_id == environments.c.id)
            )
            .where(or_(environments.c.owner_id == actor_id, environments.c.id.in_(member_of)))
            .order_by(environments.c.created, environments.c.id)
        )
        with self._store.read() as reader:
            rows = reader.conn.execute(query).fetchall()

        items = [
            {
                "id": row.id,
                "name": row.name,
                "slug": row.slug,
                "role": "owner" if row.owner_id == actor_id else "member",
                "boards_count": row.boards_count,
                "cards_count": row.cards_count,
            }
            for row in rows
        ]
        return ServiceResult(ok=True, op=op, data={"items": items, "count": len(items)})

    def add_member(self, environment_id: str, user_id: str, actor_id: str) -> ServiceResult:
        """Add *user_id* to the environment. Only the owner may do this."""
        op = "add_member"
        with self._store.transaction() as txn:
            env = self._owned_environment(txn.conn, environment_id, actor_id)
            if env is None:
                return ServiceResult.failure(
                    op, NOT_FOUND, f"No environment found with ID '{environment_id}'"
                )
            user = txn.conn.execute(select(users.c.id).where(users.c.id == user_id)).first()
            if user is None:
                return ServiceResult.failure(op, NOT_FOUND, f"No user found with ID '{user_id}'")
            if user_id == env.owner_id:
                return ServiceResult.failure(
                    op, CONFLICT, f"User '{user_id}' already owns this environment"
                )

            existing = txn.conn.execute(
                select(environment_members.c.user_id).where(
                    environment_members.c.environment_id == environment_id,
                    environment_members.c.user_id == user_id,
                )
            ).first()
            if existing is not None:
                return ServiceResult.failure(
                    op, CONFLICT, f"User '{user_id}' is already a member"
                )

            txn.conn.execute(
                insert(environment_members).values(
                    environment_id=environment_id,
                    user_id=user_id,
                    role="member",
                    created=now_iso(),
                )
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"environment_id": environment_id, "user_id": user_id, "role": "member"},
        )

    def create_board(
        self,
        environment_id: str,
        name: str,
        actor_id: str,
        *,
        description: str | None = None,
    ) -> ServiceResult:
        """Append a board to the environment. Only the owner may do this."""
        op = "create_board"
        clean_name = clean_text(name)
        if clean_name is None:
            return ServiceResult.failure(op, INVALID_INPUT, "Board name must not be empty")

        board_id = generate_id("board")
        with self._store.transaction() as txn:
            if self._owned_environment(txn.conn, environment_id, actor_id) is None:
                return ServiceResult.failure(
                    op, NOT_FOUND, f"No environment found with ID '{environment_id}'"
                )
            position = len(
                txn.conn.execute(
                    select(boards.c.id).where(boards.c.environment_id == environment_id)
                ).fetchall()
            )
            txn.conn.execute(
                insert(boards).values(
                    id=board_id,
                    environment_id=environment_id,
                    name=clean_name,
                    description=clean_text(description),
                    position=position,
                    created=now_iso(),
                )
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": board_id,
                "environment_id": environment_id,
                "name": clean_name,
                "position": position,
            },
        )

    def list_boards(self, environment_id: str, actor_id: str) -> ServiceResult:
        """Boards in the environment in display order, with card counts."""
        op = "list_boards"
        card_counts = (
            select(cards.c.board_id, func.count().label("n"))
            .group_by(cards.c.board_id)
            .subquery()
        )
        with self._store.read() as reader:
            if self._visible_environment(reader.conn, environment_id, actor_id) is None:
                return ServiceResult.failure(
                    op, NOT_FOUND, f"No environment found with ID '{environment_id}'"
                )
            rows = reader.conn.execute(
                select(boards, func.coalesce(card_counts.c.n, 0).label("cards_count"))
                .select_from(boards.outerjoin(card_counts, card_counts.c.board_id == boards.c.id))
                .where(boards.c.environment_id == environment_id)
                .order_by(boards.c.position, boards.c.id)
            ).fetchall()

        items = [{**_board_to_dict(row), "cards_count": row.cards_count} for row in rows]
        return ServiceResult(
            ok=True,
            op=op,
            data={"environment_id": environment_id, "items": items, "count": len(items)},
        )

    def update_board(
        self,
        board_id: str,
        actor_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> ServiceResult:
        """Rename a board or change its description. Only the owner may do this.

        An empty *description* clears it. Board order is fixed at creation.
        """
        op = "update_board"
        values: dict[str, Any] = {}
        if name is not None:
            clean_name = clean_text(name)
            if clean_name is None:
                return ServiceResult.failure(op, INVALID_INPUT, "Board name must not be empty")
            values["name"] = clean_name
        if description is not None:
            values["description"] = clean_text(description)
        if not values:
            return ServiceResult.failure(op, INVALID_INPUT, "Nothing to update")

        with self._store.transaction() as txn:
            board = txn.get_board(board_id)
            if board is None or (
                self._owned_environment(txn.conn, board.environment_id, actor_id) is None
            ):
                return ServiceResult.failure(op, NOT_FOUND, f"No board found with ID '{board_id}'")
            txn.conn.execute(update(boards).where(boards.c.id == board_id).values(**values))
            updated = txn.get_board(board_id)

        data = _board_to_dict(updated)
        data["updated_fields"] = sorted(values)
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    def delete_board(self, board_id: str, actor_id: str) -> ServiceResult:
        """Remove a board and every card on it. Only the owner may do this.

        The environment's remaining boards are renumbered so board
        positions stay ``0..n-1``.
        """
        op = "delete_board"
        try:
            with self._store.transaction() as txn:
                txn.lock_boards([board_id])
                board = txn.get_board(board_id)
                if board is None or (
                    self._owned_environment(txn.conn, board.environment_id, actor_id) is None
                ):
                    return ServiceResult.failure(
                        op, NOT_FOUND, f"No board found with ID '{board_id}'"
                    )
                environment_id: str = board.environment_id
                card_ids = [slot.card_id for slot in txn.list_ordered(board_id)]

                with trace_span("cascade"):
                    txn.conn.execute(delete(cards).where(cards.c.board_id == board_id))
                    txn.conn.execute(delete(boards).where(boards.c.id == board_id))

                with trace_span("renumber"):
                    remaining = txn.conn.execute(
                        select(boards.c.id, boards.c.position)
                        .where(boards.c.environment_id == environment_id)
                        .order_by(boards.c.position, boards.c.id)
                    ).fetchall()
                    for index, row in enumerate(remaining):
                        if row.position != index:
                            txn.conn.execute(
                                update(boards).where(boards.c.id == row.id).values(position=index)
                            )
        except SQLAlchemyError as exc:
            return ServiceResult.failure(
                op,
                CONFLICT,
                f"Could not delete board '{board_id}': {exc.__class__.__name__}",
                retryable=True,
            )

        warnings: list[str] = []
        notifier = self._notifier
        for card_id in card_ids:
            warnings.extend(notifier.record_delete(card_id, actor_id, board_id))
        warnings.extend(
            notifier.emit(
                environment_id,
                EVENT_BOARD_DELETED,
                {"id": board_id, "cards_deleted": len(card_ids)},
            )
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": board_id,
                "environment_id": environment_id,
                "cards_deleted": len(card_ids),
            },
            warnings=warnings,
        )

    @staticmethod
    def _owned_environment(conn: Any, environment_id: str, actor_id: str) -> Any:
        """The environment row if *actor_id* owns it, else None."""
        return conn.execute(
            select(environments).where(
                environments.c.id == environment_id,
                environments.c.owner_id == actor_id,
            )
        ).first()

    @staticmethod
    def _visible_environment(conn: Any, environment_id: str, actor_id: str) -> Any:
        """The environment row if *actor_id* owns it or is a member, else None."""
        member_of = select(environment_members.c.environment_id).where(
            environment_members.c.user_id == actor_id
        )
        return conn.execute(
            select(environments).where(
                environments.c.id == environment_id,
                or_(environments.c.owner_id == actor_id, environments.c.id.in_(member_of)),
            )
        ).first()


def _board_to_dict(row: Any) -> dict[str, Any]:
    return {
        "id": row.id,
        "environment_id": row.environment_id,
        "name": row.name,
        "description": row.description,
        "position": row.position,
    }

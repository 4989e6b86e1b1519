"""Tests for WorkspaceService — users, environments, members, boards."""

from __future__ import annotations

import pytest

from boardctl.infrastructure.store import Store
from boardctl.services.relocation import RelocationService
from boardctl.services.result import CONFLICT, INVALID_INPUT, NOT_FOUND
from boardctl.services.workspace import WorkspaceService
from tests.conftest import (
    RecordingPlugin,
    Workspace,
    create_environment,
    create_user,
    fill_board,
)


class TestCreateUser:
    def test_creates_user(self, store: Store) -> None:
        result = WorkspaceService(store).create_user("Ada", email="ada@example.com")
        assert result.ok
        assert result.data["name"] == "Ada"
        assert result.data["id"].startswith("usr_")

    def test_duplicate_email_conflicts(self, store: Store) -> None:
        svc = WorkspaceService(store)
        assert svc.create_user("Ada", email="ada@example.com").ok
        result = svc.create_user("Another Ada", email="ada@example.com")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == CONFLICT

    def test_users_without_email_do_not_collide(self, store: Store) -> None:
        svc = WorkspaceService(store)
        assert svc.create_user("One").ok
        assert svc.create_user("Two").ok

    def test_blank_name_rejected(self, store: Store) -> None:
        result = WorkspaceService(store).create_user("  ")
        assert result.error is not None
        assert result.error.code == INVALID_INPUT


class TestCreateEnvironment:
    def test_slug_from_name(self, store: Store) -> None:
        owner = create_user(store, "Owner")
        data = create_environment(store, "Product Team", owner["id"])
        assert data["slug"] == "product-team"
        assert data["owner_id"] == owner["id"]

    def test_slug_collision_gets_suffix(self, store: Store) -> None:
        owner = create_user(store, "Owner")
        first = create_environment(store, "Ops", owner["id"])
        second = create_environment(store, "Ops", owner["id"])
        assert first["slug"] == "ops"
        assert second["slug"] == "ops-2"

    def test_unknown_owner(self, store: Store) -> None:
        result = WorkspaceService(store).create_environment("Ops", "usr_000000000000")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == NOT_FOUND


class TestAddMember:
    def test_member_gains_access(self, store: Store, workspace: Workspace) -> None:
        svc = WorkspaceService(store)
        result = svc.add_member(
            workspace.environment_id, workspace.outsider_id, workspace.owner_id
        )
        assert result.ok
        assert result.data["role"] == "member"
        with store.read() as reader:
            assert reader.can_access_board(workspace.outsider_id, workspace.todo_id)

    def test_only_owner_may_add(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).add_member(
            workspace.environment_id, workspace.outsider_id, workspace.member_id
        )
        assert not result.ok
        assert result.error is not None
        assert result.error.code == NOT_FOUND

    def test_existing_member_conflicts(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).add_member(
            workspace.environment_id, workspace.member_id, workspace.owner_id
        )
        assert result.error is not None
        assert result.error.code == CONFLICT

    def test_owner_cannot_join_own_environment(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).add_member(
            workspace.environment_id, workspace.owner_id, workspace.owner_id
        )
        assert result.error is not None
        assert result.error.code == CONFLICT

    def test_unknown_user(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).add_member(
            workspace.environment_id, "usr_000000000000", workspace.owner_id
        )
        assert result.error is not None
        assert result.error.code == NOT_FOUND


class TestCreateBoard:
    def test_boards_are_numbered_in_order(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).create_board(
            workspace.environment_id, "Done", workspace.owner_id, description="Shipped"
        )
        assert result.ok
        assert result.data["position"] == 2
        assert result.data["id"].startswith("brd_")

    def test_member_may_not_create_board(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).create_board(
            workspace.environment_id, "Done", workspace.member_id
        )
        assert result.error is not None
        assert result.error.code == NOT_FOUND

    def test_blank_name_rejected(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).create_board(
            workspace.environment_id, "", workspace.owner_id
        )
        assert result.error is not None
        assert result.error.code == INVALID_INPUT


class TestListEnvironments:
    def test_owned_and_member_environments(self, store: Store, workspace: Workspace) -> None:
        side = create_environment(store, "Side", workspace.member_id)
        fill_board(store, workspace.todo_id, workspace.owner_id, "AB")
        fill_board(store, workspace.doing_id, workspace.owner_id, "C")

        result = WorkspaceService(store).list_environments(workspace.member_id)

        assert result.ok
        assert [(e["id"], e["role"]) for e in result.data["items"]] == [
            (workspace.environment_id, "member"),
            (side["id"], "owner"),
        ]
        product = result.data["items"][0]
        assert product["boards_count"] == 2
        assert product["cards_count"] == 3
        assert result.data["items"][1]["boards_count"] == 0

    def test_outsider_sees_nothing(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).list_environments(workspace.outsider_id)
        assert result.data == {"items": [], "count": 0}


class TestListBoards:
    def test_in_position_order_with_card_counts(self, store: Store, workspace: Workspace) -> None:
        fill_board(store, workspace.doing_id, workspace.owner_id, "XY")
        result = WorkspaceService(store).list_boards(workspace.environment_id, workspace.member_id)

        assert result.ok
        assert [(b["id"], b["position"], b["cards_count"]) for b in result.data["items"]] == [
            (workspace.todo_id, 0, 0),
            (workspace.doing_id, 1, 2),
        ]

    def test_outsider_sees_not_found(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).list_boards(
            workspace.environment_id, workspace.outsider_id
        )
        assert result.error is not None
        assert result.error.code == NOT_FOUND


class TestUpdateBoard:
    def test_rename_and_describe(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).update_board(
            workspace.todo_id, workspace.owner_id, name=" Backlog ", description="Later"
        )
        assert result.ok
        assert result.data["name"] == "Backlog"
        assert result.data["description"] == "Later"
        assert result.data["position"] == 0
        assert result.data["updated_fields"] == ["description", "name"]

    def test_member_may_not_edit(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).update_board(
            workspace.todo_id, workspace.member_id, name="Mine"
        )
        assert result.error is not None
        assert result.error.code == NOT_FOUND

    @pytest.mark.parametrize("kwargs", [{}, {"name": "  "}], ids=["nothing", "blank-name"])
    def test_invalid_input(self, store: Store, workspace: Workspace, kwargs: dict) -> None:
        result = WorkspaceService(store).update_board(
            workspace.todo_id, workspace.owner_id, **kwargs
        )
        assert result.error is not None
        assert result.error.code == INVALID_INPUT


class TestDeleteBoard:
    def test_removes_board_and_its_cards(
        self, store: Store, workspace: Workspace, recorder: RecordingPlugin
    ) -> None:
        ids = fill_board(store, workspace.todo_id, workspace.owner_id, "AB")
        fill_board(store, workspace.doing_id, workspace.owner_id, "X")
        recorder.calls.clear()

        result = WorkspaceService(store).delete_board(workspace.todo_id, workspace.owner_id)

        assert result.ok, result.error
        assert result.data["cards_deleted"] == 2
        assert store.list_ordered(workspace.todo_id) == []
        with store.read() as reader:
            assert reader.get_board(workspace.todo_id) is None
            assert reader.get_card(ids["A"]) is None
        assert recorder.names() == ["post_card_delete", "post_card_delete", "publish_event"]
        assert recorder.calls[-1][1]["event"] == "boardDeleted"

    def test_remaining_boards_renumbered(self, store: Store, workspace: Workspace) -> None:
        svc = WorkspaceService(store)
        done = svc.create_board(workspace.environment_id, "Done", workspace.owner_id).data
        svc.delete_board(workspace.todo_id, workspace.owner_id)

        listed = svc.list_boards(workspace.environment_id, workspace.owner_id).data["items"]
        assert [(b["id"], b["position"]) for b in listed] == [
            (workspace.doing_id, 0),
            (done["id"], 1),
        ]
        again = svc.create_board(workspace.environment_id, "Archive", workspace.owner_id)
        assert again.data["position"] == 2

    def test_member_may_not_delete(self, store: Store, workspace: Workspace) -> None:
        result = WorkspaceService(store).delete_board(workspace.todo_id, workspace.member_id)
        assert result.error is not None
        assert result.error.code == NOT_FOUND
        with store.read() as reader:
            assert reader.get_board(workspace.todo_id) is not None

    def test_moving_onto_deleted_board_is_not_found(
        self, store: Store, workspace: Workspace
    ) -> None:
        ids = fill_board(store, workspace.todo_id, workspace.owner_id, "A")
        WorkspaceService(store).delete_board(workspace.doing_id, workspace.owner_id)

        result = RelocationService(store).relocate(
            ids["A"], workspace.owner_id, workspace.doing_id, 0
        )
        assert result.error is not None
        assert result.error.code == NOT_FOUND

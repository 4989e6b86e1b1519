"""Shared pytest fixtures and test helpers for boardctl tests."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from boardctl.config.settings import BoardSettings
from boardctl.infrastructure.database.engine import init_database
from boardctl.infrastructure.store import Store
from boardctl.plugins.hookspecs import hookimpl
from boardctl.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _no_ambient_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's BOARDCTL_* environment out of the tests."""
    monkeypatch.delenv("BOARDCTL_CONFIG", raising=False)
    monkeypatch.delenv("BOARDCTL_ACTOR", raising=False)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` turns telemetry on for the whole thread; switch it back off."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / '.boardctl' / 'boardctl.db'}"


@pytest.fixture
def db_engine(db_url: str) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(db_url)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def settings(tmp_path: Path) -> BoardSettings:
    return BoardSettings.from_cli(root=tmp_path, sync=True)


@pytest.fixture
def store(settings: BoardSettings) -> Store:
    """Store on a temp SQLite database with a synchronous event bus.

    Hooks run inline, so audit rows and published events are visible as
    soon as the service call returns.
    """
    s = Store(settings)
    s.init_event_bus(sync=True)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI with CWD at a temp root so it creates an isolated database."""
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# A small tenant: one owner, one member, one outsider, two boards
# ---------------------------------------------------------------------------


@dataclass
class Workspace:
    owner_id: str
    member_id: str
    outsider_id: str
    environment_id: str
    todo_id: str
    doing_id: str


@pytest.fixture
def workspace(store: Store) -> Workspace:
    owner = create_user(store, "Olive Owner")
    member = create_user(store, "Max Member")
    outsider = create_user(store, "Oscar Outsider")
    env = create_environment(store, "Product", owner["id"])
    add_member(store, env["id"], member["id"], owner["id"])
    todo = create_board(store, env["id"], "Todo", owner["id"])
    doing = create_board(store, env["id"], "Doing", owner["id"])
    return Workspace(
        owner_id=owner["id"],
        member_id=member["id"],
        outsider_id=outsider["id"],
        environment_id=env["id"],
        todo_id=todo["id"],
        doing_id=doing["id"],
    )


class RecordingPlugin:
    """Records every card lifecycle hook and published event."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    @hookimpl
    def post_card_create(
        self,
        card_id: str,
        actor_id: str,
        board_id: str,
        title: str,
        position: int,
    ) -> None:
        self.calls.append(
            (
                "post_card_create",
                {"card_id": card_id, "board_id": board_id, "position": position},
            )
        )

    @hookimpl
    def post_card_move(
        self,
        card_id: str,
        actor_id: str,
        from_board_id: str,
        to_board_id: str,
        new_position: int,
    ) -> None:
        self.calls.append(
            (
                "post_card_move",
                {
                    "card_id": card_id,
                    "actor_id": actor_id,
                    "from_board_id": from_board_id,
                    "to_board_id": to_board_id,
                    "new_position": new_position,
                },
            )
        )

    @hookimpl
    def post_card_update(
        self, card_id: str, actor_id: str, board_id: str, fields: list[str]
    ) -> None:
        self.calls.append(("post_card_update", {"card_id": card_id, "fields": fields}))

    @hookimpl
    def post_card_delete(self, card_id: str, actor_id: str, board_id: str) -> None:
        self.calls.append(("post_card_delete", {"card_id": card_id, "board_id": board_id}))

    @hookimpl
    def publish_event(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        self.calls.append(("publish_event", {"channel": channel, "event": event, **payload}))


@pytest.fixture
def recorder(store: Store) -> RecordingPlugin:
    """A RecordingPlugin registered on the store's event bus."""
    assert store.event_bus is not None
    plugin = RecordingPlugin()
    store.event_bus.plugin_manager.register_plugin(plugin, name="recorder")
    return plugin


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def create_user(store: Store, name: str, **kwargs: Any) -> dict[str, Any]:
    from boardctl.services.workspace import WorkspaceService

    result = WorkspaceService(store).create_user(name, **kwargs)
    assert result.ok, result.error
    return result.data


def create_environment(store: Store, name: str, owner_id: str) -> dict[str, Any]:
    from boardctl.services.workspace import WorkspaceService

    result = WorkspaceService(store).create_environment(name, owner_id)
    assert result.ok, result.error
    return result.data


def add_member(store: Store, environment_id: str, user_id: str, actor_id: str) -> None:
    from boardctl.services.workspace import WorkspaceService

    result = WorkspaceService(store).add_member(environment_id, user_id, actor_id)
    assert result.ok, result.error


def create_board(store: Store, environment_id: str, name: str, actor_id: str) -> dict[str, Any]:
    from boardctl.services.workspace import WorkspaceService

    result = WorkspaceService(store).create_board(environment_id, name, actor_id)
    assert result.ok, result.error
    return result.data


def create_card(
    store: Store, board_id: str, actor_id: str, title: str, **kwargs: Any
) -> dict[str, Any]:
    """Create a card via CardService, asserting success."""
    from boardctl.services.cards import CardService

    result = CardService(store).create_card(board_id, actor_id, title, **kwargs)
    assert result.ok, result.error
    return result.data


def fill_board(store: Store, board_id: str, actor_id: str, titles: str) -> dict[str, str]:
    """Create one card per character in *titles*; returns ``{title: card_id}``."""
    return {t: create_card(store, board_id, actor_id, t)["id"] for t in titles}


def board_state(store: Store, board_id: str, ids: dict[str, str]) -> list[tuple[str, int]]:
    """The board as ``[(title, position), ...]`` for readable assertions."""
    titles = {card_id: title for title, card_id in ids.items()}
    return [(titles.get(s.card_id, s.card_id), s.position) for s in store.list_ordered(board_id)]

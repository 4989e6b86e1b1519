"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from boardctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from boardctl.services.result import ServiceResult

Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if "id" in item)
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="board.ok"), Text(f"  {result.op}", style="board.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="board.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="board.id")
    elif key in ("title", "name"):
        v = Text(str(value), style="board.title")
    elif key == "position":
        v = Text(str(value), style="board.position")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta including the telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations")
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="board.error"),
        Text(f"  {result.op}{code}", style="board.op"),
        Text(" — "),
        msg,
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Card renderers ────────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Create / move / delete results."""
    _status_line(console, result)
    for key in (
        "id",
        "name",
        "title",
        "slug",
        "environment_id",
        "owner_id",
        "user_id",
        "board_id",
        "position",
        "role",
        "shifted",
        "cards_deleted",
    ):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_card(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "title", "board_id", "position", "completed", "due_date", "modified"):
        value = result.data.get(key)
        if value is not None:
            _field(console, key, value)
    if result.data.get("updated_fields"):
        _field(console, "updated", ", ".join(result.data["updated_fields"]))
    description = result.data.get("description")
    if description:
        console.print()
        console.print(f"  {description}")


def _render_card_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", style="board.position", justify="right")
    table.add_column("ID", style="board.id", no_wrap=True)
    table.add_column("Title", style="board.title")
    table.add_column("Done", style="board.done")
    if verbose:
        table.add_column("Due")
        table.add_column("Modified", style="dim")

    for item in items:
        row = [
            str(item.get("position", "")),
            str(item.get("id", "")),
            str(item.get("title", "")),
            "x" if item.get("completed") else "",
        ]
        if verbose:
            row.extend([str(item.get("due_date") or ""), str(item.get("modified", ""))])
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} cards")


def _render_activity(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("When", style="dim", no_wrap=True)
    table.add_column("Action", style="board.op")
    table.add_column("By")
    table.add_column("Details")
    if verbose:
        table.add_column("#", style="dim", justify="right")

    for item in items:
        details = item.get("details") or {}
        row: list[str | Text] = [
            str(item.get("created", "")),
            str(item.get("action", "")),
            str(item.get("user_name") or item.get("user_id", "")),
            Text(", ".join(f"{k}={v}" for k, v in details.items())),
        ]
        if verbose:
            row.append(str(item.get("id", "")))
        table.add_row(*row)

    console.print(table)
    cursor = result.data.get("next_cursor")
    if cursor is not None:
        console.print(f"\nmore: --cursor {cursor}")


# ── Workspace renderers ───────────────────────────────────────────────


def _render_board_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", style="board.position", justify="right")
    table.add_column("ID", style="board.id", no_wrap=True)
    table.add_column("Name", style="board.title")
    table.add_column("Cards", justify="right")
    if verbose:
        table.add_column("Description")

    for item in items:
        row = [
            str(item.get("position", "")),
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("cards_count", 0)),
        ]
        if verbose:
            row.append(str(item.get("description") or ""))
        table.add_row(*row)

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} boards")


def _render_environment_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="board.id", no_wrap=True)
    table.add_column("Name", style="board.title")
    table.add_column("Role")
    table.add_column("Boards", justify="right")
    table.add_column("Cards", justify="right")

    for item in items:
        table.add_row(
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("role", "")),
            str(item.get("boards_count", 0)),
            str(item.get("cards_count", 0)),
        )

    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} environments")


# ── Maintenance renderers ─────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    issues = result.data.get("issues", [])
    if not issues:
        console.print("[board.ok]OK[/board.ok]  No issues found.")
        return

    for issue in issues:
        board_id = issue.get("board_id")
        console.print(f"  [board.error]{issue.get('severity', 'error')}[/board.error]", end="")
        console.print(f" [{board_id}]: {issue.get('message', '')}", markup=False)
        if verbose and issue.get("fix_action"):
            console.print(f"    fix: {issue['fix_action']}")
    console.print(f"\n{len(issues)} issue(s); run 'boardctl check --fix' to compact")


def _render_fix(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    fixes = result.data.get("fixes", [])
    _field(console, "fixes_applied", result.data.get("count", len(fixes)))
    if "backup_path" in result.data:
        _field(console, "backup_path", result.data["backup_path"])
    if verbose:
        for fix in fixes:
            console.print(f"  - {fix}")


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("pending_count", "applied_count", "current", "head", "backup_path", "message"):
        if key in d:
            _field(console, key, d[key])
    if d.get("pending") and (verbose or "applied_count" not in d):
        console.print()
        for p in d["pending"]:
            console.print(f"  {p['revision']}: {p['description']}")


def _render_drain(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    drained = result.data.get("drained", [])
    _field(console, "retried", len(drained))
    for entry in drained:
        console.print(f"  #{entry['id']} {entry['hook_name']}: {entry['status']}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "create_user": _render_mutation,
    "create_environment": _render_mutation,
    "add_member": _render_mutation,
    "create_board": _render_mutation,
    "create_card": _render_mutation,
    "relocate": _render_mutation,
    "delete_card": _render_mutation,
    "update_board": _render_mutation,
    "delete_board": _render_mutation,
    "get_card": _render_card,
    "update_card": _render_card,
    "list_cards": _render_card_table,
    "card_activity": _render_activity,
    "list_boards": _render_board_table,
    "list_environments": _render_environment_table,
    "check": _render_check,
    "fix": _render_fix,
    "upgrade": _render_upgrade,
    "events_drain": _render_drain,
}

"""Tests for operation-specific Rich renderers."""

from boardctl.output.renderers import render_quiet, render_result
from boardctl.services.result import CONFLICT, NOT_FOUND, ServiceResult


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


# ── Errors ───────────────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(ServiceResult.failure("relocate", NOT_FOUND, "No card found"))
        assert "ERROR" in output
        assert "relocate" in output
        assert NOT_FOUND in output
        assert "No card found" in output

    def test_verbose_shows_detail(self) -> None:
        result = ServiceResult.failure("relocate", CONFLICT, "Busy", retryable=True)
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "retryable: True" in output

    def test_detail_hidden_by_default(self) -> None:
        result = ServiceResult.failure("relocate", CONFLICT, "Busy", retryable=True)
        assert "retryable" not in render_result(result)

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="relocate"))


# ── Cards ────────────────────────────────────────────────────────────


class TestMutationRenderer:
    def test_relocate(self) -> None:
        result = ServiceResult(
            ok=True,
            op="relocate",
            data={"id": "crd_0123456789ab", "board_id": "brd_0123456789ab", "position": 3},
            meta={"writes": 4},
        )
        output = render_result(result)
        assert "OK" in output
        assert "crd_0123456789ab" in output
        assert "position: 3" in output
        assert "writes" not in output

    def test_verbose_shows_meta(self) -> None:
        result = ServiceResult(
            ok=True,
            op="relocate",
            data={"id": "crd_0123456789ab", "position": 0},
            meta={"writes": 4},
        )
        assert "writes: 4" in render_result(result, verbose=True)

    def test_delete_shows_shifted(self) -> None:
        output = render_result(_ok("delete_card", id="crd_0123456789ab", shifted=2))
        assert "shifted: 2" in output


class TestCardRenderers:
    def test_single_card(self) -> None:
        output = render_result(
            _ok(
                "get_card",
                id="crd_0123456789ab",
                title="Ship it",
                position=1,
                completed=False,
                due_date=None,
                description="Before Friday",
            )
        )
        assert "Ship it" in output
        assert "Before Friday" in output
        assert "due_date" not in output

    def test_card_table(self) -> None:
        items = [
            {"id": "crd_aaaaaaaaaaaa", "title": "First", "position": 0, "completed": True},
            {"id": "crd_bbbbbbbbbbbb", "title": "Second", "position": 1, "completed": False},
        ]
        output = render_result(_ok("list_cards", items=items, count=2))
        assert "Title" in output
        assert output.index("First") < output.index("Second")
        assert "2 cards" in output


# ── Maintenance ──────────────────────────────────────────────────────


class TestMaintenanceRenderers:
    def test_check_clean(self) -> None:
        assert "No issues found" in render_result(_ok("check", issues=[], count=0))

    def test_check_issues(self) -> None:
        issue = {
            "severity": "error",
            "board_id": "brd_0123456789ab",
            "message": "positions [0, 2] are not 0..1",
            "fix_action": "compact",
        }
        output = render_result(_ok("check", issues=[issue], count=1))
        assert "brd_0123456789ab" in output
        assert "[0, 2]" in output
        assert "--fix" in output

    def test_fix(self) -> None:
        output = render_result(_ok("fix", fixes=["Compacted board 'b'"], count=1))
        assert "fixes_applied: 1" in output

    def test_upgrade_pending(self) -> None:
        pending = [{"revision": "002_activity_log", "description": "Add the audit trail"}]
        output = render_result(
            _ok("upgrade", pending_count=1, pending=pending, current="001_baseline")
        )
        assert "002_activity_log: Add the audit trail" in output

    def test_drain(self) -> None:
        drained = [{"id": 7, "hook_name": "publish_event", "status": "completed"}]
        output = render_result(_ok("events_drain", drained=drained, count=1))
        assert "#7 publish_event: completed" in output


class TestGenericRenderer:
    def test_unknown_op_dumps_data(self) -> None:
        output = render_result(_ok("events_status", counts={"completed": 3}, total=3))
        assert "events_status" in output
        assert '{"completed":3}' in output
        assert "total: 3" in output


# ── Telemetry tree ───────────────────────────────────────────────────


class TestTelemetryRendering:
    def _result(self) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op="relocate",
            data={"id": "crd_0123456789ab"},
            meta={
                "telemetry": {
                    "name": "RelocationService.relocate",
                    "duration_ms": 12.5,
                    "children": [
                        {"name": "lock", "duration_ms": 1.0},
                        {"name": "write", "duration_ms": 2.0, "annotations": {"rows": 3}},
                    ],
                }
            },
        )

    def test_tree_in_verbose(self) -> None:
        output = render_result(self._result(), verbose=True)
        assert "RelocationService.relocate" in output
        assert "lock" in output
        assert "(rows=3)" in output

    def test_tree_hidden_without_verbose(self) -> None:
        assert "RelocationService" not in render_result(self._result())


# ── Quiet ────────────────────────────────────────────────────────────


class TestQuiet:
    def test_single_id(self) -> None:
        assert render_quiet(_ok("relocate", id="crd_0123456789ab")) == "crd_0123456789ab"

    def test_list_ids(self) -> None:
        items = [{"id": "crd_a"}, {"id": "crd_b"}]
        assert render_quiet(_ok("list_cards", items=items)) == "crd_a\ncrd_b"

    def test_no_id(self) -> None:
        assert render_quiet(_ok("fix", count=0)) == "OK: fix"

    def test_error(self) -> None:
        output = render_quiet(ServiceResult.failure("relocate", NOT_FOUND, "No card"))
        assert output.startswith("ERROR: relocate")
        assert "No card" in output

"""
CLI integration tests

Tests the offline sgov commands against JSON event documents.
Uses Typer's CliRunner for isolated command testing.

Fun fact: RFQ documents were traditionally exchanged by fax well into the
2000s - a JSON file on the command line is positively futuristic!
"""

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from sourcing_governance.cli.main import app
from sourcing_governance.event.models import EventStatus
from tests.helpers import event_document, make_quote


@pytest.fixture
def runner():
    """Typer CLI test runner"""
    return CliRunner()


def write_json(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def event_file(tmp_path):
    """Live event with quotes sup-a 100 + 50 and sup-b 40"""
    document = event_document(quotes=[make_quote("sup-a", 100, 50), make_quote("sup-b", 40)])
    return write_json(tmp_path / "event.json", document)


# =============================================================================
# status
# =============================================================================


def test_status_json_for_open_event(runner, event_file):
    result = runner.invoke(
        app, ["status", str(event_file), "--at", "2025-01-15T12:00:00+00:00", "--json"]
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data == {
        "event_id": "rfq-001",
        "stored_status": "APPROVED",
        "status": "LIVE",
        "allowed_actions": ["PAUSE", "ENTER_EDIT", "AWARD"],
    }


def test_status_before_window_opens(runner, event_file):
    """Test that a naive --at is read as UTC"""
    result = runner.invoke(app, ["status", str(event_file), "--at", "2025-01-01T00:00:00"])

    assert result.exit_code == 0
    assert "Status: APPROVED" in result.stdout
    assert "Allowed actions: AWARD" in result.stdout


def test_status_window_without_offset(runner, tmp_path):
    """Test that an open_at with no offset is read as UTC"""
    document = event_document()
    document["open_at"] = "2025-01-10T09:00:00"
    path = write_json(tmp_path / "naive.json", document)

    result = runner.invoke(app, ["status", str(path), "--at", "2025-01-15T12:00:00+00:00"])

    assert result.exit_code == 0
    assert "Status: LIVE" in result.stdout


def test_status_terminal_event(runner, tmp_path):
    path = write_json(tmp_path / "rejected.json", event_document(status=EventStatus.REJECTED))

    result = runner.invoke(app, ["status", str(path)])

    assert result.exit_code == 0
    assert "Allowed actions: none" in result.stdout


def test_status_missing_file(runner, tmp_path):
    result = runner.invoke(app, ["status", str(tmp_path / "nope.json")])

    assert result.exit_code == 1


def test_status_invalid_json(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["status", str(path)])

    assert result.exit_code == 1


def test_status_invalid_event_document(runner, tmp_path):
    path = write_json(tmp_path / "bad.json", {"title": "no id"})

    result = runner.invoke(app, ["status", str(path)])

    assert result.exit_code == 1


def test_status_invalid_time(runner, event_file):
    result = runner.invoke(app, ["status", str(event_file), "--at", "yesterday"])

    assert result.exit_code == 1


# =============================================================================
# award-value
# =============================================================================


def test_award_value_sums_selected_suppliers(runner, event_file):
    result = runner.invoke(app, ["award-value", str(event_file), "-s", "sup-a", "-s", "sup-b"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "190"


def test_award_value_unknown_supplier_is_zero(runner, event_file):
    result = runner.invoke(app, ["award-value", str(event_file), "--supplier", "sup-x"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "0"


# =============================================================================
# check-award
# =============================================================================


def test_check_award_default_threshold_passes(runner, event_file):
    result = runner.invoke(app, ["check-award", str(event_file), "-s", "sup-a"])

    assert result.exit_code == 0
    assert "Estimated award value: 150" in result.stdout
    assert "No approval rules triggered" in result.stdout


def test_check_award_with_rules_file(runner, event_file, tmp_path):
    rules = write_json(
        tmp_path / "award-workflow.json",
        {
            "rules": [
                {"type": "value_threshold", "threshold": 100},
                {"type": "require_higher_approval_on_split"},
            ]
        },
    )

    result = runner.invoke(
        app,
        ["check-award", str(event_file), "-s", "sup-a", "-s", "sup-b", "--rules", str(rules), "--json"],
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["estimated_value"] == "190"
    assert data["ok"] is False
    assert data["reasons"] == [
        "Estimated award value 190 exceeds threshold 100.",
        "Split award to 2 suppliers requires higher-level approval.",
    ]


def test_check_award_default_threshold_override(runner, event_file):
    result = runner.invoke(
        app, ["check-award", str(event_file), "-s", "sup-a", "--default-threshold", "100"]
    )

    assert result.exit_code == 0
    assert "Approval required" in result.stdout
    assert "exceeds threshold 100" in result.stdout


def test_check_award_requires_a_supplier(runner, event_file):
    result = runner.invoke(app, ["check-award", str(event_file), "-s", " "])

    assert result.exit_code == 1


# =============================================================================
# diff
# =============================================================================


def test_diff_reports_changed_close_date(runner, tmp_path):
    before = write_json(tmp_path / "before.json", event_document())
    after = write_json(
        tmp_path / "after.json",
        event_document(close_at="2025-02-08T17:00:00Z", title="Renamed"),
    )

    result = runner.invoke(app, ["diff", str(before), str(after)])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "close_at": {"from": "2025-02-01T17:00:00Z", "to": "2025-02-08T17:00:00Z"}
    }


def test_diff_with_explicit_fields(runner, tmp_path):
    before = write_json(tmp_path / "before.json", event_document())
    after = write_json(tmp_path / "after.json", event_document(title="Renamed"))

    result = runner.invoke(app, ["diff", str(before), str(after), "-f", "title"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "title": {"from": "Steel fasteners 2025", "to": "Renamed"}
    }


def test_diff_identical_documents(runner, event_file):
    result = runner.invoke(app, ["diff", str(event_file), str(event_file)])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {}

"""
Sourcing Governance CLI

Offline command-line tools for inspecting events and awards. Events are
read from JSON documents; nothing is sent to the approval authority.

Usage:
    sgov status event.json
    sgov award-value event.json --supplier sup-a --supplier sup-b
    sgov check-award event.json --supplier sup-a --rules award-workflow.json
    sgov diff before.json after.json
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional

import typer
from typing_extensions import Annotated

from sourcing_governance.award.rules import evaluate_award_rules, parse_award_config
from sourcing_governance.award.value import compute_award_value, format_amount
from sourcing_governance.event.invariants import dedupe_suppliers, parse_event
from sourcing_governance.event.lifecycle import allowed_actions, effective_status
from sourcing_governance.event.models import ProcurementEvent
from sourcing_governance.kernel.errors import InvalidEventData
from sourcing_governance.kernel.logging import configure_logging, is_production
from sourcing_governance.kernel.policy import DEFAULT_AWARD_THRESHOLD, WATCHED_FIELDS
from sourcing_governance.modification.differ import diff as diff_events

# Configure logging to stderr (avoids polluting stdout for JSON output)
configure_logging(json_output=is_production(), log_level="INFO")

app = typer.Typer(
    name="sgov",
    help="Sourcing Governance - event lifecycle and award governance tools",
    add_completion=False,
)


def _read_json(path: Path) -> Any:
    """Read a JSON document or exit with an error"""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: {path} is not valid JSON: {e}", err=True)
        raise typer.Exit(1)


def load_event(path: Path) -> ProcurementEvent:
    """Load an event document or exit with an error"""
    try:
        return parse_event(_read_json(path))
    except InvalidEventData as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _parse_time(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        typer.echo(f"Error: Invalid time: {value} (expected ISO-8601)", err=True)
        raise typer.Exit(1)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@app.command()
def status(
    event_file: Annotated[Path, typer.Argument(help="Event JSON document")],
    at: Annotated[
        Optional[str],
        typer.Option("--at", help="Evaluate at this ISO-8601 time (default: now)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the effective status of an event and the actions allowed now"""
    event = load_event(event_file)
    now = _parse_time(at)

    current = effective_status(event, now)
    actions = [action.value for action in allowed_actions(event, now)]

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "event_id": event.id,
                    "stored_status": event.status.value,
                    "status": current.value,
                    "allowed_actions": actions,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Event: {event.id}")
    if event.title:
        typer.echo(f"  Title: {event.title}")
    typer.echo(f"  Status: {current.value}")
    typer.echo(f"  Allowed actions: {', '.join(actions) if actions else 'none'}")


@app.command("award-value")
def award_value(
    event_file: Annotated[Path, typer.Argument(help="Event JSON document")],
    supplier: Annotated[
        List[str],
        typer.Option("--supplier", "-s", help="Selected supplier id (repeatable)"),
    ],
) -> None:
    """Compute the estimated value of awarding the selected suppliers"""
    event = load_event(event_file)
    value = compute_award_value(event.quotes, supplier)
    typer.echo(format_amount(value))


@app.command("check-award")
def check_award(
    event_file: Annotated[Path, typer.Argument(help="Event JSON document")],
    supplier: Annotated[
        List[str],
        typer.Option("--supplier", "-s", help="Selected supplier id (repeatable)"),
    ],
    rules: Annotated[
        Optional[Path],
        typer.Option("--rules", help="Award workflow config (JSON rules list or document)"),
    ] = None,
    default_threshold: Annotated[
        Decimal,
        typer.Option(
            "--default-threshold",
            help="Threshold used when no rules are configured",
            parser=Decimal,
        ),
    ] = DEFAULT_AWARD_THRESHOLD,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Evaluate award rules for a selection (advisory, nothing is submitted)"""
    event = load_event(event_file)
    suppliers = dedupe_suppliers(supplier)
    if not suppliers:
        typer.echo("Error: Select at least one supplier", err=True)
        raise typer.Exit(1)

    config = parse_award_config(_read_json(rules) if rules else None)
    value = compute_award_value(event.quotes, suppliers)
    result = evaluate_award_rules(
        config.rules,
        value,
        event.categories,
        len(suppliers),
        default_threshold=default_threshold,
    )

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "event_id": event.id,
                    "estimated_value": format_amount(value),
                    "ok": result.ok,
                    "reasons": result.reasons,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Estimated award value: {format_amount(value)}")
    if result.ok:
        typer.echo("✓ No approval rules triggered")
    else:
        typer.echo("⚠ Approval required:")
        for reason in result.reasons:
            typer.echo(f"  - {reason}")


@app.command()
def diff(
    original_file: Annotated[Path, typer.Argument(help="Event JSON before editing")],
    current_file: Annotated[Path, typer.Argument(help="Event JSON after editing")],
    field: Annotated[
        Optional[List[str]],
        typer.Option("--field", "-f", help="Watched field (repeatable, default: watch list)"),
    ] = None,
) -> None:
    """Show the watched fields that changed between two versions of an event"""
    original = load_event(original_file)
    current = load_event(current_file)

    changes = diff_events(original, current, tuple(field) if field else WATCHED_FIELDS)
    typer.echo(
        json.dumps(
            {name: change.model_dump(mode="json", by_alias=True) for name, change in changes.items()},
            indent=2,
            default=str,
        )
    )


if __name__ == "__main__":
    app()

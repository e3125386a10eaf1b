#!/usr/bin/env python3
"""
Prime Scorecard CLI: score evidence and pick coaching domains from the shell.

Usage:
    prime-scorecard score inputs.yaml                    # rich table
    prime-scorecard score inputs.json --json             # raw scorecard JSON
    prime-scorecard score inputs.yaml --now 2025-01-15T08:00:00Z --audit audit.json
    prime-scorecard select scorecard.json --hours 6 --prefer heart --exclude metabolism

Input files for `score` are JSON or YAML, either a ScorecardInputs bundle
(metrics / identity / quick_checks / photo_estimates) or {"evidence": [...]}.
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import VALID_LOG_LEVELS, get_audit_dir, get_log_file, get_log_level
from .engine import coerce_evidence, generate_scorecard
from .parsers.scorecard_inputs import ScorecardInputs, inputs_to_evidence
from .schemas.common import DOMAINS, Domain
from .schemas.evidence import ensure_aware
from .schemas.scorecard import Scorecard
from .scorers.confidence import confidence_label
from .scorers.risk_flags import RISK_FLAG_COPY
from .services.priority_selector import select_priority_domains, selection_summary
from .utils.logger import ScoringLogger, configure_global_logging
from .utils.scoring_audit import ScoringAuditLog
from .validators.scorecard_validator import validate_scorecard

console = Console()


def load_document(path: Path) -> dict:
    """Read a JSON or YAML file into a dict."""
    with open(path) as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain an object at the top level")
    return data


def parse_now(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))


def evidence_from_document(data: dict, now: datetime) -> list:
    if "evidence" in data:
        return coerce_evidence(data["evidence"])
    return inputs_to_evidence(ScorecardInputs.model_validate(data), now=now)


def render_scorecard(scorecard: Scorecard, show_missing: bool = False) -> None:
    if scorecard.risk_flags.raised:
        console.print(
            Panel(
                "\n".join(f"[red]⚠[/red] {RISK_FLAG_COPY[name]}" for name in scorecard.risk_flags.raised),
                title="Risk flags",
                border_style="red",
            )
        )

    table = Table(title=f"Prime Scorecard (revision {scorecard.scoring_revision})")
    table.add_column("Domain", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("How calculated")

    for domain in DOMAINS:
        score = scorecard.domain_scores[domain]
        conf = scorecard.domain_confidence[domain]
        table.add_row(
            domain.display_name,
            "-" if score is None else str(score),
            f"{conf} ({confidence_label(conf).value})",
            "\n".join(scorecard.how_calculated.get(domain, [])),
        )
    console.print(table)

    prime = "not enough data yet" if scorecard.prime_score is None else str(scorecard.prime_score)
    label = confidence_label(scorecard.prime_confidence)
    console.print(
        Panel(
            f"Prime score: [bold]{prime}[/bold]\n"
            f"Confidence: {scorecard.prime_confidence} ({label.value}) - {label.copy}",
            title="Overall",
        )
    )

    if show_missing:
        for domain in DOMAINS:
            action = scorecard.fastest_upgrade_action.get(domain)
            if action:
                console.print(f"[dim]{domain.display_name}:[/dim] {action}")


def cmd_score(args, log: ScoringLogger) -> None:
    if not args.input.exists():
        console.print(f"[red]File not found: {args.input}[/red]")
        sys.exit(1)

    now = parse_now(args.now)
    audit_log = ScoringAuditLog() if args.audit else None

    try:
        with log.time_operation("scorecard generation", source=args.input.name):
            evidence = evidence_from_document(load_document(args.input), now)
            scorecard = generate_scorecard(evidence, now=now, audit_log=audit_log)
    except (ValueError, ValidationError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid input: {e}[/red]")
        sys.exit(1)

    log.log_scorecard(scorecard.prime_score, scorecard.prime_confidence, len(scorecard.evidence), scorecard.scoring_revision)

    if audit_log is not None:
        audit_path = Path(args.audit) if args.audit != "auto" else get_audit_dir() / f"audit_{now:%Y%m%dT%H%M%S}.json"
        audit_log.export_to_json(str(audit_path))

    if args.json:
        sys.stdout.write(scorecard.model_dump_json(indent=2) + "\n")
    else:
        render_scorecard(scorecard, show_missing=args.missing)


def cmd_select(args, log: ScoringLogger) -> None:
    if not args.scorecard.exists():
        console.print(f"[red]File not found: {args.scorecard}[/red]")
        sys.exit(1)

    try:
        data = load_document(args.scorecard)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Unreadable scorecard: {e}[/red]")
        sys.exit(1)

    result = validate_scorecard(data)
    if not result.is_valid:
        console.print(f"[red]Scorecard failed validation ({len(result.errors)} errors)[/red]")
        for error in result.errors:
            console.print(f"  [red]✗[/red] {error.field}: {error.message}")
        sys.exit(1)

    try:
        scorecard = Scorecard.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Scorecard does not match the output model ({e.error_count()} errors)[/red]")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  [red]✗[/red] {location}: {error['msg']}")
        sys.exit(1)

    try:
        selection = select_priority_domains(
            scorecard,
            args.hours,
            preferences=[Domain(d) for d in args.prefer],
            exclusions=[Domain(d) for d in args.exclude],
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    log.log_selection(
        selection.primary.value,
        selection.secondary.value if selection.secondary else None,
        selection.tertiary.value if selection.tertiary else None,
        args.hours,
    )

    if args.json:
        sys.stdout.write(selection.model_dump_json(indent=2) + "\n")
        return

    for item in selection_summary(selection):
        console.print(
            Panel(
                f"[italic]{item.preview}[/italic]\n{item.reasoning}",
                title=f"{item.priority.value.capitalize()}: {item.domain.display_name}",
            )
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Prime Scorecard: domain scores, confidence and coaching focus")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Log level (default: $PRIME_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    score_parser = sub.add_parser("score", help="Generate a scorecard from inputs or evidence")
    score_parser.add_argument("input", type=Path, help="JSON or YAML inputs file")
    score_parser.add_argument("--now", help="Reference time (ISO 8601) for reproducible output")
    score_parser.add_argument("--json", action="store_true", help="Print the scorecard as JSON")
    score_parser.add_argument("--missing", action="store_true", help="Show the fastest way to improve confidence in each domain")
    score_parser.add_argument(
        "--audit",
        nargs="?",
        const="auto",
        default=None,
        help="Export scoring audit log (optional path; default under $PRIME_DATA_DIR/audit)",
    )

    domain_choices = [d.value for d in DOMAINS]
    select_parser = sub.add_parser("select", help="Pick coaching domains from a scorecard JSON")
    select_parser.add_argument("scorecard", type=Path, help="Scorecard JSON (output of `score --json`)")
    select_parser.add_argument("--hours", type=float, required=True, help="Weekly time budget in hours")
    select_parser.add_argument("--prefer", action="append", default=[], choices=domain_choices, help="Preferred domain (repeatable)")
    select_parser.add_argument("--exclude", action="append", default=[], choices=domain_choices, help="Domain to skip (repeatable)")
    select_parser.add_argument("--json", action="store_true", help="Print the selection as JSON")

    return parser


def main(argv: Optional[list] = None):
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    log_level = args.log_level or get_log_level()
    configure_global_logging(log_level)
    log = ScoringLogger(name="prime_scorecard.cli", log_level=log_level, log_file=get_log_file())

    if args.command == "score":
        cmd_score(args, log)
    elif args.command == "select":
        cmd_select(args, log)


if __name__ == "__main__":
    main()

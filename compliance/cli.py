from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .config import load_config
from .domain.parsing import problem_from_dict, schedule_from_records, score_summary_from_dict
from .engine.diff import ChangeReport, build_change_report
from .errors import ComplianceError, ProblemFormatError
from .report import build_compliance_report, summarize_report
from .scoring import compute_unique_contacts


def _read_json(path: str | Path) -> Any:
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ProblemFormatError(f"File not found: {p}") from e
    except json.JSONDecodeError as e:
        raise ProblemFormatError(f"{p} is not valid JSON: {e}") from e


def _score_from(payload: Any):
    # Solution payloads carry the optimizer's score fields next to the assignments.
    if isinstance(payload, dict) and "final_score" in payload:
        return score_summary_from_dict(payload)
    return None


def _print_change_report(change: ChangeReport) -> None:
    delta = change.score_summary_delta
    if delta is not None:
        print(f"Score delta: {delta.final_score:+.2f} (lower is better)")
        print(f"  Unique contacts: {delta.unique_contacts:+d}")
        print(f"  Repetition penalty: {delta.repetition_penalty:+.2f}")
        print(f"  Attribute balance penalty: {delta.attribute_balance_penalty:+.2f}")
        print(f"  Constraint penalty: {delta.constraint_penalty:+.2f}")

    if not change.per_constraint_delta:
        print("No constraint changes.")
    for label, entries in (("Hard constraints", change.hard_entries), ("Soft constraints", change.soft_entries)):
        if not entries:
            continue
        print(f"\n{label}:")
        for d in entries:
            print(
                f"  #{d.constraint_index} {d.type}: {d.before_count} -> {d.after_count} "
                f"(weighted {d.weighted_delta:+.2f}, +{len(d.added_details)}/-{len(d.removed_details)} details)"
            )
    print(f"\nAggregate weighted delta: {change.aggregate_score_delta:+.2f}")


def _cmd_evaluate(args: argparse.Namespace) -> None:
    cfg = load_config(args.config)
    problem = problem_from_dict(_read_json(args.problem), cfg)
    report = build_compliance_report(problem, _read_json(args.schedule), cfg)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(summarize_report(report))


def _cmd_diff(args: argparse.Namespace) -> None:
    cfg = load_config(args.config)
    problem = problem_from_dict(_read_json(args.problem), cfg)
    before_payload = _read_json(args.before)
    after_payload = _read_json(args.after)
    change = build_change_report(
        build_compliance_report(problem, before_payload, cfg),
        build_compliance_report(problem, after_payload, cfg),
        cfg,
        before_score=_score_from(before_payload),
        after_score=_score_from(after_payload),
    )
    if args.json:
        print(json.dumps(change.to_dict(), indent=2))
    else:
        _print_change_report(change)


def _cmd_contacts(args: argparse.Namespace) -> None:
    problem = problem_from_dict(_read_json(args.problem), load_config(args.config))
    assignments = schedule_from_records(_read_json(args.schedule))
    unique, avg = compute_unique_contacts(assignments, len(problem.people))
    print(f"Unique contacts: {unique}")
    print(f"Average unique contacts per person: {avg:.2f}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="compliance", description="Constraint compliance for group schedules")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    e = sub.add_parser("evaluate", help="Evaluate a schedule against a problem's constraints")
    e.add_argument("--problem", required=True, help="Path to problem JSON")
    e.add_argument("--schedule", required=True, help="Path to solution/assignments JSON")
    e.add_argument("--config", help="Optional evaluator config (JSON or YAML)")
    e.add_argument("--json", action="store_true", help="Print the full report as JSON")
    e.set_defaults(func=_cmd_evaluate)

    d = sub.add_parser("diff", help="Compare compliance of two schedules")
    d.add_argument("--problem", required=True, help="Path to problem JSON")
    d.add_argument("--before", required=True, help="Schedule before the change")
    d.add_argument("--after", required=True, help="Schedule after the change")
    d.add_argument("--config", help="Optional evaluator config (JSON or YAML)")
    d.add_argument("--json", action="store_true", help="Print the change report as JSON")
    d.set_defaults(func=_cmd_diff)

    c = sub.add_parser("contacts", help="Count unique contacts in a schedule")
    c.add_argument("--problem", required=True, help="Path to problem JSON")
    c.add_argument("--schedule", required=True, help="Path to solution/assignments JSON")
    c.add_argument("--config", help="Optional evaluator config (JSON or YAML)")
    c.set_defaults(func=_cmd_contacts)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )
    try:
        args.func(args)
    except ComplianceError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()

"""Constraint compliance evaluation and change diffs for group schedules.

Modules:
- config: evaluator configuration (JSON or YAML)
- errors: exception types
- domain: problem, schedule and report value types, payload parsing
- services: schedule index, per-constraint evaluators, detail normalizer
- report: compliance report builder and tabular summaries
- scoring: penalty weights, weighted deltas, unique contacts
- engine: change diff between two compliance reports
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "errors",
    "domain",
    "services",
    "report",
    "scoring",
    "engine",
    "cli",
]

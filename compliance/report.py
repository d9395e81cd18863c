from __future__ import annotations

import logging
from typing import Any, List

import pandas as pd

from .config import EvaluatorConfig
from .domain.details import ComplianceReport, ComplianceResult
from .domain.models import Problem
from .domain.parsing import schedule_from_records
from .services.evaluators import EvaluationContext, evaluate_constraint
from .services.normalizer import dedupe_details
from .services.schedule_index import ScheduleIndex

logger = logging.getLogger(__name__)


def _as_index(schedule: Any, num_sessions: int) -> ScheduleIndex:
    if isinstance(schedule, ScheduleIndex):
        return schedule
    return ScheduleIndex(schedule_from_records(schedule), num_sessions)


def build_compliance_report(problem: Problem, schedule: Any, cfg: EvaluatorConfig | None = None) -> ComplianceReport:
    """
    Evaluate every constraint of ``problem`` against ``schedule``.

    Args:
        problem: Problem whose constraint order defines result order
        schedule: ScheduleIndex, assignment records, a solution payload with
            an ``assignments`` list, or a DataFrame of assignments
        cfg: EvaluatorConfig (defaults apply when omitted)

    Returns:
        A new ComplianceReport with one result per constraint, in order
    """
    cfg = cfg or EvaluatorConfig()
    ctx = EvaluationContext(
        index=_as_index(schedule, problem.num_sessions),
        people=problem.people_by_id(),
        num_sessions=problem.num_sessions,
        cfg=cfg,
    )

    results: List[ComplianceResult] = []
    for i, constraint in enumerate(problem.constraints):
        result = evaluate_constraint(ctx, constraint, i)
        deduped = dedupe_details(result.details)
        if len(deduped) != len(result.details):
            result = ComplianceResult(
                constraint_index=result.constraint_index,
                constraint=result.constraint,
                violations_count=result.violations_count,
                details=deduped,
                title=result.title,
                subtitle=result.subtitle,
            )
        results.append(result)

    report = ComplianceReport(results=tuple(results))
    logger.debug(
        "Evaluated %d constraints against %d assignments: %d violations",
        len(results),
        len(ctx.index.records),
        report.total_violations,
    )
    return report


def report_to_frame(report: ComplianceReport) -> pd.DataFrame:
    rows = [
        {
            "index": r.constraint_index,
            "type": r.type,
            "title": r.title,
            "adheres": r.adheres,
            "violations": r.violations_count,
            "details": len(r.details),
        }
        for r in report
    ]
    return pd.DataFrame(rows, columns=["index", "type", "title", "adheres", "violations", "details"])


def summarize_report(report: ComplianceReport) -> str:
    if len(report) == 0:
        return "No constraints."
    df = report_to_frame(report)
    by_type = df.groupby("type").agg(constraints=("index", "size"), violations=("violations", "sum"))

    lines = ["Compliance per constraint:"]
    lines.append(df.set_index("index").to_string())
    lines.append("")
    lines.append("Violations per constraint type:")
    lines.append(by_type.to_string())
    lines.append("")
    status = "all constraints satisfied" if report.adheres else f"{int(df['violations'].sum())} violations"
    lines.append(f"Status: {status}")
    return "\n".join(lines)

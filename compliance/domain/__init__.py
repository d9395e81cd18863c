"""Domain value types and payload parsing."""

from .details import ComplianceReport, ComplianceResult, detail_to_dict
from .models import Assignment, Group, Person, Problem, ScoreSummary
from .parsing import constraint_from_dict, problem_from_dict, schedule_from_records, score_summary_from_dict

__all__ = [
    "Assignment",
    "Group",
    "Person",
    "Problem",
    "ScoreSummary",
    "ComplianceReport",
    "ComplianceResult",
    "detail_to_dict",
    "constraint_from_dict",
    "problem_from_dict",
    "schedule_from_records",
    "score_summary_from_dict",
]

"""Services for compliance evaluation."""

from .evaluators import EvaluationContext, evaluate_constraint
from .normalizer import dedupe_details, detail_key
from .schedule_index import ScheduleIndex

__all__ = [
    "EvaluationContext",
    "evaluate_constraint",
    "dedupe_details",
    "detail_key",
    "ScheduleIndex",
]

from __future__ import annotations

from dataclasses import fields
from typing import Iterable, Set, Tuple

from .config import EvaluatorConfig
from .domain.models import Assignment, Constraint, ScoreSummary
from .services.schedule_index import ScheduleIndex


def is_hard(constraint: Constraint) -> bool:
    return bool(getattr(constraint, "HARD", False))


def penalty_weight(constraint: Constraint, cfg: EvaluatorConfig) -> float:
    # Hard constraints carry no declared weight.
    if is_hard(constraint):
        return cfg.hard_penalty_weight
    return float(getattr(constraint, "penalty_weight", cfg.hard_penalty_weight))


def weighted_delta(before_count: int, after_count: int, constraint: Constraint, cfg: EvaluatorConfig) -> float:
    """
    Linear weighted change in violations for one constraint.

    RepeatEncounter's ``penalty_function`` is not applied here; squaring, if
    any, belongs to the optimizer's own scoring.
    """
    return (after_count - before_count) * penalty_weight(constraint, cfg)


def compute_unique_contacts(schedule: ScheduleIndex | Iterable[Assignment], people_count: int) -> Tuple[int, float]:
    """
    Count distinct unordered pairs that shared a group in any session.

    Returns:
        (unique_contacts, avg_unique_contacts) where the average is the number
        of distinct contacts per person.
    """
    index = schedule if isinstance(schedule, ScheduleIndex) else ScheduleIndex(schedule, 0)
    seen: Set[Tuple[str, str]] = set()
    for session in index.sessions():
        for members in index.groups_in(session).values():
            for i in range(len(members)):
                for j in range(i + 1, len(members)):
                    a, b = members[i], members[j]
                    if a == b:
                        continue
                    seen.add((a, b) if a < b else (b, a))
    unique = len(seen)
    return unique, unique * 2 / max(1, people_count)


def score_delta(before: ScoreSummary, after: ScoreSummary) -> ScoreSummary:
    """Field-wise ``after - before``. Lower final_score is better."""
    return ScoreSummary(**{f.name: getattr(after, f.name) - getattr(before, f.name) for f in fields(ScoreSummary)})

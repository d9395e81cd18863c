"""Change diff between two compliance reports of the same problem."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from compliance.config import EvaluatorConfig
from compliance.domain.details import ComplianceReport, ComplianceResult, ViolationDetail, detail_to_dict
from compliance.domain.models import ScoreSummary
from compliance.errors import ReportMismatchError
from compliance.scoring import is_hard, score_delta, weighted_delta
from compliance.services.normalizer import DetailKey, detail_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstraintDelta:
    """What changed for one constraint between the before and after reports."""

    constraint_index: int
    type: str
    is_hard: bool
    before_count: int
    after_count: int
    added_details: Tuple[ViolationDetail, ...]
    removed_details: Tuple[ViolationDetail, ...]
    weighted_delta: float
    changed: bool

    @property
    def count_delta(self) -> int:
        return self.after_count - self.before_count

    def to_dict(self) -> Dict[str, object]:
        return {
            "constraint_index": self.constraint_index,
            "type": self.type,
            "is_hard": self.is_hard,
            "before_count": self.before_count,
            "after_count": self.after_count,
            "changed": self.changed,
            "weighted_delta": self.weighted_delta,
            "added_details": [detail_to_dict(d) for d in self.added_details],
            "removed_details": [detail_to_dict(d) for d in self.removed_details],
        }


@dataclass(frozen=True)
class ChangeReport:
    """
    Per-constraint deltas, hard constraints first, then soft, each by index.

    Entries cover every changed constraint plus every hard constraint that
    does not adhere on either side, even when nothing about it changed.
    """

    per_constraint_delta: Tuple[ConstraintDelta, ...]
    aggregate_score_delta: float
    before_score_summary: Optional[ScoreSummary] = None
    after_score_summary: Optional[ScoreSummary] = None

    @property
    def hard_entries(self) -> Tuple[ConstraintDelta, ...]:
        return tuple(d for d in self.per_constraint_delta if d.is_hard)

    @property
    def soft_entries(self) -> Tuple[ConstraintDelta, ...]:
        return tuple(d for d in self.per_constraint_delta if not d.is_hard)

    @property
    def has_changes(self) -> bool:
        return any(d.changed for d in self.per_constraint_delta)

    @property
    def score_summary_delta(self) -> Optional[ScoreSummary]:
        if self.before_score_summary is None or self.after_score_summary is None:
            return None
        return score_delta(self.before_score_summary, self.after_score_summary)

    def changed_by_type(self) -> Dict[str, List[ConstraintDelta]]:
        grouped: Dict[str, List[ConstraintDelta]] = {}
        for d in self.per_constraint_delta:
            grouped.setdefault(d.type, []).append(d)
        return grouped

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "aggregate_score_delta": self.aggregate_score_delta,
            "per_constraint_delta": [d.to_dict() for d in self.per_constraint_delta],
        }
        summary_delta = self.score_summary_delta
        if summary_delta is not None:
            out["score_summary_delta"] = {
                "final_score": summary_delta.final_score,
                "unique_contacts": summary_delta.unique_contacts,
                "repetition_penalty": summary_delta.repetition_penalty,
                "attribute_balance_penalty": summary_delta.attribute_balance_penalty,
                "constraint_penalty": summary_delta.constraint_penalty,
            }
        return out


def diff_details(
    before: Sequence[ViolationDetail], after: Sequence[ViolationDetail]
) -> Tuple[Tuple[ViolationDetail, ...], Tuple[ViolationDetail, ...]]:
    """Return (added, removed) details, matched by normalizer key."""
    before_by_key: Dict[DetailKey, ViolationDetail] = {}
    for d in before:
        before_by_key.setdefault(detail_key(d), d)

    added: List[ViolationDetail] = []
    after_keys = set()
    for d in after:
        key = detail_key(d)
        if key in after_keys:
            continue
        after_keys.add(key)
        if key not in before_by_key:
            added.append(d)

    removed = [d for key, d in before_by_key.items() if key not in after_keys]
    return tuple(added), tuple(removed)


def _check_aligned(before: ComplianceReport, after: ComplianceReport) -> None:
    if len(before) != len(after):
        logger.warning("Refusing to diff reports of %d and %d constraints", len(before), len(after))
        raise ReportMismatchError(
            f"Reports cover different constraint lists: {len(before)} vs {len(after)} constraints"
        )
    for pos, (b, a) in enumerate(zip(before, after)):
        if b.constraint_index != a.constraint_index or b.constraint_index != pos:
            logger.warning("Refusing to diff reports: constraint index mismatch at position %d", pos)
            raise ReportMismatchError(
                f"Constraint index mismatch at position {pos}: {b.constraint_index} vs {a.constraint_index}"
            )
        if b.type != a.type:
            logger.warning("Refusing to diff reports: constraint #%d is %s before and %s after", pos, b.type, a.type)
            raise ReportMismatchError(f"Constraint #{pos} changed type: {b.type} vs {a.type}")


def diff_result(before: ComplianceResult, after: ComplianceResult, cfg: EvaluatorConfig) -> ConstraintDelta:
    added, removed = diff_details(before.details, after.details)
    # The count can move while the set of offending tuples stays identical.
    changed = before.violations_count != after.violations_count or bool(added) or bool(removed)
    return ConstraintDelta(
        constraint_index=after.constraint_index,
        type=after.type,
        is_hard=is_hard(after.constraint),
        before_count=before.violations_count,
        after_count=after.violations_count,
        added_details=added,
        removed_details=removed,
        weighted_delta=weighted_delta(before.violations_count, after.violations_count, after.constraint, cfg),
        changed=changed,
    )


def build_change_report(
    before: ComplianceReport,
    after: ComplianceReport,
    cfg: EvaluatorConfig | None = None,
    before_score: ScoreSummary | None = None,
    after_score: ScoreSummary | None = None,
) -> ChangeReport:
    """
    Diff two reports evaluated for the same problem against different schedules.

    Raises:
        ReportMismatchError: If the reports do not line up constraint for constraint
    """
    cfg = cfg or EvaluatorConfig()
    _check_aligned(before, after)

    hard: List[ConstraintDelta] = []
    soft: List[ConstraintDelta] = []
    total = 0.0
    for b, a in zip(before, after):
        delta = diff_result(b, a, cfg)
        total += delta.weighted_delta
        if delta.is_hard:
            if delta.changed or not b.adheres or not a.adheres:
                hard.append(delta)
        elif delta.changed:
            soft.append(delta)

    return ChangeReport(
        per_constraint_delta=tuple(hard + soft),
        aggregate_score_delta=total,
        before_score_summary=before_score,
        after_score_summary=after_score,
    )

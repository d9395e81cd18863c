"""One evaluator per constraint kind.

Each evaluator is a pure function of the schedule index and one constraint and
returns a fresh ComplianceResult. Local dicts/sets are used as accumulators
while scanning; nothing they hold escapes except through the returned result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set, Tuple

from compliance.config import EvaluatorConfig
from compliance.domain.details import (
    AttributeBalanceDetail,
    ComplianceResult,
    ImmovableDetail,
    NotTogetherDetail,
    PairMeetingApartDetail,
    PairMeetingCountSummaryDetail,
    PairMeetingTogetherDetail,
    PersonPlacement,
    RepeatEncounterDetail,
    TogetherSplitDetail,
    ViolationDetail,
)
from compliance.domain.models import (
    AttributeBalance,
    Constraint,
    ImmovablePeople,
    ImmovablePerson,
    MustStayTogether,
    PairMeetingCount,
    Person,
    RepeatEncounter,
    ShouldNotBeTogether,
    ShouldStayTogether,
    UnknownConstraint,
    distinct,
    selected_sessions,
)

from .schedule_index import ScheduleIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationContext:
    """Inputs shared by every evaluator during one report build."""

    index: ScheduleIndex
    people: Dict[str, Person]
    num_sessions: int
    cfg: EvaluatorConfig = EvaluatorConfig()

    def sessions_for(self, sessions: Optional[Tuple[int, ...]]) -> Tuple[int, ...]:
        return selected_sessions(sessions, self.num_sessions)

    def participates(self, person_id: str, session: int) -> bool:
        # Unknown people count as participating so they show up as violations.
        if not self.cfg.respect_participation:
            return True
        person = self.people.get(person_id)
        return person is None or person.participates(session)

    def attribute_of(self, person_id: str, key: str) -> str:
        person = self.people.get(person_id)
        if person is None:
            return self.cfg.unknown_attribute_value
        return person.attributes.get(key, self.cfg.unknown_attribute_value)


def format_sessions(sessions: Optional[Tuple[int, ...]], total: int) -> str:
    if not sessions or len(sessions) == total:
        return "All sessions"
    return "Sessions " + ", ".join(str(s + 1) for s in sessions)


def _weight_label(weight: float) -> str:
    return f"{weight:g}"


def _sorted_pair(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def evaluate_repeat_encounter(ctx: EvaluationContext, c: RepeatEncounter, constraint_index: int) -> ComplianceResult:
    counts: Dict[Tuple[str, str], int] = {}
    seen_in: Dict[Tuple[str, str], Set[int]] = {}
    for session in ctx.index.sessions():
        for members in ctx.index.groups_in(session).values():
            for i in range(len(members)):
                for j in range(i + 1, len(members)):
                    pair = _sorted_pair(members[i], members[j])
                    counts[pair] = counts.get(pair, 0) + 1
                    seen_in.setdefault(pair, set()).add(session)

    violations = 0
    details: List[ViolationDetail] = []
    for pair in sorted(counts):
        count = counts[pair]
        if count > c.max_allowed_encounters:
            violations += count - c.max_allowed_encounters
            details.append(
                RepeatEncounterDetail(
                    pair=pair,
                    count=count,
                    max_allowed=c.max_allowed_encounters,
                    sessions=tuple(sorted(seen_in[pair])),
                )
            )

    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=violations,
        details=tuple(details),
        title=f"Repeat Encounter (max {c.max_allowed_encounters})",
        subtitle=f"Penalty: {c.penalty_function}, Weight: {_weight_label(c.penalty_weight)}",
    )


def evaluate_attribute_balance(ctx: EvaluationContext, c: AttributeBalance, constraint_index: int) -> ComplianceResult:
    violations = 0
    details: List[ViolationDetail] = []
    for session in ctx.sessions_for(c.sessions):
        buckets: Dict[str, int] = {}
        for pid in ctx.index.members(session, c.group_id):
            value = ctx.attribute_of(pid, c.attribute_key)
            buckets[value] = buckets.get(value, 0) + 1

        # Values without a desired count are unconstrained.
        for value, desired in c.desired_values.items():
            actual = buckets.get(value, 0)
            if c.mode == "at_least":
                deficit = max(0, desired - actual)
            else:
                deficit = abs(actual - desired)
            if deficit:
                violations += deficit
                details.append(
                    AttributeBalanceDetail(
                        session=session,
                        group_id=c.group_id,
                        attribute_value=value,
                        desired=desired,
                        actual=actual,
                    )
                )

    subtitle = f"{format_sessions(c.sessions, ctx.num_sessions)} • Weight: {_weight_label(c.penalty_weight)}"
    if c.mode == "at_least":
        subtitle += " • Mode: At least"
    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=violations,
        details=tuple(details),
        title=f"Attribute Balance – {c.group_id} ({c.attribute_key})",
        subtitle=subtitle,
    )


def evaluate_immovable(ctx: EvaluationContext, c: ImmovablePeople | ImmovablePerson, constraint_index: int) -> ComplianceResult:
    violations = 0
    details: List[ViolationDetail] = []
    for session in ctx.sessions_for(c.sessions):
        required_members = ctx.index.members(session, c.group_id)
        for pid in distinct(c.people):
            if not ctx.participates(pid, session):
                continue
            if pid in required_members:
                continue
            violations += 1
            details.append(
                ImmovableDetail(
                    session=session,
                    person_id=pid,
                    required_group=c.group_id,
                    assigned_group=ctx.index.group_of(pid, session),
                )
            )

    title = "Immovable Person" if isinstance(c, ImmovablePerson) else "Immovable People"
    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=violations,
        details=tuple(details),
        title=title,
        subtitle=f"{format_sessions(c.sessions, ctx.num_sessions)} • Group: {c.group_id}",
    )


def evaluate_stay_together(
    ctx: EvaluationContext, c: MustStayTogether | ShouldStayTogether, constraint_index: int
) -> ComplianceResult:
    violations = 0
    details: List[ViolationDetail] = []
    for session in ctx.sessions_for(c.sessions):
        placements: List[PersonPlacement] = []
        used_groups: Set[str] = set()
        unassigned = 0
        for pid in distinct(c.people):
            if not ctx.participates(pid, session):
                continue
            gid = ctx.index.group_of(pid, session)
            placements.append(PersonPlacement(person_id=pid, group_id=gid))
            if gid is None:
                unassigned += 1
            else:
                used_groups.add(gid)

        split = max(0, len(used_groups) - 1)
        if split or unassigned:
            violations += split + unassigned
            details.append(TogetherSplitDetail(session=session, people=tuple(placements)))

    if isinstance(c, MustStayTogether):
        title = "Must Stay Together"
        subtitle = format_sessions(c.sessions, ctx.num_sessions)
    else:
        title = "Should Stay Together"
        subtitle = f"{format_sessions(c.sessions, ctx.num_sessions)} • Weight: {_weight_label(c.penalty_weight)}"
    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=violations,
        details=tuple(details),
        title=title,
        subtitle=subtitle,
    )


def evaluate_should_not_be_together(
    ctx: EvaluationContext, c: ShouldNotBeTogether, constraint_index: int
) -> ComplianceResult:
    constrained = set(c.people)
    violations = 0
    details: List[ViolationDetail] = []
    for session in ctx.sessions_for(c.sessions):
        for gid, members in ctx.index.groups_in(session).items():
            involved = [pid for pid in members if pid in constrained]
            if len(involved) > 1:
                violations += len(involved) - 1
                details.append(NotTogetherDetail(session=session, group_id=gid, people=tuple(involved)))

    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=violations,
        details=tuple(details),
        title="Should Not Be Together",
        subtitle=f"{format_sessions(c.sessions, ctx.num_sessions)} • Weight: {_weight_label(c.penalty_weight)}",
    )


def evaluate_pair_meeting_count(ctx: EvaluationContext, c: PairMeetingCount, constraint_index: int) -> ComplianceResult:
    a, b = c.people
    # An empty session list counts every session for this kind only.
    sessions = ctx.sessions_for(c.sessions or None)
    per_session: List[ViolationDetail] = []
    together = 0
    for session in sessions:
        shared: Optional[str] = None
        for gid, members in ctx.index.groups_in(session).items():
            if a in members and b in members:
                shared = gid
                break
        if shared is not None:
            together += 1
            per_session.append(PairMeetingTogetherDetail(session=session, people=(a, b), group_id=shared))
        else:
            per_session.append(PairMeetingApartDetail(session=session, people=(a, b)))

    target = c.target_meetings
    if c.mode == "at_least":
        deviation = max(0, target - together)
    elif c.mode == "exact":
        deviation = abs(target - together)
    else:
        deviation = max(0, together - target)

    summary = PairMeetingCountSummaryDetail(
        people=(a, b), target=target, actual=together, mode=c.mode, sessions=sessions
    )
    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=deviation,
        details=(summary, *per_session),
        title=f"Pair Meeting Count ({c.mode.replace('_', ' ')})",
        subtitle=f"{format_sessions(c.sessions, ctx.num_sessions)} • Target: {target}",
    )


def evaluate_unknown(ctx: EvaluationContext, c: Constraint, constraint_index: int) -> ComplianceResult:
    """Unrecognised constraint kinds are reported as satisfied, never as a failure."""
    if ctx.cfg.warn_on_unknown_constraints:
        logger.warning(
            "Constraint #%d has unknown type %r; assuming it is satisfied", constraint_index, c.type
        )
    return ComplianceResult(
        constraint_index=constraint_index,
        constraint=c,
        violations_count=0,
        details=(),
        title=c.type,
    )


Evaluator = Callable[[EvaluationContext, Constraint, int], ComplianceResult]

EVALUATORS: Dict[type, Evaluator] = {
    RepeatEncounter: evaluate_repeat_encounter,
    AttributeBalance: evaluate_attribute_balance,
    ImmovablePeople: evaluate_immovable,
    ImmovablePerson: evaluate_immovable,
    MustStayTogether: evaluate_stay_together,
    ShouldStayTogether: evaluate_stay_together,
    ShouldNotBeTogether: evaluate_should_not_be_together,
    PairMeetingCount: evaluate_pair_meeting_count,
    UnknownConstraint: evaluate_unknown,
}


def evaluate_constraint(ctx: EvaluationContext, constraint: Constraint, constraint_index: int) -> ComplianceResult:
    evaluator = EVALUATORS.get(type(constraint))
    if evaluator is None:
        return evaluate_unknown(ctx, constraint, constraint_index)
    return evaluator(ctx, constraint, constraint_index)

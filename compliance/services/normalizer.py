"""Order-insensitive identity keys for violation details.

Two details from different reports describe the same finding iff their keys
are equal. Keys never include the quantities a diff is meant to compare
(encounter counts, actual attribute counts, actual meeting counts), so a
finding whose count changes keeps its identity.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from compliance.domain.details import (
    AttributeBalanceDetail,
    ImmovableDetail,
    NotTogetherDetail,
    PairMeetingApartDetail,
    PairMeetingCountSummaryDetail,
    PairMeetingTogetherDetail,
    RepeatEncounterDetail,
    TogetherSplitDetail,
    ViolationDetail,
)

DetailKey = Tuple[object, ...]


def _pair(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def detail_key(d: ViolationDetail) -> DetailKey:
    if isinstance(d, RepeatEncounterDetail):
        return (d.kind, _pair(*d.pair))
    if isinstance(d, AttributeBalanceDetail):
        return (d.kind, d.session, d.group_id, d.attribute_value)
    if isinstance(d, ImmovableDetail):
        return (d.kind, d.session, d.person_id, d.required_group, d.assigned_group or "")
    if isinstance(d, TogetherSplitDetail):
        return (d.kind, d.session, tuple(sorted(p.person_id for p in d.people)))
    if isinstance(d, NotTogetherDetail):
        return (d.kind, d.session, d.group_id, tuple(sorted(d.people)))
    if isinstance(d, PairMeetingCountSummaryDetail):
        return (d.kind, _pair(*d.people), d.mode, d.target)
    if isinstance(d, (PairMeetingTogetherDetail, PairMeetingApartDetail)):
        return (d.kind, d.session, _pair(*d.people))
    raise TypeError(f"No identity key defined for detail type {type(d).__name__}")


def dedupe_details(details: Iterable[ViolationDetail]) -> Tuple[ViolationDetail, ...]:
    """Drop details whose key was already seen, keeping the first occurrence."""
    seen = set()
    out: List[ViolationDetail] = []
    for d in details:
        key = detail_key(d)
        if key in seen:
            continue
        seen.add(key)
        out.append(d)
    return tuple(out)

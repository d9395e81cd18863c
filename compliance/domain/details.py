"""Evaluation-side value types: violation details, per-constraint results and reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar, Dict, Iterator, Optional, Tuple, Union

from .models import Constraint


@dataclass(frozen=True)
class RepeatEncounterDetail:
    kind: ClassVar[str] = "RepeatEncounter"

    pair: Tuple[str, str]
    count: int
    max_allowed: int
    sessions: Tuple[int, ...]


@dataclass(frozen=True)
class AttributeBalanceDetail:
    kind: ClassVar[str] = "AttributeBalance"

    session: int
    group_id: str
    attribute_value: str
    desired: int
    actual: int


@dataclass(frozen=True)
class ImmovableDetail:
    kind: ClassVar[str] = "Immovable"

    session: int
    person_id: str
    required_group: str
    assigned_group: Optional[str] = None


@dataclass(frozen=True)
class PersonPlacement:
    person_id: str
    group_id: Optional[str] = None


@dataclass(frozen=True)
class TogetherSplitDetail:
    kind: ClassVar[str] = "TogetherSplit"

    session: int
    people: Tuple[PersonPlacement, ...]


@dataclass(frozen=True)
class NotTogetherDetail:
    kind: ClassVar[str] = "NotTogether"

    session: int
    group_id: str
    people: Tuple[str, ...]


@dataclass(frozen=True)
class PairMeetingCountSummaryDetail:
    kind: ClassVar[str] = "PairMeetingCountSummary"

    people: Tuple[str, str]
    target: int
    actual: int
    mode: str
    sessions: Tuple[int, ...]


@dataclass(frozen=True)
class PairMeetingTogetherDetail:
    kind: ClassVar[str] = "PairMeetingTogether"

    session: int
    people: Tuple[str, str]
    group_id: Optional[str] = None


@dataclass(frozen=True)
class PairMeetingApartDetail:
    kind: ClassVar[str] = "PairMeetingApart"

    session: int
    people: Tuple[str, str]
    group_id: Optional[str] = None


ViolationDetail = Union[
    RepeatEncounterDetail,
    AttributeBalanceDetail,
    ImmovableDetail,
    TogetherSplitDetail,
    NotTogetherDetail,
    PairMeetingCountSummaryDetail,
    PairMeetingTogetherDetail,
    PairMeetingApartDetail,
]


def detail_to_dict(detail: ViolationDetail) -> Dict[str, object]:
    out: Dict[str, object] = {"kind": detail.kind}
    out.update(asdict(detail))
    return out


@dataclass(frozen=True)
class ComplianceResult:
    """Outcome of evaluating one constraint against one schedule."""

    constraint_index: int
    constraint: Constraint
    violations_count: int
    details: Tuple[ViolationDetail, ...] = ()
    title: str = ""
    subtitle: Optional[str] = None

    @property
    def type(self) -> str:
        return self.constraint.type

    @property
    def adheres(self) -> bool:
        return self.violations_count == 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "constraint_index": self.constraint_index,
            "type": self.type,
            "title": self.title,
            "subtitle": self.subtitle,
            "adheres": self.adheres,
            "violations_count": self.violations_count,
            "details": [detail_to_dict(d) for d in self.details],
        }


@dataclass(frozen=True)
class ComplianceReport:
    """Per-constraint results, index-for-index with ``Problem.constraints``."""

    results: Tuple[ComplianceResult, ...] = ()

    def __iter__(self) -> Iterator[ComplianceResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> ComplianceResult:
        return self.results[index]

    @property
    def adheres(self) -> bool:
        return all(r.adheres for r in self.results)

    @property
    def total_violations(self) -> int:
        return sum(r.violations_count for r in self.results)

    def to_dict(self) -> Dict[str, object]:
        return {
            "adheres": self.adheres,
            "total_violations": self.total_violations,
            "results": [r.to_dict() for r in self.results],
        }

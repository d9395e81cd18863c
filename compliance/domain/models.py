"""Problem-side value types: people, groups, constraints and assignments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from compliance.config import DEFAULT_PENALTY_WEIGHT


PENALTY_FUNCTIONS = {"linear", "squared"}
ATTRIBUTE_BALANCE_MODES = {"exact", "at_least"}
PAIR_MEETING_MODES = {"at_least", "exact", "at_most"}


@dataclass(frozen=True)
class Person:
    """A participant; ``allowed_sessions`` of ``None`` means every session."""

    id: str
    attributes: Dict[str, str] = field(default_factory=dict)
    allowed_sessions: Optional[FrozenSet[int]] = None

    def participates(self, session: int) -> bool:
        if self.allowed_sessions is None:
            return True
        return session in self.allowed_sessions


@dataclass(frozen=True)
class Group:
    id: str
    capacity: int


@dataclass(frozen=True)
class Assignment:
    """One (session, group, person) record of a schedule."""

    session_id: int
    group_id: str
    person_id: str


class _ConstraintBase:
    HARD: ClassVar[bool] = False

    @property
    def type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class RepeatEncounter(_ConstraintBase):
    max_allowed_encounters: int
    penalty_function: str = "linear"  # metadata only, see scoring.weighted_delta
    penalty_weight: float = DEFAULT_PENALTY_WEIGHT


@dataclass(frozen=True)
class AttributeBalance(_ConstraintBase):
    group_id: str
    attribute_key: str
    desired_values: Dict[str, int]
    penalty_weight: float = DEFAULT_PENALTY_WEIGHT
    mode: str = "exact"
    sessions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class ImmovablePeople(_ConstraintBase):
    HARD: ClassVar[bool] = True

    people: Tuple[str, ...]
    group_id: str
    sessions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class ImmovablePerson(_ConstraintBase):
    """Single-person form of ImmovablePeople kept for older problem files."""

    HARD: ClassVar[bool] = True

    person_id: str
    group_id: str
    sessions: Optional[Tuple[int, ...]] = None

    @property
    def people(self) -> Tuple[str, ...]:
        return (self.person_id,)


@dataclass(frozen=True)
class MustStayTogether(_ConstraintBase):
    HARD: ClassVar[bool] = True

    people: Tuple[str, ...]
    sessions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class ShouldStayTogether(_ConstraintBase):
    people: Tuple[str, ...]
    penalty_weight: float = DEFAULT_PENALTY_WEIGHT
    sessions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class ShouldNotBeTogether(_ConstraintBase):
    people: Tuple[str, ...]
    penalty_weight: float = DEFAULT_PENALTY_WEIGHT
    sessions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True)
class PairMeetingCount(_ConstraintBase):
    people: Tuple[str, str]
    target_meetings: int
    mode: str = "at_least"
    sessions: Optional[Tuple[int, ...]] = None
    penalty_weight: float = DEFAULT_PENALTY_WEIGHT


@dataclass(frozen=True)
class UnknownConstraint(_ConstraintBase):
    """A constraint tag this version does not know how to evaluate."""

    type_name: str
    params: Dict[str, object] = field(default_factory=dict)

    @property
    def type(self) -> str:
        return self.type_name


Constraint = Union[
    RepeatEncounter,
    AttributeBalance,
    ImmovablePeople,
    ImmovablePerson,
    MustStayTogether,
    ShouldStayTogether,
    ShouldNotBeTogether,
    PairMeetingCount,
    UnknownConstraint,
]


@dataclass(frozen=True)
class Problem:
    people: Tuple[Person, ...]
    groups: Tuple[Group, ...]
    num_sessions: int
    constraints: Tuple[Constraint, ...] = ()

    def people_by_id(self) -> Dict[str, Person]:
        return {p.id: p for p in self.people}


@dataclass(frozen=True)
class ScoreSummary:
    """Score figures reported by the optimizer for one solution."""

    final_score: float
    unique_contacts: int
    repetition_penalty: float
    attribute_balance_penalty: float
    constraint_penalty: float


def distinct(ids: Iterable) -> Tuple:
    """Drop repeated ids, keeping first-seen order."""
    return tuple(dict.fromkeys(ids))


def selected_sessions(sessions: Optional[Iterable[int]], num_sessions: int) -> Tuple[int, ...]:
    """Sessions a constraint applies to; ``None`` means all of them, an empty list means none."""
    if sessions is None:
        return tuple(range(num_sessions))
    return distinct(sessions)

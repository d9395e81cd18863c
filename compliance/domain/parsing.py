"""Build domain objects from the snake_case payloads used by the editor and optimizer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from compliance.config import EvaluatorConfig
from compliance.errors import ProblemFormatError

from .models import (
    ATTRIBUTE_BALANCE_MODES,
    PAIR_MEETING_MODES,
    PENALTY_FUNCTIONS,
    AttributeBalance,
    Assignment,
    Constraint,
    Group,
    ImmovablePeople,
    ImmovablePerson,
    MustStayTogether,
    PairMeetingCount,
    Person,
    Problem,
    RepeatEncounter,
    ScoreSummary,
    ShouldNotBeTogether,
    ShouldStayTogether,
    UnknownConstraint,
    distinct,
)

logger = logging.getLogger(__name__)

ASSIGNMENT_COLUMNS = ["session_id", "group_id", "person_id"]


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, Mapping):
        raise ProblemFormatError(f"{where} must be an object, got {type(data).__name__}")
    if key not in data:
        raise ProblemFormatError(f"{where} is missing required field '{key}'")
    return data[key]


def _int(value: Any, where: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ProblemFormatError(f"{where} must be an integer, got {value!r}") from e


def _float(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ProblemFormatError(f"{where} must be a number, got {value!r}") from e


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ProblemFormatError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _sessions(value: Any, where: str) -> Optional[Tuple[int, ...]]:
    if value is None:
        return None
    if isinstance(value, (str, Mapping)) or not isinstance(value, Iterable):
        raise ProblemFormatError(f"{where}: sessions must be a list of integers")
    return distinct(_int(s, f"{where}: session") for s in value)


def _people(value: Any, where: str) -> Tuple[str, ...]:
    if isinstance(value, (str, Mapping)) or not isinstance(value, Iterable):
        raise ProblemFormatError(f"{where}: people must be a list of person ids")
    return distinct(str(p) for p in value)


def _items(data: Mapping[str, Any], key: str, where: str) -> List[Any]:
    value = data.get(key) or []
    if isinstance(value, (str, Mapping)) or not isinstance(value, Iterable):
        raise ProblemFormatError(f"{where}: {key} must be a list")
    return list(value)


def _mode(value: Any, allowed: set, default: str, where: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value not in allowed:
        raise ProblemFormatError(f"{where}: mode must be one of {sorted(allowed)}, got {value!r}")
    return value


def person_from_dict(data: Mapping[str, Any]) -> Person:
    pid = str(_require(data, "id", "Person"))
    raw_attributes = _mapping(data.get("attributes") or {}, f"Person {pid} attributes")
    attributes = {str(k): str(v) for k, v in raw_attributes.items()}
    sessions = _sessions(data.get("sessions"), f"Person {pid}")
    allowed = frozenset(sessions) if sessions is not None else None
    return Person(id=pid, attributes=attributes, allowed_sessions=allowed)


def group_from_dict(data: Mapping[str, Any]) -> Group:
    gid = str(_require(data, "id", "Group"))
    capacity = data.get("size", data.get("capacity"))
    if capacity is None:
        raise ProblemFormatError(f"Group {gid} is missing required field 'size'")
    return Group(id=gid, capacity=_int(capacity, f"Group {gid} size"))


def constraint_from_dict(data: Mapping[str, Any], cfg: EvaluatorConfig | None = None) -> Constraint:
    """
    Build one constraint from its tagged dict form.

    Tags this module does not know become ``UnknownConstraint`` rather than
    an error, so a newer problem file can still be evaluated.
    """
    cfg = cfg or EvaluatorConfig()
    tag = _require(data, "type", "Constraint")
    where = f"{tag} constraint"
    weight = _float(data.get("penalty_weight", cfg.default_penalty_weight), f"{where}: penalty_weight")

    if tag == "RepeatEncounter":
        penalty_function = data.get("penalty_function", "linear")
        if not isinstance(penalty_function, str) or penalty_function not in PENALTY_FUNCTIONS:
            raise ProblemFormatError(f"{where}: unknown penalty_function {penalty_function!r}")
        return RepeatEncounter(
            max_allowed_encounters=_int(
                _require(data, "max_allowed_encounters", where), f"{where}: max_allowed_encounters"
            ),
            penalty_function=penalty_function,
            penalty_weight=weight,
        )
    if tag == "AttributeBalance":
        desired = _mapping(_require(data, "desired_values", where), f"{where}: desired_values")
        return AttributeBalance(
            group_id=str(_require(data, "group_id", where)),
            attribute_key=str(_require(data, "attribute_key", where)),
            desired_values={str(k): _int(v, f"{where}: desired count for {k!r}") for k, v in desired.items()},
            penalty_weight=weight,
            mode=_mode(data.get("mode"), ATTRIBUTE_BALANCE_MODES, "exact", where),
            sessions=_sessions(data.get("sessions"), where),
        )
    if tag == "ImmovablePeople":
        return ImmovablePeople(
            people=_people(_require(data, "people", where), where),
            group_id=str(_require(data, "group_id", where)),
            sessions=_sessions(data.get("sessions"), where),
        )
    if tag == "ImmovablePerson":
        return ImmovablePerson(
            person_id=str(_require(data, "person_id", where)),
            group_id=str(_require(data, "group_id", where)),
            sessions=_sessions(data.get("sessions"), where),
        )
    if tag == "MustStayTogether":
        return MustStayTogether(
            people=_people(_require(data, "people", where), where),
            sessions=_sessions(data.get("sessions"), where),
        )
    if tag == "ShouldStayTogether":
        return ShouldStayTogether(
            people=_people(_require(data, "people", where), where),
            penalty_weight=weight,
            sessions=_sessions(data.get("sessions"), where),
        )
    if tag == "ShouldNotBeTogether":
        return ShouldNotBeTogether(
            people=_people(_require(data, "people", where), where),
            penalty_weight=weight,
            sessions=_sessions(data.get("sessions"), where),
        )
    if tag == "PairMeetingCount":
        people = _people(_require(data, "people", where), where)
        if len(people) != 2:
            raise ProblemFormatError(f"{where}: people must name exactly two persons")
        return PairMeetingCount(
            people=(people[0], people[1]),
            target_meetings=_int(_require(data, "target_meetings", where), f"{where}: target_meetings"),
            mode=_mode(data.get("mode"), PAIR_MEETING_MODES, "at_least", where),
            sessions=_sessions(data.get("sessions"), where),
            penalty_weight=weight,
        )

    logger.debug("Unrecognised constraint type %r kept as UnknownConstraint", tag)
    params = {k: v for k, v in data.items() if k != "type"}
    return UnknownConstraint(type_name=str(tag), params=params)


def problem_from_dict(data: Mapping[str, Any], cfg: EvaluatorConfig | None = None) -> Problem:
    num_sessions = _int(_require(data, "num_sessions", "Problem"), "Problem num_sessions")
    if num_sessions < 0:
        raise ProblemFormatError("Problem num_sessions must be non-negative")
    return Problem(
        people=tuple(person_from_dict(p) for p in _items(data, "people", "Problem")),
        groups=tuple(group_from_dict(g) for g in _items(data, "groups", "Problem")),
        num_sessions=num_sessions,
        constraints=tuple(constraint_from_dict(c, cfg) for c in _items(data, "constraints", "Problem")),
    )


def schedule_from_records(records: Any) -> Tuple[Assignment, ...]:
    """
    Accept a solution payload (``{"assignments": [...]}``), a list of
    assignment dicts, or a DataFrame with session_id/group_id/person_id columns.
    """
    if isinstance(records, pd.DataFrame):
        return schedule_from_frame(records)
    if isinstance(records, Mapping):
        records = _require(records, "assignments", "Solution")
    if isinstance(records, (str, Mapping)) or not isinstance(records, Iterable):
        raise ProblemFormatError("Assignments must be a list of records")

    out: List[Assignment] = []
    for i, rec in enumerate(records):
        if isinstance(rec, Assignment):
            out.append(rec)
            continue
        where = f"Assignment #{i}"
        out.append(
            Assignment(
                session_id=_int(_require(rec, "session_id", where), f"{where} session_id"),
                group_id=str(_require(rec, "group_id", where)),
                person_id=str(_require(rec, "person_id", where)),
            )
        )
    return tuple(out)


def schedule_from_frame(df: pd.DataFrame) -> Tuple[Assignment, ...]:
    missing = [c for c in ASSIGNMENT_COLUMNS if c not in df.columns]
    if missing:
        raise ProblemFormatError(f"Assignments frame is missing columns: {missing}")
    rows = df[ASSIGNMENT_COLUMNS].itertuples(index=False, name=None)
    return tuple(
        Assignment(_int(s, f"Assignments frame row {i} session_id"), str(g), str(p))
        for i, (s, g, p) in enumerate(rows)
    )


def score_summary_from_dict(data: Mapping[str, Any]) -> ScoreSummary:
    fields: Dict[str, Any] = {}
    for key in ("final_score", "unique_contacts", "repetition_penalty", "attribute_balance_penalty", "constraint_penalty"):
        fields[key] = _require(data, key, "Score summary")
    return ScoreSummary(
        final_score=_float(fields["final_score"], "Score summary final_score"),
        unique_contacts=_int(fields["unique_contacts"], "Score summary unique_contacts"),
        repetition_penalty=_float(fields["repetition_penalty"], "Score summary repetition_penalty"),
        attribute_balance_penalty=_float(
            fields["attribute_balance_penalty"], "Score summary attribute_balance_penalty"
        ),
        constraint_penalty=_float(fields["constraint_penalty"], "Score summary constraint_penalty"),
    )

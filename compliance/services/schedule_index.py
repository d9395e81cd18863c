"""Queryable view of a flat list of assignment records."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from compliance.domain.models import Assignment
from compliance.domain.parsing import schedule_from_frame


class ScheduleIndex:
    """
    Session -> group -> members lookup built from assignment records.

    Membership lists keep record order. The person -> session -> group map is
    built on first use. Neither capacity nor the one-group-per-session rule is
    checked here; when a person appears in several groups of a session the
    last record wins in ``group_of``.
    """

    def __init__(self, assignments: Iterable[Assignment], num_sessions: int):
        self.num_sessions = num_sessions
        self._by_session: Dict[int, Dict[str, List[str]]] = defaultdict(dict)
        self._records: Tuple[Assignment, ...] = tuple(assignments)
        for a in self._records:
            self._by_session[a.session_id].setdefault(a.group_id, []).append(a.person_id)
        self._by_person: Optional[Dict[str, Dict[int, str]]] = None

    @classmethod
    def from_frame(cls, df: pd.DataFrame, num_sessions: int) -> "ScheduleIndex":
        return cls(schedule_from_frame(df), num_sessions)

    @property
    def records(self) -> Tuple[Assignment, ...]:
        return self._records

    def sessions(self) -> List[int]:
        """Sessions that have at least one record, ascending."""
        return sorted(self._by_session)

    def groups_in(self, session: int) -> Dict[str, List[str]]:
        return self._by_session.get(session, {})

    def members(self, session: int, group_id: str) -> List[str]:
        return self._by_session.get(session, {}).get(group_id, [])

    def group_of(self, person_id: str, session: int) -> Optional[str]:
        if self._by_person is None:
            self._by_person = self._build_person_map()
        return self._by_person.get(person_id, {}).get(session)

    def _build_person_map(self) -> Dict[str, Dict[int, str]]:
        by_person: Dict[str, Dict[int, str]] = defaultdict(dict)
        for a in self._records:
            by_person[a.person_id][a.session_id] = a.group_id
        return dict(by_person)

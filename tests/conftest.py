"""Pytest configuration and shared fixtures."""

import pytest

from compliance.domain.models import Assignment, Group, Person, Problem


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def records(*rows):
    """Build assignments from (session, group, person) tuples."""
    return [Assignment(session_id=s, group_id=g, person_id=p) for s, g, p in rows]


@pytest.fixture
def people():
    return (
        Person("A", {"gender": "male"}),
        Person("B", {"gender": "female"}),
        Person("C", {"gender": "male"}),
        Person("D", {"gender": "female"}),
    )


@pytest.fixture
def groups():
    return (Group("G1", 2), Group("G2", 2))


@pytest.fixture
def make_problem(people, groups):
    def _make(constraints, num_sessions=3, people_=None):
        return Problem(
            people=people_ if people_ is not None else people,
            groups=groups,
            num_sessions=num_sessions,
            constraints=tuple(constraints),
        )

    return _make


@pytest.fixture
def rotating_schedule():
    # Session 0: AB | CD, session 1: AC | BD, session 2: AB | CD
    return records(
        (0, "G1", "A"), (0, "G1", "B"), (0, "G2", "C"), (0, "G2", "D"),
        (1, "G1", "A"), (1, "G1", "C"), (1, "G2", "B"), (1, "G2", "D"),
        (2, "G1", "A"), (2, "G1", "B"), (2, "G2", "C"), (2, "G2", "D"),
    )

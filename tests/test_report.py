"""Tests for the compliance report builder."""

import random

import pandas as pd

from compliance.config import EvaluatorConfig
from compliance.domain.models import (
    AttributeBalance,
    ImmovablePeople,
    MustStayTogether,
    PairMeetingCount,
    RepeatEncounter,
    ShouldNotBeTogether,
    UnknownConstraint,
)
from compliance.report import build_compliance_report, report_to_frame, summarize_report
from compliance.services.schedule_index import ScheduleIndex

from conftest import records


def _all_kinds():
    return [
        RepeatEncounter(max_allowed_encounters=1, penalty_weight=10),
        AttributeBalance("G1", "gender", {"male": 1, "female": 1}, penalty_weight=5),
        MustStayTogether(("A", "B")),
        ShouldNotBeTogether(("A", "C"), penalty_weight=3),
        PairMeetingCount(("A", "D"), target_meetings=1),
    ]


def test_zero_constraints_gives_empty_report(make_problem, rotating_schedule):
    report = build_compliance_report(make_problem([]), rotating_schedule)
    assert len(report) == 0
    assert report.adheres
    assert summarize_report(report) == "No constraints."


def test_results_follow_constraint_order(make_problem, rotating_schedule):
    problem = make_problem(_all_kinds())
    report = build_compliance_report(problem, rotating_schedule)
    assert [r.constraint_index for r in report] == [0, 1, 2, 3, 4]
    assert [r.type for r in report] == [
        "RepeatEncounter",
        "AttributeBalance",
        "MustStayTogether",
        "ShouldNotBeTogether",
        "PairMeetingCount",
    ]
    for r in report:
        assert r.adheres == (r.violations_count == 0)


def test_expected_counts_on_rotating_schedule(make_problem, rotating_schedule):
    report = build_compliance_report(make_problem(_all_kinds()), rotating_schedule)
    counts = [r.violations_count for r in report]
    # AB/CD meet twice; G1 is balanced in sessions 0 and 2 only; AB split in session 1;
    # AC share G1 in session 1; AD never meet
    assert counts == [2, 2, 1, 1, 1]
    assert report.total_violations == 7


def test_repeat_encounter_is_order_independent(make_problem, rotating_schedule):
    problem = make_problem([RepeatEncounter(max_allowed_encounters=0)])
    expected = build_compliance_report(problem, rotating_schedule)[0].violations_count
    shuffled = list(rotating_schedule)
    rng = random.Random(7)
    for _ in range(5):
        rng.shuffle(shuffled)
        assert build_compliance_report(problem, shuffled)[0].violations_count == expected


def test_evaluation_is_idempotent(make_problem, rotating_schedule):
    problem = make_problem(_all_kinds())
    first = build_compliance_report(problem, rotating_schedule)
    second = build_compliance_report(problem, rotating_schedule)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_accepts_solution_payload_frame_and_index(make_problem, rotating_schedule):
    problem = make_problem(_all_kinds())
    expected = build_compliance_report(problem, rotating_schedule)

    payload = {
        "assignments": [
            {"session_id": a.session_id, "group_id": a.group_id, "person_id": a.person_id}
            for a in rotating_schedule
        ],
        "final_score": 1.0,
    }
    frame = pd.DataFrame(payload["assignments"])
    index = ScheduleIndex(rotating_schedule, problem.num_sessions)

    assert build_compliance_report(problem, payload) == expected
    assert build_compliance_report(problem, frame) == expected
    assert build_compliance_report(problem, index) == expected


def test_unknown_constraint_does_not_abort_report(make_problem, rotating_schedule):
    problem = make_problem([UnknownConstraint("Teleport", {"x": 1}), RepeatEncounter(0)])
    report = build_compliance_report(problem, rotating_schedule, EvaluatorConfig(warn_on_unknown_constraints=False))
    assert report[0].adheres
    assert report[0].type == "Teleport"
    assert not report[1].adheres


def test_person_listed_twice_is_counted_once(make_problem):
    schedule = records((0, "G1", "A"))
    report = build_compliance_report(make_problem([ImmovablePeople(("A", "A"), "G2")], num_sessions=1), schedule)
    result = report[0]
    assert result.violations_count == 1
    assert len(result.details) == 1


def test_report_frame_and_summary(make_problem, rotating_schedule):
    report = build_compliance_report(make_problem(_all_kinds()), rotating_schedule)
    df = report_to_frame(report)
    assert list(df.columns) == ["index", "type", "title", "adheres", "violations", "details"]
    assert df["violations"].sum() == 7
    text = summarize_report(report)
    assert "Compliance per constraint:" in text
    assert "Status: 7 violations" in text

"""Tests for the command-line interface."""

import json

import pytest

from compliance.cli import main


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _assignments(rows):
    return [{"session_id": s, "group_id": g, "person_id": p} for s, g, p in rows]


@pytest.fixture
def files(tmp_path):
    problem = {
        "people": [{"id": pid, "attributes": {}} for pid in "ABCD"],
        "groups": [{"id": "G1", "size": 2}, {"id": "G2", "size": 2}],
        "num_sessions": 2,
        "constraints": [
            {"type": "RepeatEncounter", "max_allowed_encounters": 1, "penalty_function": "linear", "penalty_weight": 10},
            {"type": "MustStayTogether", "people": ["A", "C"]},
        ],
    }
    before = {
        "assignments": _assignments(
            [(0, "G1", "A"), (0, "G1", "B"), (0, "G2", "C"), (0, "G2", "D"),
             (1, "G1", "A"), (1, "G1", "C"), (1, "G2", "B"), (1, "G2", "D")]
        ),
        "final_score": 5.0,
        "unique_contacts": 4,
        "repetition_penalty": 0,
        "attribute_balance_penalty": 0,
        "constraint_penalty": 1,
    }
    after = {
        "assignments": _assignments(
            [(0, "G1", "A"), (0, "G1", "B"), (0, "G2", "C"), (0, "G2", "D"),
             (1, "G1", "A"), (1, "G1", "B"), (1, "G2", "C"), (1, "G2", "D")]
        ),
        "final_score": 30.0,
        "unique_contacts": 2,
        "repetition_penalty": 2,
        "attribute_balance_penalty": 0,
        "constraint_penalty": 2,
    }
    return {
        "problem": _write(tmp_path / "problem.json", problem),
        "before": _write(tmp_path / "before.json", before),
        "after": _write(tmp_path / "after.json", after),
    }


def test_evaluate_prints_summary(files, capsys):
    main(["evaluate", "--problem", files["problem"], "--schedule", files["before"]])
    out = capsys.readouterr().out
    assert "Compliance per constraint:" in out
    assert "MustStayTogether" in out


def test_evaluate_json(files, capsys):
    main(["evaluate", "--problem", files["problem"], "--schedule", files["after"], "--json"])
    report = json.loads(capsys.readouterr().out)
    assert report["total_violations"] == 4
    assert report["results"][0]["violations_count"] == 2
    assert report["results"][0]["details"][0]["kind"] == "RepeatEncounter"


def test_diff_text_and_json(files, capsys):
    main(["diff", "--problem", files["problem"], "--before", files["before"], "--after", files["after"]])
    out = capsys.readouterr().out
    assert "Hard constraints:" in out
    assert "Aggregate weighted delta: +21.00" in out
    assert "Score delta: +25.00" in out

    main(["diff", "--problem", files["problem"], "--before", files["before"], "--after", files["after"], "--json"])
    change = json.loads(capsys.readouterr().out)
    assert change["aggregate_score_delta"] == 21
    assert change["per_constraint_delta"][0]["type"] == "MustStayTogether"


def test_contacts(files, capsys):
    main(["contacts", "--problem", files["problem"], "--schedule", files["before"]])
    out = capsys.readouterr().out
    assert "Unique contacts: 4" in out


def test_errors_exit_nonzero(files, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["evaluate", "--problem", str(tmp_path / "missing.json"), "--schedule", files["before"]])
    assert exc.value.code == 1
    assert "[ERROR]" in capsys.readouterr().err


def test_contacts_reads_config(files, tmp_path, capsys):
    good = tmp_path / "cfg.yaml"
    good.write_text("default_penalty_weight: 5\n", encoding="utf-8")
    main(["contacts", "--problem", files["problem"], "--schedule", files["before"], "--config", str(good)])
    assert "Unique contacts: 4" in capsys.readouterr().out

    bad = tmp_path / "bad.yaml"
    bad.write_text("no_such_option: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["contacts", "--problem", files["problem"], "--schedule", files["before"], "--config", str(bad)])
    assert exc.value.code == 1
    assert "[ERROR]" in capsys.readouterr().err


def test_wrongly_typed_problem_reports_error_line(files, tmp_path, capsys):
    problem = _write(tmp_path / "typed.json", {"people": [{"id": "A", "sessions": ["x"]}], "num_sessions": 1})
    with pytest.raises(SystemExit) as exc:
        main(["evaluate", "--problem", problem, "--schedule", files["before"]])
    assert exc.value.code == 1
    assert "[ERROR]" in capsys.readouterr().err

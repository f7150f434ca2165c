"""
Tests for the qlogic command line.
"""

import json

import pytest
import yaml
from qlogic.cli import build_parser, main
from qlogic.config import get_settings
from qlogic.examples import build_example_petition
from qlogic.rules import Action, ConditionalRule, Operator
from qlogic.serialization import structure_from_yaml, structure_to_json, structure_to_yaml
from qlogic.store import YamlDirectoryStore


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Each test reads settings from its own environment."""
    monkeypatch.delenv("QLOGIC_DATA_DIR", raising=False)
    monkeypatch.delenv("QLOGIC_STRICT_STRUCTURE_CHECK", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def petition_file(tmp_path):
    path = tmp_path / "petition.json"
    path.write_text(structure_to_json(build_example_petition()), encoding="utf-8")
    return path


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_example(capsys):
    assert main(["example"]) == 0
    out = capsys.readouterr().out
    assert structure_from_yaml(out) == build_example_petition()


def test_check_clean(petition_file, capsys):
    assert main(["check", str(petition_file)]) == 0
    out = capsys.readouterr().out
    assert "Structure: petition (petition)" in out
    assert "No problems found" in out


def test_check_reports_errors(tmp_path, capsys):
    structure = build_example_petition()
    structure.get_question("prenupDate").conditional_logic = [
        ConditionalRule(field="ghost", operator=Operator.EQUALS, value="yes", action=Action.SHOW),
    ]
    path = tmp_path / "broken.yaml"
    path.write_text(structure_to_yaml(structure), encoding="utf-8")

    assert main(["check", str(path)]) == 1
    assert "ERROR: Rule on question 'prenupDate' references unknown field 'ghost'" in capsys.readouterr().out


def test_evaluate(petition_file, tmp_path, capsys):
    responses = tmp_path / "answers.json"
    responses.write_text(json.dumps({"hasPrenup": "yes", "residencyDurationMonths": 6}), encoding="utf-8")

    assert main(["evaluate", str(petition_file), str(responses)]) == 1
    output = yaml.safe_load(capsys.readouterr().out)
    assert output["responses"]["residencyRequirementMet"] == "yes"
    assert output["visibility"]["questions"]["prenupDate"] == {"visible": True, "enabled": True}
    assert output["visibility"]["questions"]["residencyRequirementMet"]["enabled"] is False
    assert output["progress"]["totalSections"] == 4
    assert output["progress"]["progressPercentage"] == 0
    assert output["progress"]["minutesRemaining"] == 28
    fields = {e["fieldName"] for e in output["errors"]}
    assert "prenupDate" in fields
    assert "residencyDurationMonths" not in fields


def test_evaluate_rejects_broken_structure(tmp_path, capsys):
    path = tmp_path / "broken.yaml"
    data = yaml.safe_load(structure_to_yaml(build_example_petition()))
    data["sections"][0]["questions"][1]["fieldName"] = "petitionerFirstName"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    responses = tmp_path / "answers.yaml"
    responses.write_text("{}\n", encoding="utf-8")

    assert main(["evaluate", str(path), str(responses)]) == 2
    assert "Duplicate field name 'petitionerFirstName'" in capsys.readouterr().err


def test_structures(tmp_path, capsys):
    YamlDirectoryStore(tmp_path).add_structure(build_example_petition())
    assert main(["structures", "--data-dir", str(tmp_path)]) == 0
    assert "petition: petition (Petition for Dissolution of Marriage)" in capsys.readouterr().out


def test_structures_uses_settings(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("QLOGIC_DATA_DIR", str(tmp_path))
    assert main(["structures"]) == 0
    assert f"No active structures in {tmp_path}" in capsys.readouterr().out

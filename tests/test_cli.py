"""Tests for the ssdl command line."""

import json

import pytest

from ssdl.cli import main
from ssdl.core.codec import dump


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config lookup at an empty location."""
    monkeypatch.setenv("SSDL_CONFIG", str(tmp_path / "no-config.yaml"))


@pytest.fixture
def vehicle_file(vehicle_system, tmp_path):
    return str(dump(vehicle_system, tmp_path / "vehicle.json"))


@pytest.fixture
def automotive_file(automotive_system, tmp_path):
    return str(dump(automotive_system, tmp_path / "acs.json"))


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_validate(vehicle_file, capsys):
    """validate reports element and requirement counts."""
    assert main(["validate", vehicle_file]) == 0
    assert "OK: VEH (Vehicle), 11 elements, 3 requirements" in capsys.readouterr().out


def test_validate_invalid_model(tmp_path, capsys):
    """A decode error exits 1 with the path of the problem."""
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"id": "S", "name": "S", "components": [{"id": "C"}]}))
    assert main(["validate", str(path)]) == 1
    err = capsys.readouterr().err
    assert "Invalid model" in err
    assert "$.components[0]" in err


def test_missing_file(tmp_path, capsys):
    assert main(["coverage", str(tmp_path / "nope.json")]) == 1
    assert "Error reading" in capsys.readouterr().err


def test_coverage_json(automotive_file, capsys):
    assert main(["coverage", automotive_file, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total_elements"] == 4
    assert data["elements_without_requirements"] == ["EC-001", "BC-001", "SA-001"]


def test_coverage_text(automotive_file, capsys):
    assert main(["coverage", automotive_file]) == 0
    out = capsys.readouterr().out
    assert "25.00%" in out
    assert "- `SA-001`" in out


def test_trace_filters(vehicle_file, capsys):
    """--requirement and --element filter the links."""
    assert main(["trace", vehicle_file, "--requirement", "REQ-L1"]) == 0
    assert "`REQ-L1` -> `IF-001` (Interface)" in capsys.readouterr().out

    assert main(["trace", vehicle_file, "--element", "MOT", "--json"]) == 0
    links = json.loads(capsys.readouterr().out)
    assert links == [{"requirement_id": "REQ-S2", "element_id": "MOT", "element_kind": "Component"}]


def test_connectivity_recursive_flag(vehicle_file, capsys):
    assert main(["connectivity", vehicle_file, "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["total_interfaces"] == 3

    assert main(["connectivity", vehicle_file, "--recursive", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["total_interfaces"] == 4


def test_types(vehicle_file, capsys):
    assert main(["types", vehicle_file]) == 0
    out = capsys.readouterr().out
    assert "- Electrical: 1" in out
    assert "50.00%" in out


def test_graph_paths(vehicle_file, capsys):
    """Direct paths by default, multi-hop with --transitive."""
    assert main(["graph", vehicle_file, "--from", "SENS", "--to", "PT"]) == 0
    assert "No path from SENS to PT" in capsys.readouterr().out

    assert main(["graph", vehicle_file, "--from", "SENS", "--to", "PT", "--transitive"]) == 0
    assert "SENS -> ECU [IF-001] -> PT [IF-002]" in capsys.readouterr().out


def test_graph_requires_both_ends(vehicle_file, capsys):
    assert main(["graph", vehicle_file, "--from", "SENS"]) == 1
    assert "--from and --to" in capsys.readouterr().err


def test_conflicts(vehicle_file, capsys):
    assert main(["conflicts", vehicle_file]) == 0
    assert "`REQ-S1` / `REQ-S2`" in capsys.readouterr().out


def test_report_json(vehicle_file, capsys):
    assert main(["report", vehicle_file, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert set(data) == {
        "system", "coverage", "traceability", "connectivity", "interface_types", "dependency_graph", "conflicts",
    }


def test_config_output_format(vehicle_file, tmp_path, monkeypatch, capsys):
    """output_format: json in the config makes JSON the default."""
    config = tmp_path / "json.yaml"
    config.write_text("output_format: json\n")
    monkeypatch.setenv("SSDL_CONFIG", str(config))

    assert main(["conflicts", vehicle_file]) == 0
    assert json.loads(capsys.readouterr().out)[0]["requirement1"] == "REQ-S1"


def test_no_recursive_overrides_config(vehicle_file, tmp_path, monkeypatch, capsys):
    """--no-recursive switches off recursive_interfaces from the config."""
    config = tmp_path / "recursive.yaml"
    config.write_text("recursive_interfaces: true\n")
    monkeypatch.setenv("SSDL_CONFIG", str(config))

    assert main(["connectivity", vehicle_file, "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["total_interfaces"] == 4

    assert main(["connectivity", vehicle_file, "--no-recursive", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["total_interfaces"] == 3


def test_no_json_overrides_config(vehicle_file, tmp_path, monkeypatch, capsys):
    """--no-json restores text output when the config asks for JSON."""
    config = tmp_path / "json.yaml"
    config.write_text("output_format: json\n")
    monkeypatch.setenv("SSDL_CONFIG", str(config))

    assert main(["conflicts", vehicle_file, "--no-json"]) == 0
    assert "- `REQ-S1` / `REQ-S2`" in capsys.readouterr().out


def test_diagram_to_file(automotive_file, tmp_path):
    out = tmp_path / "acs.puml"
    assert main(["diagram", automotive_file, "--kind", "bdd", "-o", str(out)]) == 0
    assert out.read_text().startswith("@startuml BDD_ACS_001")


def test_schema(capsys):
    assert main(["schema"]) == 0
    assert json.loads(capsys.readouterr().out)["title"] == "SSDL System Model"


def test_config_init(tmp_path, capsys):
    target = tmp_path / "init.yaml"
    assert main(["--config", str(target), "config", "--init"]) == 0
    assert target.exists()
    assert f"Saved to {target}" in capsys.readouterr().out


def test_render(vehicle_file, tmp_path, capsys):
    out = tmp_path / "graph.png"
    assert main(["render", vehicle_file, "-o", str(out), "--layout", "circular", "--figsize", "6x4"]) == 0
    assert out.exists()


def test_render_bad_center(vehicle_file, tmp_path, capsys):
    assert main(["render", vehicle_file, "-o", str(tmp_path / "x.png"), "--center", "NOPE"]) == 1
    assert "not in graph" in capsys.readouterr().err

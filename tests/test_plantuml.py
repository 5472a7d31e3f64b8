"""Tests for PlantUML diagram generation."""

import pytest

from ssdl.builder import component, requirement, system
from ssdl.core.models import BooleanValue, ListValue, NumberValue, StringValue
from ssdl.views import (
    DIAGRAMS,
    format_property_value,
    generate_bdd,
    generate_complete_document,
    generate_ibd,
    generate_requirements_diagram,
    sanitize_id,
)


def test_sanitize_id():
    assert sanitize_id("ACS-001") == "ACS_001"
    assert sanitize_id("a.b c") == "a_b_c"


@pytest.mark.parametrize("value,expected", [
    (StringValue("ECU"), '"ECU"'),
    (NumberValue(2.4, "GHz"), "2.4 GHz"),
    (NumberValue(3.0), "3.0"),
    (BooleanValue(True), "true"),
    (ListValue((StringValue("Camera"), ListValue((BooleanValue(False),)))), '["Camera", [false]]'),
    (ListValue(()), "[]"),
])
def test_format_property_value(value, expected):
    assert format_property_value(value) == expected


def test_bdd(automotive_system):
    """BDD has a package for the system and a block per component."""
    bdd = generate_bdd(automotive_system)
    assert bdd.startswith("@startuml BDD_ACS_001")
    assert "title Block Definition Diagram - AutomotiveControlSystem" in bdd
    assert 'package "AutomotiveControlSystem" as ACS_001 <<system>>' in bdd
    assert 'class "EngineController" as EC_001 <<block>>' in bdd
    assert 'class "SensorArray" as SA_001 <<block>>' in bdd
    assert "ACS_001 *-- EC_001" in bdd
    assert bdd.endswith("@enduml")


def test_bdd_nested_subsystems(vehicle_system):
    """Subsystems nest as packages and compose into their parent."""
    bdd = generate_bdd(vehicle_system)
    assert '  package "Powertrain" as PT <<system>> {' in bdd
    assert "VEH *-- PT" in bdd
    assert "PT *-- MOT" in bdd
    assert bdd.count("{") == bdd.count("}")


def test_ibd(automotive_system):
    """IBD lists components with their properties."""
    ibd = generate_ibd(automotive_system)
    assert ibd.startswith("@startuml IBD_ACS_001")
    assert "title Internal Block Diagram - AutomotiveControlSystem" in ibd
    assert 'component "EngineController" as EC_001' in ibd
    assert 'type = "ECU"' in ibd
    assert "processingPower = 2.4 GHz" in ibd
    assert 'compliance = "ISO 26262"' in ibd


def test_ibd_connections(vehicle_system):
    """Root interfaces become arrows labelled with their type."""
    ibd = generate_ibd(vehicle_system)
    assert "SENS --> ECU : Sensor bus\\n<<data>>" in ibd
    assert "ECU --> PT : Torque command\\n<<control>>" in ibd


def test_requirements_diagram(automotive_system):
    """Each requirement becomes a rectangle with its attributes."""
    req = generate_requirements_diagram(automotive_system)
    assert req.startswith("@startuml REQ_ACS_001")
    assert 'rectangle "Engine Response Time" as REQ_001' in req
    assert 'rectangle "Brake Safety" as REQ_002' in req
    assert "id: REQ-001" in req
    assert "type: Performance" in req
    assert "type: Safety" in req
    assert "priority: Critical" in req


def test_requirements_derivation_arrow():
    """Derived requirements point back at their parent."""
    root = (
        system("S", "S")
        .with_requirement(requirement("R-1", "Parent").build())
        .with_requirement(requirement("R-2", "Child").derived_from("R-1").build())
        .build()
    )
    assert "R_1 --> R_2 : derives" in generate_requirements_diagram(root)


def test_complete_document(automotive_system):
    """The complete document holds all three diagrams."""
    doc = generate_complete_document(automotive_system)
    assert "@startuml BDD_ACS_001" in doc
    assert "@startuml IBD_ACS_001" in doc
    assert "@startuml REQ_ACS_001" in doc
    assert doc.count("@") == 6
    assert DIAGRAMS["all"](automotive_system) == doc


def test_components_without_properties():
    """Blocks without properties get no note."""
    root = system("S", "S").with_component(component("C", "Plain").build()).build()
    assert "note right of C" not in generate_bdd(root)

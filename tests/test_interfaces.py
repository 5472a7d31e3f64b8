"""Tests for connectivity, dependency graph and interface type analyses."""

import networkx as nx
import pytest

from ssdl.analysis import (
    Analyzer,
    analyze_connectivity,
    analyze_coverage,
    analyze_interface_types,
    build_dependency_graph,
    build_traceability_matrix,
    detect_conflicts,
)
from ssdl.builder import component, interface, requirement, system
from ssdl.core.models import InterfaceType, Priority


@pytest.fixture
def dangling():
    """IF-1 points at an id that is not in the tree."""
    return (
        system("S", "S")
        .with_component(component("C1", "C1").build())
        .with_interface(interface("IF-1", "Broken", "C1", "C-UNKNOWN").build())
        .build()
    )


def test_dangling_interface_is_invalid(dangling):
    """An unresolved endpoint makes the interface invalid."""
    result = analyze_connectivity(dangling)
    assert [i.id for i in result.invalid_interfaces] == ["IF-1"]
    assert result.valid_interfaces == 0
    assert result.connectivity_score == 0.0


def test_vacuous_connectivity(automotive_system):
    """No interfaces: score is 100 and every element is orphaned."""
    result = analyze_connectivity(automotive_system)
    assert result.total_interfaces == 0
    assert result.connectivity_score == 100.0
    assert result.orphaned_elements == ("ACS-001", "EC-001", "BC-001", "SA-001")


def test_connectivity_root_interfaces(vehicle_system):
    """By default only root interfaces are checked; subsystem ids still resolve."""
    result = analyze_connectivity(vehicle_system)
    assert result.total_interfaces == 3
    assert result.valid_interfaces == 3
    assert result.connectivity_score == 100.0
    assert result.orphaned_elements == ("VEH", "MOT", "GB", "IF-101", "IF-001", "IF-002", "IF-003")


def test_connectivity_recursive(vehicle_system):
    """Recursive analysis adds subsystem interfaces."""
    result = analyze_connectivity(vehicle_system, recursive=True)
    assert result.total_interfaces == 4
    assert "MOT" not in result.orphaned_elements
    assert "GB" not in result.orphaned_elements


def test_dependency_graph_edges(vehicle_system):
    """One edge per interface, labelled with type and id."""
    graph = build_dependency_graph(vehicle_system)
    assert len(graph.nodes) == 11
    assert [(e.source, e.target, e.interface_id) for e in graph.edges] == [
        ("SENS", "ECU", "IF-001"),
        ("ECU", "PT", "IF-002"),
        ("BAT", "ECU", "IF-003"),
    ]

    incoming = graph.get_incoming_edges("ECU")
    assert {e.interface_id for e in incoming} == {"IF-001", "IF-003"}
    assert [e.interface_type for e in graph.get_outgoing_edges("ECU")] == [InterfaceType.CONTROL]


def test_find_paths_direct_only(vehicle_system):
    """find_paths returns single-edge paths and nothing transitive."""
    graph = build_dependency_graph(vehicle_system)
    paths = graph.find_paths("SENS", "ECU")
    assert len(paths) == 1
    assert paths[0][0].interface_id == "IF-001"
    assert graph.find_paths("SENS", "PT") == []


def test_find_all_paths_transitive(vehicle_system):
    """find_all_paths walks through intermediate elements."""
    graph = build_dependency_graph(vehicle_system)
    paths = graph.find_all_paths("SENS", "PT")
    assert [[e.interface_id for e in path] for path in paths] == [["IF-001", "IF-002"]]
    assert graph.find_all_paths("SENS", "PT", max_length=1) == []
    assert graph.find_all_paths("SENS", "NOPE") == []


def test_parallel_interfaces_are_distinct_paths():
    """Two interfaces between the same pair give two paths."""
    root = (
        system("S", "S")
        .with_component(component("A", "A").build())
        .with_component(component("B", "B").build())
        .with_interface(interface("I1", "Power", "A", "B", InterfaceType.ELECTRICAL).build())
        .with_interface(interface("I2", "Data", "A", "B").build())
        .build()
    )
    graph = build_dependency_graph(root)
    assert len(graph.find_paths("A", "B")) == 2
    assert sorted(p[0].interface_id for p in graph.find_all_paths("A", "B")) == ["I1", "I2"]


def test_to_networkx_marks_dangling_nodes(dangling):
    """Dangling endpoints become nodes with known=False."""
    nx_graph = build_dependency_graph(dangling).to_networkx()
    assert isinstance(nx_graph, nx.MultiDiGraph)
    assert nx_graph.nodes["C1"]["known"] is True
    assert nx_graph.nodes["C-UNKNOWN"]["known"] is False
    assert nx_graph.number_of_edges() == 1


def test_interface_types(vehicle_system):
    """Distribution, tie-breaking by declaration order, and diversity."""
    result = analyze_interface_types(vehicle_system)
    assert result.total_interfaces == 3
    assert list(result.type_distribution) == [InterfaceType.ELECTRICAL, InterfaceType.DATA, InterfaceType.CONTROL]
    assert result.most_common_type == InterfaceType.ELECTRICAL
    assert result.least_common_type == InterfaceType.ELECTRICAL
    assert result.diversity_score == 50.0


def test_interface_types_majority():
    """The most frequent type wins over declaration order."""
    root = (
        system("S", "S")
        .with_interface(interface("I1", "I1", "A", "B", InterfaceType.PHYSICAL).build())
        .with_interface(interface("I2", "I2", "A", "B").build())
        .with_interface(interface("I3", "I3", "B", "A").build())
        .build()
    )
    result = analyze_interface_types(root)
    assert result.most_common_type == InterfaceType.DATA
    assert result.least_common_type == InterfaceType.PHYSICAL
    assert result.to_dict()["type_distribution"] == {"Physical": 1, "Data": 2}


def test_interface_types_empty(automotive_system):
    """No interfaces: no most or least common type."""
    result = analyze_interface_types(automotive_system)
    assert result.most_common_type is None
    assert result.least_common_type is None
    assert result.diversity_score == 0.0


def test_analyzer_report(vehicle_system):
    """Analyzer gathers every analysis into one report."""
    report = Analyzer(vehicle_system, recursive=True).report()
    assert report.system_id == "VEH"
    assert report.connectivity.total_interfaces == 4
    assert report.interface_types.most_common_type == InterfaceType.PHYSICAL
    assert len(report.conflicts) == 1

    data = report.to_dict()
    assert data["system"] == {"id": "VEH", "name": "Vehicle"}
    assert len(data["dependency_graph"]["edges"]) == 4


def test_analyses_survive_subsystem_cycle(caplog):
    """Every analysis finishes on a system that contains itself."""
    root = (
        system("LOOP", "Loop")
        .with_component(component("C1", "C1").build())
        .with_interface(interface("IF-1", "Link", "LOOP", "C1").build())
        .with_requirement(requirement("R1", "R1").with_priority(Priority.CRITICAL).build())
        .with_requirement(requirement("R2", "R2").with_priority(Priority.CRITICAL).build())
        .build()
    )
    object.__setattr__(root, "subsystems", (root,))
    caplog.set_level("WARNING", logger="ssdl.core.walk")

    coverage = analyze_coverage(root)
    assert coverage.total_elements == 3
    assert coverage.elements_without_requirements == ("C1", "IF-1")

    assert [l.requirement_id for l in build_traceability_matrix(root).links] == ["R1", "R2"]
    assert [(c.requirement1, c.requirement2) for c in detect_conflicts(root)] == [("R1", "R2")]

    connectivity = analyze_connectivity(root, recursive=True)
    assert connectivity.total_interfaces == 1
    assert connectivity.connectivity_score == 100.0

    graph = build_dependency_graph(root, recursive=True)
    assert graph.nodes == ("LOOP", "C1", "IF-1")
    assert len(graph.edges) == 1

    assert analyze_interface_types(root, recursive=True).type_distribution == {InterfaceType.DATA: 1}
    assert "cycle" in caplog.text

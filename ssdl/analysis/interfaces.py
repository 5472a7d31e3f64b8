"""Interface analyses: connectivity, dependency graph, type distribution.

Known element ids are always collected from the whole tree. By default only
the interfaces declared on the root system are analysed; pass
`recursive=True` to include interfaces declared in subsystems.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

import networkx as nx

from ..core.models import INTERFACE_TYPES, ElementId, Interface, InterfaceType, System
from ..core.walk import collect_element_ids, iter_interfaces

logger = logging.getLogger(__name__)


# =============================================================================
# Connectivity
# =============================================================================


@dataclass(frozen=True)
class ConnectivityAnalysis:
    total_interfaces: int
    valid_interfaces: int
    invalid_interfaces: Tuple[Interface, ...]
    orphaned_elements: Tuple[ElementId, ...]
    connectivity_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_interfaces": self.total_interfaces,
            "valid_interfaces": self.valid_interfaces,
            "invalid_interfaces": [
                {"id": i.id, "name": i.name, "source": i.source, "target": i.target}
                for i in self.invalid_interfaces
            ],
            "orphaned_elements": list(self.orphaned_elements),
            "connectivity_score": self.connectivity_score,
        }


def analyze_connectivity(system: System, recursive: bool = False) -> ConnectivityAnalysis:
    """
    Classify interfaces by whether both endpoints resolve to known elements.

    Orphaned elements are known ids touched by no interface endpoint. With no
    interfaces the score is 100.0 (vacuously connected).
    """
    known_ids = collect_element_ids(system)
    known: Set[ElementId] = set(known_ids)
    interfaces = list(iter_interfaces(system, recursive=recursive))

    valid: List[Interface] = []
    invalid: List[Interface] = []
    touched: Set[ElementId] = set()
    for interface in interfaces:
        touched.add(interface.source)
        touched.add(interface.target)
        if interface.source in known and interface.target in known:
            valid.append(interface)
        else:
            invalid.append(interface)

    if invalid:
        logger.info("%d of %d interfaces in %s have unresolved endpoints", len(invalid), len(interfaces), system.id)

    score = len(valid) / len(interfaces) * 100 if interfaces else 100.0

    return ConnectivityAnalysis(
        total_interfaces=len(interfaces),
        valid_interfaces=len(valid),
        invalid_interfaces=tuple(invalid),
        orphaned_elements=tuple(e for e in known_ids if e not in touched),
        connectivity_score=score,
    )


# =============================================================================
# Dependency graph
# =============================================================================


@dataclass(frozen=True)
class DependencyEdge:
    source: ElementId
    target: ElementId
    interface_type: InterfaceType
    interface_id: ElementId

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "interface_type": self.interface_type.value,
            "interface_id": self.interface_id,
        }


@dataclass(frozen=True)
class DependencyGraph:
    """
    Directed graph of element ids; one edge per interface.

    Edges may point at ids that are not nodes (dangling interface endpoints).
    """

    nodes: Tuple[ElementId, ...] = ()
    edges: Tuple[DependencyEdge, ...] = ()

    # Lazily built networkx view, for transitive queries and rendering
    _nx: Dict[str, nx.MultiDiGraph] = field(default_factory=dict, repr=False, compare=False)

    def get_incoming_edges(self, element_id: ElementId) -> List[DependencyEdge]:
        return [e for e in self.edges if e.target == element_id]

    def get_outgoing_edges(self, element_id: ElementId) -> List[DependencyEdge]:
        return [e for e in self.edges if e.source == element_id]

    def find_paths(self, source: ElementId, target: ElementId) -> List[List[DependencyEdge]]:
        """Direct (single-edge) paths from `source` to `target`."""
        return [[e] for e in self.edges if e.source == source and e.target == target]

    def find_all_paths(
        self, source: ElementId, target: ElementId, max_length: Optional[int] = None
    ) -> List[List[DependencyEdge]]:
        """
        All simple paths from `source` to `target`, as edge lists.

        Parallel interfaces between the same pair of elements give distinct
        paths. `max_length` caps the number of edges per path.
        """
        graph = self.to_networkx()
        if source not in graph or target not in graph:
            return []
        if source == target:
            # networkx yields nothing for source == target; self-loops are direct paths
            return self.find_paths(source, target)

        paths = []
        for edge_path in nx.all_simple_edge_paths(graph, source, target, cutoff=max_length):
            paths.append([self.edges[key] for _, _, key in edge_path])
        return paths

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        MultiDiGraph view; edge keys index into `edges`.

        Nodes carry `known=True` for tree elements and `known=False` for
        dangling endpoints.
        """
        cached = self._nx.get("graph")
        if cached is not None:
            return cached

        graph = nx.MultiDiGraph()
        for node in self.nodes:
            graph.add_node(node, known=True)
        for index, edge in enumerate(self.edges):
            for endpoint in (edge.source, edge.target):
                if endpoint not in graph:
                    graph.add_node(endpoint, known=False)
            graph.add_edge(
                edge.source,
                edge.target,
                key=index,
                interface_type=edge.interface_type.value,
                interface_id=edge.interface_id,
            )

        self._nx["graph"] = graph
        return graph

    def to_dict(self) -> Dict[str, Any]:
        return {"nodes": list(self.nodes), "edges": [e.to_dict() for e in self.edges]}


def build_dependency_graph(system: System, recursive: bool = False) -> DependencyGraph:
    nodes = tuple(collect_element_ids(system))
    edges = tuple(
        DependencyEdge(
            source=interface.source,
            target=interface.target,
            interface_type=interface.interface_type,
            interface_id=interface.id,
        )
        for interface in iter_interfaces(system, recursive=recursive)
    )
    return DependencyGraph(nodes=nodes, edges=edges)


# =============================================================================
# Interface types
# =============================================================================


@dataclass(frozen=True)
class InterfaceTypeAnalysis:
    total_interfaces: int
    type_distribution: Dict[InterfaceType, int]
    most_common_type: Optional[InterfaceType]
    least_common_type: Optional[InterfaceType]
    diversity_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_interfaces": self.total_interfaces,
            "type_distribution": {t.value: n for t, n in self.type_distribution.items()},
            "most_common_type": self.most_common_type.value if self.most_common_type else None,
            "least_common_type": self.least_common_type.value if self.least_common_type else None,
            "diversity_score": self.diversity_score,
        }


def analyze_interface_types(system: System, recursive: bool = False) -> InterfaceTypeAnalysis:
    """
    Count interfaces per type.

    Ties for most/least common go to the type declared first in
    INTERFACE_TYPES. Only types actually used are in the distribution.
    """
    interfaces = list(iter_interfaces(system, recursive=recursive))

    counts = {t: 0 for t in INTERFACE_TYPES}
    for interface in interfaces:
        counts[interface.interface_type] += 1
    distribution = {t: n for t, n in counts.items() if n > 0}

    most_common: Optional[InterfaceType] = None
    least_common: Optional[InterfaceType] = None
    for interface_type, count in distribution.items():
        if most_common is None or count > distribution[most_common]:
            most_common = interface_type
        if least_common is None or count < distribution[least_common]:
            least_common = interface_type

    return InterfaceTypeAnalysis(
        total_interfaces=len(interfaces),
        type_distribution=distribution,
        most_common_type=most_common,
        least_common_type=least_common,
        diversity_score=len(distribution) / len(INTERFACE_TYPES) * 100,
    )

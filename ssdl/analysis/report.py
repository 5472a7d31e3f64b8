"""Combined analysis over one system.

Analyzer owns no state beyond the system and options; each query is computed
on demand from the pure functions in `requirements` and `interfaces`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from ..core.models import System
from .interfaces import (
    ConnectivityAnalysis,
    DependencyGraph,
    InterfaceTypeAnalysis,
    analyze_connectivity,
    analyze_interface_types,
    build_dependency_graph,
)
from .requirements import (
    RequirementConflict,
    RequirementsCoverage,
    TraceabilityMatrix,
    analyze_coverage,
    build_traceability_matrix,
    detect_conflicts,
)


@dataclass(frozen=True)
class SystemReport:
    system_id: str
    system_name: str
    coverage: RequirementsCoverage
    traceability: TraceabilityMatrix
    connectivity: ConnectivityAnalysis
    interface_types: InterfaceTypeAnalysis
    dependency_graph: DependencyGraph
    conflicts: List[RequirementConflict]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "system": {"id": self.system_id, "name": self.system_name},
            "coverage": self.coverage.to_dict(),
            "traceability": self.traceability.to_dict(),
            "connectivity": self.connectivity.to_dict(),
            "interface_types": self.interface_types.to_dict(),
            "dependency_graph": self.dependency_graph.to_dict(),
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


class Analyzer:
    """
    Convenience front-end for the analysis functions.

    Usage:
        analyzer = Analyzer(system, recursive=True)
        print(analyzer.coverage().coverage_percentage)
        report = analyzer.report()
    """

    def __init__(self, system: System, recursive: bool = False):
        self.system = system
        self.recursive = recursive

    def coverage(self) -> RequirementsCoverage:
        return analyze_coverage(self.system)

    def traceability(self) -> TraceabilityMatrix:
        return build_traceability_matrix(self.system)

    def conflicts(self) -> List[RequirementConflict]:
        return detect_conflicts(self.system)

    def connectivity(self) -> ConnectivityAnalysis:
        return analyze_connectivity(self.system, recursive=self.recursive)

    def interface_types(self) -> InterfaceTypeAnalysis:
        return analyze_interface_types(self.system, recursive=self.recursive)

    def dependency_graph(self) -> DependencyGraph:
        return build_dependency_graph(self.system, recursive=self.recursive)

    def report(self) -> SystemReport:
        return SystemReport(
            system_id=self.system.id,
            system_name=self.system.name,
            coverage=self.coverage(),
            traceability=self.traceability(),
            connectivity=self.connectivity(),
            interface_types=self.interface_types(),
            dependency_graph=self.dependency_graph(),
            conflicts=self.conflicts(),
        )

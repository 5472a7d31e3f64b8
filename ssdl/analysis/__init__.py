"""Read-only analyses over a System tree."""

from .interfaces import (
    ConnectivityAnalysis,
    DependencyEdge,
    DependencyGraph,
    InterfaceTypeAnalysis,
    analyze_connectivity,
    analyze_interface_types,
    build_dependency_graph,
)
from .report import Analyzer, SystemReport
from .requirements import (
    RequirementConflict,
    RequirementsCoverage,
    TraceabilityLink,
    TraceabilityMatrix,
    analyze_coverage,
    build_traceability_matrix,
    collect_all_elements,
    collect_all_requirements,
    detect_conflicts,
)

__all__ = [
    # requirements
    "RequirementConflict",
    "RequirementsCoverage",
    "TraceabilityLink",
    "TraceabilityMatrix",
    "analyze_coverage",
    "build_traceability_matrix",
    "collect_all_elements",
    "collect_all_requirements",
    "detect_conflicts",
    # interfaces
    "ConnectivityAnalysis",
    "DependencyEdge",
    "DependencyGraph",
    "InterfaceTypeAnalysis",
    "analyze_connectivity",
    "analyze_interface_types",
    "build_dependency_graph",
    # report
    "Analyzer",
    "SystemReport",
]

"""Requirement analyses: allocation coverage, traceability, conflicts.

All functions are read-only over an immutable System and return immutable
report values. Dangling or duplicate ids are reported, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Any, Dict, List, Optional, Tuple

from ..core.models import (
    Element,
    ElementId,
    ElementKind,
    Priority,
    Requirement,
    System,
    allocated_requirements,
    element_kind,
    has_requirements,
)
from ..core.walk import iter_elements, iter_requirements

logger = logging.getLogger(__name__)

CONFLICT_DESCRIPTION = "Multiple critical requirements of same type"


def collect_all_elements(system: System) -> List[Element]:
    """
    Flatten the tree into every System, Component and Interface.

    The root comes first; each system is followed by its subsystems' subtrees,
    then its components, then its interfaces.
    """
    return list(iter_elements(system))


def collect_all_requirements(system: System) -> List[Requirement]:
    """Every requirement allocated anywhere in the tree, duplicates kept."""
    return list(iter_requirements(system))


# =============================================================================
# Coverage
# =============================================================================


@dataclass(frozen=True)
class RequirementsCoverage:
    total_elements: int
    elements_with_requirements: int
    elements_without_requirements: Tuple[ElementId, ...]
    coverage_percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_elements": self.total_elements,
            "elements_with_requirements": self.elements_with_requirements,
            "elements_without_requirements": list(self.elements_without_requirements),
            "coverage_percentage": self.coverage_percentage,
        }


def analyze_coverage(system: System) -> RequirementsCoverage:
    """Share of elements with at least one allocated requirement."""
    elements = collect_all_elements(system)
    covered = [e for e in elements if has_requirements(e)]
    uncovered = tuple(e.id for e in elements if not has_requirements(e))

    percentage = len(covered) / len(elements) * 100 if elements else 0.0

    return RequirementsCoverage(
        total_elements=len(elements),
        elements_with_requirements=len(covered),
        elements_without_requirements=uncovered,
        coverage_percentage=percentage,
    )


# =============================================================================
# Traceability
# =============================================================================


@dataclass(frozen=True)
class TraceabilityLink:
    requirement_id: ElementId
    element_id: ElementId
    element_kind: ElementKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requirement_id": self.requirement_id,
            "element_id": self.element_id,
            "element_kind": self.element_kind.value,
        }


@dataclass(frozen=True)
class TraceabilityMatrix:
    """Requirement-to-element links. Lookups are linear scans."""

    links: Tuple[TraceabilityLink, ...] = ()

    def get_elements_for(self, requirement_id: ElementId) -> List[TraceabilityLink]:
        return [link for link in self.links if link.requirement_id == requirement_id]

    def get_requirements_for(self, element_id: ElementId) -> List[TraceabilityLink]:
        return [link for link in self.links if link.element_id == element_id]

    def requirement_ids(self) -> List[ElementId]:
        return list(dict.fromkeys(link.requirement_id for link in self.links))

    def element_ids(self) -> List[ElementId]:
        return list(dict.fromkeys(link.element_id for link in self.links))

    def to_dict(self) -> Dict[str, Any]:
        return {"links": [link.to_dict() for link in self.links]}


def build_traceability_matrix(system: System) -> TraceabilityMatrix:
    """One link per (element, requirement allocated to it) pair."""
    links = tuple(
        TraceabilityLink(requirement_id=req.id, element_id=element.id, element_kind=element_kind(element))
        for element in collect_all_elements(system)
        for req in allocated_requirements(element)
    )
    return TraceabilityMatrix(links)


# =============================================================================
# Conflicts
# =============================================================================


@dataclass(frozen=True)
class RequirementConflict:
    """Two conflicting requirements; `requirement1` sorts before `requirement2`."""

    requirement1: ElementId
    requirement2: ElementId
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requirement1": self.requirement1,
            "requirement2": self.requirement2,
            "description": self.description,
        }


def _conflict_between(a: Requirement, b: Requirement) -> Optional[RequirementConflict]:
    if a.id == b.id:
        return None
    if a.priority != Priority.CRITICAL or b.priority != Priority.CRITICAL:
        return None
    if a.requirement_type != b.requirement_type:
        return None
    first, second = sorted((a.id, b.id))
    return RequirementConflict(ElementId(first), ElementId(second), CONFLICT_DESCRIPTION)


def detect_conflicts(system: System) -> List[RequirementConflict]:
    """
    Pairwise scan for critical requirements of the same type.

    Requirements sharing an id are treated as the same requirement. Each
    unordered pair is reported once, with ids in sorted order, in the order
    the pairs are first met.
    """
    requirements = collect_all_requirements(system)

    conflicts: Dict[RequirementConflict, None] = {}
    for a, b in combinations(requirements, 2):
        conflict = _conflict_between(a, b)
        if conflict is not None:
            conflicts.setdefault(conflict, None)

    if conflicts:
        logger.debug("Found %d requirement conflicts in %s", len(conflicts), system.id)
    return list(conflicts)

"""Tree traversal over System values.

All walks use an explicit stack, so tree depth is bounded by memory rather
than by the interpreter's recursion limit.

Frozen dataclasses make a cyclic tree hard to build, but not impossible
(`object.__setattr__`). A subsystem that is its own ancestor is logged and
skipped instead of being expanded forever. Shared, non-cyclic subtrees are
walked once per occurrence.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterator, List, Optional, Tuple, Union

from .models import Component, Element, ElementId, Interface, Requirement, System, allocated_requirements

logger = logging.getLogger(__name__)


class _Leaves:
    """Stack marker: emit a system's components and interfaces."""

    __slots__ = ("system",)

    def __init__(self, system: System):
        self.system = system


_Frame = Union[Tuple[System, FrozenSet[int]], _Leaves]


def _children(system: System, path: FrozenSet[int]) -> List[System]:
    """Subsystems in reverse declaration order (stack order), minus cycles."""
    children = []
    for subsystem in reversed(system.subsystems):
        if id(subsystem) in path:
            logger.warning(
                "Subsystem cycle: %s contains its ancestor %s; not descending",
                system.id,
                subsystem.id,
            )
            continue
        children.append(subsystem)
    return children


def walk_systems(root: System) -> Iterator[Tuple[System, int, Optional[System]]]:
    """Yield (system, depth, parent) for the root and every subsystem, pre-order."""
    stack: List[Tuple[System, int, Optional[System], FrozenSet[int]]] = [(root, 0, None, frozenset())]

    while stack:
        system, depth, parent, ancestors = stack.pop()
        yield system, depth, parent

        path = ancestors | {id(system)}
        for subsystem in _children(system, path):
            stack.append((subsystem, depth + 1, system, path))


def iter_systems(root: System) -> Iterator[System]:
    for system, _, _ in walk_systems(root):
        yield system


def iter_elements(root: System) -> Iterator[Element]:
    """
    Yield every System, Component and Interface reachable from `root`.

    Order: a system, then its subsystems' subtrees (in declaration order),
    then its components, then its interfaces.
    """
    stack: List[_Frame] = [(root, frozenset())]

    while stack:
        frame = stack.pop()

        if isinstance(frame, _Leaves):
            yield from frame.system.components
            yield from frame.system.interfaces
            continue

        system, ancestors = frame
        yield system

        path = ancestors | {id(system)}
        stack.append(_Leaves(system))
        for subsystem in _children(system, path):
            stack.append((subsystem, path))


def iter_requirements(root: System) -> Iterator[Requirement]:
    """Yield every requirement allocated anywhere in the tree, in element order."""
    for element in iter_elements(root):
        yield from allocated_requirements(element)


def iter_interfaces(root: System, recursive: bool = True) -> Iterator[Interface]:
    """Interfaces of the root only, or of the whole tree when `recursive`."""
    if not recursive:
        yield from root.interfaces
        return
    for element in iter_elements(root):
        if isinstance(element, Interface):
            yield element


def iter_components(root: System) -> Iterator[Component]:
    for element in iter_elements(root):
        if isinstance(element, Component):
            yield element


def collect_element_ids(root: System) -> List[ElementId]:
    """Distinct ids of all elements, in first-seen traversal order."""
    return list(dict.fromkeys(element.id for element in iter_elements(root)))

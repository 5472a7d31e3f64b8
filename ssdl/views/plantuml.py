"""PlantUML views of a system model (SysML flavoured).

- BDD: block definition diagram, nested packages per system
- IBD: internal block diagram of the root's components and interfaces
- REQ: requirements with derivation arrows

Views only read the model; ids are sanitised into PlantUML aliases.
"""

from __future__ import annotations

import re
from typing import List, Union

from ..core.models import BooleanValue, Component, ListValue, NumberValue, PropertyValue, StringValue, System
from ..core.walk import iter_requirements, walk_systems

_ALIAS_RE = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_id(element_id: str) -> str:
    return _ALIAS_RE.sub("_", element_id)


def format_property_value(value: PropertyValue) -> str:
    """Human-readable form: strings quoted, numbers with unit, lists bracketed."""
    parts: List[str] = []
    stack: List[Union[PropertyValue, str]] = [value]

    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, StringValue):
            parts.append(f'"{item.value}"')
        elif isinstance(item, NumberValue):
            parts.append(f"{item.value} {item.unit}" if item.unit is not None else f"{item.value}")
        elif isinstance(item, BooleanValue):
            parts.append("true" if item.value else "false")
        elif isinstance(item, ListValue):
            tokens: List[Union[PropertyValue, str]] = ["["]
            for i, child in enumerate(item.values):
                if i:
                    tokens.append(", ")
                tokens.append(child)
            tokens.append("]")
            stack.extend(reversed(tokens))
        else:
            raise TypeError(f"Unknown PropertyValue variant: {type(item).__name__}")

    return "".join(parts)


def _header(prefix: str, title: str, system: System) -> List[str]:
    return [f"@startuml {prefix}_{sanitize_id(system.id)}", f"title {title} - {system.name}", ""]


def _block_lines(component: Component, indent: str) -> List[str]:
    alias = sanitize_id(component.id)
    lines = [f'{indent}  class "{component.name}" as {alias} <<block>>']
    if component.properties:
        notes = "".join(f"{k} = {format_property_value(v)}\\l" for k, v in component.properties.items())
        lines.append(f"{indent}  note right of {alias} : \\l{notes}")
    return lines


def generate_bdd(system: System) -> str:
    """Block definition diagram: systems as packages, components as blocks."""
    lines = _header("BDD", "Block Definition Diagram", system)

    # Packages nest, so a system closes (components, then brace) once the
    # walk moves back up to its depth or above.
    open_systems: List[System] = []

    def close_to(depth: int) -> None:
        while len(open_systems) > depth:
            closing = open_systems.pop()
            indent = "  " * len(open_systems)
            for component in closing.components:
                lines.extend(_block_lines(component, indent))
            lines.append(f"{indent}}}")
            lines.append("")

    composition: List[str] = []
    open_for_composition: List[System] = []

    def close_composition_to(depth: int) -> None:
        while len(open_for_composition) > depth:
            closing = open_for_composition.pop()
            for component in closing.components:
                composition.append(f"{sanitize_id(closing.id)} *-- {sanitize_id(component.id)}")

    for current, depth, parent in walk_systems(system):
        close_to(depth)
        close_composition_to(depth)

        indent = "  " * depth
        alias = sanitize_id(current.id)
        lines.append(f'{indent}package "{current.name}" as {alias} <<system>> {{')
        if current.description is not None:
            lines.append(f'{indent}  note "{current.description}" as N_{alias}')
        open_systems.append(current)

        if parent is not None:
            composition.append(f"{sanitize_id(parent.id)} *-- {alias}")
        open_for_composition.append(current)

    close_to(0)
    close_composition_to(0)

    lines.extend(composition)
    lines.append("")
    lines.append("@enduml")
    return "\n".join(lines)


def generate_ibd(system: System) -> str:
    """Internal block diagram of the root system's parts and connections."""
    lines = _header("IBD", "Internal Block Diagram", system)

    for component in system.components:
        lines.append(f'component "{component.name}" as {sanitize_id(component.id)} {{')
        for key, value in component.properties.items():
            lines.append(f"  note : {key} = {format_property_value(value)}")
        lines.append("}")
        lines.append("")

    for interface in system.interfaces:
        lines.append(
            f"{sanitize_id(interface.source)} --> {sanitize_id(interface.target)} : "
            f"{interface.name}\\n<<{interface.interface_type.value.lower()}>>"
        )

    lines.append("")
    lines.append("@enduml")
    return "\n".join(lines)


def generate_requirements_diagram(system: System) -> str:
    lines = _header("REQ", "Requirements Diagram", system)
    requirements = list(iter_requirements(system))

    for req in requirements:
        lines.append(f'rectangle "{req.name}" as {sanitize_id(req.id)} {{')
        lines.append(f"  note : id: {req.id}")
        lines.append(f"  note : text: {req.description}")
        lines.append(f"  note : type: {req.requirement_type.value}")
        lines.append(f"  note : priority: {req.priority.value}")
        lines.append(f"  note : verification: {req.verification.value}")
        lines.append("}")
        lines.append("")

    for req in requirements:
        if req.derived_from is not None:
            lines.append(f"{sanitize_id(req.derived_from)} --> {sanitize_id(req.id)} : derives")

    lines.append("")
    lines.append("@enduml")
    return "\n".join(lines)


def generate_complete_document(system: System) -> str:
    """All three diagrams, separated by blank lines."""
    return "\n\n".join(
        [generate_bdd(system), generate_ibd(system), generate_requirements_diagram(system)]
    ) + "\n\n"


DIAGRAMS = {
    "bdd": generate_bdd,
    "ibd": generate_ibd,
    "req": generate_requirements_diagram,
    "all": generate_complete_document,
}

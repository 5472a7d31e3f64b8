"""Fluent builders for system models.

Builders are immutable: every `with_*` call returns a new builder, so a
partially configured builder can be reused as a template.

    vehicle = (
        system("VEH-001", "Vehicle")
        .with_description("Passenger car")
        .with_component(component("EC-001", "EngineController").with_property("mass", NumberValue(1.2, "kg")).build())
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from .core.models import (
    Component,
    Constraint,
    ConstraintType,
    ElementId,
    Interface,
    InterfaceType,
    Priority,
    PropertyValue,
    Requirement,
    RequirementType,
    System,
    VerificationMethod,
)


@dataclass(frozen=True)
class SystemBuilder:
    id: ElementId
    name: str
    description: Optional[str] = None
    subsystems: Tuple[System, ...] = ()
    components: Tuple[Component, ...] = ()
    interfaces: Tuple[Interface, ...] = ()
    requirements: Tuple[Requirement, ...] = ()

    def with_description(self, description: str) -> "SystemBuilder":
        return replace(self, description=description)

    def with_subsystem(self, subsystem: System) -> "SystemBuilder":
        return replace(self, subsystems=self.subsystems + (subsystem,))

    def with_component(self, component: Component) -> "SystemBuilder":
        return replace(self, components=self.components + (component,))

    def with_interface(self, interface: Interface) -> "SystemBuilder":
        return replace(self, interfaces=self.interfaces + (interface,))

    def with_requirement(self, requirement: Requirement) -> "SystemBuilder":
        return replace(self, requirements=self.requirements + (requirement,))

    def build(self) -> System:
        return System(
            id=self.id,
            name=self.name,
            description=self.description,
            subsystems=self.subsystems,
            components=self.components,
            interfaces=self.interfaces,
            requirements=self.requirements,
        )


@dataclass(frozen=True)
class ComponentBuilder:
    id: ElementId
    name: str
    description: Optional[str] = None
    properties: Dict[str, PropertyValue] = field(default_factory=dict, hash=False)
    requirements: Tuple[Requirement, ...] = ()

    def with_description(self, description: str) -> "ComponentBuilder":
        return replace(self, description=description)

    def with_property(self, key: str, value: PropertyValue) -> "ComponentBuilder":
        """Set a property; an existing key is overwritten."""
        return replace(self, properties={**self.properties, key: value})

    def with_requirement(self, requirement: Requirement) -> "ComponentBuilder":
        return replace(self, requirements=self.requirements + (requirement,))

    def build(self) -> Component:
        return Component(
            id=self.id,
            name=self.name,
            description=self.description,
            properties=dict(self.properties),
            requirements=self.requirements,
        )


@dataclass(frozen=True)
class InterfaceBuilder:
    id: ElementId
    name: str
    source: ElementId
    target: ElementId
    interface_type: InterfaceType = InterfaceType.DATA
    description: Optional[str] = None
    requirements: Tuple[Requirement, ...] = ()

    def with_description(self, description: str) -> "InterfaceBuilder":
        return replace(self, description=description)

    def of_type(self, interface_type: InterfaceType) -> "InterfaceBuilder":
        return replace(self, interface_type=interface_type)

    def with_requirement(self, requirement: Requirement) -> "InterfaceBuilder":
        return replace(self, requirements=self.requirements + (requirement,))

    def build(self) -> Interface:
        return Interface(
            id=self.id,
            name=self.name,
            source=self.source,
            target=self.target,
            interface_type=self.interface_type,
            description=self.description,
            requirements=self.requirements,
        )


@dataclass(frozen=True)
class RequirementBuilder:
    id: ElementId
    name: str
    description: str = ""
    requirement_type: RequirementType = RequirementType.FUNCTIONAL
    priority: Priority = Priority.MEDIUM
    verification: VerificationMethod = VerificationMethod.TEST
    constraints: Tuple[Constraint, ...] = ()
    parent: Optional[ElementId] = None

    def with_description(self, description: str) -> "RequirementBuilder":
        return replace(self, description=description)

    def of_type(self, requirement_type: RequirementType) -> "RequirementBuilder":
        return replace(self, requirement_type=requirement_type)

    def with_priority(self, priority: Priority) -> "RequirementBuilder":
        return replace(self, priority=priority)

    def verified_by(self, method: VerificationMethod) -> "RequirementBuilder":
        return replace(self, verification=method)

    def with_constraint(self, constraint: Constraint) -> "RequirementBuilder":
        return replace(self, constraints=self.constraints + (constraint,))

    def derived_from(self, parent_id: str) -> "RequirementBuilder":
        return replace(self, parent=ElementId(parent_id))

    def build(self) -> Requirement:
        return Requirement(
            id=self.id,
            name=self.name,
            description=self.description,
            requirement_type=self.requirement_type,
            priority=self.priority,
            verification=self.verification,
            constraints=self.constraints,
            derived_from=self.parent,
        )


def system(id: str, name: str) -> SystemBuilder:
    return SystemBuilder(ElementId(id), name)


def component(id: str, name: str) -> ComponentBuilder:
    return ComponentBuilder(ElementId(id), name)


def requirement(id: str, name: str) -> RequirementBuilder:
    return RequirementBuilder(ElementId(id), name)


def interface(
    id: str,
    name: str,
    source: str,
    target: str,
    interface_type: InterfaceType = InterfaceType.DATA,
) -> InterfaceBuilder:
    return InterfaceBuilder(ElementId(id), name, ElementId(source), ElementId(target), interface_type)


def constraint(
    id: str,
    name: str,
    constraint_type: ConstraintType,
    value: PropertyValue,
    description: str = "",
) -> Constraint:
    """Constraints have no optional structure, so this builds directly."""
    return Constraint(
        id=ElementId(id),
        name=name,
        description=description,
        constraint_type=constraint_type,
        value=value,
    )

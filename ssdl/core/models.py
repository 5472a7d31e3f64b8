"""Entity model for SSDL system specifications.

A specification is a tree: a System owns subsystems, components, interfaces
and requirements by value. Interface endpoints and requirement derivation are
weak references by ElementId and are never resolved here; analysis code
builds lookup tables when it needs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, Dict, Mapping, NewType, Optional, Tuple, Union

ElementId = NewType("ElementId", str)


class InterfaceType(str, Enum):
    """Kind of flow carried by an interface."""

    PHYSICAL = "Physical"  # mechanical connections
    ELECTRICAL = "Electrical"  # power, signals
    DATA = "Data"  # information flow
    CONTROL = "Control"  # command/control signals
    THERMAL = "Thermal"  # heat transfer
    OPTICAL = "Optical"  # light/optical signals


class RequirementType(str, Enum):
    FUNCTIONAL = "Functional"
    PERFORMANCE = "Performance"
    INTERFACE = "Interface"
    DESIGN = "Design"
    OPERATIONAL = "Operational"
    SAFETY = "Safety"
    SECURITY = "Security"


class Priority(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class VerificationMethod(str, Enum):
    TEST = "Test"
    ANALYSIS = "Analysis"
    INSPECTION = "Inspection"
    DEMONSTRATION = "Demonstration"


class ConstraintType(str, Enum):
    MASS = "Mass"
    POWER = "Power"
    COST = "Cost"
    SIZE = "Size"
    TEMPERATURE = "Temperature"
    REGULATORY = "Regulatory"


class ElementKind(str, Enum):
    """Element kinds reachable by traversal (the traceable ones)."""

    SYSTEM = "System"
    COMPONENT = "Component"
    INTERFACE = "Interface"


# Fixed registries, in declaration order. Diversity scoring and
# "first maximal type" tie-breaking depend on this order.
INTERFACE_TYPES: Tuple[InterfaceType, ...] = (
    InterfaceType.PHYSICAL,
    InterfaceType.ELECTRICAL,
    InterfaceType.DATA,
    InterfaceType.CONTROL,
    InterfaceType.THERMAL,
    InterfaceType.OPTICAL,
)
REQUIREMENT_TYPES: Tuple[RequirementType, ...] = (
    RequirementType.FUNCTIONAL,
    RequirementType.PERFORMANCE,
    RequirementType.INTERFACE,
    RequirementType.DESIGN,
    RequirementType.OPERATIONAL,
    RequirementType.SAFETY,
    RequirementType.SECURITY,
)
PRIORITIES: Tuple[Priority, ...] = (Priority.CRITICAL, Priority.HIGH, Priority.MEDIUM, Priority.LOW)
VERIFICATION_METHODS: Tuple[VerificationMethod, ...] = (
    VerificationMethod.TEST,
    VerificationMethod.ANALYSIS,
    VerificationMethod.INSPECTION,
    VerificationMethod.DEMONSTRATION,
)
CONSTRAINT_TYPES: Tuple[ConstraintType, ...] = (
    ConstraintType.MASS,
    ConstraintType.POWER,
    ConstraintType.COST,
    ConstraintType.SIZE,
    ConstraintType.TEMPERATURE,
    ConstraintType.REGULATORY,
)


# =============================================================================
# Property values
# =============================================================================


@dataclass(frozen=True)
class StringValue:
    value: str

    kind: ClassVar[str] = "string"


@dataclass(frozen=True)
class NumberValue:
    value: float
    unit: Optional[str] = None

    kind: ClassVar[str] = "number"


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    kind: ClassVar[str] = "boolean"


@dataclass(frozen=True)
class ListValue:
    """Ordered list of property values; may nest to any depth."""

    values: Tuple["PropertyValue", ...] = ()

    kind: ClassVar[str] = "list"

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


PropertyValue = Union[StringValue, NumberValue, BooleanValue, ListValue]

# Wire discriminant -> variant
PROPERTY_VARIANTS: Dict[str, type] = {
    StringValue.kind: StringValue,
    NumberValue.kind: NumberValue,
    BooleanValue.kind: BooleanValue,
    ListValue.kind: ListValue,
}


# =============================================================================
# Requirements and constraints
# =============================================================================


@dataclass(frozen=True)
class Constraint:
    """A limitation on the design space, e.g. a mass or power budget."""

    id: ElementId
    name: str
    description: str
    constraint_type: ConstraintType
    value: PropertyValue


@dataclass(frozen=True)
class Requirement:
    id: ElementId
    name: str
    description: str
    requirement_type: RequirementType
    priority: Priority
    verification: VerificationMethod
    constraints: Tuple[Constraint, ...] = ()
    derived_from: Optional[ElementId] = None  # weak reference, may dangle

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraints", tuple(self.constraints))


# =============================================================================
# Structural elements
# =============================================================================


@dataclass(frozen=True)
class Interface:
    """
    A directed connection between two elements.

    `source` produces and `target` consumes. Both are plain ids into the
    enclosing system and are not guaranteed to resolve.
    """

    id: ElementId
    name: str
    source: ElementId
    target: ElementId
    interface_type: InterfaceType
    description: Optional[str] = None
    requirements: Tuple[Requirement, ...] = ()

    kind: ClassVar[ElementKind] = ElementKind.INTERFACE

    def __post_init__(self) -> None:
        object.__setattr__(self, "requirements", tuple(self.requirements))


@dataclass(frozen=True)
class Component:
    """Leaf element with free-form typed properties (held as a read-only mapping)."""

    id: ElementId
    name: str
    description: Optional[str] = None
    properties: Mapping[str, PropertyValue] = field(default_factory=dict, hash=False)
    requirements: Tuple[Requirement, ...] = ()

    kind: ClassVar[ElementKind] = ElementKind.COMPONENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "requirements", tuple(self.requirements))


@dataclass(frozen=True)
class System:
    id: ElementId
    name: str
    description: Optional[str] = None
    subsystems: Tuple["System", ...] = ()
    components: Tuple[Component, ...] = ()
    interfaces: Tuple[Interface, ...] = ()
    requirements: Tuple[Requirement, ...] = ()

    kind: ClassVar[ElementKind] = ElementKind.SYSTEM

    def __post_init__(self) -> None:
        object.__setattr__(self, "subsystems", tuple(self.subsystems))
        object.__setattr__(self, "components", tuple(self.components))
        object.__setattr__(self, "interfaces", tuple(self.interfaces))
        object.__setattr__(self, "requirements", tuple(self.requirements))


Element = Union[System, Component, Interface]


def element_kind(element: Element) -> ElementKind:
    """Return the kind of a structural element."""
    if isinstance(element, System):
        return ElementKind.SYSTEM
    if isinstance(element, Component):
        return ElementKind.COMPONENT
    if isinstance(element, Interface):
        return ElementKind.INTERFACE
    raise TypeError(f"Not a system element: {type(element).__name__}")


def allocated_requirements(element: Element) -> Tuple[Requirement, ...]:
    """Requirements allocated directly to an element (not its descendants)."""
    if isinstance(element, (System, Component, Interface)):
        return element.requirements
    raise TypeError(f"Not a system element: {type(element).__name__}")


def has_requirements(element: Element) -> bool:
    return len(allocated_requirements(element)) > 0

"""Core domain types, traversal and the JSON codec."""

from .codec import (
    CyclicModelError,
    DecodeError,
    DecodeResult,
    InvalidValueError,
    MissingFieldError,
    ParseError,
    UnknownDiscriminantError,
    decode,
    decode_property_value,
    dump,
    encode,
    encode_property_value,
    from_json,
    json_schema,
    load,
    to_json,
)
from .models import (
    CONSTRAINT_TYPES,
    INTERFACE_TYPES,
    PRIORITIES,
    REQUIREMENT_TYPES,
    VERIFICATION_METHODS,
    BooleanValue,
    Component,
    Constraint,
    ConstraintType,
    Element,
    ElementId,
    ElementKind,
    Interface,
    InterfaceType,
    ListValue,
    NumberValue,
    Priority,
    PropertyValue,
    Requirement,
    RequirementType,
    StringValue,
    System,
    VerificationMethod,
    allocated_requirements,
    element_kind,
    has_requirements,
)
from .walk import (
    collect_element_ids,
    iter_components,
    iter_elements,
    iter_interfaces,
    iter_requirements,
    iter_systems,
    walk_systems,
)

__all__ = [
    # models
    "CONSTRAINT_TYPES",
    "INTERFACE_TYPES",
    "PRIORITIES",
    "REQUIREMENT_TYPES",
    "VERIFICATION_METHODS",
    "BooleanValue",
    "Component",
    "Constraint",
    "ConstraintType",
    "Element",
    "ElementId",
    "ElementKind",
    "Interface",
    "InterfaceType",
    "ListValue",
    "NumberValue",
    "Priority",
    "PropertyValue",
    "Requirement",
    "RequirementType",
    "StringValue",
    "System",
    "VerificationMethod",
    "allocated_requirements",
    "element_kind",
    "has_requirements",
    # walk
    "collect_element_ids",
    "iter_elements",
    "iter_interfaces",
    "iter_requirements",
    "iter_systems",
    "walk_systems",
    "iter_components",
    # codec
    "CyclicModelError",
    "DecodeError",
    "DecodeResult",
    "InvalidValueError",
    "MissingFieldError",
    "ParseError",
    "UnknownDiscriminantError",
    "decode",
    "decode_property_value",
    "dump",
    "encode",
    "encode_property_value",
    "from_json",
    "json_schema",
    "load",
    "to_json",
]

"""JSON codec for SSDL system models.

Wire format
-----------
Objects use the camelCase keys of the SSDL document format::

    {"id": "SYS-1", "name": "Vehicle", "description": null,
     "subsystems": [...], "components": [...], "interfaces": [...],
     "requirements": [...]}

Enums are their literal names ("Critical", "Data", ...). Property values are
tagged with a `type` discriminant::

    {"type": "string",  "value": "ECU"}
    {"type": "number",  "value": 2.4, "unit": "GHz"}
    {"type": "boolean", "value": true}
    {"type": "list",    "values": [ ...property values... ]}

`decode` and `from_json` never raise: failures come back as a DecodeResult
carrying a DecodeError that names the offending path.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Generic, List, Optional, Tuple, Type, TypeVar, Union

from .models import (
    CONSTRAINT_TYPES,
    INTERFACE_TYPES,
    PRIORITIES,
    PROPERTY_VARIANTS,
    REQUIREMENT_TYPES,
    VERIFICATION_METHODS,
    BooleanValue,
    Component,
    Constraint,
    ConstraintType,
    ElementId,
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
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


# =============================================================================
# Errors and results
# =============================================================================


class DecodeError(ValueError):
    """A JSON document could not be turned into a model value."""

    def __init__(self, message: str, path: str = "$"):
        self.path = path
        super().__init__(message)


class ParseError(DecodeError):
    """The input is not well-formed JSON."""


class MissingFieldError(DecodeError):
    def __init__(self, field: str, path: str):
        self.field = field
        super().__init__(f"Missing required field '{field}' at {path}", path)


class UnknownDiscriminantError(DecodeError):
    def __init__(self, value: Any, path: str):
        self.value = value
        super().__init__(f"Unknown PropertyValue type {value!r} at {path}", path)


class InvalidValueError(DecodeError):
    """A field is present but has the wrong JSON type or an unknown enum literal."""


class CyclicModelError(ValueError):
    """A System contains itself, so it has no finite JSON form."""


@dataclass(frozen=True)
class DecodeResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the decoded value or raise the decode error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


# =============================================================================
# Encoding
# =============================================================================


def encode_property_value(value: PropertyValue) -> Dict[str, Any]:
    """Encode a property value, nested lists included."""
    root: List[Dict[str, Any]] = []
    stack: List[Tuple[PropertyValue, List[Dict[str, Any]]]] = [(value, root)]

    while stack:
        current, out = stack.pop()
        if isinstance(current, StringValue):
            out.append({"type": StringValue.kind, "value": current.value})
        elif isinstance(current, NumberValue):
            out.append({"type": NumberValue.kind, "value": current.value, "unit": current.unit})
        elif isinstance(current, BooleanValue):
            out.append({"type": BooleanValue.kind, "value": current.value})
        elif isinstance(current, ListValue):
            encoded: Dict[str, Any] = {"type": ListValue.kind, "values": []}
            out.append(encoded)
            for child in reversed(current.values):
                stack.append((child, encoded["values"]))
        else:
            raise TypeError(f"Unknown PropertyValue variant: {type(current).__name__}")

    return root[0]


def encode_constraint(constraint: Constraint) -> Dict[str, Any]:
    return {
        "id": constraint.id,
        "name": constraint.name,
        "description": constraint.description,
        "constraintType": constraint.constraint_type.value,
        "value": encode_property_value(constraint.value),
    }


def encode_requirement(requirement: Requirement) -> Dict[str, Any]:
    return {
        "id": requirement.id,
        "name": requirement.name,
        "description": requirement.description,
        "requirementType": requirement.requirement_type.value,
        "priority": requirement.priority.value,
        "verification": requirement.verification.value,
        "constraints": [encode_constraint(c) for c in requirement.constraints],
        "derivedFrom": requirement.derived_from,
    }


def encode_component(component: Component) -> Dict[str, Any]:
    return {
        "id": component.id,
        "name": component.name,
        "description": component.description,
        "properties": {k: encode_property_value(v) for k, v in component.properties.items()},
        "requirements": [encode_requirement(r) for r in component.requirements],
    }


def encode_interface(interface: Interface) -> Dict[str, Any]:
    return {
        "id": interface.id,
        "name": interface.name,
        "description": interface.description,
        "source": interface.source,
        "target": interface.target,
        "interfaceType": interface.interface_type.value,
        "requirements": [encode_requirement(r) for r in interface.requirements],
    }


def encode(system: System) -> Dict[str, Any]:
    """
    Encode a System tree into plain JSON-compatible dicts.

    Raises:
        CyclicModelError: if a subsystem is its own ancestor
    """
    root: List[Dict[str, Any]] = []
    stack: List[Tuple[System, List[Dict[str, Any]], FrozenSet[int]]] = [(system, root, frozenset())]

    while stack:
        current, out, ancestors = stack.pop()
        if id(current) in ancestors:
            raise CyclicModelError(f"System {current.id!r} contains itself")

        encoded: Dict[str, Any] = {
            "id": current.id,
            "name": current.name,
            "description": current.description,
            "subsystems": [],
            "components": [encode_component(c) for c in current.components],
            "interfaces": [encode_interface(i) for i in current.interfaces],
            "requirements": [encode_requirement(r) for r in current.requirements],
        }
        out.append(encoded)

        path = ancestors | {id(current)}
        for subsystem in reversed(current.subsystems):
            stack.append((subsystem, encoded["subsystems"], path))

    return root[0]


# =============================================================================
# Decoding
# =============================================================================


class _ListFrame:
    """Partially decoded ListValue."""

    __slots__ = ("path", "items", "index", "decoded")

    def __init__(self, path: str, items: List[Any]):
        self.path = path
        self.items = items
        self.index = 0
        self.decoded: List[PropertyValue] = []


class _SystemFrame:
    """Partially decoded System awaiting its subsystems."""

    __slots__ = ("path", "fields", "items", "index", "decoded")

    def __init__(self, path: str, fields: Dict[str, Any], items: List[Any]):
        self.path = path
        self.fields = fields
        self.items = items
        self.index = 0
        self.decoded: List[System] = []


def _type_name(raw: Any) -> str:
    if raw is None:
        return "null"
    if isinstance(raw, bool):
        return "boolean"
    if isinstance(raw, (int, float)):
        return "number"
    if isinstance(raw, str):
        return "string"
    if isinstance(raw, list):
        return "array"
    if isinstance(raw, dict):
        return "object"
    return type(raw).__name__


class _Decoder:
    """
    Strict JSON-to-model decoder.

    Every helper takes the JSONPath of the value it inspects and raises a
    DecodeError naming that path; `decode()` turns the exception into a
    DecodeResult.
    """

    # --- primitives ---------------------------------------------------------

    def object(self, raw: Any, path: str) -> Dict[str, Any]:
        if not isinstance(raw, dict):
            raise InvalidValueError(f"Expected object at {path}, got {_type_name(raw)}", path)
        return raw

    def array(self, raw: Any, path: str) -> List[Any]:
        if not isinstance(raw, list):
            raise InvalidValueError(f"Expected array at {path}, got {_type_name(raw)}", path)
        return raw

    def require(self, obj: Dict[str, Any], key: str, path: str) -> Any:
        if key not in obj:
            raise MissingFieldError(key, path)
        return obj[key]

    def string(self, raw: Any, path: str) -> str:
        if not isinstance(raw, str):
            raise InvalidValueError(f"Expected string at {path}, got {_type_name(raw)}", path)
        return raw

    def optional_string(self, obj: Dict[str, Any], key: str, path: str) -> Optional[str]:
        raw = obj.get(key)
        if raw is None:
            return None
        return self.string(raw, f"{path}.{key}")

    def required_string(self, obj: Dict[str, Any], key: str, path: str) -> str:
        return self.string(self.require(obj, key, path), f"{path}.{key}")

    def element_id(self, obj: Dict[str, Any], key: str, path: str) -> ElementId:
        return ElementId(self.required_string(obj, key, path))

    def enum(self, enum_cls: Type[E], obj: Dict[str, Any], key: str, path: str) -> E:
        literal = self.required_string(obj, key, path)
        try:
            return enum_cls(literal)
        except ValueError:
            raise InvalidValueError(
                f"Invalid {enum_cls.__name__} {literal!r} at {path}.{key}", f"{path}.{key}"
            ) from None

    def items(self, obj: Dict[str, Any], key: str, path: str) -> List[Any]:
        """A collection field; absent means empty."""
        raw = obj.get(key)
        if raw is None:
            return []
        return self.array(raw, f"{path}.{key}")

    # --- property values ----------------------------------------------------

    def _open_property(self, raw: Any, path: str) -> Union[PropertyValue, _ListFrame]:
        obj = self.object(raw, path)
        kind = self.require(obj, "type", path)
        if not isinstance(kind, str) or kind not in PROPERTY_VARIANTS:
            raise UnknownDiscriminantError(kind, f"{path}.type")

        if kind == StringValue.kind:
            return StringValue(self.string(self.require(obj, "value", path), f"{path}.value"))
        if kind == NumberValue.kind:
            value = self.require(obj, "value", path)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidValueError(
                    f"Expected number at {path}.value, got {_type_name(value)}", f"{path}.value"
                )
            return NumberValue(float(value), self.optional_string(obj, "unit", path))
        if kind == BooleanValue.kind:
            value = self.require(obj, "value", path)
            if not isinstance(value, bool):
                raise InvalidValueError(
                    f"Expected boolean at {path}.value, got {_type_name(value)}", f"{path}.value"
                )
            return BooleanValue(value)
        if kind == ListValue.kind:
            return _ListFrame(path, self.array(self.require(obj, "values", path), f"{path}.values"))
        raise UnknownDiscriminantError(kind, f"{path}.type")

    def property_value(self, raw: Any, path: str) -> PropertyValue:
        frames: List[_ListFrame] = []
        pending = self._open_property(raw, path)

        while True:
            finished: Optional[PropertyValue] = None
            if isinstance(pending, _ListFrame):
                frames.append(pending)
            else:
                finished = pending

            # Bubble finished values up until some list still has items to open.
            while True:
                if finished is not None:
                    if not frames:
                        return finished
                    frames[-1].decoded.append(finished)
                    finished = None
                top = frames[-1]
                if top.index < len(top.items):
                    pending = self._open_property(top.items[top.index], f"{top.path}.values[{top.index}]")
                    top.index += 1
                    break
                frames.pop()
                finished = ListValue(tuple(top.decoded))

    # --- entities -----------------------------------------------------------

    def constraint(self, raw: Any, path: str) -> Constraint:
        obj = self.object(raw, path)
        return Constraint(
            id=self.element_id(obj, "id", path),
            name=self.required_string(obj, "name", path),
            description=self.required_string(obj, "description", path),
            constraint_type=self.enum(ConstraintType, obj, "constraintType", path),
            value=self.property_value(self.require(obj, "value", path), f"{path}.value"),
        )

    def requirement(self, raw: Any, path: str) -> Requirement:
        obj = self.object(raw, path)
        derived = self.optional_string(obj, "derivedFrom", path)
        return Requirement(
            id=self.element_id(obj, "id", path),
            name=self.required_string(obj, "name", path),
            description=self.required_string(obj, "description", path),
            requirement_type=self.enum(RequirementType, obj, "requirementType", path),
            priority=self.enum(Priority, obj, "priority", path),
            verification=self.enum(VerificationMethod, obj, "verification", path),
            constraints=tuple(
                self.constraint(c, f"{path}.constraints[{i}]")
                for i, c in enumerate(self.items(obj, "constraints", path))
            ),
            derived_from=ElementId(derived) if derived is not None else None,
        )

    def requirements(self, obj: Dict[str, Any], path: str) -> Tuple[Requirement, ...]:
        return tuple(
            self.requirement(r, f"{path}.requirements[{i}]")
            for i, r in enumerate(self.items(obj, "requirements", path))
        )

    def component(self, raw: Any, path: str) -> Component:
        obj = self.object(raw, path)
        raw_props = obj.get("properties")
        props: Dict[str, PropertyValue] = {}
        if raw_props is not None:
            for key, value in self.object(raw_props, f"{path}.properties").items():
                props[key] = self.property_value(value, f"{path}.properties.{key}")
        return Component(
            id=self.element_id(obj, "id", path),
            name=self.required_string(obj, "name", path),
            description=self.optional_string(obj, "description", path),
            properties=props,
            requirements=self.requirements(obj, path),
        )

    def interface(self, raw: Any, path: str) -> Interface:
        obj = self.object(raw, path)
        return Interface(
            id=self.element_id(obj, "id", path),
            name=self.required_string(obj, "name", path),
            description=self.optional_string(obj, "description", path),
            source=self.element_id(obj, "source", path),
            target=self.element_id(obj, "target", path),
            interface_type=self.enum(InterfaceType, obj, "interfaceType", path),
            requirements=self.requirements(obj, path),
        )

    def _open_system(self, raw: Any, path: str) -> _SystemFrame:
        obj = self.object(raw, path)
        fields = {
            "id": self.element_id(obj, "id", path),
            "name": self.required_string(obj, "name", path),
            "description": self.optional_string(obj, "description", path),
            "components": tuple(
                self.component(c, f"{path}.components[{i}]")
                for i, c in enumerate(self.items(obj, "components", path))
            ),
            "interfaces": tuple(
                self.interface(x, f"{path}.interfaces[{i}]")
                for i, x in enumerate(self.items(obj, "interfaces", path))
            ),
            "requirements": self.requirements(obj, path),
        }
        return _SystemFrame(path, fields, self.items(obj, "subsystems", path))

    def system(self, raw: Any, path: str = "$") -> System:
        frames: List[_SystemFrame] = [self._open_system(raw, path)]

        while True:
            top = frames[-1]
            if top.index < len(top.items):
                child_path = f"{top.path}.subsystems[{top.index}]"
                child = top.items[top.index]
                top.index += 1
                frames.append(self._open_system(child, child_path))
                continue

            frames.pop()
            done = System(subsystems=tuple(top.decoded), **top.fields)
            if not frames:
                return done
            frames[-1].decoded.append(done)


def decode(document: Any) -> DecodeResult[System]:
    """Decode an already-parsed JSON document into a System."""
    try:
        return DecodeResult(value=_Decoder().system(document))
    except DecodeError as e:
        logger.debug("Decode failed: %s", e)
        return DecodeResult(error=e)


def decode_property_value(document: Any) -> DecodeResult[PropertyValue]:
    try:
        return DecodeResult(value=_Decoder().property_value(document, "$"))
    except DecodeError as e:
        logger.debug("Decode failed: %s", e)
        return DecodeResult(error=e)


# =============================================================================
# JSON text and files
# =============================================================================


def _reject_constant(name: str) -> Any:
    raise ParseError(f"Non-finite number {name} is not valid JSON")


def parse_json(text: Union[str, bytes]) -> Any:
    """Parse JSON text, raising ParseError on any syntax problem."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e
    except RecursionError as e:
        raise ParseError("Malformed JSON: nesting too deep") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Malformed JSON: {e}") from e


def to_json(system: System, indent: Optional[int] = 2) -> str:
    """Serialize a System to JSON text; `indent=None` gives the compact form."""
    separators = (",", ":") if indent is None else None
    return json.dumps(encode(system), indent=indent, separators=separators, ensure_ascii=False, allow_nan=False)


def from_json(text: Union[str, bytes]) -> DecodeResult[System]:
    try:
        document = parse_json(text)
    except ParseError as e:
        logger.debug("Parse failed: %s", e)
        return DecodeResult(error=e)
    return decode(document)


def dump(system: System, path: Union[str, Path], indent: Optional[int] = 2) -> Path:
    """Write a System as UTF-8 JSON."""
    path = Path(path)
    path.write_text(to_json(system, indent=indent), encoding="utf-8")
    return path


def load(path: Union[str, Path]) -> DecodeResult[System]:
    """Read and decode a JSON model file. I/O errors propagate."""
    return from_json(Path(path).read_bytes())


# =============================================================================
# Schema
# =============================================================================


def _enum_schema(values: Tuple[Enum, ...]) -> Dict[str, Any]:
    return {"type": "string", "enum": [v.value for v in values]}


def json_schema() -> Dict[str, Any]:
    """JSON schema (draft 2020-12) of the system document format."""
    nullable_string = {"type": ["string", "null"]}
    requirements = {"type": "array", "items": {"$ref": "#/definitions/Requirement"}}

    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": "SSDL System Model",
        "version": SCHEMA_VERSION,
        "description": "SSDL System Model JSON Schema",
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "name": {"type": "string"},
            "description": nullable_string,
            "subsystems": {"type": "array", "items": {"$ref": "#"}},
            "components": {"type": "array", "items": {"$ref": "#/definitions/Component"}},
            "interfaces": {"type": "array", "items": {"$ref": "#/definitions/Interface"}},
            "requirements": requirements,
        },
        "required": ["id", "name"],
        "definitions": {
            "PropertyValue": {
                "type": "object",
                "properties": {
                    "type": {"enum": list(PROPERTY_VARIANTS)},
                    "value": {"type": ["string", "number", "boolean"]},
                    "unit": nullable_string,
                    "values": {"type": "array", "items": {"$ref": "#/definitions/PropertyValue"}},
                },
                "required": ["type"],
            },
            "Constraint": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "constraintType": _enum_schema(CONSTRAINT_TYPES),
                    "value": {"$ref": "#/definitions/PropertyValue"},
                },
                "required": ["id", "name", "description", "constraintType", "value"],
            },
            "Requirement": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "requirementType": _enum_schema(REQUIREMENT_TYPES),
                    "priority": _enum_schema(PRIORITIES),
                    "verification": _enum_schema(VERIFICATION_METHODS),
                    "constraints": {"type": "array", "items": {"$ref": "#/definitions/Constraint"}},
                    "derivedFrom": nullable_string,
                },
                "required": ["id", "name", "description", "requirementType", "priority", "verification"],
            },
            "Component": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "description": nullable_string,
                    "properties": {
                        "type": "object",
                        "additionalProperties": {"$ref": "#/definitions/PropertyValue"},
                    },
                    "requirements": requirements,
                },
                "required": ["id", "name"],
            },
            "Interface": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "description": nullable_string,
                    "source": {"type": "string"},
                    "target": {"type": "string"},
                    "interfaceType": _enum_schema(INTERFACE_TYPES),
                    "requirements": requirements,
                },
                "required": ["id", "name", "source", "target", "interfaceType"],
            },
        },
    }

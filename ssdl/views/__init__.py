"""Text views of system models."""

from .plantuml import (
    DIAGRAMS,
    format_property_value,
    generate_bdd,
    generate_complete_document,
    generate_ibd,
    generate_requirements_diagram,
    sanitize_id,
)

__all__ = [
    "DIAGRAMS",
    "format_property_value",
    "generate_bdd",
    "generate_complete_document",
    "generate_ibd",
    "generate_requirements_diagram",
    "sanitize_id",
]

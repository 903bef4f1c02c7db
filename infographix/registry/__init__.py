"""
Section type registry for infographic reports.
"""

from infographix.registry.section_registry import (
    SectionTypeDefinition,
    SectionTypeRegistry,
    section_registry,
    register_section_type,
    get_section_type_names,
)
from infographix.registry.core_sections import CORE_SECTION_TYPES, register_core_section_types

__all__ = [
    "SectionTypeDefinition",
    "SectionTypeRegistry",
    "section_registry",
    "register_section_type",
    "get_section_type_names",
    "CORE_SECTION_TYPES",
    "register_core_section_types",
]

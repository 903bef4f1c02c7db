"""
Section type registry.

Process-wide table of infographic section types: type name -> field
contract + renderer handle. New visual types are added at startup with
``register_section_type`` without touching the parser or the providers,
which only ever see an open ``{"type": ..., ...}`` record.

Registration is idempotent (last write wins) and guarded by a lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionTypeDefinition:
    """Field contract and renderer handle for one section type."""
    type: str
    display_name: str
    # chart, comparison, sequence, content, ...
    category: str
    # Name of the front-end component that renders this type
    renderer: str
    required_fields: List[str] = field(default_factory=list)
    optional_fields: List[str] = field(default_factory=list)
    forbidden_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "display_name": self.display_name,
            "category": self.category,
            "renderer": self.renderer,
            "required_fields": list(self.required_fields),
            "optional_fields": list(self.optional_fields),
            "forbidden_fields": list(self.forbidden_fields),
        }


class SectionTypeRegistry:
    """Registry of section types, keyed by type name in registration order."""

    def __init__(self) -> None:
        self._types: Dict[str, SectionTypeDefinition] = {}
        self._lock = threading.Lock()

    def register(self, definition: SectionTypeDefinition) -> None:
        with self._lock:
            existing = self._types.get(definition.type)
            if existing is not None and existing != definition:
                logger.warning(f"Section type '{definition.type}' already registered, overwriting.")
            self._types[definition.type] = definition

    def unregister(self, type_name: str) -> None:
        with self._lock:
            self._types.pop(type_name, None)

    def get(self, type_name: str) -> Optional[SectionTypeDefinition]:
        return self._types.get(type_name)

    def has(self, type_name: str) -> bool:
        return type_name in self._types

    def get_all(self) -> List[SectionTypeDefinition]:
        with self._lock:
            return list(self._types.values())

    def get_type_names(self) -> List[str]:
        """All registered type names (used as the schema enum)."""
        with self._lock:
            return list(self._types.keys())

    def get_by_category(self, category: str) -> List[SectionTypeDefinition]:
        return [d for d in self.get_all() if d.category == category]

    def clear(self) -> None:
        with self._lock:
            self._types.clear()

    def __len__(self) -> int:
        return len(self._types)


# Global registry instance
section_registry = SectionTypeRegistry()


def register_section_type(definition: SectionTypeDefinition) -> None:
    """Convenience function to register a section type globally."""
    section_registry.register(definition)


def get_section_type_names() -> List[str]:
    return section_registry.get_type_names()

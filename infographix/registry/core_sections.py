"""Built-in section types."""

from __future__ import annotations

from typing import List, Optional

from infographix.registry.section_registry import (
    SectionTypeDefinition,
    SectionTypeRegistry,
    section_registry,
)

_STAT_FIELDS = ["statValue", "statLabel", "statTrend"]
_NESTED_FORBIDDEN = ["steps", "comparisonItems", *_STAT_FIELDS]

CORE_SECTION_TYPES: List[SectionTypeDefinition] = [
    SectionTypeDefinition(
        type="text",
        display_name="Text",
        category="content",
        renderer="TextSection",
        required_fields=[],
        optional_fields=["content"],
        forbidden_fields=["data", "steps", *_STAT_FIELDS, "comparisonItems"],
    ),
    SectionTypeDefinition(
        type="stat_highlight",
        display_name="Stat Highlight",
        category="chart",
        renderer="StatHighlight",
        required_fields=["statValue", "statLabel"],
        optional_fields=["content", "statTrend"],
        forbidden_fields=["data", "steps", "comparisonItems"],
    ),
    SectionTypeDefinition(
        type="bar_chart",
        display_name="Bar Chart",
        category="chart",
        renderer="ChartSection",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=["steps", "comparisonItems", *_STAT_FIELDS],
    ),
    SectionTypeDefinition(
        type="pie_chart",
        display_name="Pie Chart",
        category="chart",
        renderer="ChartSection",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=["steps", "comparisonItems", *_STAT_FIELDS],
    ),
    SectionTypeDefinition(
        type="process_flow",
        display_name="Process Flow",
        category="sequence",
        renderer="ProcessFlow",
        required_fields=["steps"],
        optional_fields=[],
        forbidden_fields=["data", "comparisonItems", *_STAT_FIELDS],
    ),
    SectionTypeDefinition(
        type="comparison",
        display_name="Comparison",
        category="comparison",
        renderer="ComparisonSection",
        required_fields=["comparisonItems"],
        optional_fields=["content"],
        forbidden_fields=["data", "steps", *_STAT_FIELDS],
    ),
    # Types below carry a nested `data` object (`items`, or `root` / `center`)
    SectionTypeDefinition(
        type="timeline",
        display_name="Timeline",
        category="sequence",
        renderer="SequenceTimeline",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=_NESTED_FORBIDDEN,
    ),
    SectionTypeDefinition(
        type="swot",
        display_name="SWOT Analysis",
        category="comparison",
        renderer="SWOTAnalysis",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=_NESTED_FORBIDDEN,
    ),
    SectionTypeDefinition(
        type="list_grid",
        display_name="List Grid",
        category="list",
        renderer="ListGrid",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=_NESTED_FORBIDDEN,
    ),
    SectionTypeDefinition(
        type="hierarchy_tree",
        display_name="Hierarchy Tree",
        category="hierarchy",
        renderer="HierarchyTree",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=_NESTED_FORBIDDEN,
    ),
    SectionTypeDefinition(
        type="quadrant",
        display_name="Quadrant Matrix",
        category="quadrant",
        renderer="QuadrantMatrix",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=_NESTED_FORBIDDEN,
    ),
    SectionTypeDefinition(
        type="relation_circle",
        display_name="Relation Circle",
        category="relation",
        renderer="RelationCircle",
        required_fields=["data"],
        optional_fields=["content"],
        forbidden_fields=_NESTED_FORBIDDEN,
    ),
]


def register_core_section_types(registry: Optional[SectionTypeRegistry] = None) -> None:
    """Register all built-in types. Safe to call more than once."""
    target = registry if registry is not None else section_registry
    for definition in CORE_SECTION_TYPES:
        target.register(definition)

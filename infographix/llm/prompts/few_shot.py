"""
Few-shot gallery of worked section examples.

Examples are grouped by visual category. Each prompt includes a random
subset (one per category by default) so the model sees variety without
the whole gallery inflating every request. Pass ``seed`` for a
reproducible selection.

Every example names the section ``type`` it demonstrates; when a registry
is supplied, examples whose type is not registered are left out so the
prompt never advertises a type the renderer cannot draw.
"""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from infographix.registry.section_registry import SectionTypeRegistry


@dataclass(frozen=True)
class FewShotExample:
    example_id: str
    # Registered section type this example demonstrates
    section_type: str
    description: str
    section: Dict[str, Any]

    def to_dict(self) -> dict:
        return {
            "type": self.section_type,
            "example_id": self.example_id,
            "description": self.description,
            "data": self.section,
        }


@dataclass(frozen=True)
class FewShotCategory:
    key: str
    label: str
    examples: List[FewShotExample] = field(default_factory=list)


@dataclass
class ComposedFewShot:
    data: Dict[str, Any]
    total_examples: int
    categories_included: List[str]


# =============================================================================
# Gallery
# =============================================================================

SEQUENCE_EXAMPLES = FewShotCategory(
    key="sequence",
    label="Sequence & Process",
    examples=[
        FewShotExample(
            example_id="sequence-process-flow",
            section_type="process_flow",
            description="Ordered steps of a workflow",
            section={
                "type": "process_flow",
                "title": "Product Development Flow",
                "steps": [
                    {"step": 1, "title": "Research", "description": "User interviews and pain-point analysis"},
                    {"step": 2, "title": "Prototype", "description": "Interaction design and visual sign-off"},
                    {"step": 3, "title": "Build & Test", "description": "Implementation and QA acceptance"},
                    {"step": 4, "title": "Launch", "description": "Staged rollout to all users"},
                ],
            },
        ),
        FewShotExample(
            example_id="sequence-timeline-simple",
            section_type="timeline",
            description="Milestones on a time axis",
            section={
                "type": "timeline",
                "title": "Company Milestones",
                "data": {
                    "items": [
                        {"label": "2020", "desc": "Founding team formed"},
                        {"label": "2022", "desc": "Series A funding closed"},
                        {"label": "2024", "desc": "Market share leader"},
                    ]
                },
            },
        ),
        FewShotExample(
            example_id="sequence-roadmap-vertical",
            section_type="timeline",
            description="Quarterly roadmap",
            section={
                "type": "timeline",
                "title": "Technology Roadmap",
                "data": {
                    "items": [
                        {"label": "Q1 Foundations", "desc": "Move to a service architecture"},
                        {"label": "Q2 Core features", "desc": "Ship payments and orders"},
                        {"label": "Q3 Performance", "desc": "Add caching and sharding"},
                    ]
                },
            },
        ),
    ],
)

COMPARISON_EXAMPLES = FewShotCategory(
    key="comparison",
    label="Comparison",
    examples=[
        FewShotExample(
            example_id="compare-side-by-side",
            section_type="comparison",
            description="Two options compared row by row",
            section={
                "type": "comparison",
                "title": "Electric vs Petrol Cars",
                "comparisonItems": [
                    {"label": "Running cost", "left": "About $0.04 per mile", "right": "About $0.12 per mile"},
                    {"label": "Refuel time", "left": "30 min fast charge", "right": "5 min fill-up"},
                    {"label": "Maintenance", "left": "Few moving parts", "right": "Oil and belt changes"},
                    {"label": "Emissions", "left": "None at the tailpipe", "right": "About 4.6 t CO2 per year"},
                ],
            },
        ),
        FewShotExample(
            example_id="compare-pros-cons",
            section_type="comparison",
            description="Pros and cons of a decision",
            section={
                "type": "comparison",
                "title": "Remote Work: Pros and Cons",
                "comparisonItems": [
                    {"label": "Commute", "left": "No daily travel", "right": "Less separation of home and work"},
                    {"label": "Focus", "left": "Fewer interruptions", "right": "More distractions at home"},
                    {"label": "Collaboration", "left": "Async by default", "right": "Harder spontaneous discussion"},
                    {"label": "Hiring", "left": "Global talent pool", "right": "Time-zone coordination"},
                ],
            },
        ),
        FewShotExample(
            example_id="compare-swot",
            section_type="swot",
            description="Strengths, weaknesses, opportunities, threats",
            section={
                "type": "swot",
                "title": "SWOT Analysis",
                "data": {
                    "items": [
                        {"label": "Strengths", "children": [{"label": "Strong brand"}, {"label": "Loyal users"}]},
                        {"label": "Weaknesses", "children": [{"label": "High costs"}]},
                        {"label": "Opportunities", "children": [{"label": "New markets"}]},
                        {"label": "Threats", "children": [{"label": "Aggressive competitors"}]},
                    ]
                },
            },
        ),
    ],
)

LIST_GRID_EXAMPLES = FewShotCategory(
    key="list_grid",
    label="List & Grid",
    examples=[
        FewShotExample(
            example_id="list-grid-badge-card",
            section_type="list_grid",
            description="Feature cards in a grid",
            section={
                "type": "list_grid",
                "title": "Core Capabilities",
                "data": {
                    "items": [
                        {"label": "Fast", "desc": "Sub-second responses", "icon": "mdi/flash"},
                        {"label": "Secure", "desc": "End-to-end encryption", "icon": "mdi/shield-check"},
                        {"label": "Scalable", "desc": "Grows with demand", "icon": "mdi/chart-line"},
                        {"label": "Open", "desc": "Documented public API", "icon": "mdi/api"},
                    ]
                },
            },
        ),
        FewShotExample(
            example_id="list-row-horizontal-icon-arrow",
            section_type="list_grid",
            description="Horizontal list of key points",
            section={
                "type": "list_grid",
                "title": "Why Customers Switch",
                "data": {
                    "items": [
                        {"label": "Price", "desc": "Lower total cost"},
                        {"label": "Support", "desc": "Round-the-clock help"},
                        {"label": "Integrations", "desc": "Works with existing tools"},
                    ]
                },
            },
        ),
    ],
)

CHART_EXAMPLES = FewShotCategory(
    key="chart",
    label="Charts & Data",
    examples=[
        FewShotExample(
            example_id="chart-bar-plain-text",
            section_type="bar_chart",
            description="Quantities compared across categories",
            section={
                "type": "bar_chart",
                "title": "Smartphone Shipments by Vendor (millions, 2023)",
                "content": "Shipments remain concentrated among a handful of vendors.",
                "data": [
                    {"name": "Apple", "value": 234.6},
                    {"name": "Samsung", "value": 226.6},
                    {"name": "Xiaomi", "value": 145.9},
                    {"name": "OPPO", "value": 103.1},
                    {"name": "Transsion", "value": 94.9},
                ],
            },
        ),
        FewShotExample(
            example_id="chart-pie-share",
            section_type="pie_chart",
            description="Parts of a whole",
            section={
                "type": "pie_chart",
                "title": "Global Electricity Mix (%)",
                "data": [
                    {"name": "Coal", "value": 35},
                    {"name": "Gas", "value": 23},
                    {"name": "Hydro", "value": 15},
                    {"name": "Nuclear", "value": 9},
                    {"name": "Wind & Solar", "value": 13},
                    {"name": "Other", "value": 5},
                ],
            },
        ),
        FewShotExample(
            example_id="chart-stat-highlight",
            section_type="stat_highlight",
            description="A single headline figure",
            section={
                "type": "stat_highlight",
                "title": "Active Users",
                "statValue": "12,847",
                "statLabel": "Monthly active users",
                "statTrend": "up",
                "content": "Up 18% quarter over quarter.",
            },
        ),
    ],
)

HIERARCHY_EXAMPLES = FewShotCategory(
    key="hierarchy",
    label="Hierarchy",
    examples=[
        FewShotExample(
            example_id="hierarchy-tree-capsule-item",
            section_type="hierarchy_tree",
            description="Tree of parent and child concepts",
            section={
                "type": "hierarchy_tree",
                "title": "Web Technology Stack",
                "data": {
                    "root": {
                        "label": "Web App",
                        "children": [
                            {"label": "Frontend", "children": [{"label": "React"}, {"label": "CSS"}]},
                            {"label": "Backend", "children": [{"label": "API"}, {"label": "Database"}]},
                        ],
                    }
                },
            },
        ),
    ],
)

QUADRANT_EXAMPLES = FewShotCategory(
    key="quadrant",
    label="Quadrant",
    examples=[
        FewShotExample(
            example_id="quadrant-quarter-simple-card",
            section_type="quadrant",
            description="Two-axis priority matrix",
            section={
                "type": "quadrant",
                "title": "Eisenhower Matrix",
                "data": {
                    "items": [
                        {"label": "Urgent & Important", "desc": "Do now"},
                        {"label": "Important, Not Urgent", "desc": "Schedule"},
                        {"label": "Urgent, Not Important", "desc": "Delegate"},
                        {"label": "Neither", "desc": "Drop"},
                    ]
                },
            },
        ),
    ],
)

RELATION_EXAMPLES = FewShotCategory(
    key="relation",
    label="Relation",
    examples=[
        FewShotExample(
            example_id="relation-circle-icon-badge",
            section_type="relation_circle",
            description="Elements arranged around a central idea",
            section={
                "type": "relation_circle",
                "title": "Digital Marketing Ecosystem",
                "data": {
                    "center": {"label": "Brand"},
                    "items": [
                        {"label": "Search", "icon": "mdi/magnify"},
                        {"label": "Social", "icon": "mdi/account-group"},
                        {"label": "Email", "icon": "mdi/email"},
                        {"label": "Content", "icon": "mdi/file-document"},
                    ],
                },
            },
        ),
    ],
)

BASIC_EXAMPLES = FewShotCategory(
    key="basic",
    label="Basic",
    examples=[
        FewShotExample(
            example_id="text",
            section_type="text",
            description="Narrative paragraph",
            section={
                "type": "text",
                "title": "Background",
                "content": "A short narrative paragraph that sets context, lists dated events or explains a concept in prose.",
            },
        ),
        FewShotExample(
            example_id="stat_highlight",
            section_type="stat_highlight",
            description="Key metric with trend",
            section={
                "type": "stat_highlight",
                "title": "Key Metric",
                "statValue": "42%",
                "statLabel": "Share of revenue from subscriptions",
                "statTrend": "neutral",
            },
        ),
        FewShotExample(
            example_id="process_flow",
            section_type="process_flow",
            description="Short numbered process",
            section={
                "type": "process_flow",
                "title": "How a Bill Becomes Law",
                "steps": [
                    {"step": 1, "title": "Drafting", "description": "A member introduces the bill"},
                    {"step": 2, "title": "Committee", "description": "Hearings and amendments"},
                    {"step": 3, "title": "Floor Vote", "description": "Both chambers vote"},
                    {"step": 4, "title": "Signature", "description": "Signed or vetoed"},
                ],
            },
        ),
    ],
)

GALLERY: List[FewShotCategory] = [
    SEQUENCE_EXAMPLES,
    COMPARISON_EXAMPLES,
    LIST_GRID_EXAMPLES,
    CHART_EXAMPLES,
    HIERARCHY_EXAMPLES,
    QUADRANT_EXAMPLES,
    RELATION_EXAMPLES,
    BASIC_EXAMPLES,
]

CATEGORY_KEYS: List[str] = [c.key for c in GALLERY]


# =============================================================================
# Composition
# =============================================================================

def compose_few_shot(
    examples_per_category: int = 1,
    categories: Optional[Sequence[str]] = None,
    seed: Optional[int] = None,
    registry: Optional[SectionTypeRegistry] = None,
) -> ComposedFewShot:
    """
    Pick up to ``examples_per_category`` random examples from each category.

    Args:
        examples_per_category: How many examples to sample per category
        categories: Category keys to include (default: all). Unknown keys are ignored.
        seed: Makes the selection reproducible
        registry: When given, only examples of registered types are eligible;
            categories left without any eligible example are skipped.
    """
    rng = random.Random(seed)
    count = max(1, examples_per_category)

    selected_categories = GALLERY
    if categories:
        by_key = {c.key: c for c in GALLERY}
        selected_categories = [by_key[k] for k in categories if k in by_key]

    composed: List[dict] = []
    included: List[str] = []
    total = 0

    for category in selected_categories:
        eligible = category.examples
        if registry is not None:
            eligible = [e for e in eligible if registry.has(e.section_type)]
        if not eligible:
            continue

        picks = rng.sample(eligible, min(count, len(eligible)))
        composed.append({
            "category": category.label,
            "sub_categories": [e.to_dict() for e in picks],
        })
        included.append(category.key)
        total += len(picks)

    return ComposedFewShot(
        data={"infographic_gallery_few_shot": composed},
        total_examples=total,
        categories_included=included,
    )


def format_few_shot(composed: ComposedFewShot) -> str:
    return json.dumps(composed.data, indent=2, ensure_ascii=False)


def get_few_shot_prompt(**kwargs: Any) -> str:
    """Compose and format in one step. Accepts the ``compose_few_shot`` arguments."""
    return format_few_shot(compose_few_shot(**kwargs))

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from google.genai import types

from infographix.core.config import settings
from infographix.llm.prompts.few_shot import compose_few_shot, format_few_shot
from infographix.llm.prompts.languages import Language, language_directive
from infographix.registry.core_sections import register_core_section_types
from infographix.registry.section_registry import (
    SectionTypeDefinition,
    SectionTypeRegistry,
    section_registry,
)

logger = logging.getLogger(__name__)

# Types that keep the original flat field layout instead of a nested ``data`` object
LEGACY_SHAPES: Dict[str, str] = {
    "bar_chart": "`data`: array of { name: string, value: number }",
    "pie_chart": "`data`: array of { name: string, value: number }",
    "process_flow": "`steps`: array of { step: number, title: string, description: string }",
    "comparison": "`comparisonItems`: array of { label: string, left: string, right: string }",
    "stat_highlight": "`statValue`, `statLabel` (strings) and optional `statTrend` (up | down | neutral)",
    "text": "`content`: narrative string",
}

NESTED_SHAPE = (
    "`data`: object with an `items` array of { label, desc?, value?, icon?, children? } "
    "(hierarchies may use `root` with nested `children` instead)"
)

# Minimum amount of data per section, by category
DATA_MINIMUMS: Dict[str, str] = {
    "chart": "at least **5-8 data points**",
    "sequence": "at least **4-6 steps**",
    "comparison": "at least **4-6 comparison items**",
    "quadrant": "exactly **4 items**, one per quadrant",
}
DEFAULT_DATA_MINIMUM = "at least **3 items**"

STAT_TRENDS = ["up", "down", "neutral"]

ROLE_AND_GOAL = """You are an expert Information Designer and Data Journalist.

**Your Goal:**
Transform the user's input into a visually compelling "Infographic Report" returned as a single JSON object:
{ "title": string, "summary": string, "sections": [ { "type": string, "title": string, ... } ] }"""

CHART_GUIDANCE = """**CHART TYPE SELECTION GUIDELINES (CRITICAL):**
*   **DO NOT** use bar_chart/pie_chart for years or dates, era or dynasty names, or any non-quantitative data.
*   **USE** bar_chart/pie_chart ONLY for quantitative metrics (sales, population, percentages, counts).
*   **USE** text for lists of dated events and timeline narratives.
*   **USE** process_flow for sequential events and historical developments."""


def _ensure_registry(registry: Optional[SectionTypeRegistry]) -> SectionTypeRegistry:
    target = registry if registry is not None else section_registry
    if len(target) == 0:
        logger.info("[PROMPT] Section registry empty, registering core types")
        register_core_section_types(target)
    return target


class PromptBuilder:
    """
    Builds the system and user instructions for report generation.

    The type catalogue, field rules and few-shot examples are all derived
    from the section registry, so anything registered before a request is
    immediately advertised to the model.
    """

    def __init__(self, registry: Optional[SectionTypeRegistry] = None):
        self._registry = registry

    @property
    def registry(self) -> SectionTypeRegistry:
        return _ensure_registry(self._registry)

    def _rules(self, section_count: int, definitions: List[SectionTypeDefinition]) -> str:
        minimums = []
        for category in sorted({d.category for d in definitions}):
            names = ", ".join(d.type for d in definitions if d.category == category)
            minimums.append(f"    *   {names}: {DATA_MINIMUMS.get(category, DEFAULT_DATA_MINIMUM)}.")

        return "\n".join([
            "**STRICT GENERATION RULES:**",
            f"1.  **Section Count:** Generate exactly **{section_count}** sections.",
            "2.  **No Loops:** Do not repeat similar sections. Cover different aspects "
            "(History, Economics, Technology, Future).",
            "3.  **Data Quantity Requirements:**",
            *minimums,
            "4.  **Data Integrity:**",
            "    *   **NEVER** output empty arrays (e.g., `\"data\": []`).",
            "    *   **NEVER** output empty objects (e.g., `\"steps\": [{}]`).",
            "    *   If you lack exact numbers, make reasonable, educated estimates.",
        ])

    def _catalogue(self, definitions: List[SectionTypeDefinition]) -> str:
        lines = [
            "**VALID SECTION TYPES:** The `type` field MUST be one of: "
            + ", ".join(f"'{d.type}'" for d in definitions) + ".",
            "",
            "**SCHEMA MAPPING (CRITICAL):**",
        ]
        for d in definitions:
            lines.append(f"*   If `type` is **'{d.type}'** ({d.display_name}, {d.category}):")
            lines.append(f"    *   SHAPE: {LEGACY_SHAPES.get(d.type, NESTED_SHAPE)}.")
            if d.required_fields:
                lines.append(f"    *   REQUIRED: {', '.join(f'`{f}`' for f in d.required_fields)}.")
            if d.forbidden_fields:
                lines.append(f"    *   FORBIDDEN: {', '.join(f'`{f}`' for f in d.forbidden_fields)}.")
        return "\n".join(lines)

    def build_system_instruction(
        self,
        section_count: Optional[int] = None,
        language: Union[str, Language, None] = None,
        include_few_shot: bool = True,
        seed: Optional[int] = None,
    ) -> str:
        """
        Assemble the full system instruction.

        Args:
            section_count: Exact number of sections to request
            language: Output language code (falls back to English)
            include_few_shot: Append a sampled example gallery
            seed: Makes the few-shot sample reproducible
        """
        registry = self.registry
        definitions = registry.get_all()
        count = section_count or settings.GENERATION_SECTION_COUNT

        parts = [
            ROLE_AND_GOAL,
            self._rules(count, definitions),
            CHART_GUIDANCE,
            self._catalogue(definitions),
            language_directive(language or settings.GENERATION_LANGUAGE),
            "**Process:**\n1.  Analyze the topic.\n2.  Select multiple distinct angles.\n"
            "3.  Output ONLY the JSON object, with no markdown fences or commentary.",
        ]

        if include_few_shot:
            composed = compose_few_shot(seed=seed, registry=registry)
            if composed.total_examples:
                parts.append(
                    "**EXAMPLES (one per category, showing valid section shapes):**\n"
                    + format_few_shot(composed)
                )

        instruction = "\n\n".join(parts)
        logger.debug(
            f"[PROMPT] System instruction: {len(instruction)} chars, "
            f"{len(definitions)} types, few_shot={include_few_shot}"
        )
        return instruction

    def build_user_instruction(self, topic: str) -> str:
        return f'Create an infographic report for: "{topic}"'


def build_system_instruction(
    section_count: Optional[int] = None,
    language: Union[str, Language, None] = None,
    include_few_shot: bool = True,
    seed: Optional[int] = None,
    registry: Optional[SectionTypeRegistry] = None,
) -> str:
    return PromptBuilder(registry).build_system_instruction(
        section_count=section_count,
        language=language,
        include_few_shot=include_few_shot,
        seed=seed,
    )


def build_user_instruction(topic: str) -> str:
    return PromptBuilder().build_user_instruction(topic)


# =============================================================================
# Response schemas
# =============================================================================

def build_report_json_schema(registry: Optional[SectionTypeRegistry] = None) -> Dict[str, Any]:
    """JSON Schema of a report; the section ``type`` enum is the registry's type names."""
    type_names = _ensure_registry(registry).get_type_names()
    return {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "A catchy, journalistic headline for the infographic report."},
            "summary": {"type": "string", "description": "A concise executive summary (approx 80-100 words)."},
            "sections": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string", "enum": type_names, "description": "The visual component type."},
                        "title": {"type": "string", "description": "Section header."},
                        "content": {"type": "string", "description": "Contextual narrative text."},
                        "statValue": {"type": "string", "description": "ONLY for 'stat_highlight'. The focal number."},
                        "statLabel": {"type": "string", "description": "ONLY for 'stat_highlight'. Label for the statistic."},
                        "statTrend": {"type": "string", "enum": STAT_TRENDS},
                        "data": {
                            "description": "Array of {name, value} for bar/pie charts, otherwise an object with `items`.",
                        },
                        "steps": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "step": {"type": "number"},
                                    "title": {"type": "string"},
                                    "description": {"type": "string"},
                                },
                            },
                        },
                        "comparisonItems": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "label": {"type": "string"},
                                    "left": {"type": "string"},
                                    "right": {"type": "string"},
                                },
                                "required": ["label", "left", "right"],
                            },
                        },
                    },
                    "required": ["type", "title"],
                },
            },
        },
        "required": ["title", "summary", "sections"],
    }


def build_gemini_schema(registry: Optional[SectionTypeRegistry] = None) -> types.Schema:
    """
    Native Gemini response schema.

    ``data`` is either the chart array or the nested ``items`` / ``root`` /
    ``center`` object; nesting below two child levels is left to the prompt.
    """
    type_names = _ensure_registry(registry).get_type_names()
    string = types.Schema(type=types.Type.STRING)
    leaf = types.Schema(type=types.Type.OBJECT, properties={"label": string, "desc": string}, required=["label"])
    node = types.Schema(
        type=types.Type.OBJECT,
        properties={"label": string, "children": types.Schema(type=types.Type.ARRAY, items=leaf)},
        required=["label"],
    )
    item = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "label": string,
            "desc": string,
            "value": types.Schema(type=types.Type.NUMBER),
            "icon": string,
            "children": types.Schema(type=types.Type.ARRAY, items=node),
        },
        required=["label"],
    )
    chart_data = types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(
            type=types.Type.OBJECT,
            properties={"name": string, "value": types.Schema(type=types.Type.NUMBER)},
            required=["name", "value"],
        ),
    )
    nested_data = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "items": types.Schema(type=types.Type.ARRAY, items=item),
            "root": types.Schema(
                type=types.Type.OBJECT,
                properties={"label": string, "children": types.Schema(type=types.Type.ARRAY, items=node)},
                required=["label"],
            ),
            "center": types.Schema(type=types.Type.OBJECT, properties={"label": string}, required=["label"]),
        },
    )

    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "title": types.Schema(type=types.Type.STRING, description="A catchy, journalistic headline for the infographic report."),
            "summary": types.Schema(type=types.Type.STRING, description="A concise executive summary (approx 80-100 words)."),
            "sections": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(
                    type=types.Type.OBJECT,
                    properties={
                        "type": types.Schema(type=types.Type.STRING, enum=type_names, description="The visual component type."),
                        "title": types.Schema(type=types.Type.STRING, description="Section header."),
                        "content": types.Schema(type=types.Type.STRING, description="Contextual narrative text."),
                        "statValue": types.Schema(type=types.Type.STRING, description="ONLY for 'stat_highlight'. The focal number."),
                        "statLabel": types.Schema(type=types.Type.STRING, description="ONLY for 'stat_highlight'. Label for the statistic."),
                        "statTrend": types.Schema(type=types.Type.STRING, enum=STAT_TRENDS),
                        "data": types.Schema(any_of=[chart_data, nested_data]),
                        "steps": types.Schema(
                            type=types.Type.ARRAY,
                            items=types.Schema(
                                type=types.Type.OBJECT,
                                properties={
                                    "step": types.Schema(type=types.Type.NUMBER),
                                    "title": string,
                                    "description": string,
                                },
                            ),
                        ),
                        "comparisonItems": types.Schema(
                            type=types.Type.ARRAY,
                            items=types.Schema(
                                type=types.Type.OBJECT,
                                properties={"label": string, "left": string, "right": string},
                                required=["label", "left", "right"],
                            ),
                        ),
                    },
                    required=["type", "title"],
                ),
            ),
        },
        required=["title", "summary", "sections"],
    )

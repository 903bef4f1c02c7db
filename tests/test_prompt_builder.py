"""
Tests for the prompt builder, few-shot gallery and languages.
"""

import json

import pytest

from google.genai import types

from infographix.llm.prompt_builder import (
    PromptBuilder,
    build_gemini_schema,
    build_report_json_schema,
    build_system_instruction,
    build_user_instruction,
)
from infographix.llm.prompts.few_shot import (
    CATEGORY_KEYS,
    GALLERY,
    compose_few_shot,
    format_few_shot,
    get_few_shot_prompt,
)
from infographix.llm.prompts.languages import (
    Language,
    language_directive,
    resolve_language,
    supported_languages,
)
from infographix.registry.core_sections import CORE_SECTION_TYPES
from infographix.registry.section_registry import SectionTypeDefinition, SectionTypeRegistry


@pytest.fixture
def funnel_type():
    return SectionTypeDefinition(
        type="funnel",
        display_name="Funnel",
        category="sequence",
        renderer="FunnelSection",
        required_fields=["data"],
        forbidden_fields=["steps"],
    )


# ============== System Instruction ==============

class TestSystemInstruction:
    """Tests for build_system_instruction."""

    def test_exact_section_count(self, core_registry):
        prompt = build_system_instruction(section_count=7, registry=core_registry, include_few_shot=False)
        assert "exactly **7** sections" in prompt

    def test_catalogue_matches_registry(self, core_registry):
        prompt = build_system_instruction(registry=core_registry, include_few_shot=False)

        for name in core_registry.get_type_names():
            assert f"'{name}'" in prompt
        assert "REQUIRED: `comparisonItems`" in prompt
        assert "FORBIDDEN: `data`, `steps`" in prompt

    def test_newly_registered_type_is_advertised(self, core_registry, funnel_type):
        core_registry.register(funnel_type)
        prompt = build_system_instruction(registry=core_registry, include_few_shot=False)

        assert "'funnel'" in prompt
        assert "`data`: object with an `items` array" in prompt

    def test_unregistered_type_not_advertised(self, core_registry):
        core_registry.unregister("pie_chart")
        prompt = build_system_instruction(registry=core_registry, include_few_shot=True, seed=3)
        assert "'pie_chart'" not in prompt
        assert '"type": "pie_chart"' not in prompt

    def test_empty_registry_gets_core_types(self):
        registry = SectionTypeRegistry()
        prompt = build_system_instruction(registry=registry, include_few_shot=False)

        assert len(registry) == len(CORE_SECTION_TYPES)
        assert "'process_flow'" in prompt

    def test_data_rules(self, core_registry):
        prompt = build_system_instruction(registry=core_registry, include_few_shot=False)
        assert "at least **5-8 data points**" in prompt
        assert "**NEVER** output empty arrays" in prompt

    def test_language_directive(self, core_registry):
        prompt = build_system_instruction(language="ja", registry=core_registry, include_few_shot=False)
        assert "Japanese (日本語)" in prompt

    def test_few_shot_toggle(self, core_registry):
        with_examples = build_system_instruction(registry=core_registry, include_few_shot=True, seed=1)
        without = build_system_instruction(registry=core_registry, include_few_shot=False)

        assert "infographic_gallery_few_shot" in with_examples
        assert "infographic_gallery_few_shot" not in without

    def test_seed_is_deterministic(self, core_registry):
        first = build_system_instruction(registry=core_registry, seed=42)
        second = build_system_instruction(registry=core_registry, seed=42)
        assert first == second

    def test_user_instruction(self):
        assert build_user_instruction("Mars") == 'Create an infographic report for: "Mars"'
        assert PromptBuilder().build_user_instruction("Mars") == 'Create an infographic report for: "Mars"'


# ============== Few-shot ==============

class TestFewShot:
    """Tests for compose_few_shot."""

    def test_one_example_per_category(self):
        composed = compose_few_shot(seed=0)

        assert composed.categories_included == CATEGORY_KEYS
        assert composed.total_examples == len(CATEGORY_KEYS)
        for category in composed.data["infographic_gallery_few_shot"]:
            assert len(category["sub_categories"]) == 1

    def test_examples_per_category_capped_by_gallery(self):
        composed = compose_few_shot(examples_per_category=50, categories=["hierarchy"], seed=0)
        assert composed.total_examples == 1

    def test_category_filter(self):
        composed = compose_few_shot(categories=["chart", "comparison", "unknown"], seed=0)
        assert composed.categories_included == ["chart", "comparison"]

    def test_registry_filter(self, core_registry):
        core_registry.unregister("hierarchy_tree")
        composed = compose_few_shot(examples_per_category=10, registry=core_registry, seed=0)

        types_used = {
            example["type"]
            for category in composed.data["infographic_gallery_few_shot"]
            for example in category["sub_categories"]
        }
        assert types_used <= set(core_registry.get_type_names())
        assert "hierarchy" not in composed.categories_included

    def test_every_example_reachable_with_core_types(self, core_registry):
        """Each gallery example can be sampled once the built-in types are registered."""
        composed = compose_few_shot(examples_per_category=10, registry=core_registry, seed=0)

        sampled = {
            example["example_id"]
            for category in composed.data["infographic_gallery_few_shot"]
            for example in category["sub_categories"]
        }
        assert sampled == {e.example_id for c in GALLERY for e in c.examples}
        assert composed.categories_included == CATEGORY_KEYS

    def test_core_prompt_covers_every_category(self, core_registry):
        composed = compose_few_shot(seed=5, registry=core_registry)
        assert composed.total_examples == len(CATEGORY_KEYS)

    def test_seed_reproducible(self):
        assert get_few_shot_prompt(seed=7) == get_few_shot_prompt(seed=7)

    def test_examples_are_valid_sections(self):
        composed = compose_few_shot(examples_per_category=10)
        for category in composed.data["infographic_gallery_few_shot"]:
            for example in category["sub_categories"]:
                assert example["data"]["type"] == example["type"]
                assert example["data"]["title"]

    def test_format_is_json(self):
        composed = compose_few_shot(seed=1)
        assert json.loads(format_few_shot(composed)) == composed.data


# ============== Schemas ==============

class TestSchemas:

    def test_json_schema_enum_is_registry(self, core_registry, funnel_type):
        core_registry.register(funnel_type)
        schema = build_report_json_schema(core_registry)

        enum = schema["properties"]["sections"]["items"]["properties"]["type"]["enum"]
        assert enum == core_registry.get_type_names()
        assert schema["required"] == ["title", "summary", "sections"]

    def test_gemini_schema_enum_is_registry(self, core_registry):
        schema = build_gemini_schema(core_registry)

        assert isinstance(schema, types.Schema)
        assert schema.type == types.Type.OBJECT
        section = schema.properties["sections"].items
        assert section.properties["type"].enum == core_registry.get_type_names()
        assert section.required == ["type", "title"]

    def test_gemini_data_accepts_chart_and_nested_forms(self, core_registry):
        section = build_gemini_schema(core_registry).properties["sections"].items
        chart_form, nested_form = section.properties["data"].any_of

        assert chart_form.type == types.Type.ARRAY
        assert chart_form.items.required == ["name", "value"]
        assert nested_form.type == types.Type.OBJECT
        assert set(nested_form.properties) == {"items", "root", "center"}


# ============== Languages ==============

class TestLanguages:

    def test_eight_languages(self):
        assert [lang["code"] for lang in supported_languages()] == ["en", "zh", "ja", "ko", "es", "fr", "de", "pt"]

    @pytest.mark.parametrize("value,expected", [
        ("en", Language.EN),
        ("ZH", Language.ZH),
        ("pt-BR", Language.PT),
        (Language.DE, Language.DE),
        ("xx", Language.EN),
        (None, Language.EN),
        ("", Language.EN),
    ])
    def test_resolve_language(self, value, expected):
        assert resolve_language(value) == expected

    def test_directive_keeps_keys_in_english(self):
        directive = language_directive("es")
        assert "Spanish (Español)" in directive
        assert "JSON keys" in directive

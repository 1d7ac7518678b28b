"""Tests for prompt template management."""

import json

from component_forge.utils.prompt_templates import (
    DEFAULT_TEMPLATES,
    PromptTemplate,
    build_context_summary,
    build_system_prompt,
    default_prompt_manager,
)

EXPECTED_TEMPLATES = [
    "spec_extraction",
    "design_generation",
    "content_generation",
    "layout_generation",
    "code_generation",
    "tailwind_styling",
    "component_validation",
]


class TestPromptTemplate:
    def test_all_expected_templates_exist(self):
        assert sorted(DEFAULT_TEMPLATES) == sorted(EXPECTED_TEMPLATES)

    def test_get_missing_template(self):
        assert PromptTemplate(default_templates={}).get_template("nonexistent") is None

    def test_format_prompt_strips(self):
        pm = PromptTemplate(default_templates={"greet": "\n   Build $thing for $who\n"})
        assert pm.format_prompt("greet", thing="a page", who="Northwind") == "Build a page for Northwind"

    def test_format_missing_template(self):
        assert PromptTemplate(default_templates={}).format_prompt("nonexistent", key="v") is None

    def test_safe_substitute_missing_vars(self):
        pm = PromptTemplate(default_templates={"t": "Spec $page_spec and $design"})
        result = pm.format_prompt("t", page_spec="{}")
        assert "$design" in result

    def test_json_braces_survive(self):
        pm = PromptTemplate(default_templates={"t": 'Return {"name": "..."} for $x'})
        assert pm.format_prompt("t", x="y") == 'Return {"name": "..."} for y'

    def test_add_template(self):
        pm = PromptTemplate(default_templates={})
        pm.add_template("new", "Layout for $name")
        assert pm.format_prompt("new", name="Hero") == "Layout for Hero"

    def test_save_template_no_dir(self):
        assert PromptTemplate(default_templates={"t": "x"}).save_template("t") is False

    def test_save_template_missing_name(self, tmp_path):
        assert PromptTemplate(templates_dir=tmp_path).save_template("nonexistent") is False

    def test_overrides_loaded_from_dir(self, tmp_path):
        (tmp_path / "spec_extraction.txt").write_text("Custom spec: $user_prompt")
        pm = PromptTemplate(templates_dir=tmp_path, default_templates=DEFAULT_TEMPLATES)
        assert pm.format_prompt("spec_extraction", user_prompt="bakery") == "Custom spec: bakery"
        assert "design_generation" in pm.templates

    def test_save_template_to_dir(self, tmp_path):
        templates_dir = tmp_path / "templates"
        pm = PromptTemplate(templates_dir=templates_dir, default_templates={"saveme": "Save $x"})
        assert pm.save_template("saveme") is True
        assert (templates_dir / "saveme.txt").read_text() == "Save $x"


class TestDefaultPromptManager:
    def test_is_initialized(self):
        assert len(default_prompt_manager.templates) == len(EXPECTED_TEMPLATES)

    def test_code_generation_variables(self):
        result = default_prompt_manager.format_prompt(
            "code_generation",
            component_name="CoffeeLanding",
            content='{"hero": {"title": "Brew"}}',
            layout="{}",
            design="{}",
            missing="MISSING CONTENT - features[0].title",
        )
        assert "CoffeeLanding" in result
        assert '"Brew"' in result
        assert "MISSING CONTENT" in result
        assert "$" not in result

    def test_every_template_fills(self):
        values = dict(
            user_prompt="u", page_spec="s", design="d", content="c", layout="l",
            component_name="N", missing="m", issues="i", code="k",
        )
        for name in EXPECTED_TEMPLATES:
            result = default_prompt_manager.format_prompt(name, **values)
            assert "$" not in result, name


class TestContextHelpers:
    def test_small_context_is_plain_json(self):
        context = {"name": "Landing", "sections": ["hero"]}
        assert json.loads(build_context_summary(context)) == context

    def test_none_context(self):
        assert build_context_summary(None) == "{}"

    def test_large_context_is_summarized(self):
        context = {"code": "x" * 5000, "name": "Landing"}
        summary = json.loads(build_context_summary(context, limit=200))
        assert summary["name"] == '"Landing"'
        assert summary["code"].endswith("...")
        assert len(summary["code"]) == 120

    def test_system_prompt(self):
        structured = build_system_prompt("code_agent")
        assert structured.startswith("You are the code_agent ")
        assert "JSON" in structured
        assert "JSON" not in build_system_prompt("code_agent", structured=False)

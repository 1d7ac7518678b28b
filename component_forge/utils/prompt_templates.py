"""Prompt templates for the generation agents."""

import json
import logging
from pathlib import Path
from string import Template
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

CONTEXT_SUMMARY_LIMIT = 1000


class PromptTemplate:
    """Named ``string.Template`` prompts, optionally overridden from a directory."""

    def __init__(
        self,
        templates_dir: Optional[Union[str, Path]] = None,
        default_templates: Optional[Dict[str, str]] = None,
    ):
        """
        Parameters
        ----------
        templates_dir : str or Path, optional
            Directory of ``<name>.txt`` files that override the defaults
        default_templates : dict, optional
            Built-in templates keyed by name
        """
        self.templates_dir = Path(templates_dir) if templates_dir else None
        self.templates: Dict[str, str] = dict(default_templates or {})
        if self.templates_dir and self.templates_dir.is_dir():
            for path in sorted(self.templates_dir.glob("*.txt")):
                try:
                    self.templates[path.stem] = path.read_text(encoding="utf-8")
                    logger.debug(f"Loaded template override: {path.stem}")
                except OSError as e:
                    logger.warning(f"Could not read template {path}: {e}")

    def get_template(self, template_name: str) -> Optional[Template]:
        if template_name not in self.templates:
            logger.warning(f"Template not found: {template_name}")
            return None
        return Template(self.templates[template_name])

    def format_prompt(self, template_name: str, **kwargs) -> Optional[str]:
        """Substitute ``kwargs`` into a template; unknown placeholders are left as-is."""
        template = self.get_template(template_name)
        if template is None:
            return None
        return template.safe_substitute(**kwargs).strip()

    def add_template(self, template_name: str, template_content: str) -> None:
        self.templates[template_name] = template_content

    def save_template(self, template_name: str) -> bool:
        """Write one template to ``templates_dir``. Returns False when that is not possible."""
        if not self.templates_dir or template_name not in self.templates:
            return False
        try:
            self.templates_dir.mkdir(parents=True, exist_ok=True)
            (self.templates_dir / f"{template_name}.txt").write_text(
                self.templates[template_name], encoding="utf-8"
            )
        except OSError as e:
            logger.error(f"Error saving template {template_name}: {e}")
            return False
        return True


def build_context_summary(context: Any, limit: int = CONTEXT_SUMMARY_LIMIT) -> str:
    """
    Serialize stage context for a prompt.

    Context that fits in ``limit`` characters is passed through as JSON.
    Larger dicts are reduced to their keys with a short preview of each value.
    """
    if context is None:
        return "{}"
    text = json.dumps(context, indent=2, ensure_ascii=False, default=str)
    if len(text) <= limit or not isinstance(context, dict):
        return text

    summary = {}
    for key, value in context.items():
        preview = json.dumps(value, ensure_ascii=False, default=str)
        summary[key] = preview if len(preview) <= 120 else preview[:117] + "..."
    return json.dumps(summary, indent=2, ensure_ascii=False)


def build_system_prompt(agent_name: str, structured: bool = True) -> str:
    """System prompt for an agent; structured agents must answer with JSON only."""
    base = f"You are the {agent_name} in a pipeline that builds React landing-page components."
    if not structured:
        return base
    return (
        f"{base}\n"
        "Respond with a single valid JSON value and nothing else: no markdown fences, "
        "no commentary, no comments inside the JSON. Use double quotes for all keys and strings."
    )


DEFAULT_TEMPLATES = {
    "spec_extraction": """
    Turn this request into a page specification.

    REQUEST:
    $user_prompt

    Return a JSON object with keys:
    "name" (PascalCase component name), "type" (e.g. landing, pricing, portfolio),
    "industry", "businessName", "targetAudience", "complexity" (1-10),
    "sections" (ordered list of section ids such as hero, features, testimonials, stats, cta, footer),
    "requirements" (list of strings).
    """,

    "design_generation": """
    Create a visual design system for this page.

    PAGE SPEC:
    $page_spec

    Return a JSON object with keys:
    "colorPalette" (primary, secondary, accent, background, text),
    "typography" (headingFont, bodyFont, scale), "spacing", "style" (short description).
    """,

    "content_generation": """
    Write the final marketing copy for this page. Use specific, realistic details for the
    business; never use placeholder text such as Lorem ipsum or John Doe.

    PAGE SPEC:
    $page_spec

    Return a JSON object with one key per section. Use this shape where it applies:
    "hero": {"title", "subtitle", "ctaButtons": [{"text"}]},
    "features": [{"title", "description"}],
    "testimonials": [{"quote", "author", "role"}],
    "stats": [{"value", "label"}].
    """,

    "layout_generation": """
    Plan the layout of this page.

    PAGE SPEC:
    $page_spec

    DESIGN:
    $design

    Return a JSON object with keys:
    "sections" (list of {"id", "layout", "columns"}), "breakpoints", "containerWidth".
    """,

    "code_generation": """
    Write a single React functional component named $component_name that renders this page.
    Every string and number in CONTENT must appear verbatim in the JSX. Use Tailwind classes.

    CONTENT:
    $content

    LAYOUT:
    $layout

    DESIGN:
    $design

    $missing

    Return a JSON object: {"componentName": "...", "reactCode": "<full component source>"}.
    """,

    "tailwind_styling": """
    Improve the Tailwind styling of this React component. Keep every piece of text,
    every import and the export unchanged.

    DESIGN:
    $design

    ISSUES TO ADDRESS:
    $issues

    CODE:
    $code

    Return a JSON object: {"reactCode": "<full component source>", "changes": ["..."]}.
    """,

    "component_validation": """
    Review this React component for correctness, accessibility, responsiveness and
    faithful use of the provided content.

    CONTENT:
    $content

    CODE:
    $code

    Return a JSON object with keys:
    "overallScore" (0-100), "passed" (boolean), "criticalIssues" (list), "suggestions" (list).
    """,
}

default_prompt_manager = PromptTemplate(default_templates=DEFAULT_TEMPLATES)

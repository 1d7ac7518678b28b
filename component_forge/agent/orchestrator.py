"""Agent orchestrator: sequential prompt-to-component generation."""

import copy
import json
import logging
import math
import re
import time
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from component_forge.agent.agent_call import agent_options, call_agent
from component_forge.analyzers.content_utilization import (
    DEFAULT_MATCH_PREFIX_LENGTH,
    DEFAULT_UTILIZATION_THRESHOLD,
    ContentUtilizationValidator,
)
from component_forge.analyzers.output_validator import (
    check_content_authenticity,
    missing_spec_fields,
    validate_code_output,
)
from component_forge.models import (
    AgentCallResult,
    GenerationResult,
    StageRecord,
    UtilizationReport,
    ValidationOutcome,
)
from component_forge.providers.manager import ProviderManager
from component_forge.utils.api_cache import ApiCache, prompt_key
from component_forge.utils.log_context import LoggerLike, new_correlation_id, with_correlation
from component_forge.utils.prompt_templates import (
    PromptTemplate,
    build_context_summary,
    build_system_prompt,
    default_prompt_manager,
)

logger = logging.getLogger(__name__)

_SPEC_DEFAULTS = {
    "type": "landing",
    "industry": "general",
    "complexity": 5,
    "sections": ["hero", "features", "testimonials", "cta"],
}

_DEFAULT_DESIGN = {
    "colorPalette": {
        "primary": "#2563eb",
        "secondary": "#0f172a",
        "accent": "#f59e0b",
        "background": "#ffffff",
        "text": "#1e293b",
    },
    "typography": {"headingFont": "Inter", "bodyFont": "Inter", "scale": "1.25"},
    "spacing": "comfortable",
    "style": "clean, modern",
}

_CODE_KEYS = ("reactCode", "code", "componentCode", "component")
_CODE_FENCE = re.compile(r"```(?:jsx|tsx|javascript|js|react|typescript)?\s*\n([\s\S]*?)```", re.IGNORECASE)


class StageError(RuntimeError):
    """A required stage produced no usable output."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage} stage failed: {message}")
        self.stage = stage


def component_name(raw: Any, default: str = "GeneratedPage") -> str:
    """PascalCase identifier derived from ``raw``."""
    words = re.findall(r"[A-Za-z0-9]+", str(raw or ""))
    name = "".join(w[:1].upper() + w[1:] for w in words)
    if not name or not name[0].isalpha():
        return default
    return name


def _as_list(value: Any) -> List[Any]:
    """Model output that should be a list; a lone string or object becomes one item."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def extract_code(response: Any) -> Optional[str]:
    """Pull component source out of a code or styling agent response."""
    if isinstance(response, dict):
        for key in _CODE_KEYS:
            value = response.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None
    if not isinstance(response, str):
        return None
    match = _CODE_FENCE.search(response)
    if match and match.group(1).strip():
        return match.group(1).strip()
    if "export" in response or re.search(r"^\s*import\s", response, re.MULTILINE):
        return response.strip()
    return None


class GenerationOrchestrator:
    """
    Runs the agent chain that turns a prompt into a React component.

    Stages run strictly one after another: spec, design, content, layout,
    code, then a styling and validation loop. Spec, content and code are
    required; design and layout fall back to defaults; styling failures keep
    the unstyled code.
    """

    def __init__(
        self,
        provider_manager: Optional[ProviderManager] = None,
        cache: Optional[ApiCache] = None,
        prompts: Optional[PromptTemplate] = None,
        utilization_threshold: float = DEFAULT_UTILIZATION_THRESHOLD,
        prefix_length: int = DEFAULT_MATCH_PREFIX_LENGTH,
        max_code_attempts: int = 2,
        max_validation_attempts: int = 2,
        pass_score: int = 75,
        show_progress: bool = False,
        logger: Optional[LoggerLike] = None,
    ):
        self.pm = provider_manager or ProviderManager()
        self.cache = cache
        self.prompts = prompts or default_prompt_manager
        self.validator = ContentUtilizationValidator(
            prefix_length=prefix_length, threshold=utilization_threshold
        )
        self.max_code_attempts = max(1, max_code_attempts)
        self.max_validation_attempts = max(1, max_validation_attempts)
        self.pass_score = pass_score
        self.show_progress = show_progress
        self._base_logger = logger or logging.getLogger(__name__)
        self.log: LoggerLike = self._base_logger
        self._reset()

    def _reset(self) -> None:
        self._plan: List[str] = []
        self._results: Dict[str, Any] = {}
        self._stages: List[StageRecord] = []
        self._agents_used: List[str] = []
        self._insights: List[str] = []
        self._validation_history: List[ValidationOutcome] = []

    @property
    def insights(self) -> List[str]:
        return list(self._insights)

    def run(self, user_prompt: str) -> GenerationResult:
        """Generate a component for ``user_prompt``. Never raises on stage failures."""
        start_time = time.time()
        self._reset()
        correlation_id = new_correlation_id()
        self.log = with_correlation(self._base_logger, correlation_id)
        self._results["user_prompt"] = user_prompt
        result = GenerationResult(correlation_id=correlation_id, prompt=user_prompt)

        plan = self._create_plan()
        self.log.info(f"Generation started: {len(plan)} stages")
        bar = tqdm(plan, desc="Generating", unit="stage", disable=not self.show_progress)
        try:
            for stage in bar:
                bar.set_postfix_str(stage)
                self.pm.usage.start_step(stage)
                self._run_stage(stage)
            result.success = True
        except StageError as e:
            self.log.error(str(e))
            result.error = str(e)
        finally:
            self.pm.usage.end_step()
            bar.close()

        self._fill_result(result)
        result.execution_time = time.time() - start_time
        self.log.info(
            f"Generation {'succeeded' if result.success else 'failed'} in "
            f"{result.execution_time:.1f}s, completeness {result.completeness}%"
        )
        return result

    def _create_plan(self) -> List[str]:
        self._plan = ["spec", "design", "content", "layout", "code", "refine"]
        return self._plan

    def _run_stage(self, stage: str) -> None:
        if stage == "spec":
            self._spec_stage()
        elif stage == "design":
            self._design_stage()
        elif stage == "content":
            self._content_stage()
        elif stage == "layout":
            self._layout_stage()
        elif stage == "code":
            self._code_stage()
        elif stage == "refine":
            self._refine_stage()
        else:
            raise ValueError(f"Unknown stage: {stage}")

    # --- Agent calls ---

    def _generator(self, agent_name: str, system: str):
        options = agent_options(agent_name)

        def generate(prompt: str) -> str:
            def fetch() -> str:
                return self.pm.complete(prompt, system=system, **options)

            if self.cache is None:
                return fetch()
            key = prompt_key(agent_name, self.pm.chat_model, f"{system}\n{prompt}")
            return self.cache.get_or_call(key, fetch)

        return generate

    def _call(self, agent_name: str, template_name: str, attempt: int = 1, **variables) -> AgentCallResult:
        prompt = self.prompts.format_prompt(template_name, **variables) or ""
        system = build_system_prompt(agent_name)
        self._agents_used.append(agent_name)
        res = call_agent(
            prompt,
            self._generator(agent_name, system),
            agent_name=agent_name,
            model=self.pm.chat_model,
            logger=self.log,
        )
        self._stages.append(StageRecord(
            agent=agent_name,
            success=res.success and res.metadata.parsed,
            execution_time=res.metadata.execution_time,
            strategy_used=res.metadata.strategy_used,
            attempt=attempt,
            error=res.error or res.metadata.parse_error,
        ))
        return res

    def _mark_fallback(self) -> None:
        if self._stages:
            self._stages[-1].used_fallback = True

    @staticmethod
    def _as_dict(res: AgentCallResult) -> Optional[Dict[str, Any]]:
        if res.success and isinstance(res.response, dict):
            return res.response
        return None

    @staticmethod
    def _failure_reason(res: AgentCallResult) -> str:
        return res.error or res.metadata.parse_error or "response was not a JSON object"

    # --- Stages ---

    def _spec_stage(self) -> None:
        res = self._call("spec_agent", "spec_extraction", user_prompt=self._results["user_prompt"])
        spec = self._as_dict(res)
        if spec is None:
            raise StageError("spec", self._failure_reason(res))

        for field in missing_spec_fields(spec):
            if field == "name":
                spec["name"] = component_name(self._results["user_prompt"][:40])
            else:
                spec[field] = _SPEC_DEFAULTS[field]
            self._insights.append(f"Page spec missing '{field}', using default")
        spec["name"] = component_name(spec["name"])
        self._results["page_spec"] = spec

    def _design_stage(self) -> None:
        res = self._call(
            "design_agent", "design_generation",
            page_spec=build_context_summary(self._results["page_spec"]),
        )
        design = self._as_dict(res)
        if design is None:
            self.log.warning(f"Design agent failed ({self._failure_reason(res)}), using default design")
            self._insights.append("Default design system used")
            self._mark_fallback()
            design = copy.deepcopy(_DEFAULT_DESIGN)
        self._results["design"] = design

    def _content_stage(self) -> None:
        res = self._call(
            "content_agent", "content_generation",
            page_spec=build_context_summary(self._results["page_spec"]),
        )
        content = self._as_dict(res)
        if not content:
            raise StageError("content", self._failure_reason(res))

        authenticity = check_content_authenticity(content)
        if authenticity.issues:
            self.log.warning(
                f"Content authenticity score {authenticity.score}: "
                f"{len(authenticity.issues)} placeholder issues"
            )
            self._insights.append(f"Content has {len(authenticity.issues)} placeholder values")
        self._results["content"] = content
        self._results["authenticity"] = authenticity

    def _layout_stage(self) -> None:
        page_spec = self._results["page_spec"]
        res = self._call(
            "layout_agent", "layout_generation",
            page_spec=build_context_summary(page_spec),
            design=build_context_summary(self._results["design"]),
        )
        layout = self._as_dict(res)
        if layout is None:
            self.log.warning(f"Layout agent failed ({self._failure_reason(res)}), using stacked layout")
            self._insights.append("Default stacked layout used")
            self._mark_fallback()
            sections = _as_list(page_spec.get("sections")) or _SPEC_DEFAULTS["sections"]
            layout = {
                "sections": [
                    {"id": str(s.get("id", s) if isinstance(s, dict) else s), "layout": "stack", "columns": 1}
                    for s in sections
                ],
                "breakpoints": {"sm": 640, "md": 768, "lg": 1024},
                "containerWidth": "max-w-7xl",
            }
        self._results["layout"] = layout

    def _code_stage(self) -> None:
        content = self._results["content"]
        name = self._results["page_spec"]["name"]
        best_code: Optional[str] = None
        best_report: Optional[UtilizationReport] = None
        last_error = "no code returned"
        missing_note = ""

        for attempt in range(1, self.max_code_attempts + 1):
            res = self._call(
                "code_agent", "code_generation", attempt=attempt,
                component_name=name,
                content=json.dumps(content, indent=2, ensure_ascii=False),
                layout=build_context_summary(self._results["layout"]),
                design=build_context_summary(self._results["design"]),
                missing=missing_note,
            )
            code = extract_code(res.response) if res.success else None
            if isinstance(res.response, dict) and res.response.get("componentName"):
                name = component_name(res.response["componentName"], default=name)
            if not code:
                last_error = self._failure_reason(res) if not res.success else "no code in response"
                self.log.warning(f"Code attempt {attempt} produced no code: {last_error}")
                continue

            report = self.validator.validate(content, code)
            self.log.info(
                f"Code attempt {attempt}: utilization {report.used_elements}/"
                f"{report.total_elements} ({report.utilization_percent}%)"
            )
            if best_report is None or report.utilization_rate > best_report.utilization_rate:
                best_code, best_report = code, report
            if self.validator.meets_threshold(report):
                break
            missing_note = (
                "MISSING CONTENT - the previous version left these out, render each verbatim:\n"
                + self.validator.missing_summary(report)
            )

        if best_code is None:
            raise StageError("code", last_error)
        if not self.validator.meets_threshold(best_report):
            self._insights.extend(self.validator.recommend(best_report))
        self._results["component_name"] = name
        self._results["code"] = best_code
        self._results["utilization"] = best_report

    def _refine_stage(self) -> None:
        previous: Optional[ValidationOutcome] = None
        for attempt in range(1, self.max_validation_attempts + 1):
            issues = previous.critical_issues + previous.suggestions if previous else []
            self._style(attempt, issues)
            outcome = self._validate(attempt)
            self._validation_history.append(outcome)
            self.log.info(f"Validation attempt {attempt}: score {outcome.score}, passed={outcome.passed}")
            if outcome.passed:
                break
            if previous is not None and outcome.score <= previous.score:
                self._insights.append("Validation score stopped improving")
                break
            previous = outcome

    def _style(self, attempt: int, issues: List[str]) -> None:
        code = self._results["code"]
        res = self._call(
            "tailwind_stylist", "tailwind_styling", attempt=attempt,
            code=code,
            design=build_context_summary(self._results["design"]),
            issues="\n".join(f"- {i}" for i in issues) or "- none reported",
        )
        styled = extract_code(res.response) if res.success else None
        if not styled:
            self.log.warning(f"Styling attempt {attempt} failed, keeping previous code")
            self._mark_fallback()
            return

        report = self.validator.validate(self._results["content"], styled)
        current = self._results["utilization"]
        if report.utilization_rate < current.utilization_rate:
            self.log.warning(
                f"Styled code dropped utilization to {report.utilization_percent}%, keeping previous code"
            )
            self._insights.append("Styling pass rejected for dropping content")
            self._mark_fallback()
            return
        self._results["code"] = styled
        self._results["utilization"] = report

    def _validate(self, attempt: int) -> ValidationOutcome:
        code = self._results["code"]
        content = self._results["content"]
        check = validate_code_output(code, content, self.validator)
        res = self._call(
            "validator_agent", "component_validation", attempt=attempt,
            code=code,
            content=build_context_summary(content),
        )
        verdict = self._as_dict(res)
        if verdict is None:
            self.log.warning("Validator agent failed, using static checks only")
            self._mark_fallback()
            score = 80 if check.passed else 40
            return ValidationOutcome(
                score=score,
                passed=check.passed and score >= self.pass_score,
                critical_issues=list(check.issues),
                suggestions=list(check.warnings),
                attempt=attempt,
            )

        try:
            raw_score = float(verdict.get("overallScore", verdict.get("score", 0)))
        except (TypeError, ValueError):
            raw_score = 0.0
        # NaN and infinities from lenient parsing count as no score
        score = int(raw_score) if math.isfinite(raw_score) else 0
        score = max(0, min(100, score))
        llm_passed = bool(verdict.get("passed")) or score >= self.pass_score
        return ValidationOutcome(
            score=score,
            passed=llm_passed and check.passed,
            critical_issues=[str(i) for i in _as_list(verdict.get("criticalIssues"))] + list(check.issues),
            suggestions=[str(s) for s in _as_list(verdict.get("suggestions"))] + list(check.warnings),
            attempt=attempt,
        )

    def _fill_result(self, result: GenerationResult) -> None:
        r = self._results
        result.page_spec = r.get("page_spec")
        result.design = r.get("design")
        result.content = r.get("content")
        result.layout = r.get("layout")
        result.code = r.get("code")
        result.component_name = r.get("component_name") or (r.get("page_spec") or {}).get("name")
        result.utilization = r.get("utilization")
        result.authenticity = r.get("authenticity")
        result.validation = self._validation_history[-1] if self._validation_history else None
        result.validation_history = list(self._validation_history)
        result.stages = list(self._stages)
        result.agents_used = list(dict.fromkeys(self._agents_used))
        result.insights = list(self._insights)
        present = [r.get(k) for k in ("page_spec", "design", "content", "layout", "code")]
        result.completeness = round(sum(1 for p in present if p) / len(present) * 100)
        result.models_used = self.pm.get_models_used()

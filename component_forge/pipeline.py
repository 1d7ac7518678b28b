"""End-to-end generation: run the agents and write the results to disk."""

import logging
from pathlib import Path
from typing import List, Optional

from component_forge.agent.orchestrator import GenerationOrchestrator
from component_forge.analyzers.content_utilization import DEFAULT_UTILIZATION_THRESHOLD
from component_forge.models import GenerationResult
from component_forge.output_structure import (
    create_output_dirs,
    write_generation_manifest,
    write_stage_output,
)
from component_forge.providers.manager import ProviderManager
from component_forge.utils.api_cache import ApiCache

logger = logging.getLogger(__name__)

_STAGE_FIELDS = ("page_spec", "design", "content", "layout")


def generate_component(
    prompt: str,
    output_dir: str | Path,
    provider_manager: Optional[ProviderManager] = None,
    cache_dir: Optional[str | Path] = None,
    utilization_threshold: float = DEFAULT_UTILIZATION_THRESHOLD,
    max_attempts: int = 2,
    show_progress: bool = True,
) -> GenerationResult:
    """
    Generate a React component for ``prompt`` and write it under ``output_dir``.

    Parameters
    ----------
    prompt : str
        Natural-language description of the page
    output_dir : str or Path
        Destination directory, created if needed
    provider_manager : ProviderManager, optional
        Routing for agent calls; a default manager is created when omitted
    cache_dir : str or Path, optional
        Enables the response cache rooted here
    utilization_threshold : float
        Minimum share of content elements the code must render
    max_attempts : int
        Attempts for code regeneration and for the style/validate loop
    show_progress : bool
        Show a tqdm progress bar over the stages

    Returns
    -------
    GenerationResult
        The manifest that was written to ``output_dir/manifest.json``
    """
    pm = provider_manager or ProviderManager()
    cache = ApiCache(cache_dir, namespace="responses") if cache_dir else None
    orchestrator = GenerationOrchestrator(
        provider_manager=pm,
        cache=cache,
        utilization_threshold=utilization_threshold,
        max_code_attempts=max_attempts,
        max_validation_attempts=max_attempts,
        show_progress=show_progress,
    )
    result = orchestrator.run(prompt)

    name = result.component_name or "GeneratedPage"
    dirs = create_output_dirs(output_dir, name)
    for field in _STAGE_FIELDS:
        data = getattr(result, field)
        if data is not None:
            write_stage_output(data, dirs["stages"], field)
    if result.code:
        code_path = dirs["component"] / f"{name}.jsx"
        code_path.write_text(result.code + "\n", encoding="utf-8")
        logger.info(f"Wrote component to {code_path}")

    (dirs["root"] / "report.md").write_text(render_report(result), encoding="utf-8")
    write_generation_manifest(result, dirs["root"])
    return result


def render_report(result: GenerationResult) -> str:
    """Markdown summary of a run: status, utilization, validation, insights."""
    lines: List[str] = [f"# {result.component_name or 'Generation'} report", ""]
    lines.append(f"- Status: {'success' if result.success else 'failed'}")
    if result.error:
        lines.append(f"- Error: {result.error}")
    lines.append(f"- Correlation id: `{result.correlation_id}`")
    lines.append(f"- Completeness: {result.completeness}%")
    lines.append(f"- Time: {result.execution_time:.1f}s")

    if result.utilization:
        u = result.utilization
        lines += ["", "## Content utilization", ""]
        lines.append(f"{u.used_elements}/{u.total_elements} elements used ({u.utilization_percent}%)")
        if u.missing_elements:
            lines += ["", "| Path | Value |", "| --- | --- |"]
            for e in u.missing_elements:
                value = str(e.value).replace("|", "\\|")
                lines.append(f"| `{e.path}` | {value} |")

    if result.validation:
        v = result.validation
        lines += ["", "## Validation", ""]
        lines.append(f"Score {v.score}/100, {'passed' if v.passed else 'not passed'} "
                     f"after {len(result.validation_history)} attempt(s)")
        for issue in v.critical_issues:
            lines.append(f"- {issue}")

    if result.insights:
        lines += ["", "## Insights", ""]
        lines += [f"- {i}" for i in result.insights]

    lines += ["", "## Stages", "", "| Agent | Attempt | OK | Fallback | Time | Strategy |",
              "| --- | --- | --- | --- | --- | --- |"]
    for s in result.stages:
        strategy = s.strategy_used.value if s.strategy_used else "-"
        lines.append(
            f"| {s.agent} | {s.attempt} | {'yes' if s.success else 'no'} | "
            f"{'yes' if s.used_fallback else 'no'} | {s.execution_time:.2f}s | {strategy} |"
        )
    return "\n".join(lines) + "\n"

"""Output directory layout and manifest I/O for generation runs."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from component_forge.models import GenerationResult

logger = logging.getLogger(__name__)


def create_output_dirs(output_dir: str | Path, component_name: str) -> Dict[str, Path]:
    """
    Create the output layout for one generation run.

    Layout:
        output_dir/
            manifest.json
            report.md
            component/
                <ComponentName>.jsx
            stages/
                page_spec.json, design.json, content.json, layout.json

    Returns dict mapping directory names to Path objects.
    """
    base = Path(output_dir)
    dirs = {
        "root": base,
        "component": base / "component",
        "stages": base / "stages",
    }
    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)
    logger.info(f"Created output structure for '{component_name}' at {base}")
    return dirs


def write_stage_output(data: Any, stages_dir: str | Path, stage: str) -> Path:
    """Write one stage's structured output as pretty JSON."""
    path = Path(stages_dir) / f"{stage}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def write_generation_manifest(manifest: GenerationResult, output_dir: str | Path) -> Path:
    """Write a GenerationResult to output_dir/manifest.json."""
    path = Path(output_dir) / "manifest.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manifest.model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Wrote generation manifest to {path}")
    return path


def read_generation_manifest(output_dir: str | Path) -> GenerationResult:
    """Read a GenerationResult from output_dir/manifest.json."""
    path = Path(output_dir) / "manifest.json"
    return GenerationResult.model_validate_json(path.read_text(encoding="utf-8"))

"""Tests for output structure and manifest I/O."""

import json

from component_forge.models import GenerationResult, StageRecord, UtilizationReport
from component_forge.output_structure import (
    create_output_dirs,
    read_generation_manifest,
    write_generation_manifest,
    write_stage_output,
)


class TestCreateOutputDirs:
    def test_creates_all_directories(self, tmp_path):
        dirs = create_output_dirs(tmp_path / "output", "Landing")
        assert dirs["root"].exists()
        assert dirs["component"].exists()
        assert dirs["stages"].exists()

    def test_expected_layout(self, tmp_path):
        dirs = create_output_dirs(tmp_path / "output", "Landing")
        base = tmp_path / "output"
        assert dirs["component"] == base / "component"
        assert dirs["stages"] == base / "stages"

    def test_idempotent(self, tmp_path):
        out = tmp_path / "output"
        assert create_output_dirs(out, "A") == create_output_dirs(out, "A")


class TestStageOutput:
    def test_writes_pretty_json(self, tmp_path):
        path = write_stage_output({"title": "Café"}, tmp_path / "stages", "content")
        assert path == tmp_path / "stages" / "content.json"
        text = path.read_text(encoding="utf-8")
        assert "Café" in text
        assert json.loads(text) == {"title": "Café"}


class TestGenerationManifest:
    def test_round_trip(self, tmp_path):
        manifest = GenerationResult(
            success=True,
            correlation_id="abc123def456",
            prompt="coffee",
            component_name="CoffeeLanding",
            code="export default function CoffeeLanding() {}",
            utilization=UtilizationReport(total_elements=4, used_elements=3, utilization_rate=0.75),
            stages=[StageRecord(agent="spec_agent", success=True, execution_time=1.2)],
            models_used={"chat": "groq/llama-3.3-70b-versatile"},
        )
        write_generation_manifest(manifest, tmp_path)
        restored = read_generation_manifest(tmp_path)

        assert restored.component_name == "CoffeeLanding"
        assert restored.utilization.utilization_rate == 0.75
        assert restored.stages[0].agent == "spec_agent"
        assert restored.models_used == manifest.models_used

    def test_manifest_is_json(self, tmp_path):
        path = write_generation_manifest(GenerationResult(error="spec stage failed: x"), tmp_path)
        data = json.loads(path.read_text())
        assert data["version"] == "1.0"
        assert data["success"] is False
        assert data["error"] == "spec stage failed: x"

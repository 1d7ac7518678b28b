"""Tests for deterministic output checks."""

from component_forge.analyzers.content_utilization import ContentUtilizationValidator
from component_forge.analyzers.output_validator import (
    REQUIRED_SPEC_FIELDS,
    check_content_authenticity,
    missing_spec_fields,
    validate_code_output,
)

GOOD_CODE = """import React from 'react';

export default function Landing() {
  return (
    <main>
      <h1>Fast</h1>
      <h2>Secure</h2>
    </main>
  );
}
"""


class TestContentAuthenticity:
    def test_clean_content(self):
        report = check_content_authenticity({"hero": {"title": "Northwind Coffee Roasters"}})
        assert report.score == 100
        assert report.issues == []

    def test_placeholder_penalties(self):
        content = {
            "hero": {"title": "Lorem ipsum dolor"},
            "testimonials": [{"author": "Jane Doe"}],
        }
        report = check_content_authenticity(content)
        assert report.score == 100 - 25 - 15
        assert {i.path for i in report.issues} == {"hero.title", "testimonials[0].author"}
        assert {i.severity for i in report.issues} == {"high", "medium"}

    def test_score_floor(self):
        content = {"items": ["lorem ipsum"] * 10}
        assert check_content_authenticity(content).score == 15

    def test_low_severity(self):
        report = check_content_authenticity({"brand": "Acme Widgets"})
        assert report.score == 95
        assert report.issues[0].severity == "low"

    def test_numbers_ignored(self):
        assert check_content_authenticity({"stats": [555]}).issues == []


class TestMissingSpecFields:
    def test_complete_spec(self):
        spec = {"name": "X", "type": "landing", "industry": "saas", "complexity": 5, "sections": ["hero"]}
        assert missing_spec_fields(spec) == []

    def test_empty_values_count_as_missing(self):
        spec = {"name": "X", "type": "", "industry": None, "complexity": 3, "sections": []}
        assert missing_spec_fields(spec) == ["type", "industry", "sections"]

    def test_not_a_dict(self):
        assert missing_spec_fields("landing page") == list(REQUIRED_SPEC_FIELDS)


class TestValidateCodeOutput:
    def test_good_code(self):
        check = validate_code_output(GOOD_CODE)
        assert check.passed
        assert check.issues == []
        assert check.utilization is None

    def test_empty_code(self):
        check = validate_code_output("   ")
        assert not check.passed
        assert check.issues == ["Generated code is empty"]

    def test_missing_structure(self):
        check = validate_code_output("const x = 1;")
        assert not check.passed
        assert "Missing import statements" in check.issues
        assert "Missing export statement" in check.issues
        assert "No JSX return found" in check.issues

    def test_placeholder_warning_is_not_blocking(self):
        code = GOOD_CODE.replace("Secure", "Lorem ipsum")
        check = validate_code_output(code)
        assert check.passed
        assert len(check.warnings) == 1

    def test_utilization_pass(self):
        content = {"features": [{"title": "Fast"}, {"title": "Secure"}]}
        check = validate_code_output(GOOD_CODE, content=content)
        assert check.passed
        assert check.utilization.utilization_rate == 1.0

    def test_utilization_shortfall(self):
        content = {"features": [{"title": "Fast"}, {"title": "Private"}]}
        check = validate_code_output(GOOD_CODE, content=content)
        assert not check.passed
        assert check.issues == ["Content utilization 50% is below 90%"]

    def test_threshold_override(self):
        content = {"features": [{"title": "Fast"}, {"title": "Private"}]}
        check = validate_code_output(GOOD_CODE, content=content, threshold=0.5)
        assert check.passed

    def test_custom_validator(self):
        content = {"features": [{"title": "Fast"}, {"title": "Private"}]}
        validator = ContentUtilizationValidator(threshold=0.4)
        assert validate_code_output(GOOD_CODE, content=content, validator=validator).passed

"""Deterministic quality checks for agent outputs."""

import logging
import re
from typing import Any, List, Optional

from component_forge.analyzers.content_utilization import ContentUtilizationValidator
from component_forge.models import (
    AuthenticityIssue,
    AuthenticityReport,
    CodeCheck,
)

logger = logging.getLogger(__name__)

REQUIRED_SPEC_FIELDS = ("name", "type", "industry", "complexity", "sections")

_SEVERITY_WEIGHTS = {"high": 25, "medium": 15, "low": 5}

# (pattern, severity) pairs for generic or placeholder copy
_PLACEHOLDER_PATTERNS = [
    (re.compile(r"lorem ipsum", re.IGNORECASE), "high"),
    (re.compile(r"\[(?:placeholder|insert[^\]]*|your [^\]]*)\]", re.IGNORECASE), "high"),
    (re.compile(r"\b(?:john|jane) doe\b", re.IGNORECASE), "medium"),
    (re.compile(r"\bexample\.com\b", re.IGNORECASE), "medium"),
    (re.compile(r"\b555-\d{4}\b"), "medium"),
    (re.compile(r"\b(?:TODO|TBD|FIXME)\b"), "medium"),
    (re.compile(r"\b(?:company|product|brand) name\b", re.IGNORECASE), "low"),
    (re.compile(r"\bacme\b", re.IGNORECASE), "low"),
]


def check_content_authenticity(content: Any) -> AuthenticityReport:
    """
    Scan every string in ``content`` for placeholder text.

    The score starts at 100 and loses the summed severity weights, capped so
    it never drops below 15.
    """
    validator = ContentUtilizationValidator(skip_private_keys=True)
    issues: List[AuthenticityIssue] = []
    for element in validator.flatten(content):
        if not isinstance(element.value, str):
            continue
        for pattern, severity in _PLACEHOLDER_PATTERNS:
            if pattern.search(element.value):
                issues.append(AuthenticityIssue(
                    path=element.path,
                    pattern=pattern.pattern,
                    severity=severity,
                ))
    total = sum(_SEVERITY_WEIGHTS[i.severity] for i in issues)
    return AuthenticityReport(score=max(0, 100 - min(total, 85)), issues=issues)


def missing_spec_fields(page_spec: Any) -> List[str]:
    """Required page-spec fields that are absent or empty."""
    if not isinstance(page_spec, dict):
        return list(REQUIRED_SPEC_FIELDS)
    return [f for f in REQUIRED_SPEC_FIELDS if page_spec.get(f) in (None, "", [], {})]


def validate_code_output(
    code: Optional[str],
    content: Any = None,
    validator: Optional[ContentUtilizationValidator] = None,
    threshold: Optional[float] = None,
) -> CodeCheck:
    """
    Run static checks over generated component code.

    Parameters
    ----------
    code : str
        React component source
    content : dict, optional
        Content the component must render; enables the utilization check
    validator : ContentUtilizationValidator, optional
        Validator to use for the utilization check
    threshold : float, optional
        Override for the validator's utilization threshold

    Returns
    -------
    CodeCheck
        ``passed`` is False when any blocking issue was found
    """
    check = CodeCheck()
    if not code or not code.strip():
        check.passed = False
        check.issues.append("Generated code is empty")
        return check

    if not re.search(r"^\s*import\s", code, re.MULTILINE):
        check.issues.append("Missing import statements")
    if "export" not in code:
        check.issues.append("Missing export statement")
    if "return" not in code or "<" not in code:
        check.issues.append("No JSX return found")

    for pattern, severity in _PLACEHOLDER_PATTERNS:
        if severity != "low" and pattern.search(code):
            check.warnings.append(f"Placeholder text in code: {pattern.pattern}")

    if content is not None:
        validator = validator or ContentUtilizationValidator()
        report = validator.validate(content, code)
        check.utilization = report
        if not validator.meets_threshold(report, threshold):
            limit = validator.threshold if threshold is None else threshold
            check.issues.append(
                f"Content utilization {report.utilization_percent}% is below "
                f"{round(limit * 100)}%"
            )

    check.passed = not check.issues
    logger.debug(f"Code check: {len(check.issues)} issues, {len(check.warnings)} warnings")
    return check

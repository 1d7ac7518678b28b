"""Check how much of a structured content set made it into generated code."""

import logging
import re
from typing import Any, Dict, List, Optional

from component_forge.models import ContentCategory, ContentElement, UtilizationReport

logger = logging.getLogger(__name__)

DEFAULT_MATCH_PREFIX_LENGTH = 30
DEFAULT_UTILIZATION_THRESHOLD = 0.9

# Top-level content keys mapped to their section category
_CATEGORY_KEYS = {
    "hero": ContentCategory.hero,
    "feature": ContentCategory.feature,
    "features": ContentCategory.feature,
    "testimonial": ContentCategory.testimonial,
    "testimonials": ContentCategory.testimonial,
    "stat": ContentCategory.stat,
    "stats": ContentCategory.stat,
    "statistics": ContentCategory.stat,
    "metrics": ContentCategory.stat,
}

_PLACEHOLDER_MARKERS = (
    "lorem ipsum",
    "john doe",
    "jane doe",
    "[placeholder]",
    "placeholder text",
    "[insert",
)

_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip().lower()


def element_text(value: Any) -> str:
    """String form used for matching; integral floats drop their ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_placeholder(value: Any) -> bool:
    text = element_text(value).lower()
    return any(marker in text for marker in _PLACEHOLDER_MARKERS)


class ContentUtilizationValidator:
    """
    Flattens content objects and searches a text artifact for each element.

    Matching is literal: a case-insensitive substring search with whitespace
    runs collapsed. Strings longer than ``prefix_length`` are matched on their
    first ``prefix_length`` characters so a paraphrased tail still counts.
    """

    def __init__(
        self,
        prefix_length: int = DEFAULT_MATCH_PREFIX_LENGTH,
        threshold: float = DEFAULT_UTILIZATION_THRESHOLD,
        skip_private_keys: bool = True,
    ):
        self.prefix_length = max(1, prefix_length)
        self.threshold = threshold
        self.skip_private_keys = skip_private_keys

    def flatten(self, content: Any) -> List[ContentElement]:
        """Return every non-empty string and number in ``content`` with its path."""
        elements: List[ContentElement] = []
        if isinstance(content, (dict, list)):
            self._walk(content, "", ContentCategory.other, elements)
        return elements

    def _walk(self, node: Any, path: str, category: ContentCategory, out: List[ContentElement]) -> None:
        if isinstance(node, dict):
            for key, value in node.items():
                key = str(key)
                if self.skip_private_keys and key.startswith("_"):
                    continue
                child_category = category
                if not path:
                    child_category = _CATEGORY_KEYS.get(key.lower(), ContentCategory.other)
                child_path = f"{path}.{key}" if path else key
                self._walk(value, child_path, child_category, out)
        elif isinstance(node, list):
            for i, item in enumerate(node):
                self._walk(item, f"{path}[{i}]", category, out)
        elif isinstance(node, bool) or node is None:
            return
        elif isinstance(node, (int, float)):
            out.append(ContentElement(path=path or "$", value=node, category=category))
        elif isinstance(node, str) and node.strip():
            out.append(ContentElement(path=path or "$", value=node, category=category))

    def needle(self, element: ContentElement) -> str:
        """Text searched for in the artifact."""
        text = _collapse(element_text(element.value))
        if len(text) > self.prefix_length:
            text = text[:self.prefix_length].rstrip()
        return text

    def is_used(self, element: ContentElement, artifact_text: str) -> bool:
        needle = self.needle(element)
        return bool(needle) and needle in artifact_text

    def validate(self, content: Any, artifact_text: Any) -> UtilizationReport:
        """
        Compare ``content`` against ``artifact_text``.

        Never raises. Content that is not a dict or list flattens to nothing
        and yields a rate of 1.0.
        """
        try:
            elements = self.flatten(content)
        except Exception as e:
            logger.warning(f"Could not flatten content: {e}")
            elements = []
        if not elements:
            return UtilizationReport()

        haystack = _collapse(artifact_text) if isinstance(artifact_text, str) else ""
        used = 0
        missing: List[ContentElement] = []
        placeholders: List[ContentElement] = []
        for element in elements:
            if is_placeholder(element.value):
                placeholders.append(element)
                missing.append(element)
            elif self.is_used(element, haystack):
                used += 1
            else:
                missing.append(element)

        return UtilizationReport(
            total_elements=len(elements),
            used_elements=used,
            missing_elements=missing,
            placeholder_elements=placeholders,
            utilization_rate=used / len(elements),
        )

    def meets_threshold(self, report: UtilizationReport, threshold: Optional[float] = None) -> bool:
        return report.utilization_rate >= (self.threshold if threshold is None else threshold)

    def recommend(self, report: UtilizationReport) -> List[str]:
        """Human-readable follow-ups for a report that falls short."""
        recommendations: List[str] = []
        if self.meets_threshold(report):
            return recommendations

        recommendations.append(
            f"Content utilization is {report.utilization_percent}%, "
            f"below the {round(self.threshold * 100)}% target"
        )
        critical = [e for e in report.missing_elements if e.category == ContentCategory.hero]
        if critical:
            paths = ", ".join(e.path for e in critical)
            recommendations.append(f"Critical hero content missing: {paths}")

        for category, elements in report.missing_by_category().items():
            if len(elements) > 2:
                recommendations.append(
                    f"Section '{category}' is missing {len(elements)} elements; render every item"
                )
        if report.placeholder_elements:
            recommendations.append(
                f"Replace {len(report.placeholder_elements)} placeholder values with real content"
            )
        return recommendations

    def missing_summary(self, report: UtilizationReport, limit: int = 20) -> str:
        """Bullet list of missing elements, for feeding back into a prompt."""
        lines = [
            f'- {e.path}: "{element_text(e.value)}"'
            for e in report.missing_elements[:limit]
        ]
        extra = len(report.missing_elements) - limit
        if extra > 0:
            lines.append(f"- ... and {extra} more")
        return "\n".join(lines)


def validate_content_utilization(
    content: Any,
    artifact_text: Any,
    prefix_length: int = DEFAULT_MATCH_PREFIX_LENGTH,
) -> UtilizationReport:
    """Module-level shortcut for ``ContentUtilizationValidator().validate``."""
    return ContentUtilizationValidator(prefix_length=prefix_length).validate(content, artifact_text)


def report_to_dict(report: UtilizationReport) -> Dict[str, Any]:
    """Compact dict with the caller-facing fields."""
    return {
        "utilizationRate": report.utilization_rate,
        "usedElements": report.used_elements,
        "totalElements": report.total_elements,
        "missingElements": [
            {"path": e.path, "value": e.value} for e in report.missing_elements
        ],
    }

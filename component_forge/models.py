"""Pydantic data models for ComponentForge."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator


class ExtractionStrategy(str, Enum):
    """How a JSON candidate was located inside raw model output."""
    brace_balance = "brace_balance"
    fenced_block = "fenced_block"
    prefix_pattern = "prefix_pattern"
    bullet_pattern = "bullet_pattern"
    greedy_object = "greedy_object"
    array_pattern = "array_pattern"
    whole_text = "whole_text"


class ParseStrategy(str, Enum):
    """Which parse attempt turned a candidate into data."""
    strict_json = "strict_json"
    repaired_json = "repaired_json"
    sandbox_eval = "sandbox_eval"


class FailureKind(str, Enum):
    """Failure taxonomy reported on result objects."""
    upstream = "upstream"
    extraction = "extraction"
    parse = "parse"
    validation_shortfall = "validation_shortfall"


class ContentCategory(str, Enum):
    """Section a content element belongs to."""
    hero = "hero"
    feature = "feature"
    testimonial = "testimonial"
    stat = "stat"
    other = "other"


class RawResponse(BaseModel):
    """Unstructured output received from a generator."""
    text: str = Field(description="Raw response text")
    received_at: datetime = Field(default_factory=datetime.now, description="Time the response arrived")


class ExtractionCandidate(BaseModel):
    """A substring of a raw response believed to contain a JSON value."""
    span: Tuple[int, int] = Field(description="(start, end) offsets in the searched text, end exclusive")
    text: str = Field(min_length=1, description="Candidate text")
    strategy: ExtractionStrategy = Field(description="Strategy that produced the candidate")


class ParseResult(BaseModel):
    """Outcome of turning raw output into structured data."""
    success: bool = Field(description="Whether structured data was recovered")
    data: Any = Field(default=None, description="Recovered JSON value")
    error: Optional[str] = Field(default=None, description="Last error message on failure")
    error_kind: Optional[FailureKind] = Field(default=None, description="Failure category")
    strategy_used: Optional[ParseStrategy] = Field(
        default=None,
        description="Parse attempt that succeeded; None when the input was already structured"
    )
    extraction_strategy: Optional[ExtractionStrategy] = Field(
        default=None, description="Candidate strategy that produced the data"
    )
    raw_response_preview: Optional[str] = Field(
        default=None, description="First 1000 characters of the input, on failure"
    )

    @model_validator(mode="after")
    def _check_outcome(self) -> "ParseResult":
        if self.success and self.error is not None:
            raise ValueError("successful ParseResult cannot carry an error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("failed ParseResult needs an error and no data")
        return self


class ContentElement(BaseModel):
    """An atomic piece of required content."""
    path: str = Field(description="Location in the content object, e.g. features[1].title")
    value: Union[str, int, float] = Field(description="String or number that must appear")
    category: ContentCategory = Field(default=ContentCategory.other, description="Owning section")


class UtilizationReport(BaseModel):
    """Result of comparing content elements against a generated artifact."""
    total_elements: int = Field(default=0, description="Number of content elements")
    used_elements: int = Field(default=0, description="Elements found in the artifact")
    missing_elements: List[ContentElement] = Field(default_factory=list, description="Elements not found")
    placeholder_elements: List[ContentElement] = Field(
        default_factory=list, description="Elements rejected as placeholder text"
    )
    utilization_rate: float = Field(default=1.0, ge=0.0, le=1.0, description="used / total, 1.0 when empty")

    @model_validator(mode="after")
    def _check_counts(self) -> "UtilizationReport":
        if self.used_elements > self.total_elements:
            raise ValueError("used_elements cannot exceed total_elements")
        return self

    @property
    def utilization_percent(self) -> int:
        return round(self.utilization_rate * 100)

    def missing_by_category(self) -> Dict[str, List[ContentElement]]:
        grouped: Dict[str, List[ContentElement]] = {}
        for element in self.missing_elements:
            grouped.setdefault(element.category.value, []).append(element)
        return grouped


class AuthenticityIssue(BaseModel):
    """Placeholder or generic text found in content."""
    path: str = Field(description="Location of the offending value")
    pattern: str = Field(description="Placeholder pattern that matched")
    severity: str = Field(description="high, medium or low")


class AuthenticityReport(BaseModel):
    """Placeholder scan over a content object."""
    score: int = Field(default=100, description="0-100, higher is more authentic")
    issues: List[AuthenticityIssue] = Field(default_factory=list)


class CodeCheck(BaseModel):
    """Deterministic checks over generated component code."""
    passed: bool = Field(default=True)
    issues: List[str] = Field(default_factory=list, description="Blocking problems")
    warnings: List[str] = Field(default_factory=list, description="Non-blocking observations")
    utilization: Optional[UtilizationReport] = Field(default=None)


class AgentCallMetadata(BaseModel):
    """Timing and size information for one generator call."""
    agent: str = Field(description="Agent name")
    model: Optional[str] = Field(default=None, description="Model requested for the call")
    execution_time: float = Field(default=0.0, description="Wall-clock seconds")
    prompt_length: int = Field(default=0)
    response_length: int = Field(default=0)
    parsed: bool = Field(default=False, description="Whether the response parsed into structured data")
    strategy_used: Optional[ParseStrategy] = Field(default=None)
    parse_error: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=datetime.now)


class AgentCallResult(BaseModel):
    """Outcome of a single generator call."""
    success: bool
    response: Any = Field(default=None, description="Parsed data, or the raw text when parsing failed")
    error: Optional[str] = Field(default=None)
    error_kind: Optional[FailureKind] = Field(default=None)
    metadata: AgentCallMetadata


class StageRecord(BaseModel):
    """Bookkeeping for one orchestration stage."""
    agent: str
    success: bool = False
    execution_time: float = 0.0
    strategy_used: Optional[ParseStrategy] = None
    used_fallback: bool = False
    attempt: int = 1
    error: Optional[str] = None


class ValidationOutcome(BaseModel):
    """Combined verdict from the validator agent and deterministic checks."""
    score: int = Field(default=0, description="0-100")
    passed: bool = Field(default=False)
    critical_issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    attempt: int = Field(default=1)


class GenerationResult(BaseModel):
    """Manifest of a full prompt-to-component run."""
    version: str = Field(default="1.0")
    success: bool = False
    error: Optional[str] = None
    correlation_id: str = ""
    prompt: str = ""
    component_name: Optional[str] = None
    code: Optional[str] = None
    page_spec: Optional[Dict[str, Any]] = None
    design: Optional[Dict[str, Any]] = None
    content: Optional[Dict[str, Any]] = None
    layout: Optional[Dict[str, Any]] = None
    utilization: Optional[UtilizationReport] = None
    authenticity: Optional[AuthenticityReport] = None
    validation: Optional[ValidationOutcome] = None
    validation_history: List[ValidationOutcome] = Field(default_factory=list)
    stages: List[StageRecord] = Field(default_factory=list)
    agents_used: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    completeness: int = Field(default=0, description="Percent of spec/design/content/layout/code present")
    execution_time: float = 0.0
    models_used: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)

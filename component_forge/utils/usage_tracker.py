"""Token usage, cost estimates and per-stage call counts for a generation run."""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# USD per million tokens
_MODEL_PRICING = {
    # Groq
    "llama-3.3-70b-versatile": {"input": 0.59, "output": 0.79},
    "llama-3.1-8b-instant": {"input": 0.05, "output": 0.08},
    "openai/gpt-oss-120b": {"input": 0.15, "output": 0.75},
    # Anthropic
    "claude-sonnet-4-5-20250929": {"input": 3.00, "output": 15.00},
    "claude-haiku-4-5": {"input": 1.00, "output": 5.00},
    # OpenAI
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    # Google Gemini
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-pro": {"input": 1.25, "output": 10.00},
}


def price_per_million(model: str) -> Optional[Dict[str, float]]:
    """Input/output prices for ``model``, matching dated or prefixed ids loosely."""
    if not model:
        return None
    if model in _MODEL_PRICING:
        return _MODEL_PRICING[model]
    for known, prices in _MODEL_PRICING.items():
        if known in model or model in known:
            return prices
    return None


@dataclass
class ModelUsage:
    """Accumulated usage for one provider/model pair."""

    provider: str = ""
    model: str = ""
    calls: int = 0
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def estimated_cost(self) -> float:
        prices = price_per_million(self.model)
        if not prices:
            return 0.0
        return (self.input_tokens * prices["input"] + self.output_tokens * prices["output"]) / 1_000_000


@dataclass
class StepTiming:
    """One orchestration stage and the model calls made while it ran."""

    name: str
    start_time: float = 0.0
    end_time: float = 0.0
    calls: int = 0

    @property
    def duration(self) -> float:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


@dataclass
class UsageTracker:
    """Collects model usage for a run; calls are attributed to the open stage."""

    _models: Dict[str, ModelUsage] = field(default_factory=dict)
    _steps: List[StepTiming] = field(default_factory=list)
    _current_step: Optional[StepTiming] = None
    _start_time: float = field(default_factory=time.time)

    def record(self, provider: str, model: str, input_tokens: int = 0, output_tokens: int = 0) -> None:
        usage = self._models.setdefault(f"{provider}/{model}", ModelUsage(provider=provider, model=model))
        usage.calls += 1
        usage.input_tokens += input_tokens
        usage.output_tokens += output_tokens
        if self._current_step:
            self._current_step.calls += 1

    def start_step(self, name: str) -> None:
        self.end_step()
        self._current_step = StepTiming(name=name, start_time=time.time())

    def end_step(self) -> None:
        if self._current_step:
            self._current_step.end_time = time.time()
            self._steps.append(self._current_step)
            self._current_step = None

    @property
    def steps(self) -> List[StepTiming]:
        return list(self._steps)

    @property
    def total_api_calls(self) -> int:
        return sum(u.calls for u in self._models.values())

    @property
    def total_input_tokens(self) -> int:
        return sum(u.input_tokens for u in self._models.values())

    @property
    def total_output_tokens(self) -> int:
        return sum(u.output_tokens for u in self._models.values())

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens

    @property
    def total_cost(self) -> float:
        return sum(u.estimated_cost for u in self._models.values())

    def format_summary(self) -> str:
        """Stage and model tables printed after ``componentforge generate``."""
        lines = ["", "=" * 60, "  GENERATION SUMMARY", "=" * 60]
        lines.append(f"\n  Total time: {time.time() - self._start_time:.1f}s")

        if self._steps:
            lines.append(f"\n  {'Stage':<20} {'Time':>8} {'Calls':>6}")
            for step in self._steps:
                lines.append(f"  {step.name:<20} {step.duration:>7.1f}s {step.calls:>6}")

        if self._models:
            lines.append(f"\n  API Calls: {self.total_api_calls}")
            lines.append(
                f"  Tokens:    {self.total_tokens:,} "
                f"({self.total_input_tokens:,} in / {self.total_output_tokens:,} out)"
            )
            lines.append(f"\n  {'Model':<40} {'Calls':>6} {'Cost':>10}")
            for key in sorted(self._models):
                u = self._models[key]
                cost = f"${u.estimated_cost:.4f}" if u.estimated_cost > 0 else "free"
                lines.append(f"  {key:<40} {u.calls:>6} {cost:>10}")
            lines.append(f"\n  Estimated total cost: ${self.total_cost:.4f}")

        lines.append("=" * 60)
        return "\n".join(lines)

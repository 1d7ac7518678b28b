"""Single generator call with timing and structured-output recovery."""

import logging
import time
from typing import Any, Callable, Dict, Optional

from component_forge.models import AgentCallMetadata, AgentCallResult, FailureKind
from component_forge.utils.json_parsing import parse_structured
from component_forge.utils.log_context import LoggerLike

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_TOP_P = 0.9

# Agents that emit full component source need the large token budget
_LONG_OUTPUT_AGENTS = {"code_agent", "tailwind_stylist"}
# Agents that should stay close to deterministic
_PRECISE_AGENTS = {"layout_agent", "code_agent", "tailwind_stylist", "validator_agent"}


def agent_options(agent_name: str) -> Dict[str, Any]:
    """Default generation options for an agent."""
    return {
        "max_tokens": 32000 if agent_name in _LONG_OUTPUT_AGENTS else 4000,
        "temperature": 0.3 if agent_name in _PRECISE_AGENTS else 0.7,
        "top_p": DEFAULT_TOP_P,
    }


def call_agent(
    prompt_text: str,
    generator: Callable[[str], Optional[str]],
    agent_name: str = "agent",
    model: Optional[str] = None,
    parse: bool = True,
    logger: Optional[LoggerLike] = None,
) -> AgentCallResult:
    """
    Invoke ``generator`` exactly once and recover structured data from its output.

    Parameters
    ----------
    prompt_text : str
        Prompt passed to the generator
    generator : callable
        ``generator(prompt) -> text``; exceptions it raises are captured
    agent_name : str
        Name recorded in metadata and log lines
    model : str, optional
        Model the generator is configured with, for metadata only
    parse : bool
        If False the raw text is returned without parsing
    logger : logging.Logger or LoggerAdapter, optional
        Destination for log lines, defaults to this module's logger

    Returns
    -------
    AgentCallResult
        ``success`` is False only for upstream failures (exception or empty
        text). A response that does not parse is still a success; its raw
        text is returned and ``metadata.parsed`` is False.
    """
    log = logger or logging.getLogger(__name__)
    metadata = AgentCallMetadata(agent=agent_name, model=model, prompt_length=len(prompt_text or ""))
    start = time.monotonic()

    try:
        text = generator(prompt_text)
    except Exception as e:
        metadata.execution_time = time.monotonic() - start
        log.error(f"{agent_name} failed after {metadata.execution_time:.2f}s: {e}")
        return AgentCallResult(
            success=False,
            error=str(e) or type(e).__name__,
            error_kind=FailureKind.upstream,
            metadata=metadata,
        )

    metadata.execution_time = time.monotonic() - start
    if not text or not str(text).strip():
        log.warning(f"{agent_name} returned an empty response")
        return AgentCallResult(
            success=False,
            error="Empty response",
            error_kind=FailureKind.upstream,
            metadata=metadata,
        )

    text = str(text)
    metadata.response_length = len(text)
    response: Any = text.strip()
    if parse:
        result = parse_structured(text)
        if result.success:
            response = result.data
            metadata.parsed = True
            metadata.strategy_used = result.strategy_used
        else:
            metadata.parse_error = result.error
            log.warning(f"{agent_name} response did not parse: {result.error}")

    log.info(
        f"{agent_name} completed in {metadata.execution_time:.2f}s "
        f"({metadata.response_length} chars, parsed={metadata.parsed})"
    )
    return AgentCallResult(success=True, response=response, metadata=metadata)

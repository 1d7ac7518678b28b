"""Agent layer: single-call wrapper and the generation orchestrator."""

from component_forge.agent.agent_call import agent_options, call_agent
from component_forge.agent.orchestrator import GenerationOrchestrator, StageError

__all__ = ["GenerationOrchestrator", "StageError", "agent_options", "call_agent"]

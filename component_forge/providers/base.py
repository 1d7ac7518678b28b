"""Abstract base class and shared types for provider implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, Field


class ModelInfo(BaseModel):
    """Information about an available model."""
    id: str = Field(description="Model identifier (e.g. llama-3.3-70b-versatile)")
    provider: str = Field(description="Provider name (groq, openai, anthropic, gemini, ollama)")
    display_name: str = Field(default="", description="Human-readable name")
    capabilities: List[str] = Field(
        default_factory=list,
        description="Model capabilities: chat, embedding"
    )


class BaseProvider(ABC):
    """Abstract base for all provider implementations."""

    provider_name: str = ""
    default_model: str = ""

    @abstractmethod
    def chat(
        self,
        messages: list[dict],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        model: Optional[str] = None,
        top_p: Optional[float] = None,
    ) -> str:
        """Send a chat completion request. Returns the assistant text."""

    @abstractmethod
    def list_models(self) -> list[ModelInfo]:
        """Discover available models from this provider's API."""


def usage_from_openai(response) -> dict:
    """Token counts from an OpenAI-compatible completion response."""
    usage = getattr(response, "usage", None)
    if not usage:
        return {"input_tokens": 0, "output_tokens": 0}
    return {
        "input_tokens": getattr(usage, "prompt_tokens", 0) or 0,
        "output_tokens": getattr(usage, "completion_tokens", 0) or 0,
    }

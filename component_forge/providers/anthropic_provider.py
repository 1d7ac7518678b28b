"""Anthropic provider implementation."""

import logging
import os
from typing import Optional

import anthropic
from dotenv import load_dotenv

from component_forge.providers.base import BaseProvider, ModelInfo

load_dotenv()
logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """Anthropic Claude API provider."""

    provider_name = "anthropic"
    default_model = "claude-sonnet-4-5-20250929"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")
        self.client = anthropic.Anthropic(api_key=self.api_key)

    def chat(
        self,
        messages: list[dict],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        model: Optional[str] = None,
        top_p: Optional[float] = None,
    ) -> str:
        # System prompts travel as a separate parameter; top_p is not combined
        # with temperature on current Claude models.
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        params = {
            "model": model or self.default_model,
            "messages": [m for m in messages if m["role"] != "system"],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system:
            params["system"] = system
        response = self.client.messages.create(**params)
        self._last_usage = {
            "input_tokens": getattr(response.usage, "input_tokens", 0) if response.usage else 0,
            "output_tokens": getattr(response.usage, "output_tokens", 0) if response.usage else 0,
        }
        return "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )

    def list_models(self) -> list[ModelInfo]:
        models = []
        try:
            page = self.client.models.list(limit=100)
            for m in page.data:
                models.append(ModelInfo(
                    id=m.id,
                    provider="anthropic",
                    display_name=getattr(m, "display_name", m.id),
                    capabilities=["chat"],
                ))
        except Exception as e:
            logger.warning(f"Failed to list Anthropic models: {e}")
        return sorted(models, key=lambda m: m.id)

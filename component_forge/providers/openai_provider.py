"""OpenAI provider implementation."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

from component_forge.providers.base import BaseProvider, ModelInfo, usage_from_openai

load_dotenv()
logger = logging.getLogger(__name__)

_CHAT_PREFIXES = ("gpt-", "o1", "o3", "o4", "chatgpt")


class OpenAIProvider(BaseProvider):
    """OpenAI API provider."""

    provider_name = "openai"
    default_model = "gpt-4o"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not set")
        self.client = OpenAI(api_key=self.api_key)

    def chat(
        self,
        messages: list[dict],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        model: Optional[str] = None,
        top_p: Optional[float] = None,
    ) -> str:
        params = {
            "model": model or self.default_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if top_p is not None:
            params["top_p"] = top_p
        response = self.client.chat.completions.create(**params)
        self._last_usage = usage_from_openai(response)
        return response.choices[0].message.content or ""

    def list_models(self) -> list[ModelInfo]:
        models = []
        try:
            for m in self.client.models.list():
                mid = m.id
                if mid.startswith(_CHAT_PREFIXES):
                    caps = ["chat"]
                elif "embedding" in mid:
                    caps = ["embedding"]
                else:
                    continue
                models.append(ModelInfo(id=mid, provider="openai", display_name=mid, capabilities=caps))
        except Exception as e:
            logger.warning(f"Failed to list OpenAI models: {e}")
        return sorted(models, key=lambda m: m.id)

"""Groq provider implementation using its OpenAI-compatible API."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

from component_forge.providers.base import BaseProvider, ModelInfo, usage_from_openai

load_dotenv()
logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"

# Groq serves speech and moderation models from the same listing
_NON_CHAT_KEYWORDS = ("whisper", "guard", "tts", "playai")


class GroqProvider(BaseProvider):
    """Groq hosted inference via the OpenAI-compatible endpoint."""

    provider_name = "groq"
    default_model = "llama-3.3-70b-versatile"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key or os.getenv("GROQ_API_KEY")
        if not self.api_key:
            raise ValueError("GROQ_API_KEY not set")
        self.client = OpenAI(
            base_url=base_url or os.getenv("GROQ_BASE_URL", GROQ_BASE_URL),
            api_key=self.api_key,
        )

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
                if any(kw in mid.lower() for kw in _NON_CHAT_KEYWORDS):
                    continue
                models.append(ModelInfo(id=mid, provider="groq", display_name=mid, capabilities=["chat"]))
        except Exception as e:
            logger.warning(f"Failed to list Groq models: {e}")
        return sorted(models, key=lambda m: m.id)

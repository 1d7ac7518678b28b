"""Ollama provider implementation using OpenAI-compatible API."""

import logging
import os
from typing import Optional

import requests
from openai import OpenAI

from component_forge.providers.base import BaseProvider, ModelInfo, usage_from_openai

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"

_EMBEDDING_FAMILIES = {"nomic-embed-text", "mxbai-embed-large", "all-minilm", "bge-m3"}


class OllamaProvider(BaseProvider):
    """Ollama local LLM provider via OpenAI-compatible API."""

    provider_name = "ollama"

    def __init__(self, host: Optional[str] = None):
        self.host = host or os.getenv("OLLAMA_HOST", DEFAULT_HOST)
        self.client = OpenAI(base_url=f"{self.host}/v1", api_key="ollama")
        self._models_cache: Optional[list[ModelInfo]] = None

    @staticmethod
    def is_available(host: Optional[str] = None) -> bool:
        """Check if an Ollama server is running and reachable."""
        host = host or os.getenv("OLLAMA_HOST", DEFAULT_HOST)
        try:
            resp = requests.get(f"{host}/api/tags", timeout=3)
            return resp.status_code == 200
        except Exception:
            return False

    @property
    def default_model(self) -> str:
        if self._models_cache is None:
            self._models_cache = self.list_models()
        for m in self._models_cache:
            if "chat" in m.capabilities:
                return m.id
        return "llama3.2:latest"

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
            resp = requests.get(f"{self.host}/api/tags", timeout=5)
            resp.raise_for_status()
            for m in resp.json().get("models", []):
                name = m.get("name", "")
                base_name = name.split(":")[0].lower()
                caps = ["embedding"] if base_name in _EMBEDDING_FAMILIES else ["chat"]
                models.append(ModelInfo(id=name, provider="ollama", display_name=name, capabilities=caps))
        except Exception as e:
            logger.warning(f"Failed to list Ollama models: {e}")
        return sorted(models, key=lambda m: m.id)

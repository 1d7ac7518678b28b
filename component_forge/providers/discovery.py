"""Auto-discover available models across providers."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from component_forge.providers.base import BaseProvider, ModelInfo

load_dotenv()
logger = logging.getLogger(__name__)

_cached_models: Optional[list[ModelInfo]] = None

_KEY_ENV = {
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def _keyed_provider(name: str, api_key: str) -> BaseProvider:
    if name == "groq":
        from component_forge.providers.groq_provider import GroqProvider
        return GroqProvider(api_key=api_key)
    if name == "openai":
        from component_forge.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(api_key=api_key)
    if name == "anthropic":
        from component_forge.providers.anthropic_provider import AnthropicProvider
        return AnthropicProvider(api_key=api_key)
    if name == "gemini":
        from component_forge.providers.gemini_provider import GeminiProvider
        return GeminiProvider(api_key=api_key)
    raise ValueError(f"Unknown provider: {name}")


def discover_available_models(
    api_keys: Optional[dict[str, str]] = None,
    force_refresh: bool = False,
) -> list[ModelInfo]:
    """
    Discover available models from all configured providers.

    For each provider with an API key, calls list_models() and returns a
    unified list; a reachable local Ollama server is included too. Results
    are cached for the session.
    """
    global _cached_models
    if _cached_models is not None and not force_refresh:
        return _cached_models

    keys = api_keys or {name: os.getenv(env, "") for name, env in _KEY_ENV.items()}
    all_models: list[ModelInfo] = []

    for name in _KEY_ENV:
        if not keys.get(name):
            continue
        try:
            models = _keyed_provider(name, keys[name]).list_models()
            logger.info(f"Discovered {len(models)} {name} models")
            all_models.extend(models)
        except Exception as e:
            logger.info(f"{name} discovery skipped: {e}")

    from component_forge.providers.ollama_provider import OllamaProvider

    if OllamaProvider.is_available():
        try:
            models = OllamaProvider().list_models()
            logger.info(f"Discovered {len(models)} Ollama models")
            all_models.extend(models)
        except Exception as e:
            logger.info(f"Ollama discovery skipped: {e}")

    all_models.sort(key=lambda m: (m.provider, m.id))
    _cached_models = all_models
    logger.info(f"Total discovered models: {len(all_models)}")
    return all_models


def clear_discovery_cache() -> None:
    """Clear the cached model list."""
    global _cached_models
    _cached_models = None

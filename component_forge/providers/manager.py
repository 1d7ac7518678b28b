"""ProviderManager - unified interface for routing chat calls to the best available provider."""

import logging
from typing import Optional

from dotenv import load_dotenv

from component_forge.providers.base import BaseProvider, ModelInfo
from component_forge.providers.discovery import discover_available_models
from component_forge.utils.usage_tracker import UsageTracker

load_dotenv()
logger = logging.getLogger(__name__)

# Default model preference ranking (tried in order)
_CHAT_PREFERENCES = [
    ("groq", "llama-3.3-70b-versatile"),
    ("anthropic", "claude-sonnet-4-5-20250929"),
    ("openai", "gpt-4o"),
    ("gemini", "gemini-2.5-flash"),
]

_PROVIDER_DEFAULTS = {
    "groq": "llama-3.3-70b-versatile",
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-5-20250929",
    "gemini": "gemini-2.5-flash",
    "ollama": "llama3.2:latest",
}

# Model id prefixes served by Groq
_GROQ_PREFIXES = ("llama-", "meta-llama/", "mixtral-", "gemma2-", "qwen/", "moonshotai/", "openai/gpt-oss")


class ProviderManager:
    """
    Routes chat calls to the best available provider/model.

    Supports explicit model selection or auto-routing based on which
    providers have credentials configured.
    """

    def __init__(
        self,
        chat_model: Optional[str] = None,
        provider: Optional[str] = None,
        auto: bool = True,
    ):
        """
        Initialize the ProviderManager.

        Parameters
        ----------
        chat_model : override model for all agent calls
        provider : force all calls to one provider ('groq', 'openai', 'anthropic', 'gemini', 'ollama')
        auto : if True and no model specified, pick the best available
        """
        self.auto = auto
        self._providers: dict[str, BaseProvider] = {}
        self._available_models: Optional[list[ModelInfo]] = None
        self.usage = UsageTracker()
        self._forced_provider = provider
        if provider:
            self.chat_model = chat_model or _PROVIDER_DEFAULTS.get(provider, "")
        else:
            self.chat_model = chat_model

    def _get_provider(self, provider_name: str) -> BaseProvider:
        """Lazily initialize and cache a provider instance."""
        if provider_name not in self._providers:
            if provider_name == "groq":
                from component_forge.providers.groq_provider import GroqProvider
                self._providers[provider_name] = GroqProvider()
            elif provider_name == "openai":
                from component_forge.providers.openai_provider import OpenAIProvider
                self._providers[provider_name] = OpenAIProvider()
            elif provider_name == "anthropic":
                from component_forge.providers.anthropic_provider import AnthropicProvider
                self._providers[provider_name] = AnthropicProvider()
            elif provider_name == "gemini":
                from component_forge.providers.gemini_provider import GeminiProvider
                self._providers[provider_name] = GeminiProvider()
            elif provider_name == "ollama":
                from component_forge.providers.ollama_provider import OllamaProvider
                self._providers[provider_name] = OllamaProvider()
            else:
                raise ValueError(f"Unknown provider: {provider_name}")
        return self._providers[provider_name]

    def _provider_for_model(self, model_id: str) -> str:
        """Infer the provider from a model id."""
        if self._forced_provider:
            return self._forced_provider
        if model_id.startswith(_GROQ_PREFIXES):
            return "groq"
        if model_id.startswith(("gpt-", "o1", "o3", "o4", "chatgpt")):
            return "openai"
        if model_id.startswith("claude-"):
            return "anthropic"
        if model_id.startswith("gemini-"):
            return "gemini"
        for m in self._get_available_models():
            # Ollama ids carry a tag; "llama3.2" should match "llama3.2:latest"
            if m.id == model_id or m.id.split(":")[0] == model_id:
                return m.provider
        raise ValueError(f"Cannot determine provider for model: {model_id}")

    def _get_available_models(self) -> list[ModelInfo]:
        if self._available_models is None:
            self._available_models = discover_available_models()
        return self._available_models

    def resolve_model(self, explicit: Optional[str] = None) -> tuple[str, str]:
        """
        Resolve which (provider, model) handles a chat call.

        Returns (provider_name, model_id).
        """
        explicit = explicit or self.chat_model
        if explicit:
            return self._provider_for_model(explicit), explicit

        if self.auto:
            for prov, model in _CHAT_PREFERENCES:
                try:
                    self._get_provider(prov)
                    return prov, model
                except (ValueError, ImportError):
                    continue

        raise RuntimeError(
            "No chat provider available. "
            "Set GROQ_API_KEY, ANTHROPIC_API_KEY, OPENAI_API_KEY or GEMINI_API_KEY."
        )

    def _track(self, provider: BaseProvider, prov_name: str, model: str) -> None:
        """Record usage from the last API call on a provider."""
        last = getattr(provider, "_last_usage", None)
        if last:
            self.usage.record(
                provider=prov_name,
                model=model,
                input_tokens=last.get("input_tokens", 0),
                output_tokens=last.get("output_tokens", 0),
            )
            provider._last_usage = None
        else:
            self.usage.record(provider=prov_name, model=model)

    # --- Public API ---

    def chat(
        self,
        messages: list[dict],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        """Send a chat completion to the best available provider."""
        prov_name, model = self.resolve_model(model)
        logger.info(f"Chat: using {prov_name}/{model}")
        provider = self._get_provider(prov_name)
        result = provider.chat(
            messages, max_tokens=max_tokens, temperature=temperature, model=model, top_p=top_p
        )
        self._track(provider, prov_name, model)
        return result

    def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        """Single-turn completion: optional system prompt plus one user message."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return self.chat(messages, max_tokens=max_tokens, temperature=temperature, top_p=top_p, model=model)

    def get_models_used(self) -> dict[str, str]:
        """Return {'chat': 'provider/model'} for manifests."""
        try:
            prov, model = self.resolve_model()
        except (RuntimeError, ValueError):
            return {}
        return {"chat": f"{prov}/{model}"}

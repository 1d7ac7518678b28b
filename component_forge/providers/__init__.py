"""Provider abstraction layer for chat completion APIs."""

from component_forge.providers.base import BaseProvider, ModelInfo
from component_forge.providers.manager import ProviderManager

__all__ = ["BaseProvider", "ModelInfo", "ProviderManager"]

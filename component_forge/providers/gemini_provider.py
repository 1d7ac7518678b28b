"""Google Gemini provider implementation using the google-genai SDK."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from component_forge.providers.base import BaseProvider, ModelInfo

load_dotenv()
logger = logging.getLogger(__name__)


class GeminiProvider(BaseProvider):
    """Google Gemini API provider via google-genai SDK."""

    provider_name = "gemini"
    default_model = "gemini-2.5-flash"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY not set")
        from google import genai

        self.client = genai.Client(api_key=self.api_key)

    def chat(
        self,
        messages: list[dict],
        max_tokens: int = 4096,
        temperature: float = 0.7,
        model: Optional[str] = None,
        top_p: Optional[float] = None,
    ) -> str:
        from google.genai import types

        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        # Convert OpenAI-style messages to Gemini contents
        contents = []
        for msg in messages:
            if msg["role"] == "system":
                continue
            role = "user" if msg["role"] == "user" else "model"
            contents.append(types.Content(
                role=role,
                parts=[types.Part.from_text(text=msg["content"])],
            ))

        response = self.client.models.generate_content(
            model=model or self.default_model,
            contents=contents,
            config=types.GenerateContentConfig(
                max_output_tokens=max_tokens,
                temperature=temperature,
                top_p=top_p,
                system_instruction=system or None,
            ),
        )
        meta = getattr(response, "usage_metadata", None)
        self._last_usage = {
            "input_tokens": getattr(meta, "prompt_token_count", 0) or 0,
            "output_tokens": getattr(meta, "candidates_token_count", 0) or 0,
        }
        return response.text or ""

    def list_models(self) -> list[ModelInfo]:
        models = []
        try:
            for m in self.client.models.list():
                mid = m.name or ""
                if mid.startswith("models/"):
                    mid = mid[7:]
                if "gemini" not in mid.lower():
                    continue
                caps = ["embedding"] if "embedding" in mid.lower() else ["chat"]
                models.append(ModelInfo(
                    id=mid,
                    provider="gemini",
                    display_name=getattr(m, "display_name", mid) or mid,
                    capabilities=caps,
                ))
        except Exception as e:
            logger.warning(f"Failed to list Gemini models: {e}")
        return sorted(models, key=lambda m: m.id)

"""
Moderation Client

Single-call text classifier backed by a Gemini model.
"""

import logging
from typing import Optional

from google import genai
from google.genai import types

from core.config import ModerationConfig

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a content moderation expert. Your task is to determine if the provided "
    "text contains any harmful content, including but not limited to hate speech, "
    "harassment, incitement of violence, or explicit material. Respond with only a "
    'single word: "SAFE" if the content is acceptable, or "UNSAFE" if it violates '
    "these policies. Do not provide any explanation or additional text."
)


class ModerationClient:
    """Client for the generative text classifier"""

    def __init__(self, config: ModerationConfig, client: Optional[genai.Client] = None):
        self.config = config
        self.model = config.model
        self._client = client
        if self._client is None and config.is_configured:
            self._client = genai.Client(api_key=config.api_key)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def classify(self, text: str) -> str:
        """
        Ask the model for a verdict on text.

        Returns the raw reply, trimmed and upper-cased. Raises whatever the
        SDK raises.
        """
        if self._client is None:
            raise RuntimeError("Moderation client is not configured")

        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=text,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                temperature=0.0,
            ),
        )
        return (response.text or "").strip().upper()


__all__ = ["ModerationClient", "SYSTEM_INSTRUCTION"]

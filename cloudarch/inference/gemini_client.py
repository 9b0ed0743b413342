"""
Gemini generation backend.

Binds the response to the shared schema (schema-constrained decoding) and
grants a fixed thinking budget for the multi-section answer.

Dependencies: google.genai
"""

import logging
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from cloudarch.contract.schema import to_gemini_schema
from cloudarch.inference.base import GenerationBackend

logger = logging.getLogger(__name__)


class GeminiBackend(GenerationBackend):
    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-3-pro-preview",
        thinking_budget: int = 1024,
        client: Optional[genai.Client] = None,
    ) -> None:
        """
        Args:
            api_key: Google API key; required unless a client is injected
            model: Gemini model id
            thinking_budget: reasoning tokens granted per request
            client: pre-built genai.Client (tests inject a mock)

        Raises:
            ValueError: If neither api_key nor client is provided
        """
        if client is None and not api_key:
            raise ValueError("api_key is required")

        self.model = model
        self.thinking_budget = thinking_budget
        self._client = client or genai.Client(api_key=api_key)

    def build_config(self, schema: Dict[str, Any]) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=to_gemini_schema(schema),
            thinking_config=types.ThinkingConfig(thinking_budget=self.thinking_budget),
        )

    async def complete(self, prompt: str, schema: Dict[str, Any]) -> Optional[str]:
        logger.debug(
            "Calling Gemini model=%s thinking_budget=%d", self.model, self.thinking_budget
        )
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self.build_config(schema),
        )
        return response.text

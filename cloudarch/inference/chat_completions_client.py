import asyncio
import logging
import re
from typing import Any, Dict, Optional

import requests

from cloudarch.contract.schema import to_json_schema
from cloudarch.inference.base import GenerationBackend

logger = logging.getLogger(__name__)


class ChatCompletionsBackend(GenerationBackend):
    """OpenAI-compatible /chat/completions server with json_schema output."""

    def __init__(
        self,
        base_url: str,
        model: str,
        temperature: float = 0.2,
        reasoning_effort: Optional[str] = None,
        timeout: int = 300,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.reasoning_effort = reasoning_effort
        self.timeout = timeout

    def build_payload(self, prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "cloud_solution",
                    "strict": True,
                    "schema": to_json_schema(schema),
                },
            },
            "stream": False,
        }
        if self.reasoning_effort:
            payload["reasoning_effort"] = self.reasoning_effort
        return payload

    def _post(self, payload: Dict[str, Any]) -> Optional[str]:
        url = f"{self.base_url}/chat/completions"

        response = requests.post(url, json=payload, timeout=self.timeout)
        response.raise_for_status()

        content = response.json()["choices"][0]["message"].get("content")
        if not content:
            return None

        #  STRIP MARKDOWN FENCES
        content = re.sub(r"^```(?:json)?\s*", "", content.strip())
        content = re.sub(r"\s*```$", "", content.strip())

        return content

    async def complete(self, prompt: str, schema: Dict[str, Any]) -> Optional[str]:
        logger.debug("POST %s/chat/completions model=%s", self.base_url, self.model)
        return await asyncio.to_thread(self._post, self.build_payload(prompt, schema))

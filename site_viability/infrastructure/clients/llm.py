"""Generation provider client (OpenAI-compatible chat completions)"""

import json
from typing import Any, Dict

import httpx

from site_viability.config import settings
from site_viability.domain.exceptions import InsightGenerationError

UPSTREAM = "LLM"


class LLMClient:
    """Client requesting structured JSON insights from a chat-completions endpoint"""

    def __init__(
        self,
        api_key: str | None = None,
        endpoint: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or settings.llm_api_key
        self.endpoint = endpoint or settings.llm_endpoint
        self.model = model or settings.llm_model
        self.timeout = timeout or settings.llm_timeout_seconds
        self._transport = transport

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key)

    async def generate_insights(self, system_prompt: str, user_payload: str) -> Dict[str, Any]:
        """
        Request a JSON object from the model.

        Raises:
            InsightGenerationError: On timeout, transport failure, non-2xx status,
                empty content, malformed JSON, or a non-object JSON body
        """
        if not self.api_key:
            raise InsightGenerationError("LLM provider is not configured")

        body = {
            "model": self.model,
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_payload},
            ],
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                payload = response.json()
            except httpx.TimeoutException as e:
                raise InsightGenerationError(f"{UPSTREAM} timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise InsightGenerationError(f"{UPSTREAM} error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise InsightGenerationError(f"{UPSTREAM} unreachable: {e}") from e
            except ValueError as e:
                raise InsightGenerationError(f"{UPSTREAM} returned a non-JSON envelope") from e

        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise InsightGenerationError(f"{UPSTREAM} response missing message content") from e

        if not content:
            raise InsightGenerationError(f"{UPSTREAM} empty response")

        try:
            parsed = json.loads(content)
        except (TypeError, ValueError) as e:
            raise InsightGenerationError(f"{UPSTREAM} returned malformed JSON: {e}") from e

        if not isinstance(parsed, dict):
            raise InsightGenerationError(f"{UPSTREAM} returned JSON that is not an object")

        return parsed

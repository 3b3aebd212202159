"""Google Gemini LLM client using httpx.

Implements the LLMClient protocol for the Gemini ``generateContent`` REST
API. Uses httpx directly (already a project dependency) to avoid adding the
Google SDK as a dependency.
"""

import logging
from typing import Any

import httpx

from vitalis.llm.client import CompletionResponse, Message, UpstreamModelError

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com"
GEMINI_API_VERSION = "v1beta"


class GeminiClient:
    """LLM client for the Gemini ``generateContent`` API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = GEMINI_API_URL,
        timeout: int | None = None,
        temperature: float | None = None,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Google AI Studio API key
            model: Model name (e.g., "gemini-1.5-flash")
            base_url: API root URL
            timeout: Request timeout in seconds, None to wait indefinitely
            temperature: Default sampling temperature (None = model default)
        """
        self.model = model
        self.temperature = temperature

        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "x-goog-api-key": api_key,
                "content-type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
        )

    def _convert_messages(
        self, messages: list[Message]
    ) -> tuple[str | None, list[dict[str, Any]]]:
        """Convert internal Message format to Gemini contents.

        Gemini takes the system prompt as a separate ``systemInstruction``
        and calls the assistant role ``model``.

        Args:
            messages: List of Message objects

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_instruction = None
        contents: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
                continue

            role = "model" if msg.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": msg.content}]})

        return system_instruction, contents

    def _parse_text(self, data: dict[str, Any]) -> tuple[str, str]:
        """Pull the answer text and finish reason out of a response body.

        Raises:
            UpstreamModelError: If the body has no candidate text
        """
        try:
            candidate = data["candidates"][0]
            parts = candidate["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamModelError(f"{self.model} returned a malformed body") from e

        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        finish_reason = str(candidate.get("finishReason", "STOP")).lower()
        return text, finish_reason

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        """Generate a completion from Gemini.

        Args:
            messages: Conversation history
            temperature: Sampling temperature override
            max_tokens: Maximum tokens to generate

        Returns:
            CompletionResponse with the generated text

        Raises:
            UpstreamModelError: On transport errors, non-2xx statuses or
                malformed bodies
        """
        system_instruction, contents = self._convert_messages(messages)

        payload: dict[str, Any] = {"contents": contents}

        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        generation_config: dict[str, Any] = {}
        temperature = temperature if temperature is not None else self.temperature
        if temperature is not None:
            generation_config["temperature"] = temperature
        if max_tokens:
            generation_config["maxOutputTokens"] = max_tokens
        if generation_config:
            payload["generationConfig"] = generation_config

        url = f"/{GEMINI_API_VERSION}/models/{self.model}:generateContent"

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise UpstreamModelError(f"{self.model} request failed: {e}") from e
        except ValueError as e:
            raise UpstreamModelError(f"{self.model} returned invalid JSON") from e

        content, finish_reason = self._parse_text(data)
        logger.debug("Gemini %s finished with %s", self.model, finish_reason)

        return CompletionResponse(content=content, finish_reason=finish_reason)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

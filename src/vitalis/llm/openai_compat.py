"""Client for OpenAI-compatible chat completion APIs."""

from typing import Any

import openai
from openai import AsyncOpenAI

from vitalis.llm.client import CompletionResponse, Message, UpstreamModelError


class OpenAICompatibleClient:
    """LLM client for any OpenAI-compatible ``/chat/completions`` endpoint.

    DeepSeek, OpenAI itself and most self-hosted inference servers expose the
    same request/response shape, so the primary chat model is reached through
    the official SDK pointed at a configurable base URL. The SDK sends the API
    key as a bearer token.
    """

    def __init__(
        self,
        model: str,
        base_url: str,
        api_key: str = "none",
        timeout: int | None = None,
        temperature: float = 0.7,
    ) -> None:
        """Initialise the client.

        Args:
            model: Model name served by the backend.
            base_url: OpenAI-compatible endpoint root.
            api_key: Bearer token (the SDK requires a non-empty value).
            timeout: Request timeout in seconds, None to wait indefinitely.
            temperature: Default sampling temperature.
        """
        self.model = model
        self.temperature = temperature
        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert internal Message format to OpenAI format."""
        return [{"role": msg.role, "content": msg.content} for msg in messages]

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        """Generate a completion.

        Args:
            messages: Conversation history.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens to generate.

        Returns:
            CompletionResponse with the answer text.

        Raises:
            UpstreamModelError: If the call fails or the body has no answer.
        """
        params: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "temperature": temperature if temperature is not None else self.temperature,
        }

        if max_tokens:
            params["max_tokens"] = max_tokens

        try:
            response = await self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            raise UpstreamModelError(f"{self.model} request failed: {e}") from e

        # The SDK builds response models without validation
        choices = getattr(response, "choices", None)
        if not choices:
            raise UpstreamModelError(f"{self.model} returned no choices")

        choice = choices[0]
        message = getattr(choice, "message", None)
        content = getattr(message, "content", None)
        if not content:
            raise UpstreamModelError(f"{self.model} returned an empty answer")

        return CompletionResponse(
            content=content,
            finish_reason=getattr(choice, "finish_reason", None) or "stop",
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()

"""LLM client protocol and data types."""

from dataclasses import dataclass
from typing import Protocol


class UpstreamModelError(Exception):
    """A completion API was unreachable, rejected the call or returned garbage."""


@dataclass
class Message:
    """A message in the conversation."""

    role: str  # "system", "user", "assistant"
    content: str


@dataclass
class CompletionResponse:
    """Response from LLM completion."""

    content: str
    finish_reason: str = "stop"


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    model: str

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        """Generate a completion from the LLM.

        Args:
            messages: Conversation history
            temperature: Sampling temperature override
            max_tokens: Maximum tokens to generate

        Returns:
            CompletionResponse with the generated text

        Raises:
            UpstreamModelError: On transport failure, non-2xx status or a
                response body without usable text
        """
        ...

    async def close(self) -> None:
        """Release the underlying HTTP resources."""
        ...

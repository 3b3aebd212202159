"""LLM client implementations."""

from .client import CompletionResponse, LLMClient, Message, UpstreamModelError
from .factory import create_chat_client, create_extraction_client
from .gemini import GeminiClient
from .openai_compat import OpenAICompatibleClient

__all__ = [
    "CompletionResponse",
    "GeminiClient",
    "LLMClient",
    "Message",
    "OpenAICompatibleClient",
    "UpstreamModelError",
    "create_chat_client",
    "create_extraction_client",
]

"""Factory functions for creating LLM clients from configuration."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from vitalis.llm.gemini import GeminiClient
from vitalis.llm.openai_compat import OpenAICompatibleClient

if TYPE_CHECKING:
    from vitalis.config.schema import VitalisConfig

logger = logging.getLogger(__name__)


def create_chat_client(config: VitalisConfig) -> OpenAICompatibleClient:
    """Create the primary chat client.

    The bearer token is read from the environment variable named by
    ``config.chat.api_key_env``. A missing token is logged; calls then fail
    upstream and the chat path degrades to its fallback answer.

    Args:
        config: Vitalis configuration.

    Returns:
        Client for the configured OpenAI-compatible endpoint.
    """
    chat = config.chat
    api_key = os.environ.get(chat.api_key_env, "")
    if not api_key:
        logger.warning("Chat API key not found in %s, requests will be rejected", chat.api_key_env)

    return OpenAICompatibleClient(
        model=chat.model,
        base_url=chat.base_url,
        api_key=api_key or "none",
        timeout=chat.timeout,
        temperature=chat.temperature,
    )


def create_extraction_client(config: VitalisConfig) -> GeminiClient | None:
    """Create the background fact extraction client.

    Args:
        config: Vitalis configuration.

    Returns:
        A Gemini client, or None when extraction is disabled or no API key
        is available.
    """
    extraction = config.extraction
    if not extraction.enabled:
        return None

    api_key = os.environ.get(extraction.api_key_env, "")
    if not api_key:
        logger.warning(
            "Extraction API key not found in %s, fact extraction disabled",
            extraction.api_key_env,
        )
        return None

    return GeminiClient(
        api_key=api_key,
        model=extraction.model,
        base_url=extraction.base_url,
        timeout=extraction.timeout,
    )

"""Chat turn orchestration.

Builds the persona-driven system prompt from a user's facts and recent
history, calls the primary chat model, stores the turn and hands the user's
message to the background fact extractor.

Usage::

    from vitalis.agent import ResponseGenerator

    generator = ResponseGenerator(llm, storage, assembler, extractor, persona)
    answer = await generator.generate(user_id, "I think I'm allergic to peanuts")
"""

from vitalis.agent.generator import FALLBACK_RESPONSE, ResponseGenerator
from vitalis.agent.prompt import build_system_prompt

__all__ = [
    "FALLBACK_RESPONSE",
    "ResponseGenerator",
    "build_system_prompt",
]

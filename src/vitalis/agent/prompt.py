"""System prompt construction from the persona and the user's context."""

import json

from vitalis.config.schema import Persona
from vitalis.memory.context import ContextWindow

SYSTEM_PROMPT_TEMPLATE = """\
You are {name}, {role}.
Tone: {tone}.
Directives: {directives}.

CRITICAL USER DATA (Use this to customize your answer):
{facts_block}

PREVIOUS CONVERSATION:
{history_block}

Task: Answer the user's new message: "{message}".
If they describe symptoms, ask clarifying questions. Keep it safe and medical."""


def build_system_prompt(persona: Persona, context: ContextWindow, message: str) -> str:
    """Render the system prompt for one chat turn.

    Args:
        persona: Assistant persona
        context: Facts and recent history for the user
        message: The new user message

    Returns:
        System prompt text
    """
    return SYSTEM_PROMPT_TEMPLATE.format(
        name=persona.name,
        role=persona.role,
        tone=persona.tone,
        directives=json.dumps(list(persona.directives)),
        facts_block=context.facts_block,
        history_block=context.history_block,
        message=message,
    )

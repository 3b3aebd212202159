"""Response generation for a single chat turn."""

import logging

from vitalis.agent.prompt import build_system_prompt
from vitalis.config.schema import Persona
from vitalis.llm.client import LLMClient, Message, UpstreamModelError
from vitalis.memory.context import ContextAssembler
from vitalis.memory.extractor import MemoryExtractor
from vitalis.memory.storage import MemoryStorage

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = (
    "I apologize, but I'm having trouble accessing my medical engine right now. "
    "Please try again in a moment."
)


class ResponseGenerator:
    """Answers a user message with their facts and recent history in context."""

    def __init__(
        self,
        llm: LLMClient,
        storage: MemoryStorage,
        assembler: ContextAssembler,
        extractor: MemoryExtractor,
        persona: Persona,
        temperature: float = 0.7,
    ):
        """Initialize the generator.

        Args:
            llm: Primary chat model client
            storage: Persistence gateway turns are written to
            assembler: Builds the context window for each turn
            extractor: Background fact extractor triggered after each answer
            persona: Assistant persona for the system prompt
            temperature: Sampling temperature for the chat model
        """
        self.llm = llm
        self.storage = storage
        self.assembler = assembler
        self.extractor = extractor
        self.persona = persona
        self.temperature = temperature

    async def generate(self, user_id: str, message: str) -> str:
        """Generate an answer to one user message.

        On success the user message and the answer are stored together in one
        transaction and fact extraction is scheduled in the background. If the
        chat model fails, nothing is stored and a fixed fallback answer is
        returned.

        Args:
            user_id: Existing user identifier
            message: Non-empty user message

        Returns:
            The model's answer, or FALLBACK_RESPONSE

        Raises:
            StorageError: If context can't be loaded or the turn can't be saved
        """
        context = self.assembler.assemble(user_id)
        system_prompt = build_system_prompt(self.persona, context, message)

        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=message),
        ]

        try:
            response = await self.llm.complete(messages, temperature=self.temperature)
        except UpstreamModelError:
            logger.exception("Chat model call failed for user %s", user_id)
            return FALLBACK_RESPONSE

        answer = response.content

        self.storage.append_exchange(user_id, message, answer)

        self.extractor.schedule(user_id, message)

        return answer

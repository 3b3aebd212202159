"""Assemble a user's stored facts and recent turns into prompt text."""

from dataclasses import dataclass

from vitalis.memory.schema import FactRecord, MessageRecord
from vitalis.memory.storage import MemoryStorage

NO_FACTS_SENTINEL = "No prior data known."


@dataclass(frozen=True)
class ContextWindow:
    """Facts and recent history for one prompt."""

    facts: list[FactRecord]
    history: list[MessageRecord]  # chronological
    facts_block: str
    history_block: str


def render_facts(facts: list[FactRecord]) -> str:
    """Render facts as a bullet list, or the sentinel when there are none."""
    if not facts:
        return NO_FACTS_SENTINEL
    return "\n".join(f"- {fact.content}" for fact in facts)


def render_history(history: list[MessageRecord]) -> str:
    """Render turns as ``role: content`` lines in the given order."""
    return "\n".join(f"{msg.role.value}: {msg.content}" for msg in history)


class ContextAssembler:
    """Loads what the assistant knows about a user before each model call."""

    def __init__(self, storage: MemoryStorage, history_limit: int = 5):
        """Initialize the assembler.

        Args:
            storage: Persistence gateway to read from
            history_limit: Number of most recent turns to include
        """
        self.storage = storage
        self.history_limit = history_limit

    def assemble(self, user_id: str) -> ContextWindow:
        """Build the context window for a user.

        All facts are included. Only the ``history_limit`` newest turns are
        loaded, then put back in chronological order.

        Args:
            user_id: User identifier

        Returns:
            Context window with rendered text blocks
        """
        facts = self.storage.list_facts(user_id)
        recent = self.storage.list_recent_messages(user_id, limit=self.history_limit)
        history = list(reversed(recent))

        return ContextWindow(
            facts=facts,
            history=history,
            facts_block=render_facts(facts),
            history_block=render_history(history),
        )

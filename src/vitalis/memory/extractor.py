"""Background extraction of durable user facts."""

import asyncio
import logging

from vitalis.llm.client import LLMClient, Message
from vitalis.memory.schema import FactRecord
from vitalis.memory.storage import MemoryStorage

logger = logging.getLogger(__name__)

EXTRACT_FACT_PROMPT = """\
Analyze this user message: "{message}".
Extract strictly permanent health facts (e.g., "I live in Delhi", "I am vegan", "I have a rash").
Return ONLY the fact as a text string. If no permanent fact is found, return "null"."""

NO_FACT_TOKEN = "null"
MIN_FACT_LENGTH = 6


def parse_fact(raw: str) -> str | None:
    """Turn a raw extraction answer into a fact, or None if there is none.

    The answer is trimmed. ``null`` (any case) and anything five characters
    or shorter mean "no fact"; everything else is kept verbatim.
    """
    fact = raw.strip()
    if fact.lower() == NO_FACT_TOKEN or len(fact) < MIN_FACT_LENGTH:
        return None
    return fact


class MemoryExtractor:
    """Decide whether a user message holds a durable fact and store it.

    Extraction runs as detached asyncio tasks. Callers never await them and
    their failures only reach the log.
    """

    def __init__(self, llm: LLMClient | None, storage: MemoryStorage) -> None:
        """Initialize the extractor.

        Args:
            llm: Extraction model client, or None to disable extraction
            storage: Persistence gateway facts are written to
        """
        self.llm = llm
        self.storage = storage
        self._tasks: set[asyncio.Task[FactRecord | None]] = set()

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    @property
    def pending(self) -> int:
        """Number of extraction tasks still running."""
        return len(self._tasks)

    async def extract_and_save(self, user_id: str, message: str) -> FactRecord | None:
        """Ask the extraction model for a fact and persist it if there is one.

        Never raises: any error is logged and swallowed.

        Args:
            user_id: Owning user
            message: Raw user message

        Returns:
            The stored fact, or None
        """
        if self.llm is None:
            return None

        try:
            prompt = EXTRACT_FACT_PROMPT.format(message=message)
            response = await self.llm.complete([Message(role="user", content=prompt)])
            fact = parse_fact(response.content)
            if fact is None:
                return None

            record = self.storage.append_fact(user_id, fact)
            logger.info("Memory saved for %s: %s", user_id, fact)
            return record
        except Exception as e:
            logger.warning("Fact extraction failed for %s: %s", user_id, e)
            return None

    def schedule(self, user_id: str, message: str) -> asyncio.Task[FactRecord | None] | None:
        """Start extraction in the background without waiting for it.

        A strong reference to the task is kept until it finishes so it is not
        garbage collected mid-flight.

        Args:
            user_id: Owning user
            message: Raw user message

        Returns:
            The spawned task, or None when extraction is disabled
        """
        if self.llm is None:
            logger.debug("Fact extraction disabled, skipping message from %s", user_id)
            return None

        task = asyncio.get_running_loop().create_task(self.extract_and_save(user_id, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for pending extractions, giving up after ``timeout`` seconds.

        Tasks still running after the timeout are left alone and may be
        dropped when the process exits.
        """
        if not self._tasks:
            return

        _done, still_pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if still_pending:
            logger.warning("%d fact extraction(s) still running at shutdown", len(still_pending))

"""User memory for vitalis.

Persists users, conversation turns and extracted facts in SQLite, assembles
the per-prompt context window, and distils durable facts from user messages
in the background.

Components:

- :class:`MemoryStorage` - SQLite persistence gateway
- :class:`ContextAssembler` - Facts + recent history rendered for prompts
- :class:`MemoryExtractor` - Fire-and-forget fact extraction
"""

from vitalis.memory.context import ContextAssembler, ContextWindow
from vitalis.memory.extractor import MemoryExtractor
from vitalis.memory.storage import MemoryStorage, StorageError

__all__ = [
    "ContextAssembler",
    "ContextWindow",
    "MemoryExtractor",
    "MemoryStorage",
    "StorageError",
]

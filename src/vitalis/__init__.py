"""Vitalis - memory-backed health chat backend.

Vitalis proxies user chat messages to a hosted language model, keeps each
user's conversation history, and distils durable personal facts (allergies,
diet, location, conditions) from what users say so later answers can take
them into account.

Key modules:

- :mod:`vitalis.agent` - Persona prompt and response generation
- :mod:`vitalis.memory` - SQLite persistence, context assembly, fact extraction
- :mod:`vitalis.llm` - LLM client abstraction (OpenAI-compatible, Gemini)
- :mod:`vitalis.server` - FastAPI application and routes
- :mod:`vitalis.config` - YAML configuration and persona loading
"""

__version__ = "0.1.0"

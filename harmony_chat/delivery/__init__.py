"""
Delivery package - non-LLM components of the message-delivery pipeline.

This package contains the components that move messages without talking to
a language model:
- PacedRevealEngine: Reveals a received answer at a fixed cadence
- ConversationStoreAdapter: Façade over the conversation store with local fallback
- Conversation stores: In-memory and JSON-file implementations
"""

from .reveal_engine import PacedRevealEngine, RevealHandle
from .store_adapter import ConversationStoreAdapter
from .stores import InMemoryConversationStore, JsonFileConversationStore

__all__ = [
    'PacedRevealEngine',
    'RevealHandle',
    'ConversationStoreAdapter',
    'InMemoryConversationStore',
    'JsonFileConversationStore',
]

"""
Façade between the orchestrator and the conversation store.

The adapter times and logs every store call, wraps failures in the pipeline
error taxonomy, and keeps local-only conversations in an in-memory store
when the remote store could not create one. It never retries.
"""

import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..core.errors import StoreError, StoreUnavailable, StoreWriteFailed
from ..core.models import Conversation, Message, LOCAL_CONVERSATION_PREFIX
from ..core.protocols import ChatLogger, ConversationStore
from .stores import InMemoryConversationStore


class ConversationStoreAdapter:
    """Routes conversation operations to the remote or the local store."""

    def __init__(
        self,
        store: ConversationStore,
        logger: ChatLogger,
        local_store: Optional[InMemoryConversationStore] = None,
    ):
        """
        Initialize the store adapter.

        Args:
            store: The persistent conversation store
            logger: Logger for store operations
            local_store: Store for local-only conversations (in-memory if None)
        """
        self.store = store
        self.logger = logger
        self.local_store = local_store or InMemoryConversationStore(id_prefix=LOCAL_CONVERSATION_PREFIX)

    @staticmethod
    def is_local(conversation_id: str) -> bool:
        return conversation_id.startswith(LOCAL_CONVERSATION_PREFIX)

    def _route(self, conversation_id: str) -> ConversationStore:
        return self.local_store if self.is_local(conversation_id) else self.store

    async def create_conversation(self, title: str) -> str:
        """Create a conversation in the persistent store."""
        conversation_id = await self._call(
            "create_conversation", {"title": title}, StoreUnavailable,
            lambda: self.store.create_conversation(title),
        )
        if not conversation_id:
            raise StoreUnavailable("create_conversation", "Store returned no conversation id")
        return conversation_id

    async def create_local_conversation(self, title: str) -> Conversation:
        """Record a conversation that lives only in this process."""
        conversation_id = await self.local_store.create_conversation(title)
        self.logger.log_warning(f"Using local-only conversation {conversation_id}")
        return Conversation(id=conversation_id, title=title)

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        store = self._route(conversation_id)
        return await self._call(
            "get_conversation", {"conversation_id": conversation_id}, StoreUnavailable,
            lambda: store.get_conversation(conversation_id),
        )

    async def list_conversations(self) -> List[Conversation]:
        """Persistent conversations followed by local-only ones."""
        remote = await self._call(
            "list_conversations", {}, StoreUnavailable,
            self.store.list_conversations,
        )
        local = await self.local_store.list_conversations()
        return list(remote) + local

    async def append_message(self, conversation_id: str, message: Message) -> None:
        store = self._route(conversation_id)
        await self._call(
            "append_message",
            {"conversation_id": conversation_id, "message_id": message.id, "role": message.role},
            StoreWriteFailed,
            lambda: store.append_message(conversation_id, message.finalized()),
        )

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        store = self._route(conversation_id)
        await self._call(
            "rename_conversation", {"conversation_id": conversation_id, "title": title}, StoreWriteFailed,
            lambda: store.rename_conversation(conversation_id, title),
        )

    async def delete_conversation(self, conversation_id: str) -> None:
        store = self._route(conversation_id)
        await self._call(
            "delete_conversation", {"conversation_id": conversation_id}, StoreWriteFailed,
            lambda: store.delete_conversation(conversation_id),
        )

    async def _call(
        self,
        operation: str,
        arguments: Dict[str, Any],
        error_type: type,
        func: Callable[[], Awaitable[Any]],
    ) -> Any:
        self.logger.log_function_call(operation, arguments)
        start_time = time.time()
        try:
            result = await func()
        except StoreError:
            self.logger.log_function_result(operation, False, time.time() - start_time)
            raise
        except Exception as e:
            self.logger.log_function_result(operation, False, time.time() - start_time, {"error": str(e)})
            raise error_type(operation, f"{operation} failed: {e}") from e
        self.logger.log_function_result(operation, True, time.time() - start_time)
        return result

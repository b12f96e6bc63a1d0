import asyncio
from typing import Any, Dict, List, Optional

import pytest

from harmony_chat.agents.completion_gateway import CompletionGateway
from harmony_chat.agents.orchestrator import DeliveryOrchestrator
from harmony_chat.core.config import ChatConfig
from harmony_chat.core.models import Conversation, Message
from harmony_chat.core.prompts import PromptLibrary
from harmony_chat.core.session import PipelineSession
from harmony_chat.delivery.reveal_engine import PacedRevealEngine
from harmony_chat.delivery.store_adapter import ConversationStoreAdapter
from harmony_chat.delivery.stores import InMemoryConversationStore
from harmony_chat.interfaces.logging_interface import StandardLogger


class ProviderError(Exception):
    """Provider exception carrying an HTTP status, like litellm's."""

    def __init__(self, status_code: int, message: str = "provider error"):
        super().__init__(message)
        self.status_code = status_code


class FlakyStore(InMemoryConversationStore):
    """In-memory store whose operations can be made to fail or, for appends, to wait."""

    def __init__(self):
        super().__init__()
        self.fail = set()
        self.gate: Optional[asyncio.Event] = None

    def _check(self, operation: str):
        if operation in self.fail:
            raise ConnectionError(f"store offline during {operation}")

    async def create_conversation(self, title: str) -> str:
        self._check("create")
        return await super().create_conversation(title)

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        self._check("get")
        return await super().get_conversation(conversation_id)

    async def list_conversations(self) -> List[Conversation]:
        self._check("list")
        return await super().list_conversations()

    async def append_message(self, conversation_id: str, message: Message) -> None:
        self._check("append")
        if self.gate is not None:
            await self.gate.wait()
        await super().append_message(conversation_id, message)

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        self._check("rename")
        await super().rename_conversation(conversation_id, title)

    async def delete_conversation(self, conversation_id: str) -> None:
        self._check("delete")
        await super().delete_conversation(conversation_id)


class FakeLLMClient:
    """Stands in for LLMClient; answers with canned text or raises."""

    def __init__(self, answer: str = "Here is my answer."):
        self.answer = answer
        self.error: Optional[BaseException] = None
        self.requests: List[List[Dict[str, Any]]] = []
        self.gate: Optional[asyncio.Event] = None
        self.on_request = None

    async def get_response(self, messages: List[Dict[str, Any]]) -> Any:
        self.requests.append(messages)
        if self.on_request is not None:
            self.on_request(messages)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return {"choices": [{"message": {"role": "assistant", "content": self.answer}}]}


class RecordingUI:
    """ChatUserInterface that records what it was asked to show."""

    def __init__(self):
        self.events: List[tuple] = []

    async def get_user_input(self, prompt: str = "You: ") -> Optional[str]:
        return None

    def display_chat_message(self, message: Message) -> None:
        self.events.append(("message", message.role, message.content))

    def begin_reveal(self, message: Message) -> None:
        self.events.append(("begin_reveal", message.id))

    def update_reveal(self, revealed: str) -> None:
        self.events.append(("update_reveal", revealed))

    def end_reveal(self) -> None:
        self.events.append(("end_reveal",))

    def display_conversations(self, conversations, current_id) -> None:
        self.events.append(("conversations", len(conversations)))

    def display_error(self, error: str) -> None:
        self.events.append(("error", error))

    def display_info(self, info: str) -> None:
        self.events.append(("info", info))

    def display_warning(self, warning: str) -> None:
        self.events.append(("warning", warning))

    def initialize_session(self) -> None:
        pass

    def cleanup_session(self) -> None:
        pass

    def of_kind(self, kind: str) -> List[tuple]:
        return [event for event in self.events if event[0] == kind]


class Harness:
    """An orchestrator wired to fakes."""

    def __init__(self, config: Optional[ChatConfig] = None):
        self.config = config or ChatConfig(reveal_cadence_ms=0, call_to_action_delay=0)
        self.logger = StandardLogger("harmony_chat.tests")
        self.store = FlakyStore()
        self.client = FakeLLMClient()
        self.ui = RecordingUI()
        self.session = PipelineSession()
        self.prompts = PromptLibrary(self.config.language, self.config.call_to_action_url)
        self.adapter = ConversationStoreAdapter(self.store, self.logger)
        self.gateway = CompletionGateway(self.client, self.logger, timeout=self.config.completion_timeout)
        self.orchestrator = DeliveryOrchestrator(
            session=self.session,
            store=self.adapter,
            gateway=self.gateway,
            reveal_engine=PacedRevealEngine(self.logger, cadence_ms=self.config.reveal_cadence_ms),
            ui=self.ui,
            logger=self.logger,
            prompts=self.prompts,
            config=self.config
        )

    async def stored_messages(self, conversation_id: str) -> List[Message]:
        store = self.adapter.local_store if self.adapter.is_local(conversation_id) else self.store
        conversation = await store.get_conversation(conversation_id)
        return conversation.messages if conversation else []


@pytest.fixture
def harness():
    return Harness()


@pytest.fixture
def logger():
    return StandardLogger("harmony_chat.tests")

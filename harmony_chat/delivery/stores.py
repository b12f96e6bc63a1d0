"""
Concrete conversation stores.

`InMemoryConversationStore` keeps conversations in process memory and also
backs local-only conversations. `JsonFileConversationStore` persists them to
a single JSON document so console sessions survive restarts.
"""

import asyncio
import json
import time
from pathlib import Path
from typing import Dict, List, Optional

from ..core.models import Conversation, Message


class InMemoryConversationStore:
    """Conversation store held entirely in memory."""

    def __init__(self, id_prefix: str = ""):
        self.id_prefix = id_prefix
        self.conversations: Dict[str, Conversation] = {}
        self._last_id = 0

    def _new_id(self) -> str:
        now = time.time_ns() // 1_000_000
        self._last_id = max(now, self._last_id + 1)
        return f"{self.id_prefix}{self._last_id}"

    def _require(self, conversation_id: str) -> Conversation:
        if conversation_id not in self.conversations:
            raise KeyError(f"Conversation '{conversation_id}' not found")
        return self.conversations[conversation_id]

    async def create_conversation(self, title: str) -> str:
        conversation_id = self._new_id()
        self.conversations[conversation_id] = Conversation(id=conversation_id, title=title)
        return conversation_id

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        conversation = self.conversations.get(conversation_id)
        return conversation.model_copy(deep=True) if conversation else None

    async def list_conversations(self) -> List[Conversation]:
        return [c.model_copy(deep=True) for c in reversed(list(self.conversations.values()))]

    async def append_message(self, conversation_id: str, message: Message) -> None:
        self._require(conversation_id).messages.append(message.finalized())

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        self._require(conversation_id).title = title

    async def delete_conversation(self, conversation_id: str) -> None:
        self._require(conversation_id)
        del self.conversations[conversation_id]


class JsonFileConversationStore(InMemoryConversationStore):
    """In-memory store that rewrites a JSON file after every change."""

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self._lock = asyncio.Lock()
        if self.path.exists():
            self._load()

    def _load(self):
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        for item in data.get("conversations", []):
            conversation = Conversation.model_validate(item)
            self.conversations[conversation.id] = conversation
        ids = [int(cid) for cid in self.conversations if cid.isdigit()]
        self._last_id = max(ids, default=0)

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "conversations": [c.model_dump(mode="json") for c in self.conversations.values()]
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    async def create_conversation(self, title: str) -> str:
        async with self._lock:
            conversation_id = await super().create_conversation(title)
            self._save()
            return conversation_id

    async def append_message(self, conversation_id: str, message: Message) -> None:
        async with self._lock:
            await super().append_message(conversation_id, message)
            self._save()

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        async with self._lock:
            await super().rename_conversation(conversation_id, title)
            self._save()

    async def delete_conversation(self, conversation_id: str) -> None:
        async with self._lock:
            await super().delete_conversation(conversation_id)
            self._save()

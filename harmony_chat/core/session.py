"""
Process-local pipeline session state.

One `PipelineSession` exists per user session and is owned by the
`DeliveryOrchestrator`. Nothing else mutates it.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

from .models import Conversation, InstructionOverride, Message

if TYPE_CHECKING:
    from ..delivery.reveal_engine import RevealHandle


@dataclass
class StagedMessage:
    """The single assistant message currently undergoing paced reveal."""

    message: Message
    conversation_id: Optional[str]
    revealed: str = ""
    handle: Optional["RevealHandle"] = None


@dataclass
class PipelineSession:
    """Mutable state of one chat session."""

    current_conversation_id: Optional[str] = None
    conversations: Dict[str, Conversation] = field(default_factory=dict)
    staged: Optional[StagedMessage] = None
    input_locked: bool = True
    request_in_flight: bool = False
    error: Optional[str] = None
    instruction_overrides: Dict[str, InstructionOverride] = field(default_factory=dict)
    _last_id: int = 0

    @property
    def current_conversation(self) -> Optional[Conversation]:
        if self.current_conversation_id is None:
            return None
        return self.conversations.get(self.current_conversation_id)

    @property
    def instruction_override(self) -> Optional[InstructionOverride]:
        """Instruction override of the active conversation, if any."""
        if self.current_conversation_id is None:
            return None
        return self.instruction_overrides.get(self.current_conversation_id)

    @property
    def busy(self) -> bool:
        return self.staged is not None or self.request_in_flight

    @property
    def accepts_input(self) -> bool:
        """Whether a new submission may start now."""
        if self.busy:
            return False
        return not self.input_locked or self.current_conversation_id is None

    def visible_messages(self) -> List[Message]:
        conversation = self.current_conversation
        messages = list(conversation.messages) if conversation else []
        if self.staged is not None and self.staged.conversation_id == self.current_conversation_id:
            messages.append(self.staged.message)
        return messages

    def next_message_id(self) -> str:
        # Millisecond timestamps, bumped so ids stay unique and increasing
        now = time.time_ns() // 1_000_000
        self._last_id = max(now, self._last_id + 1)
        return str(self._last_id)

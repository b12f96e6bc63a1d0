"""
Data models for chat turns and conversations.

Messages and conversations are pydantic models so that the persistent
stores can serialise them directly. The delivery flags (`revealing`,
`is_initial_instruction`) are transient and excluded from serialisation.
"""

from typing import List, Literal, Optional, Dict
from pydantic import BaseModel, Field


APOLOGY_PREFIX = "Sorry, I encountered an error"
COMPLETION_APOLOGY = f"{APOLOGY_PREFIX} generating a response. Please try again."
SUBMISSION_APOLOGY = f"{APOLOGY_PREFIX} processing your request."

LOCAL_CONVERSATION_PREFIX = "local-"

Role = Literal["user", "assistant"]


class Message(BaseModel):
    """A single chat turn."""

    id: str
    role: Role
    content: str
    revealing: bool = Field(default=False, exclude=True)
    is_initial_instruction: bool = Field(default=False, exclude=True)

    def finalized(self) -> "Message":
        """Copy of this message with the reveal flag cleared."""
        return self.model_copy(update={"revealing": False})

    def to_provider(self) -> Dict[str, str]:
        """Provider-facing `{role, content}` pair."""
        return {"role": self.role, "content": self.content.strip()}


class Conversation(BaseModel):
    """An ordered, append-only sequence of messages."""

    id: str
    title: str
    messages: List[Message] = Field(default_factory=list)

    @property
    def is_local(self) -> bool:
        return self.id.startswith(LOCAL_CONVERSATION_PREFIX)

    def has_user_message(self) -> bool:
        return any(message.role == "user" for message in self.messages)


class InstructionOverride(BaseModel):
    """System-level instruction sent ahead of the conversation when enabled."""

    value: str
    enabled: bool = True

    @property
    def active(self) -> Optional[str]:
        return self.value if self.enabled and self.value.strip() else None


def derive_title(text: str, max_words: int = 3) -> str:
    """
    Derive a conversation title from the leading words of a message.

    Args:
        text: The user's message
        max_words: Number of leading words kept in the title

    Returns:
        The first `max_words` words, followed by '...' when words were dropped
    """
    words = text.split()
    title = " ".join(words[:max_words])
    return title + ("..." if len(words) > max_words else "")


def is_apology(content: str) -> bool:
    return content.startswith(APOLOGY_PREFIX)

"""
Error taxonomy for the message-delivery pipeline.

Store failures and completion failures are raised as exceptions by the
store adapter and the completion gateway, and caught at the orchestrator
boundary where they become an apology message or a session error.
"""

from enum import Enum
from typing import Optional


class ChatPipelineError(Exception):
    """Base class for every failure the delivery pipeline knows about."""


class StoreError(ChatPipelineError):
    """A conversation store operation failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(message)
        self.operation = operation


class StoreUnavailable(StoreError):
    """The store could not be reached (creation or reads)."""


class StoreWriteFailed(StoreError):
    """A write to an existing conversation failed."""


class ConversationUnavailable(ChatPipelineError):
    """The conversation a flow was working on is no longer in the session."""


class FailureKind(str, Enum):
    """Classification of completion failures."""

    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    BAD_REQUEST = "bad_request"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NO_VALID_INPUT = "no_valid_input"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    FailureKind.RATE_LIMITED: "Rate limit exceeded. Please try again in a moment.",
    FailureKind.AUTH_FAILED: "Authentication failed. Please check your API key.",
    FailureKind.BAD_REQUEST: "Invalid request. The model or parameters may be incorrect.",
    FailureKind.PROVIDER_UNAVAILABLE: "The language model provider is unavailable.",
    FailureKind.NO_VALID_INPUT: "No valid messages to send.",
    FailureKind.UNKNOWN: "The language model request failed.",
}


class CompletionFailed(ChatPipelineError):
    """The completion provider did not produce an answer."""

    def __init__(self, kind: FailureKind, message: Optional[str] = None):
        super().__init__(message or kind.description)
        self.kind = kind


class NoValidInput(CompletionFailed):
    """Nothing was left to send after filtering the history."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(FailureKind.NO_VALID_INPUT, message)

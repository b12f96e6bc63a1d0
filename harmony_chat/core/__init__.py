"""
Core abstractions for the chat delivery pipeline.

This module provides the protocol interfaces, data models, session state
and error taxonomy shared by the agents and delivery packages.
"""

from .protocols import ChatUserInterface, ChatLogger, ConversationStore
from .models import Message, Conversation, InstructionOverride, derive_title
from .errors import (
    ChatPipelineError,
    StoreUnavailable,
    StoreWriteFailed,
    ConversationUnavailable,
    CompletionFailed,
    NoValidInput,
    FailureKind,
)
from .session import PipelineSession, StagedMessage
from .config import ChatConfig

__all__ = [
    'ChatUserInterface',
    'ChatLogger',
    'ConversationStore',
    'Message',
    'Conversation',
    'InstructionOverride',
    'derive_title',
    'ChatPipelineError',
    'StoreUnavailable',
    'StoreWriteFailed',
    'ConversationUnavailable',
    'CompletionFailed',
    'NoValidInput',
    'FailureKind',
    'PipelineSession',
    'StagedMessage',
    'ChatConfig',
]

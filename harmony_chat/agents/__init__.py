#!/usr/bin/env python3
"""
Agents package - LLM-dependent components of the chat pipeline.

This package contains the components that talk to a language model,
separated from the message-moving components in the delivery package.
"""

from .llm_client import LLMClient
from .completion_gateway import CompletionGateway, classify_provider_error
from .orchestrator import DeliveryOrchestrator

__all__ = [
    'LLMClient',
    'CompletionGateway',
    'classify_provider_error',
    'DeliveryOrchestrator',
]

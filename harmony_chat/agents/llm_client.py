"""
LLM client for handling communication with language models.

This module provides a frontend-agnostic way to request one completed
answer from an LLM through litellm, optionally collapsing a streamed
response into a single message, with proper logging.
"""

import time
from typing import List, Dict, Any
import litellm

from ..core.protocols import ChatLogger


class LLMClient:
    """Frontend-agnostic async LLM client."""

    def __init__(
        self,
        model: str,
        temperature: float,
        logger: ChatLogger,
        stream: bool = False
    ):
        """
        Initialize the LLM client.

        Args:
            model: LLM model to use
            temperature: Temperature for LLM responses
            logger: Logger for recording LLM interactions
            stream: Request an event stream and collapse it into one response
        """
        self.model = model
        self.temperature = temperature
        self.logger = logger
        self.stream = stream

    async def get_response(self, messages: List[Dict[str, Any]]) -> Any:
        """
        Get a complete response from the LLM.

        Args:
            messages: Conversation messages, optionally led by a system message

        Returns:
            LLM response object
        """
        start_time = time.time()

        has_system_prompt = bool(messages) and messages[0].get("role") == "system"
        self.logger.log_llm_request(self.model, messages, has_system_prompt)

        completion_params = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "stream": self.stream,
        }

        if self.stream:
            chunks = []
            async for chunk in await litellm.acompletion(**completion_params):
                chunks.append(chunk)
            response = litellm.stream_chunk_builder(chunks, messages=messages)
        else:
            response = await litellm.acompletion(**completion_params)

        duration = time.time() - start_time
        content = response_text(response)
        self.logger.log_llm_response(content or "", duration)

        return response


def response_text(response: Any) -> str:
    """
    Extract the answer text from a provider response.

    Accepts litellm `ModelResponse` objects as well as plain mappings in the
    chat-completions (`choices[0].message.content`) or flat (`content`,
    `output_text`) shapes.

    Returns:
        The answer text, or an empty string if none is present
    """
    if response is None:
        return ""
    if isinstance(response, str):
        return response

    choices = _field(response, "choices")
    if choices:
        first = choices[0]
        message = _field(first, "message") or _field(first, "delta")
        content = _field(message, "content") if message is not None else None
        if content is None:
            content = _field(first, "text")
        return content or ""

    for key in ("content", "output_text", "text"):
        value = _field(response, key)
        if isinstance(value, str):
            return value
    return ""


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)

"""
Completion gateway between the orchestrator and the LLM client.

The gateway turns a conversation history into a provider request, calls the
client under a bounded timeout and normalises the outcome: either one
answer string is returned or a classified `CompletionFailed` is raised.
Nothing is retried here; retrying is a user resubmission.
"""

import asyncio
from typing import Dict, List, Optional, Sequence

import litellm

from ..core.errors import CompletionFailed, FailureKind, NoValidInput
from ..core.models import InstructionOverride, Message, is_apology
from ..core.protocols import ChatLogger
from .llm_client import LLMClient, response_text


class CompletionGateway:
    """Produces one answer per conversation history, or a classified failure."""

    def __init__(self, llm_client: LLMClient, logger: ChatLogger, timeout: Optional[float] = 60.0):
        """
        Initialize the completion gateway.

        Args:
            llm_client: Client used to reach the language model
            logger: Logger for request outcomes
            timeout: Seconds to wait for an answer (None waits indefinitely)
        """
        self.llm_client = llm_client
        self.logger = logger
        self.timeout = timeout

    @staticmethod
    def filter_history(history: Sequence[Message]) -> List[Message]:
        """Drop blank messages and earlier apologies."""
        return [
            message for message in history
            if message.content.strip() and not is_apology(message.content)
        ]

    def build_request(
        self,
        history: Sequence[Message],
        instruction_override: Optional[InstructionOverride] = None,
    ) -> List[Dict[str, str]]:
        """
        Build the provider message list.

        Raises:
            NoValidInput: If nothing is left after filtering
        """
        messages = self.filter_history(history)
        if not messages:
            raise NoValidInput()

        request = []
        instruction = instruction_override.active if instruction_override else None
        if instruction:
            request.append({"role": "system", "content": instruction})
        request.extend(message.to_provider() for message in messages)
        return request

    async def complete(
        self,
        history: Sequence[Message],
        instruction_override: Optional[InstructionOverride] = None,
    ) -> str:
        """
        Get one completed answer for `history`.

        Args:
            history: Prior messages plus the new user turn, in order
            instruction_override: Optional system-level instruction

        Returns:
            The answer text

        Raises:
            CompletionFailed: With the failure classification
        """
        try:
            request = self.build_request(history, instruction_override)
        except NoValidInput:
            self.logger.log_warning("No valid messages to send; provider not contacted")
            raise

        try:
            response = await asyncio.wait_for(self.llm_client.get_response(request), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            self.logger.log_error(f"Completion timed out after {self.timeout}s")
            raise CompletionFailed(
                FailureKind.PROVIDER_UNAVAILABLE,
                f"No answer from the language model within {self.timeout} seconds.",
            ) from e
        except Exception as e:
            kind = classify_provider_error(e)
            self.logger.log_error(f"Completion failed ({kind.value}): {e}")
            raise CompletionFailed(kind) from e

        content = response_text(response)
        if not content.strip():
            self.logger.log_error("Completion returned no content")
            raise CompletionFailed(FailureKind.UNKNOWN, "No content received from the language model.")
        return content


_STATUS_KINDS = {
    400: FailureKind.BAD_REQUEST,
    401: FailureKind.AUTH_FAILED,
    403: FailureKind.AUTH_FAILED,
    404: FailureKind.BAD_REQUEST,
    408: FailureKind.PROVIDER_UNAVAILABLE,
    422: FailureKind.BAD_REQUEST,
    429: FailureKind.RATE_LIMITED,
}


def classify_provider_error(error: BaseException) -> FailureKind:
    """Classify a provider exception by status code, type, then message."""
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        if status in _STATUS_KINDS:
            return _STATUS_KINDS[status]
        if status >= 500:
            return FailureKind.PROVIDER_UNAVAILABLE

    if isinstance(error, (litellm.Timeout, litellm.APIConnectionError, litellm.ServiceUnavailableError,
                          ConnectionError, asyncio.TimeoutError)):
        return FailureKind.PROVIDER_UNAVAILABLE

    message = str(error).lower()
    if "rate limit" in message or "429" in message:
        return FailureKind.RATE_LIMITED
    if "authentication" in message or "api key" in message or "401" in message:
        return FailureKind.AUTH_FAILED
    if "model" in message or "400" in message:
        return FailureKind.BAD_REQUEST
    return FailureKind.UNKNOWN

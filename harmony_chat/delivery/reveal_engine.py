"""
Paced reveal of an already-received answer.

The engine emits progressively longer prefixes of a message's text at a
fixed cadence on the running event loop, then reports completion exactly
once. Each reveal runs as its own task behind a `RevealHandle`, which is the
cancellation token for that reveal.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Iterator, Optional, Union

from ..core.models import Message
from ..core.protocols import ChatLogger


ProgressCallback = Callable[[str], Union[None, Awaitable[None]]]
CompleteCallback = Callable[[Message], Union[None, Awaitable[None]]]


class RevealHandle:
    """Cancellation token and completion future for one reveal."""

    def __init__(self, message: Message, conversation_id: Optional[str]):
        self.message = message
        self.conversation_id = conversation_id
        self.task: Optional[asyncio.Task] = None
        self._cancelled = False
        self._completed = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def completed(self) -> bool:
        return self._completed

    def cancel(self) -> bool:
        """
        Stop emitting ticks and suppress the completion callback.

        Returns:
            False if the reveal had already completed or been cancelled
        """
        if self._completed or self._cancelled:
            return False
        self._cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()
        return True

    async def wait(self) -> None:
        """Wait until the reveal (and its completion callback) has finished."""
        if self.task is None:
            return
        try:
            await self.task
        except asyncio.CancelledError:
            if not self._cancelled:
                raise


class PacedRevealEngine:
    """Reveals message text in fixed-size slices at a fixed cadence."""

    def __init__(self, logger: ChatLogger, cadence_ms: float = 5.0, chunk_size: int = 1):
        """
        Initialize the reveal engine.

        Args:
            logger: Logger for reveal lifecycle events
            cadence_ms: Default delay between two emissions, in milliseconds
            chunk_size: Number of characters added per emission
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.logger = logger
        self.cadence_ms = cadence_ms
        self.chunk_size = chunk_size

    @staticmethod
    def slices(full_text: str, chunk_size: int = 1) -> Iterator[str]:
        """Yield the successive prefixes of `full_text`, ending with the full text."""
        for end in range(chunk_size, len(full_text) + chunk_size, chunk_size):
            yield full_text[:min(end, len(full_text))]

    def reveal(
        self,
        message: Message,
        on_progress: ProgressCallback,
        on_complete: CompleteCallback,
        cadence_ms: Optional[float] = None,
        conversation_id: Optional[str] = None,
    ) -> RevealHandle:
        """
        Start revealing `message.content` on the running event loop.

        Args:
            message: Message whose full content is revealed
            on_progress: Called with each emitted prefix
            on_complete: Called once with the message after the last emission
            cadence_ms: Delay between emissions (engine default if None)
            conversation_id: Conversation the message was staged for

        Returns:
            Handle used to cancel or await the reveal
        """
        handle = RevealHandle(message, conversation_id)
        cadence = self.cadence_ms if cadence_ms is None else cadence_ms
        handle.task = asyncio.get_running_loop().create_task(
            self._run(handle, cadence / 1000.0, on_progress, on_complete)
        )
        self.logger.log_debug(
            f"Revealing message {message.id} ({len(message.content)} chars, {cadence}ms cadence)"
        )
        return handle

    async def _run(
        self,
        handle: RevealHandle,
        delay: float,
        on_progress: ProgressCallback,
        on_complete: CompleteCallback,
    ) -> None:
        for prefix in self.slices(handle.message.content, self.chunk_size):
            await asyncio.sleep(delay)
            if handle.cancelled:
                return
            await _maybe_await(on_progress(prefix))

        if handle.cancelled:
            return
        handle._completed = True
        self.logger.log_debug(f"Reveal of message {handle.message.id} complete")
        try:
            await _maybe_await(on_complete(handle.message))
        except Exception as e:
            self.logger.log_error(f"Reveal completion handler failed: {e}", exc_info=True)
            raise


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result

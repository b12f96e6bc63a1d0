"""
Delivery orchestrator for the chat message pipeline.

This module contains the state machine that takes a user submission through
persistence, completion, paced reveal and final persistence, and that keeps
the session consistent when the user switches or deletes conversations
while an answer is still being revealed.
"""

import asyncio
import functools
from typing import Any, Dict, List, Optional

from ..core.config import ChatConfig
from ..core.errors import (
    ChatPipelineError,
    CompletionFailed,
    ConversationUnavailable,
    StoreUnavailable,
    StoreWriteFailed,
)
from ..core.models import (
    COMPLETION_APOLOGY,
    SUBMISSION_APOLOGY,
    Conversation,
    InstructionOverride,
    Message,
    derive_title,
)
from ..core.prompts import PromptLibrary
from ..core.protocols import ChatUserInterface, ChatLogger, ConversationStore
from ..core.session import PipelineSession, StagedMessage
from ..delivery.reveal_engine import PacedRevealEngine, RevealHandle
from ..delivery.store_adapter import ConversationStoreAdapter
from .completion_gateway import CompletionGateway
from .llm_client import LLMClient


class DeliveryOrchestrator:
    """Owns the pipeline session and drives every message through delivery."""

    def __init__(
        self,
        session: PipelineSession,
        store: ConversationStoreAdapter,
        gateway: CompletionGateway,
        reveal_engine: PacedRevealEngine,
        ui: ChatUserInterface,
        logger: ChatLogger,
        prompts: PromptLibrary,
        config: ChatConfig
    ):
        """
        Initialize the orchestrator.

        Args:
            session: Session state owned by this orchestrator
            store: Conversation store adapter
            gateway: Completion gateway for assistant answers
            reveal_engine: Engine revealing staged answers
            ui: User interface notified of visible changes
            logger: Logger implementation
            prompts: Fixed texts for the problem-definition flow
            config: Pipeline configuration
        """
        self.session = session
        self.store = store
        self.gateway = gateway
        self.reveal_engine = reveal_engine
        self.ui = ui
        self.logger = logger
        self.prompts = prompts
        self.config = config
        self._reveal_handle: Optional[RevealHandle] = None

        self.logger.log_info("Delivery orchestrator initialized")

    @classmethod
    def from_config(
        cls,
        config: ChatConfig,
        store: ConversationStore,
        ui: ChatUserInterface,
        logger: ChatLogger,
        session: Optional[PipelineSession] = None
    ) -> "DeliveryOrchestrator":
        """Wire an orchestrator and its collaborators from a configuration."""
        llm_client = LLMClient(
            model=config.model,
            temperature=config.temperature,
            logger=logger,
            stream=config.stream
        )
        return cls(
            session=session or PipelineSession(),
            store=ConversationStoreAdapter(store, logger),
            gateway=CompletionGateway(llm_client, logger, timeout=config.completion_timeout),
            reveal_engine=PacedRevealEngine(
                logger,
                cadence_ms=config.reveal_cadence_ms,
                chunk_size=config.reveal_chunk_size
            ),
            ui=ui,
            logger=logger,
            prompts=PromptLibrary(config.language, config.call_to_action_url),
            config=config
        )

    # Read access for frontends

    @property
    def messages(self) -> List[Message]:
        """Messages of the active conversation, including the staged one."""
        return self.session.visible_messages()

    @property
    def staged(self) -> Optional[StagedMessage]:
        return self.session.staged

    @property
    def error(self) -> Optional[str]:
        return self.session.error

    @property
    def input_locked(self) -> bool:
        return self.session.input_locked

    @property
    def current_conversation(self) -> Optional[Conversation]:
        return self.session.current_conversation

    # Submission

    async def submit(self, text: str) -> bool:
        """
        Submit a user message and stage the assistant answer for reveal.

        Args:
            text: The user's message

        Returns:
            True if an answer was staged, False if the submission was
            rejected, failed or its conversation stopped being active
        """
        session = self.session
        if not text or not text.strip():
            self.logger.log_debug("Ignoring blank submission")
            return False
        if not session.accepts_input:
            self.logger.log_warning("Submission rejected: input is locked")
            return False

        session.error = None
        session.input_locked = True
        session.request_in_flight = True
        conversation_id = session.current_conversation_id
        self.logger.log_info(f"Processing user message: {text[:50]}...")

        try:
            title = derive_title(text)
            user_message = Message(id=session.next_message_id(), role="user", content=text.strip())

            if conversation_id is None:
                conversation_id = await self._open_conversation(title)
                await self._append(conversation_id, user_message)
            else:
                is_first_user_message = not self._conversation(conversation_id).has_user_message()
                await self._append(conversation_id, user_message)
                if is_first_user_message:
                    await self._rename(conversation_id, title)

            history = list(self._conversation(conversation_id).messages)
            answer = await self.gateway.complete(history, session.instruction_overrides.get(conversation_id))

            assistant_message = Message(
                id=session.next_message_id(),
                role="assistant",
                content=answer,
                revealing=True
            )
            if conversation_id != session.current_conversation_id:
                # The user moved on: store the answer without revealing it
                self.logger.log_warning(
                    f"Saving answer for conversation {conversation_id} unrevealed: active conversation changed"
                )
                await self._append(conversation_id, assistant_message.finalized())
                return False

            self._stage(assistant_message, conversation_id)
            return True
        except Exception as e:
            await self._recover(conversation_id, e)
            return False
        finally:
            session.request_in_flight = False

    async def _recover(self, conversation_id: Optional[str], error: Exception):
        """Turn a submission failure into an apology message or a session error."""
        session = self.session
        self.logger.log_error(
            f"Submission failed: {error}",
            exc_info=not isinstance(error, ChatPipelineError)
        )

        if conversation_id is not None and conversation_id in session.conversations:
            content = COMPLETION_APOLOGY if isinstance(error, CompletionFailed) else SUBMISSION_APOLOGY
            apology = Message(id=session.next_message_id(), role="assistant", content=content)
            try:
                await self._append(conversation_id, apology)
            except StoreWriteFailed as e:
                self.logger.log_warning(f"Apology kept locally only: {e}")
                self._record(conversation_id, apology)
                self._release_input(conversation_id, str(e))
                return
            self._release_input(conversation_id)
        else:
            self._release_input(conversation_id, str(error) or "An unknown error occurred.")

    def _owns_input(self, conversation_id: Optional[str]) -> bool:
        """Whether a flow for this conversation may still change the input lock."""
        return conversation_id == self.session.current_conversation_id and self.session.staged is None

    def _release_input(self, conversation_id: Optional[str], error: Optional[str] = None):
        if not self._owns_input(conversation_id):
            self.logger.log_info(f"Leaving input lock alone: conversation {conversation_id} is no longer active")
            return
        if error:
            self._set_error(error)
        self.session.input_locked = False

    # Paced reveal

    def _stage(self, message: Message, conversation_id: str):
        staged = StagedMessage(message=message, conversation_id=conversation_id)
        self.session.staged = staged
        self.session.input_locked = True
        self.ui.begin_reveal(message)

        staged.handle = self.reveal_engine.reveal(
            message,
            on_progress=functools.partial(self._on_reveal_progress, staged),
            on_complete=functools.partial(self.on_reveal_complete, conversation_id=conversation_id),
            cadence_ms=self.config.reveal_cadence_ms,
            conversation_id=conversation_id
        )
        self._reveal_handle = staged.handle

    def _on_reveal_progress(self, staged: StagedMessage, revealed: str):
        if self.session.staged is not staged:
            return
        staged.revealed = revealed
        self.ui.update_reveal(revealed)

    async def on_reveal_complete(self, message: Message, conversation_id: Optional[str] = None):
        """
        Persist a fully revealed message.

        Ordinary answers are followed, after a short delay, by the
        call-to-action message and input stays locked. The onboarding
        instruction unlocks input instead.

        Args:
            message: The message whose reveal finished
            conversation_id: Conversation active when the message was staged
        """
        session = self.session
        staged = session.staged
        if staged is not None and staged.message.id == message.id:
            if conversation_id is None:
                conversation_id = staged.conversation_id
            session.staged = None
            self.ui.end_reveal()

        if conversation_id is None or conversation_id != session.current_conversation_id:
            self.logger.log_info(f"Discarding revealed message {message.id}: conversation changed")
            return
        if not message.content.strip():
            self.logger.log_warning(f"Revealed message {message.id} is empty; not saved")
            self._release_input(conversation_id, "The assistant returned an empty answer. Please try again.")
            return

        try:
            await self._append(conversation_id, message.finalized())
        except StoreWriteFailed as e:
            self.logger.log_error(f"Could not save revealed message {message.id}: {e}")
            self._release_input(conversation_id, str(e))
            return

        if message.is_initial_instruction:
            self._release_input(conversation_id)
            return

        await asyncio.sleep(self.config.call_to_action_delay)
        call_to_action = Message(
            id=session.next_message_id(),
            role="assistant",
            content=self.prompts.call_to_action()
        )
        try:
            await self._append(conversation_id, call_to_action)
        except StoreWriteFailed as e:
            self.logger.log_warning(f"Call-to-action kept locally only: {e}")
            self._record(conversation_id, call_to_action)
        if session.current_conversation_id == conversation_id:
            session.input_locked = True

    async def wait_for_reveal(self):
        """Wait for the latest reveal and its completion handling to finish."""
        if self._reveal_handle is not None:
            await self._reveal_handle.wait()

    def _cancel_staged(self, reason: str):
        staged = self.session.staged
        if staged is None:
            return
        self.session.staged = None
        if staged.handle is not None:
            staged.handle.cancel()
        self.ui.end_reveal()
        self.logger.log_info(f"Cancelled reveal of message {staged.message.id}: {reason}")

    # Conversation flows

    def start_new_conversation(self):
        """Return to the no-conversation (onboarding) state."""
        self._cancel_staged("new conversation")
        self.session.current_conversation_id = None
        self.session.error = None
        self.session.input_locked = True
        self.logger.log_info("Started new conversation")

    async def start_problem_definition_flow(self) -> bool:
        """
        Create a conversation and reveal the onboarding instruction in it.

        Returns:
            True if the instruction was staged
        """
        session = self.session
        self._cancel_staged("problem definition started")
        session.error = None
        session.input_locked = True

        try:
            conversation_id = await self._open_conversation(self.prompts.problem_title())
        except Exception as e:
            self.logger.log_error(f"Error starting problem definition: {e}", exc_info=True)
            self._set_error("Failed to create new conversation. Please try again.")
            return False

        session.instruction_overrides[conversation_id] = InstructionOverride(value=self.prompts.problem_prompt())
        instruction = Message(
            id=session.next_message_id(),
            role="assistant",
            content=self.prompts.problem_instruction(),
            revealing=True,
            is_initial_instruction=True
        )
        self._stage(instruction, conversation_id)
        return True

    async def select_conversation(self, conversation_id: str) -> bool:
        """
        Make an existing conversation the active one.

        Returns:
            True if the conversation was loaded
        """
        session = self.session
        if self._navigation_blocked("switch conversations"):
            return False
        self._cancel_staged("conversation switched")

        try:
            conversation = await self.store.get_conversation(conversation_id)
        except StoreUnavailable as e:
            conversation = session.conversations.get(conversation_id)
            if conversation is None:
                self._set_error(str(e))
                return False
            self.logger.log_warning(f"Using cached copy of conversation {conversation_id}: {e}")

        if conversation is None:
            self._set_error(f"Conversation '{conversation_id}' not found.")
            return False

        session.conversations[conversation_id] = conversation
        session.current_conversation_id = conversation_id
        session.error = None
        self.logger.log_info(f"Selected conversation {conversation_id}")
        return True

    async def list_conversations(self) -> List[Conversation]:
        """Conversations known to the store, or the session's copies if it is unreachable."""
        try:
            return await self.store.list_conversations()
        except StoreUnavailable as e:
            self.logger.log_warning(f"Listing cached conversations only: {e}")
            return list(self.session.conversations.values())

    async def delete_conversation(self, conversation_id: str) -> bool:
        session = self.session
        if self._navigation_blocked("delete a conversation"):
            return False
        try:
            await self.store.delete_conversation(conversation_id)
        except StoreWriteFailed as e:
            self._set_error(str(e))
            return False

        session.conversations.pop(conversation_id, None)
        session.instruction_overrides.pop(conversation_id, None)
        if session.staged is not None and session.staged.conversation_id == conversation_id:
            self._cancel_staged("conversation deleted")
        if session.current_conversation_id == conversation_id:
            session.current_conversation_id = None
            session.input_locked = True
        self.logger.log_info(f"Deleted conversation {conversation_id}")
        return True

    async def rename_conversation(self, conversation_id: str, title: str) -> bool:
        if not title.strip():
            return False
        try:
            await self._rename(conversation_id, title.strip())
        except StoreWriteFailed as e:
            self._set_error(str(e))
            return False
        return True

    # Store helpers

    async def _open_conversation(self, title: str) -> str:
        """Create a conversation, falling back to a local-only one, and activate it."""
        try:
            conversation_id = await self.store.create_conversation(title)
            conversation = Conversation(id=conversation_id, title=title)
        except StoreUnavailable as e:
            self.logger.log_warning(f"Failed to create conversation, falling back to local: {e}")
            conversation = await self.store.create_local_conversation(title)

        self.session.conversations[conversation.id] = conversation
        self.session.current_conversation_id = conversation.id
        return conversation.id

    def _conversation(self, conversation_id: str) -> Conversation:
        conversation = self.session.conversations.get(conversation_id)
        if conversation is None:
            raise ConversationUnavailable(f"Conversation '{conversation_id}' is no longer available.")
        return conversation

    async def _append(self, conversation_id: str, message: Message):
        await self.store.append_message(conversation_id, message)
        self._record(conversation_id, message)

    def _record(self, conversation_id: str, message: Message):
        conversation = self.session.conversations.get(conversation_id)
        if conversation is None:
            return
        final = message.finalized()
        conversation.messages.append(final)
        if conversation_id == self.session.current_conversation_id:
            self.ui.display_chat_message(final)

    async def _rename(self, conversation_id: str, title: str):
        await self.store.rename_conversation(conversation_id, title)
        conversation = self.session.conversations.get(conversation_id)
        if conversation is not None:
            conversation.title = title

    def _set_error(self, error: str):
        self.session.error = error
        self.ui.display_error(error)

    def _navigation_blocked(self, action: str) -> bool:
        if not self.session.request_in_flight:
            return False
        self._set_error(f"Cannot {action} while an answer is being generated.")
        return True

    def get_conversation_state(self) -> Dict[str, Any]:
        """Get current session state for debugging/monitoring."""
        session = self.session
        return {
            "current_conversation_id": session.current_conversation_id,
            "known_conversations": len(session.conversations),
            "staged_message_id": session.staged.message.id if session.staged else None,
            "input_locked": session.input_locked,
            "request_in_flight": session.request_in_flight,
            "error": session.error,
            "has_instruction_override": session.instruction_override is not None,
            "model": self.config.model,
        }

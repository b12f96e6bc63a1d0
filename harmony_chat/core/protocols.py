"""
Protocol interfaces for the chat delivery pipeline.

These protocols define the contracts that frontend implementations, loggers
and conversation stores must follow to plug into the orchestrator.
"""

from typing import Protocol, Optional, Dict, Any, List

from .models import Conversation, Message


class ChatUserInterface(Protocol):
    """Protocol defining the interface for user interactions."""

    async def get_user_input(self, prompt: str = "You: ") -> Optional[str]:
        """
        Get input from user. Returns None if user wants to quit.

        Args:
            prompt: The prompt to display to the user

        Returns:
            User input string, or None if user wants to quit
        """
        ...

    def display_chat_message(self, message: Message) -> None:
        """
        Display a message that was added to the active conversation.

        Args:
            message: The persisted (or locally recorded) message
        """
        ...

    def begin_reveal(self, message: Message) -> None:
        """
        Begin the paced reveal of a staged assistant message.

        Args:
            message: The staged message; its content is the full text
        """
        ...

    def update_reveal(self, revealed: str) -> None:
        """
        Show the currently revealed prefix of the staged message.

        Args:
            revealed: Prefix of the staged message revealed so far
        """
        ...

    def end_reveal(self) -> None:
        """End the current reveal, whether it completed or was cancelled."""
        ...

    def display_conversations(self, conversations: List[Conversation], current_id: Optional[str]) -> None:
        """
        Display the list of known conversations.

        Args:
            conversations: Conversations to list
            current_id: Identifier of the active conversation, if any
        """
        ...

    def display_error(self, error: str) -> None:
        """
        Display an error message.

        Args:
            error: Error message to display
        """
        ...

    def display_info(self, info: str) -> None:
        """
        Display informational message.

        Args:
            info: Information message to display
        """
        ...

    def display_warning(self, warning: str) -> None:
        """
        Display warning message.

        Args:
            warning: Warning message to display
        """
        ...

    def initialize_session(self) -> None:
        """Initialize the user interface session."""
        ...

    def cleanup_session(self) -> None:
        """Clean up the user interface session."""
        ...


class ChatLogger(Protocol):
    """Protocol defining the interface for logging."""

    def log_debug(self, message: str) -> None:
        """
        Log debug message.

        Args:
            message: Debug message to log
        """
        ...

    def log_info(self, message: str) -> None:
        """
        Log info message.

        Args:
            message: Info message to log
        """
        ...

    def log_warning(self, message: str) -> None:
        """
        Log warning message.

        Args:
            message: Warning message to log
        """
        ...

    def log_error(self, message: str, exc_info: bool = False) -> None:
        """
        Log error message.

        Args:
            message: Error message to log
            exc_info: Whether to include exception information
        """
        ...

    def log_function_call(self, function_name: str, arguments: Dict[str, Any]) -> None:
        """
        Log function call details.

        Args:
            function_name: Name of the function being called
            arguments: Arguments passed to the function
        """
        ...

    def log_function_result(self, function_name: str, success: bool, duration: float, result: Dict[str, Any] = None) -> None:
        """
        Log function execution results.

        Args:
            function_name: Name of the function that was executed
            success: Whether execution was successful
            duration: Execution duration in seconds
            result: Function execution result (optional)
        """
        ...

    def log_llm_request(self, model: str, messages: List[Dict], has_system_prompt: bool = False) -> None:
        """
        Log LLM request details.

        Args:
            model: LLM model being used
            messages: Messages sent to the LLM
            has_system_prompt: Whether a system instruction leads the messages
        """
        ...

    def log_llm_response(self, response_content: str, duration: float = None) -> None:
        """
        Log LLM response details.

        Args:
            response_content: Content of the LLM response
            duration: Response duration in seconds (optional)
        """
        ...


class ConversationStore(Protocol):
    """Protocol for the persistent conversation store."""

    async def create_conversation(self, title: str) -> str:
        """Create an empty conversation and return its identifier."""
        ...

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """Return a conversation with its messages, or None if unknown."""
        ...

    async def list_conversations(self) -> List[Conversation]:
        """Return all conversations, most recently created first."""
        ...

    async def append_message(self, conversation_id: str, message: Message) -> None:
        """Append a message to the end of a conversation."""
        ...

    async def rename_conversation(self, conversation_id: str, title: str) -> None:
        """Change the title of a conversation."""
        ...

    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation and its messages."""
        ...

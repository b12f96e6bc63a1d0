"""
Console implementation of ChatUserInterface and ChatLogger protocols.

This module provides Rich-based console implementations that can be used
for command-line interfaces.
"""

from typing import Dict, Any, List, Optional
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text
from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style
from prompt_toolkit.formatted_text import FormattedText

from ..core.models import Conversation, Message
from ..core.protocols import ChatUserInterface, ChatLogger


class ConsoleUserInterface(ChatUserInterface):
    """Rich console implementation of ChatUserInterface."""

    def __init__(self, console: Console = None):
        """
        Initialize console interface.

        Args:
            console: Rich Console instance (creates new one if None)
        """
        self.console = console or Console()
        self.prompt_session = PromptSession(history=InMemoryHistory())
        self.prompt_style = Style.from_dict({
            'username': '#00aaff bold',  # Blue color for "You: "
        })
        self.live: Optional[Live] = None

    async def get_user_input(self, prompt: str = "You: ") -> Optional[str]:
        """Get user input with enhanced editing capabilities."""
        try:
            return await self.prompt_session.prompt_async(
                FormattedText([('class:username', prompt)]),
                enable_history_search=True,
                style=self.prompt_style,
            )
        except (KeyboardInterrupt, EOFError):
            return None

    def display_chat_message(self, message: Message):
        """Display a message with role-based formatting."""
        if message.role == "user":
            # Already visible from the prompt line
            return
        self.console.print("[bold green]🤖 Assistant:[/bold green]")
        self.console.print(Markdown(message.content))
        self.console.print()

    def begin_reveal(self, message: Message):
        """Start a live region for the staged message."""
        self.end_reveal()
        self.live = Live(self._reveal_text(""), refresh_per_second=30, console=self.console)
        self.live.start()

    def update_reveal(self, revealed: str):
        """Show the revealed prefix with a cursor."""
        if self.live is not None:
            self.live.update(self._reveal_text(revealed + "▌"))

    def end_reveal(self):
        """Close the live region."""
        if self.live is not None:
            self.live.update(Text(""))
            self.live.stop()
            self.live = None

    def _reveal_text(self, revealed: str) -> Text:
        text = Text("🤖 Assistant: ", style="bold green")
        text.append(revealed, style="green")
        return text

    def display_conversations(self, conversations: List[Conversation], current_id: Optional[str]):
        """Display conversations as a table."""
        if not conversations:
            self.console.print("[dim]No conversations yet.[/dim]")
            return
        table = Table(title="Conversations")
        table.add_column("", width=1)
        table.add_column("ID", style="cyan")
        table.add_column("Title")
        table.add_column("Messages", justify="right")
        for conversation in conversations:
            marker = "▶" if conversation.id == current_id else ""
            suffix = " [dim](local)[/dim]" if conversation.is_local else ""
            table.add_row(marker, conversation.id, conversation.title + suffix, str(len(conversation.messages)))
        self.console.print(table)

    def display_error(self, error_message: str):
        """Display error message."""
        self.console.print(f"[bold red]❌ Error: {error_message}[/bold red]")

    def display_info(self, info: str):
        """Display informational message."""
        self.console.print(f"[blue]ℹ️  {info}[/blue]")

    def display_warning(self, warning: str):
        """Display warning message."""
        self.console.print(f"[yellow]⚠️  WARNING: {warning}[/yellow]")

    def initialize_session(self):
        """Initialize the user interface session."""
        pass  # Console interface doesn't need special initialization

    def cleanup_session(self):
        """Clean up the user interface session."""
        self.end_reveal()


class ConsoleLogger(ChatLogger):
    """Console implementation of ChatLogger."""

    def __init__(self, console: Console = None, verbose: bool = True):
        """
        Initialize console logger.

        Args:
            console: Rich Console instance (creates new one if None)
            verbose: Whether to display debug messages
        """
        self.console = console or Console()
        self.verbose = verbose

    def log_debug(self, message: str):
        """Log debug message."""
        if self.verbose:
            self.console.print(f"[dim]🔍 DEBUG: {message}[/dim]")

    def log_info(self, message: str):
        """Log info message."""
        if self.verbose:
            self.console.print(f"[blue]ℹ️  INFO: {message}[/blue]")

    def log_error(self, message: str, exc_info: bool = False):
        """Log error message."""
        self.console.print(f"[bold red]❌ ERROR: {message}[/bold red]")
        if exc_info and self.verbose:
            self.console.print_exception()

    def log_warning(self, message: str):
        """Log warning message."""
        if self.verbose:
            self.console.print(f"[yellow]⚠️  WARNING: {message}[/yellow]")

    def log_function_call(self, function_name: str, arguments: Dict[str, Any]):
        """Log function call."""
        if self.verbose:
            self.console.print(f"[cyan]📞 CALL: {function_name}({arguments})[/cyan]")

    def log_function_result(self, function_name: str, success: bool, duration: float, result: Dict[str, Any] = None):
        """Log function result."""
        if self.verbose:
            status = "✅ SUCCESS" if success else "❌ FAILED"
            self.console.print(f"[cyan]📋 RESULT: {function_name} - {status} ({duration:.2f}s)[/cyan]")

    def log_llm_request(self, model: str, messages: Any, has_system_prompt: bool = False):
        """Log LLM request."""
        if self.verbose:
            num_messages = len(messages) if hasattr(messages, '__len__') else 'unknown'
            self.console.print(
                f"[magenta]🧠 LLM REQUEST: {model} - {num_messages} messages, system prompt: {has_system_prompt}[/magenta]"
            )

    def log_llm_response(self, content: str, duration: float = None):
        """Log LLM response."""
        if self.verbose:
            content_preview = content[:50] + "..." if content and len(content) > 50 else content or ""
            timing = f" ({duration:.2f}s)" if duration is not None else ""
            self.console.print(f"[magenta]🧠 LLM RESPONSE: '{content_preview}'{timing}[/magenta]")
